from bistro.services.checkout import record_payment
from bistro.services.reports import order_stats, summary_stats
from tests.conftest import API, USER_EMAIL


def seed_salads(db):
    first = db["menu"].insert_one({"name": "Greek", "category": "Salad", "price": 10}).inserted_id
    second = db["menu"].insert_one({"name": "Caesar", "category": "Salad", "price": 12}).inserted_id
    record_payment(db, {"email": USER_EMAIL, "price": 10, "menuItemIds": [str(first)]})
    record_payment(db, {"email": USER_EMAIL, "price": 12, "menuItemIds": [str(second)]})
    return first, second


def test_order_stats_by_category(db):
    seed_salads(db)

    assert order_stats(db) == [{"category": "Salad", "quantity": 2, "revenue": 22}]


def test_order_stats_joins_string_keyed_dishes(db):
    db["menu"].insert_one({"_id": "642c155b2c4774f05c36eeaa", "category": "Salad", "price": 10})
    db["menu"].insert_one({"_id": "seed-soup", "category": "Soup", "price": 7})
    record_payment(
        db,
        {"email": USER_EMAIL, "price": 17, "menuItemIds": ["642c155b2c4774f05c36eeaa", "seed-soup"]},
    )

    assert order_stats(db) == [
        {"category": "Salad", "quantity": 1, "revenue": 10},
        {"category": "Soup", "quantity": 1, "revenue": 7},
    ]


def test_order_stats_mixes_key_forms(db):
    first, _ = seed_salads(db)
    db["menu"].insert_one({"_id": "642c155b2c4774f05c36eeaa", "category": "Salad", "price": 9})
    record_payment(db, {"email": USER_EMAIL, "price": 9, "menuItemIds": ["642c155b2c4774f05c36eeaa"]})

    assert order_stats(db) == [{"category": "Salad", "quantity": 3, "revenue": 31}]


def test_order_stats_counts_repeat_purchases(db):
    first, _ = seed_salads(db)
    soup = db["menu"].insert_one({"name": "Soup", "category": "Soup", "price": 7}).inserted_id
    record_payment(db, {"email": USER_EMAIL, "price": 21, "menuItemIds": [str(first), str(soup)]})

    assert order_stats(db) == [
        {"category": "Salad", "quantity": 3, "revenue": 32},
        {"category": "Soup", "quantity": 1, "revenue": 7},
    ]


def test_order_stats_drops_deleted_dishes(db):
    first, second = seed_salads(db)
    db["menu"].delete_one({"_id": second})

    assert order_stats(db) == [{"category": "Salad", "quantity": 1, "revenue": 10}]


def test_summary_stats_empty_store(db):
    assert summary_stats(db) == {"users": 0, "menuItems": 0, "orders": 0, "revenue": 0}


def test_summary_stats(db):
    db["users"].insert_one({"email": USER_EMAIL})
    seed_salads(db)

    stats = summary_stats(db)

    assert stats["users"] == 1
    assert stats["menuItems"] == 2
    assert stats["orders"] == 2
    assert stats["revenue"] == 22


def test_admin_stats_endpoint(client, db, admin_headers):
    seed_salads(db)

    response = client.get(f"{API}/admin-stats", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"users": 1, "menuItems": 2, "orders": 2, "revenue": 22}


def test_order_stats_endpoint(client, db, admin_headers):
    seed_salads(db)

    response = client.get(f"{API}/order-stats", headers=admin_headers)

    assert response.json() == [{"category": "Salad", "quantity": 2, "revenue": 22}]


def test_dashboard_requires_admin(client, user_headers):
    assert client.get(f"{API}/admin-stats").status_code == 401
    assert client.get(f"{API}/admin-stats", headers=user_headers).status_code == 403
    assert client.get(f"{API}/order-stats", headers=user_headers).status_code == 403
