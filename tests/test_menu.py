from bson import ObjectId

from tests.conftest import API

SALAD = {
    "name": "Caesar Salad",
    "recipe": "Romaine, parmesan, croutons",
    "image": "https://i.ibb.co/salad.jpg",
    "category": "salad",
    "price": 12.5,
}


def test_menu_is_public(client, db):
    db["menu"].insert_many([dict(SALAD), {**SALAD, "name": "Greek Salad"}])

    response = client.get(f"{API}/get-menu")

    assert response.status_code == 200
    assert sorted(item["name"] for item in response.json()) == ["Caesar Salad", "Greek Salad"]


def test_admin_creates_menu_item(client, db, admin_headers):
    response = client.post(f"{API}/create/menu", json=SALAD, headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["acknowledged"] is True
    stored = db["menu"].find_one({"_id": ObjectId(body["insertedId"])})
    assert stored["category"] == "salad"
    assert stored["price"] == 12.5


def test_menu_item_keeps_extra_fields(client, db, admin_headers):
    response = client.post(
        f"{API}/create/menu", json={**SALAD, "spicy": True}, headers=admin_headers
    )

    stored = db["menu"].find_one({"_id": ObjectId(response.json()["insertedId"])})
    assert stored["spicy"] is True


def test_non_admin_cannot_create_menu_item(client, db, user_headers):
    response = client.post(f"{API}/create/menu", json=SALAD, headers=user_headers)

    assert response.status_code == 403
    assert db["menu"].count_documents({}) == 0


def test_menu_item_requires_category_and_price(client, admin_headers):
    response = client.post(f"{API}/create/menu", json={"name": "Mystery"}, headers=admin_headers)

    assert response.status_code == 422


def test_admin_deletes_menu_item(client, db, admin_headers):
    item_id = db["menu"].insert_one(dict(SALAD)).inserted_id

    response = client.delete(f"{API}/delete/{item_id}", headers=admin_headers)

    assert response.json() == {"acknowledged": True, "deletedCount": 1}
    assert db["menu"].count_documents({}) == 0


def test_delete_seeded_item_with_string_key(client, db, admin_headers):
    db["menu"].insert_one({**SALAD, "_id": "642c155b2c4774f05c36eeaa"})

    response = client.delete(f"{API}/delete/642c155b2c4774f05c36eeaa", headers=admin_headers)

    assert response.json()["deletedCount"] == 1


def test_delete_with_invalid_id_is_a_no_op(client, db, admin_headers):
    db["menu"].insert_one(dict(SALAD))

    response = client.delete(f"{API}/delete/not-an-id", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"acknowledged": True, "deletedCount": 0}
    assert db["menu"].count_documents({}) == 1


def test_delete_menu_item_requires_admin(client, db, user_headers):
    item_id = db["menu"].insert_one(dict(SALAD)).inserted_id

    assert client.delete(f"{API}/delete/{item_id}").status_code == 401
    assert client.delete(f"{API}/delete/{item_id}", headers=user_headers).status_code == 403
    assert db["menu"].count_documents({}) == 1


def test_reviews_are_public(client, db):
    db["reviews"].insert_one({"name": "Jane", "details": "Lovely soup", "rating": 5})

    response = client.get(f"{API}/get-review")

    assert response.status_code == 200
    assert response.json()[0]["rating"] == 5
