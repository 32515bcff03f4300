from bson import ObjectId

from tests.conftest import ADMIN_EMAIL, API, USER_EMAIL


def test_create_user_once_per_email(client, db):
    first = client.post(f"{API}/create/user", json={"name": "A", "email": "a@x.com"})
    second = client.post(f"{API}/create/user", json={"name": "A again", "email": "a@x.com"})

    assert first.json()["acknowledged"] is True
    assert second.json() == {"message": "user already exist", "insertedId": None}
    assert db["users"].count_documents({"email": "a@x.com"}) == 1
    assert db["users"].find_one({"email": "a@x.com"})["name"] == "A"


def test_create_user_ignores_requested_role(client, db):
    client.post(f"{API}/create/user", json={"email": "sneaky@x.com", "role": "admin"})

    assert "role" not in db["users"].find_one({"email": "sneaky@x.com"})


def test_user_list_end_to_end(client):
    client.post(f"{API}/create/user", json={"email": "a@x.com"})
    token = client.post(f"{API}/jwt", json={"email": "a@x.com"}).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert client.get(f"{API}/get-users").status_code == 401
    assert client.get(f"{API}/get-users", headers=headers).status_code == 403


def test_admin_promotes_user(client, db, admin_headers, user_headers):
    user_id = db["users"].find_one({"email": USER_EMAIL})["_id"]

    response = client.patch(f"{API}/admin/{user_id}", headers=admin_headers)

    assert response.json() == {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1}
    assert db["users"].find_one({"_id": user_id})["role"] == "admin"
    # The promoted user now passes the admin gate
    assert client.get(f"{API}/get-users", headers=user_headers).status_code == 200


def test_promote_with_invalid_id(client, admin_headers):
    response = client.patch(f"{API}/admin/nope", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["matchedCount"] == 0


def test_non_admin_cannot_promote(client, db, user_headers):
    user_id = db["users"].find_one({"email": USER_EMAIL})["_id"]

    response = client.patch(f"{API}/admin/{user_id}", headers=user_headers)

    assert response.status_code == 403
    assert "role" not in db["users"].find_one({"_id": user_id})


def test_admin_deletes_user(client, db, admin_headers, user_headers):
    user_id = db["users"].find_one({"email": USER_EMAIL})["_id"]

    response = client.delete(f"{API}/delete-user/{user_id}", headers=admin_headers)

    assert response.json()["deletedCount"] == 1
    assert db["users"].find_one({"email": ADMIN_EMAIL}) is not None


def test_non_admin_cannot_delete_user(client, db, admin_headers, user_headers):
    admin_id = db["users"].find_one({"email": ADMIN_EMAIL})["_id"]

    response = client.delete(f"{API}/delete-user/{admin_id}", headers=user_headers)

    assert response.status_code == 403
    assert db["users"].count_documents({"_id": ObjectId(admin_id)}) == 1
