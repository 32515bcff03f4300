from bistro.core.config import Settings
from bistro.core.security import issue_token

from tests.conftest import ADMIN_EMAIL, API, USER_EMAIL, auth_header


def test_missing_header_is_unauthorized(client):
    response = client.get(f"{API}/get-users")

    assert response.status_code == 401
    assert response.json() == {"message": "unauthorized access"}


def test_non_bearer_scheme_is_unauthorized(client):
    token = issue_token({"email": USER_EMAIL})

    response = client.get(f"{API}/get-users", headers={"Authorization": f"Token {token}"})

    assert response.status_code == 401


def test_empty_bearer_is_unauthorized(client):
    response = client.get(f"{API}/get-users", headers={"Authorization": "Bearer "})

    assert response.status_code == 401


def test_expired_token_is_unauthorized(client, admin_headers):
    token = issue_token({"email": ADMIN_EMAIL}, settings=Settings(access_token_expire_minutes=-5))

    response = client.get(f"{API}/get-users", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_non_admin_is_forbidden(client, user_headers):
    response = client.get(f"{API}/get-users", headers=user_headers)

    assert response.status_code == 403
    assert response.json() == {"message": "forbidden access"}


def test_unknown_user_is_forbidden(client):
    response = client.get(f"{API}/get-users", headers=auth_header("nobody@bistro.com"))

    assert response.status_code == 403


def test_admin_gets_user_list(client, admin_headers, user_headers):
    response = client.get(f"{API}/get-users", headers=admin_headers)

    assert response.status_code == 200
    emails = {user["email"] for user in response.json()}
    assert emails == {ADMIN_EMAIL, USER_EMAIL}
    assert all(isinstance(user["_id"], str) for user in response.json())


def test_admin_check_for_self(client, admin_headers, user_headers):
    admin = client.get(f"{API}/users/admin/{ADMIN_EMAIL}", headers=admin_headers)
    user = client.get(f"{API}/users/admin/{USER_EMAIL}", headers=user_headers)

    assert admin.json() == {"admin": True}
    assert user.json() == {"admin": False}


def test_admin_check_for_someone_else_is_forbidden(client, admin_headers, user_headers):
    # Even an admin may only ask about themselves
    response = client.get(f"{API}/users/admin/{USER_EMAIL}", headers=admin_headers)

    assert response.status_code == 403


def test_admin_check_for_unregistered_self(client):
    response = client.get(
        f"{API}/users/admin/new@bistro.com", headers=auth_header("new@bistro.com")
    )

    assert response.status_code == 200
    assert response.json() == {"admin": False}


def test_admin_check_requires_token(client):
    response = client.get(f"{API}/users/admin/{USER_EMAIL}")

    assert response.status_code == 401
