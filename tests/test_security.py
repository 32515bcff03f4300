import jwt
import pytest

from bistro.core.config import Settings
from bistro.core.security import TokenError, issue_token, verify_token


def test_verify_returns_issued_claims():
    token = issue_token({"email": "guest@bistro.com", "name": "Guest"})

    claims = verify_token(token)

    assert claims["email"] == "guest@bistro.com"
    assert claims["name"] == "Guest"
    assert claims["exp"] - claims["iat"] == 3600


def test_expired_token_is_rejected():
    expired = Settings(access_token_expire_minutes=-1)
    token = issue_token({"email": "guest@bistro.com"}, settings=expired)

    with pytest.raises(TokenError, match="expired"):
        verify_token(token)


def test_token_signed_with_another_secret_is_rejected():
    forged = Settings(access_token_secret="someone-else")
    token = issue_token({"email": "guest@bistro.com"}, settings=forged)

    with pytest.raises(TokenError):
        verify_token(token)


def test_tampered_payload_is_rejected():
    header, _, signature = issue_token({"email": "guest@bistro.com"}).split(".")
    other_payload = issue_token({"email": "admin@bistro.com"}).split(".")[1]

    with pytest.raises(TokenError):
        verify_token(f"{header}.{other_payload}.{signature}")


def test_malformed_token_is_rejected():
    with pytest.raises(TokenError):
        verify_token("not-a-token")


def test_token_without_email_is_rejected():
    settings = Settings()
    token = jwt.encode(
        {"name": "Guest", "exp": 9999999999},
        settings.access_token_secret,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(TokenError, match="email"):
        verify_token(token)


def test_issue_requires_email():
    with pytest.raises(TokenError):
        issue_token({"name": "Guest"})


def test_jwt_endpoint_issues_verifiable_token(client):
    response = client.post("/api/v1/jwt", json={"email": "guest@bistro.com"})

    assert response.status_code == 200
    assert verify_token(response.json()["token"])["email"] == "guest@bistro.com"


def test_jwt_endpoint_requires_email(client):
    response = client.post("/api/v1/jwt", json={"name": "Guest"})

    assert response.status_code == 422
