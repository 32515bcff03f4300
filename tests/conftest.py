import mongomock
import pytest
from fastapi.testclient import TestClient

from bistro.core.security import issue_token
from bistro.database import get_db
from bistro.main import app
from bistro.services.payment import MockPaymentService, get_payment_service

API = "/api/v1"

ADMIN_EMAIL = "admin@bistro.com"
USER_EMAIL = "guest@bistro.com"


@pytest.fixture
def db():
    return mongomock.MongoClient()["bistroDB"]


@pytest.fixture
def payment_service():
    return MockPaymentService(min_latency=0, max_latency=0)


@pytest.fixture
def client(db, payment_service):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_header(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token({'email': email})}"}


@pytest.fixture
def admin_headers(db):
    db["users"].insert_one({"name": "Boss", "email": ADMIN_EMAIL, "role": "admin"})
    return auth_header(ADMIN_EMAIL)


@pytest.fixture
def user_headers(db):
    db["users"].insert_one({"name": "Guest", "email": USER_EMAIL})
    return auth_header(USER_EMAIL)
