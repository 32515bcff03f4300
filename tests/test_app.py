from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from bistro.database import get_db
from bistro.main import app
from tests.conftest import API


@pytest.fixture
def broken_client(client):
    db = MagicMock()
    db.__getitem__.return_value.find.side_effect = ServerSelectionTimeoutError("no servers")
    db.command.side_effect = ServerSelectionTimeoutError("no servers")
    app.dependency_overrides[get_db] = lambda: db
    return client


def test_root_message(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "Bistro serving is running well"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational"
    assert body["database"] == "healthy"
    assert body["payment_service"] == "healthy"


def test_health_reports_database_down(broken_client):
    body = broken_client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["database"].startswith("unhealthy")


def test_database_failure_is_503(broken_client):
    response = broken_client.get(f"{API}/get-menu")

    assert response.status_code == 503
    assert response.json()["success"] is False
    assert response.json()["error"] == "Database Unavailable"


def test_unexpected_error_is_500(client):
    db_mock = MagicMock()
    db_mock.__getitem__.return_value.find.side_effect = RuntimeError("boom")
    app.dependency_overrides[get_db] = lambda: db_mock

    response = TestClient(app, raise_server_exceptions=False).get(f"{API}/get-review")

    assert response.status_code == 500
    assert response.json()["error"] == "Internal Server Error"


def test_unknown_route(client):
    assert client.get(f"{API}/nope").status_code == 404
