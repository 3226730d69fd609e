from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import ensure_indexes
from main import app, get_clock, get_database


class FrozenClock:
    """Callable clock the tests move forward by hand."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now += timedelta(days=days, hours=hours)


@pytest.fixture
def mongo_db():
    database = mongomock.MongoClient()["mindpal_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def client(mongo_db, clock):
    app.dependency_overrides[get_database] = lambda: mongo_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, username="sunny", email=None, password="secret123", pet_name=None):
    body = {"username": username, "email": email or f"{username}@example.com", "password": password}
    if pet_name:
        body["petName"] = pet_name
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(client):
    data = register(client)
    return {"id": data["user"]["id"], "headers": auth_headers(data["token"])}
