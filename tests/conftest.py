import asyncio
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from airdesk.config import Config
from airdesk.main import create_app


class ConfigForTests(Config):
    MONGODB_DB = "airdesk_test"
    JWT_SECRET = "test-secret"
    HASH_ROUNDS = 1
    ACCESS_TOKEN_EXPIRE_MINUTES = 0
    LOG_LEVEL = "WARNING"


@pytest.fixture
def config():
    return ConfigForTests


@pytest.fixture
def db():
    return AsyncMongoMockClient()["airdesk_test"]


@pytest.fixture
def client(config, db):
    app = create_app(config, db=db)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def run():
    """Run a coroutine against the mock database from a sync test."""
    return asyncio.run


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signup(client):
    def _signup(username, role=None, password="secret123"):
        body = {"username": username, "email": f"{username}@example.com", "password": password}
        if role:
            body["role"] = role
        res = client.post("/users/signup", json=body)
        assert res.status_code == 201, res.text
        data = res.json()
        return data["user"], auth_headers(data["token"])

    return _signup


@pytest.fixture
def make_ticket(client):
    def _make(headers, subject="Lost bag", category="Lost Baggage", description="My bag never arrived"):
        res = client.post(
            "/tickets",
            json={"subject": subject, "description": description, "category": category},
            headers=headers,
        )
        assert res.status_code == 201, res.text
        return res.json()

    return _make
