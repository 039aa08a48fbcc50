"""Fixtures for API tests: app built with demo accounts and a shared sink."""

import pytest
from fastapi.testclient import TestClient

from medicore.api.app import create_app
from medicore.encounter import InMemoryEncounterSink, SessionRegistry


@pytest.fixture
def api_sink():
    return InMemoryEncounterSink()


@pytest.fixture
def app(test_settings, api_sink):
    return create_app(test_settings, registry=SessionRegistry(sink=api_sink))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def login(client, username, password="123456"):
    response = client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def doctor_headers(client):
    return login(client, "doctor1")


@pytest.fixture
def cashier_headers(client):
    return login(client, "cashier1")
