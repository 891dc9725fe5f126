"""Fixtures for API tests: a client bound to a fresh in-memory container."""

from typing import Callable

import pytest
from fastapi.testclient import TestClient

from api import app
from api.dependencies import ServiceContainer

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def client(container: ServiceContainer) -> TestClient:
    """Client with its own cookie jar; the container fixture isolates state."""
    return TestClient(app)


@pytest.fixture
def register(client: TestClient) -> Callable:
    """Register an account; the client keeps the session cookie."""

    def _register(
        email: str = "ann@example.com",
        password: str = DEFAULT_PASSWORD,
        name: str = "Ann",
        http: TestClient = client,
    ):
        response = http.post(
            "/api/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 200, response.text
        return response.json()["user"]

    return _register


@pytest.fixture
def signed_in(register) -> dict:
    """A registered user whose session cookie is on the client."""
    return register()
