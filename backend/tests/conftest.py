"""
Cart API — Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── memory_store: Empty in-memory document store
    ├── test_settings: Settings pointing at the memory backend
    ├── app: FastAPI app wired to memory_store
    ├── auth: Valid Basic credentials for test_settings
    ├── test_client: HTTPX AsyncClient bound to `app`
    └── sample_product / sample_user / sample_cart: Documents
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["STORE_BACKENDS"] = "memory"
os.environ["API_USER"] = "tester"
os.environ["API_PASSWORD"] = "test-password-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from cartapi.config import Settings
from cartapi.main import create_app
from cartapi.store import MemoryDocumentStore, StoreRegistry


@pytest.fixture
def memory_store():
    return MemoryDocumentStore()


@pytest.fixture
def test_settings():
    return Settings(
        store_backends="memory",
        api_user="tester",
        api_password="test-password-not-real",
        uniform_error_status=False,
        cart_update_attempts=3,
    )


@pytest.fixture
def app(test_settings, memory_store):
    return create_app(
        app_settings=test_settings,
        stores=StoreRegistry({"memory": memory_store}),
    )


@pytest.fixture
def auth(test_settings):
    return (test_settings.api_user, test_settings.api_password)


@pytest_asyncio.fixture
async def test_client(app, auth):
    """
    HTTPX AsyncClient talking to the app in-process via ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", auth=auth) as client:
        yield client


@pytest.fixture
def sample_product():
    return {"sku": "p1", "description": "Widget", "price": 9.99}


@pytest.fixture
def sample_user():
    return {
        "userID": "u1",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "street": "1 Analytical Way",
        "city": "London",
        "state": "CO",
        "zip": "80202",
    }


@pytest.fixture
def sample_cart():
    return {
        "cartID": "c1",
        "userID": "u1",
        "items": [
            {"sku": "a", "quantity": 1},
            {"sku": "b", "quantity": 2},
            {"sku": "c", "quantity": 3},
        ],
    }
