# tests/conftest.py

"""
Shared fixtures for the Catalog Service tests.

The service runs against an in-memory SQLite database; every test starts
from freshly created, empty tables.
"""
import logging
import os

# Must be set before catalog_service.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("DB_CONNECT_RETRIES", "1")

import pytest
from fastapi.testclient import TestClient

from catalog_service import models  # noqa: F401  (registers tables)
from catalog_service.db import Base, get_engine
from catalog_service.main import app

# Suppress noisy logs from SQLAlchemy/FastAPI during tests for cleaner output
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
logging.getLogger("fastapi").setLevel(logging.WARNING)


@pytest.fixture(scope="module")
def client():
    """
    Provides a TestClient for making HTTP requests to the FastAPI application.
    The TestClient runs the app's startup and shutdown handlers.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def clean_database():
    """Drop and recreate all tables so each test sees an empty catalog."""
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def make_category(client):
    def _make(name):
        response = client.post("/categories", json={"name": name})
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_group(client):
    def _make(name, categories=None):
        body = {"name": name}
        if categories is not None:
            body["categories"] = categories
        response = client.post("/group-categories", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_product(client):
    def _make(name, category="Headphones", price=9.99, image="/x.svg"):
        response = client.post(
            "/products",
            json={"name": name, "category": category, "price": price, "image": image},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def delete_json(client):
    """DELETE with a JSON body (TestClient.delete does not take one)."""

    def _delete(path, body):
        return client.request("DELETE", path, json=body)

    return _delete
