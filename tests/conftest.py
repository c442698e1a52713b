"""Shared test fixtures.

Everything runs against an in-memory SQLite database. Each test starts with
an empty categories table.
"""

import os

# Configure the app before any imports from it.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["SEED_SHARED_CATEGORIES"] = "false"
os.environ["DEV_USER_ID"] = "dev-user"

import pytest
from sqlalchemy import text
from fastapi.testclient import TestClient

from category_tree.database import get_db, SessionLocal
from category_tree.main import app
from category_tree.repositories.category_repository import CategoryRepository
from category_tree.services.category_service import CategoryService
from tests.fake_store import InMemoryNodeStore


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty the categories table before each test."""
    db = SessionLocal()
    try:
        db.execute(text("DELETE FROM categories"))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def repo(db):
    return CategoryRepository(db)


@pytest.fixture()
def fake_store():
    return InMemoryNodeStore()


@pytest.fixture()
def service(fake_store):
    return CategoryService(fake_store)


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_category(name: str = "Category", parent_id=None, **overrides) -> dict:
    """Factory for category creation payloads."""
    payload = {"name": name, "description": f"{name} description", "parent_id": parent_id}
    payload.update(overrides)
    return payload
