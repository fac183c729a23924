"""
ContactBook: Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own in-memory SQLite document store
       (sqlite+aiosqlite://), an app built around it with create_app(), and
       an HTTPX AsyncClient talking to that app over ASGITransport.

Fixture Hierarchy (all function-scoped):
    test_settings → store → app → test_client
                                → browser (ContactBookClient over test_client)
    sample_contact: Ada Lovelace, the canonical example record
"""

import os

# Settings are read at import time; keep tests off any real database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DB_AUTO_CREATE"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from contactbook.client.app import ContactBookClient
from contactbook.config import Settings
from contactbook.main import create_app
from contactbook.services.document_store import DocumentStore


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        db_auto_create=True,
        store_connect_attempts=1,
        store_connect_min_wait=0,
        store_connect_max_wait=0,
        log_level="WARNING",
        request_timeout=10,
    )


@pytest_asyncio.fixture
async def store(test_settings):
    """An opened DocumentStore on a fresh in-memory database."""
    document_store = DocumentStore(test_settings)
    await document_store.open()
    yield document_store
    await document_store.close()


@pytest.fixture
def app(test_settings, store):
    return create_app(settings=test_settings, store=store)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    ASGITransport does not run the lifespan, which is why the `store`
    fixture opens and closes the store itself.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def browser(test_client) -> ContactBookClient:
    """The Python client half, navigating against the test app."""
    return ContactBookClient(test_client)


@pytest.fixture
def sample_contact() -> dict:
    return {"firstname": "Ada", "lastname": "Lovelace", "age": 28}
