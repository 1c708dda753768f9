"""
Shared fixtures: both storage backings, the ASGI app and bearer tokens.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import create_app
from app.storage.database import DatabaseStorage
from app.storage.memory import MemoryStorage

from .helpers import bearer

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(params=["memory", "sqlite"])
async def storage(request):
    """Every store test runs against both backings."""
    if request.param == "memory":
        store = MemoryStorage()
    else:
        store = await DatabaseStorage.connect(SQLITE_URL, create_tables=True)
    yield store
    await store.close()


@pytest.fixture
def app(storage):
    return create_app(storage=storage)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def alice_headers():
    return bearer("alice", email="alice@example.com", first_name="Alice")


@pytest.fixture
def bob_headers():
    return bearer("bob", email="bob@example.com", first_name="Bob")


@pytest.fixture
def carol_headers():
    return bearer("carol", email="carol@example.com", first_name="Carol")


@pytest.fixture
async def users(storage):
    """alice, bob and carol as known users."""
    for uid in ("alice", "bob", "carol"):
        await storage.upsert_user({"id": uid, "email": f"{uid}@example.com", "username": uid})
    return ("alice", "bob", "carol")
