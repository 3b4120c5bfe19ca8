"""
Shared fixtures: an in-memory Mongo database wired into the app and
helpers that seed accounts and stores directly.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from server import app
from storerating.db.session import ensure_indexes, get_db
from storerating.models.store import Store
from storerating.models.user import User
from storerating.services.auth import create_user_token, hash_password

PASSWORD = "Secret#123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["store_ratings_test"]
    await ensure_indexes(database)
    yield database


@pytest.fixture
async def client(db):
    app.dependency_overrides[get_db] = lambda: db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Insert an account and return (user document, auth headers)."""
    counter = {"n": 0}

    async def _make_user(role="user", name=None, email=None, address="12 Market Street, Springfield"):
        counter["n"] += 1
        user = User(
            name=name or f"Test Account Number {counter['n']:04d}",
            email=email or f"{role.lower()}{counter['n']}@example.com",
            address=address,
            role=role,
        )
        doc = user.model_dump()
        doc["hashed_password"] = PASSWORD_HASH
        await db.users.insert_one(doc)
        headers = {"Authorization": f"Bearer {create_user_token(user.id)}"}
        return user, headers

    return _make_user


@pytest.fixture
def make_store(db):
    """Insert a store owned by `owner_id` and return it."""
    counter = {"n": 0}

    async def _make_store(owner_id=None, name=None, email=None, address="1 High Street, Springfield"):
        counter["n"] += 1
        store = Store(
            name=name or f"Neighbourhood Grocery Store {counter['n']:03d}",
            email=email or f"store{counter['n']}@example.com",
            address=address,
            owner_id=owner_id or f"owner-{counter['n']}",
        )
        await db.stores.insert_one(store.model_dump())
        return store

    return _make_store


@pytest.fixture
async def admin(make_user):
    return await make_user(role="admin", name="Platform Administrator One")


class PatchedDatabase:
    """Database wrapper that swaps in replacement collections by name."""

    def __init__(self, db, **collections):
        self._db = db
        self.__dict__.update(collections)

    def __getattr__(self, name):
        return getattr(self._db, name)


class RacingCollection:
    """Answers the first `hidden` lookups as if a concurrent write had not landed yet."""

    def __init__(self, collection, hidden=1):
        self._collection = collection
        self.hidden = hidden

    async def find_one(self, *args, **kwargs):
        if self.hidden:
            self.hidden -= 1
            return None
        return await self._collection.find_one(*args, **kwargs)

    def __getattr__(self, name):
        return getattr(self._collection, name)


class FailingCollection:
    """Raises from the named methods, passes everything else through."""

    def __init__(self, collection, *methods):
        self._collection = collection
        self._methods = methods

    def __getattr__(self, name):
        if name in self._methods:
            async def fail(*args, **kwargs):
                raise RuntimeError(f"{name} failed")
            return fail
        return getattr(self._collection, name)


@pytest.fixture
def use_db():
    """Route requests to a wrapped database for the rest of the test."""
    def _use_db(database):
        app.dependency_overrides[get_db] = lambda: database
        return database
    return _use_db


@pytest.fixture
async def lenient_client(db):
    """Client that returns 500 responses instead of re-raising server errors."""
    app.dependency_overrides[get_db] = lambda: db
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
