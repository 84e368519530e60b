"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- An in-memory MongoDB (mongomock) exposed through the async motor API
- Loaders wired to that in-memory database
- Sample fixture files shipped in tests/fixtures
"""

import os
from pathlib import Path

import mongomock
import pytest

from mongo_fixtures import Loader, LoaderConfig

TEST_DB_NAME = "mongo_fixtures_test"

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =============================================================================
# Async adapter over mongomock
# =============================================================================


class AsyncMockCollection:
    """Async wrapper for the mongomock collection methods the loader uses."""

    def __init__(self, collection: mongomock.Collection):
        self._collection = collection

    async def insert_many(self, documents, ordered=True):
        return self._collection.insert_many(documents, ordered=ordered)

    async def delete_many(self, filter):
        return self._collection.delete_many(filter)

    async def count_documents(self, filter):
        return self._collection.count_documents(filter)


class AsyncMockDatabase:
    """Async wrapper for a mongomock database."""

    def __init__(self, database: mongomock.Database):
        self._database = database

    def __getitem__(self, name: str) -> AsyncMockCollection:
        return AsyncMockCollection(self._database[name])

    async def list_collection_names(self):
        return self._database.list_collection_names()

    async def drop_collection(self, name: str):
        return self._database.drop_collection(name)

    async def command(self, command, *args, **kwargs):
        if command == "ping":
            return {"ok": 1.0}
        return self._database.command(command, *args, **kwargs)


class AsyncMockClient:
    """Motor-compatible client backed by a shared mongomock client."""

    def __init__(self, client: mongomock.MongoClient, uri: str, **options):
        self._client = client
        self.uri = uri
        self.options = options
        self.closed = False

    @property
    def admin(self) -> AsyncMockDatabase:
        return AsyncMockDatabase(self._client["admin"])

    def __getitem__(self, name: str) -> AsyncMockDatabase:
        return AsyncMockDatabase(self._client[name])

    def close(self) -> None:
        self.closed = True


class ClientFactory:
    """Records every client it builds so tests can count connections."""

    def __init__(self, client: mongomock.MongoClient):
        self._client = client
        self.created: list[AsyncMockClient] = []

    def __call__(self, uri: str, **options) -> AsyncMockClient:
        client = AsyncMockClient(self._client, uri, **options)
        self.created.append(client)
        return client


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mongo_client():
    """Isolated in-memory MongoDB client."""
    client = mongomock.MongoClient()
    yield client
    client.close()


@pytest.fixture
def mongo_db(mongo_client):
    """The synchronous mongomock database, for seeding and assertions."""
    return mongo_client[TEST_DB_NAME]


@pytest.fixture
def client_factory(mongo_client) -> ClientFactory:
    """Factory producing async clients over the in-memory database."""
    return ClientFactory(mongo_client)


@pytest.fixture
def loader_config() -> LoaderConfig:
    """Config targeting the test database."""
    return LoaderConfig(database=TEST_DB_NAME)


@pytest.fixture
def loader(loader_config, client_factory) -> Loader:
    """Loader wired to the in-memory database, resolving paths from tests/fixtures."""
    return Loader(loader_config, base_dir=FIXTURES_DIR, client_factory=client_factory)


@pytest.fixture
def populated_db(mongo_db):
    """Database pre-populated with archer (3 docs) and southpark (3 docs)."""
    mongo_db.archer.insert_many(
        [{"name": "Sterling"}, {"name": "Lana"}, {"name": "Cheryl"}]
    )
    mongo_db.southpark.insert_many(
        [{"name": "Eric"}, {"name": "Butters"}, {"name": "Kenny"}]
    )
    return mongo_db


# =============================================================================
# Fixture Files
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to the sample fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def doc_names(mongo_db):
    """Return a helper giving the sorted `name` values in a collection."""

    def _names(collection: str) -> list[str]:
        return sorted(doc["name"] for doc in mongo_db[collection].find())

    return _names


@pytest.fixture
def mongodb_test_url() -> str:
    """URL of a real MongoDB server for integration tests."""
    url = os.environ.get("MONGODB_TEST_URL")
    if not url:
        pytest.skip("MONGODB_TEST_URL not set")
    return url
