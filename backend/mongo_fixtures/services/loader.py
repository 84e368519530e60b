"""Fixture loader: resolve, optionally clear, modify and insert.

Typical use from a test suite:

    loader = connect("myapp_test")
    await loader.clear_all_and_load("fixtures/")
    ...
    await loader.close()
"""

import asyncio
import copy
import logging
import os
from collections.abc import Iterable
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from mongo_fixtures.exceptions import InsertError
from mongo_fixtures.schemas.loader import LoaderConfig
from mongo_fixtures.services.clearer import CollectionClearer
from mongo_fixtures.services.connection import ClientFactory, ConnectionManager
from mongo_fixtures.services.modifiers import Modifier, ModifierChain
from mongo_fixtures.services.resolver import Document, FixtureResolver, FixtureSet

logger = logging.getLogger(__name__)


class Loader:
    """
    Loads fixtures into one MongoDB database.

    A Loader owns its config, modifier chain and connection. The connection
    is opened lazily on the first operation and reused until close().

    Multi-collection operations run concurrently and report the first error.
    Collections already written by then are not rolled back.
    """

    def __init__(
        self,
        config: LoaderConfig,
        *,
        base_dir: str | os.PathLike | None = None,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ):
        """
        Initialize Loader.

        Args:
            config: Target database and connection options.
            base_dir: Directory relative fixture paths are resolved against.
                Defaults to the working directory at load time.
            client_factory: Motor-compatible client constructor (for testing).
        """
        self.config = config
        self.resolver = FixtureResolver(base_dir)
        self.modifiers = ModifierChain()
        self.connection = ConnectionManager(config, client_factory=client_factory)

    async def __aenter__(self) -> "Loader":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.connection.is_connected:
            await self.close()

    # =========================================================================
    # Connection
    # =========================================================================

    async def get_connection(self) -> AsyncIOMotorDatabase:
        """Return the target database, connecting on first use."""
        return await self.connection.get_connection()

    async def close(self) -> None:
        """Close the connection. The loader cannot be used afterwards."""
        await self.connection.close()

    # =========================================================================
    # Modifiers
    # =========================================================================

    def add_modifier(self, modifier: Modifier) -> Modifier:
        """Register a modifier; usable as a decorator."""
        return self.modifiers.add(modifier)

    # =========================================================================
    # Public operations
    # =========================================================================

    async def clear(self, collections: str | Iterable[str] | None = None) -> None:
        """
        Clear collections.

        Args:
            collections: A collection name, a list of names, or None to
                clear every non-system collection in the database.
        """
        self.connection.ensure_open()
        db = await self.get_connection()
        await CollectionClearer(db, self.config.clear_strategy).clear(collections)

    async def load(self, fixtures: Any) -> None:
        """
        Insert fixtures without clearing anything first.

        Args:
            fixtures: Inline mapping, or path to a fixture file or directory.
        """
        self.connection.ensure_open()
        fixture_set = self.resolver.resolve(fixtures)
        await self._insert_fixture_set(fixture_set)

    async def clear_and_load(self, fixtures: Any) -> None:
        """
        Clear only the collections present in `fixtures`, then insert them.

        The fixtures are resolved once; all clears complete before any
        insert starts.
        """
        self.connection.ensure_open()
        fixture_set = self.resolver.resolve(fixtures)
        db = await self.get_connection()
        await CollectionClearer(db, self.config.clear_strategy).clear(list(fixture_set))
        await self._insert_fixture_set(fixture_set)

    async def clear_all_and_load(self, fixtures: Any) -> None:
        """
        Clear every collection in the database, then insert `fixtures`.

        Fixtures are resolved before clearing so a bad path or malformed
        file leaves the database untouched.
        """
        self.connection.ensure_open()
        fixture_set = self.resolver.resolve(fixtures)
        db = await self.get_connection()
        await CollectionClearer(db, self.config.clear_strategy).clear()
        await self._insert_fixture_set(fixture_set)

    # =========================================================================
    # Insertion
    # =========================================================================

    async def _insert_fixture_set(self, fixture_set: FixtureSet) -> None:
        if not fixture_set:
            logger.debug("No fixture collections to load")
            return

        db = await self.get_connection()
        counts = await asyncio.gather(
            *(
                self._insert_collection(db, collection, documents)
                for collection, documents in fixture_set.items()
            )
        )
        logger.info(
            f"Loaded {sum(counts)} documents into {len(fixture_set)} collections "
            f"of '{self.config.database_name}'"
        )

    async def _insert_collection(
        self,
        db: AsyncIOMotorDatabase,
        collection: str,
        documents: list[Document],
    ) -> int:
        """Modify and batch-insert one collection's documents."""
        # Copies keep caller-owned fixtures free of modifier edits and driver-added _id
        prepared = await asyncio.gather(
            *(self.modifiers.apply(collection, copy.deepcopy(doc)) for doc in documents)
        )
        if not prepared:
            return 0

        try:
            await db[collection].insert_many(list(prepared), ordered=True)
        except PyMongoError as e:
            raise InsertError(collection, str(e)) from e

        logger.debug(f"Inserted {len(prepared)} documents into '{collection}'")
        return len(prepared)
