"""Lazy, memoized MongoDB connection owned by a single Loader."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from mongo_fixtures.exceptions import DatabaseConnectionError, NoActiveConnectionError
from mongo_fixtures.schemas.loader import LoaderConfig

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class ConnectionManager:
    """
    Opens the database connection on first use and reuses it afterwards.

    The client is created from the LoaderConfig and verified with a ping,
    which also surfaces authentication failures. Once closed, the manager
    cannot be used again.
    """

    def __init__(
        self,
        config: LoaderConfig,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ):
        """
        Initialize ConnectionManager.

        Args:
            config: Immutable connection settings.
            client_factory: Callable building a motor-compatible client from
                a URI and keyword options (injectable for tests).
        """
        self.config = config
        self._client_factory = client_factory
        self._client: Any = None
        self._database: AsyncIOMotorDatabase | None = None
        self._closed = False
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        """True while a verified connection is held."""
        return self._database is not None

    def ensure_open(self) -> None:
        """Raise DatabaseConnectionError if the manager has been closed."""
        if self._closed:
            raise DatabaseConnectionError("Loader connection has been closed")

    async def get_connection(self) -> AsyncIOMotorDatabase:
        """
        Return the target database, connecting on the first call.

        Raises:
            DatabaseConnectionError: If the server is unreachable, credentials
                are rejected, or the manager has been closed.
        """
        if self._database is not None:
            return self._database

        async with self._lock:
            # Another caller may have connected while we waited
            if self._database is not None:
                return self._database
            self.ensure_open()

            database_name = self.config.database_name
            logger.debug(f"Connecting to MongoDB database '{database_name}'")
            client = None
            try:
                client = self._client_factory(self.config.uri, **self.config.client_options())
                await client.admin.command("ping")
            except (PyMongoError, ValueError) as e:
                # Malformed locators fail in the client constructor
                if client is not None:
                    client.close()
                raise DatabaseConnectionError(
                    f"Could not connect to MongoDB database '{database_name}': {e}"
                ) from e

            self._client = client
            self._database = client[database_name]
            logger.info(f"Connected to MongoDB database '{database_name}'")
            return self._database

    async def close(self) -> None:
        """
        Close the connection.

        Raises:
            NoActiveConnectionError: If no connection was ever established.
        """
        if self._client is None:
            raise NoActiveConnectionError("Cannot close: no connection has been established")

        self._client.close()
        self._client = None
        self._database = None
        self._closed = True
        logger.debug("MongoDB connection closed")
