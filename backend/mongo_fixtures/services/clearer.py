"""Collection clearing before fixtures are (re)inserted."""

import asyncio
import logging
from collections.abc import Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import OperationFailure, PyMongoError

from mongo_fixtures.exceptions import ClearError
from mongo_fixtures.schemas.loader import ClearStrategy

logger = logging.getLogger(__name__)

# Collections with this prefix belong to the server and are never cleared
SYSTEM_PREFIX = "system."

# Server error code for "ns not found" (dropping a missing collection)
NAMESPACE_NOT_FOUND = 26


def normalize_names(collections: str | Iterable[str] | None) -> list[str] | None:
    """
    Normalize the `collections` argument of clear().

    None means "every collection"; a string is one name; any other iterable
    is de-duplicated with its order kept. An empty iterable stays empty.
    """
    if collections is None:
        return None
    if isinstance(collections, str):
        return [collections]
    return list(dict.fromkeys(collections))


class CollectionClearer:
    """
    Empties collections of a database.

    After clear() every targeted collection holds zero documents and accepts
    inserts without further setup. Missing collections are skipped silently.
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        strategy: ClearStrategy = ClearStrategy.DROP,
    ):
        self.database = database
        self.strategy = ClearStrategy(strategy)

    async def clear(self, collections: str | Iterable[str] | None = None) -> list[str]:
        """
        Clear the given collections, or all non-system collections.

        Collections are cleared concurrently; the first failure is raised
        and the remaining clears are left to finish on their own.

        Args:
            collections: A collection name, an iterable of names, or None
                for every collection in the database.

        Returns:
            Names of the collections that were targeted.

        Raises:
            ClearError: If any collection could not be cleared.
        """
        names = normalize_names(collections)
        if names is None:
            try:
                names = await self.database.list_collection_names()
            except PyMongoError as e:
                raise ClearError("*", f"could not list collections: {e}") from e

        targets = [name for name in names if not name.startswith(SYSTEM_PREFIX)]
        if not targets:
            return []

        await asyncio.gather(*(self._clear_one(name) for name in targets))
        logger.info(
            f"Cleared {len(targets)} collections ({self.strategy.value}): {', '.join(targets)}"
        )
        return targets

    async def _clear_one(self, name: str) -> None:
        try:
            if self.strategy is ClearStrategy.DROP:
                await self.database.drop_collection(name)
            else:
                await self.database[name].delete_many({})
        except OperationFailure as e:
            # Older servers report dropping a missing collection as an error
            if e.code == NAMESPACE_NOT_FOUND:
                return
            raise ClearError(name, str(e)) from e
        except PyMongoError as e:
            raise ClearError(name, str(e)) from e
        logger.debug(f"Cleared collection '{name}'")
