"""Load MongoDB fixtures from inline data, files or directories."""

import os
from typing import Any

from mongo_fixtures.exceptions import (
    ClearError,
    CollectionError,
    DatabaseConnectionError,
    FixtureError,
    InsertError,
    InvalidArgumentTypeError,
    InvalidFixtureShapeError,
    InvalidIdentifierFormatError,
    ModifierError,
    NoActiveConnectionError,
    ResourceNotFoundError,
    UnsupportedFixtureInputError,
)
from mongo_fixtures.schemas import ClearStrategy, LoaderConfig
from mongo_fixtures.services.loader import Loader
from mongo_fixtures.services.modifiers import ModifierChain
from mongo_fixtures.services.resolver import FixtureResolver
from mongo_fixtures.utils.object_id import create_object_id, is_object_id

__version__ = "0.1.0"


def connect(
    database: str,
    *,
    base_dir: str | os.PathLike | None = None,
    **options: Any,
) -> Loader:
    """
    Create a Loader for a database.

    No connection is opened until the first load or clear.

    Args:
        database: Database name or full mongodb:// locator.
        base_dir: Directory relative fixture paths are resolved against.
        **options: Other LoaderConfig fields (host, port, username, ...).
            Omitted fields fall back to environment settings.
    """
    return Loader(LoaderConfig.from_settings(database=database, **options), base_dir=base_dir)


__all__ = [
    "ClearError",
    "ClearStrategy",
    "CollectionError",
    "DatabaseConnectionError",
    "FixtureError",
    "FixtureResolver",
    "InsertError",
    "InvalidArgumentTypeError",
    "InvalidFixtureShapeError",
    "InvalidIdentifierFormatError",
    "Loader",
    "LoaderConfig",
    "ModifierChain",
    "ModifierError",
    "NoActiveConnectionError",
    "ResourceNotFoundError",
    "UnsupportedFixtureInputError",
    "connect",
    "create_object_id",
    "is_object_id",
]
