"""Pydantic schemas."""

from mongo_fixtures.schemas.loader import ClearStrategy, LoaderConfig

__all__ = [
    "ClearStrategy",
    "LoaderConfig",
]
