"""Pydantic schemas for loader configuration.

A LoaderConfig is immutable once built; every Loader owns exactly one.
"""

from enum import Enum
from typing import Any
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mongo_fixtures.config import settings

# Locator schemes accepted in place of a bare database name
URI_SCHEMES = ("mongodb://", "mongodb+srv://")


class ClearStrategy(str, Enum):
    """How a collection is emptied before fixtures are inserted."""

    # Drop the collection; the server recreates it on the next insert
    DROP = "drop"
    # delete_many({}); keeps the collection and its indexes
    REMOVE = "remove"


class LoaderConfig(BaseModel):
    """Connection and clearing options for one target database."""

    model_config = ConfigDict(frozen=True)

    database: str = Field(
        min_length=1,
        description="Database name, or a full mongodb:// locator that names one",
    )
    host: str = "localhost"
    port: int = Field(default=27017, gt=0, lt=65536)
    username: str | None = None
    password: str | None = None
    auth_source: str = "admin"
    connect_timeout_ms: int = Field(default=5000, gt=0)
    clear_strategy: ClearStrategy = ClearStrategy.DROP
    safe: bool = Field(
        default=True,
        description="Require acknowledged writes. Unacknowledged writes are not supported.",
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "LoaderConfig":
        if not self.safe:
            raise ValueError("safe=False is not supported: every write must be acknowledged")
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be given together")
        if self.is_uri and not self.database_name:
            raise ValueError(f"Connection locator does not name a database: {self.database}")
        return self

    @classmethod
    def from_settings(cls, **overrides: Any) -> "LoaderConfig":
        """
        Build a config from environment settings, with explicit overrides.

        Omitted fields take their environment value. An explicit None, such
        as `username=None`, clears the value taken from the environment.
        """
        values: dict[str, Any] = {
            "database": settings.mongodb_database,
            "host": settings.mongodb_host,
            "port": settings.mongodb_port,
            "username": settings.mongodb_username,
            "password": settings.mongodb_password,
            "auth_source": settings.mongodb_auth_source,
            "connect_timeout_ms": settings.mongodb_connect_timeout_ms,
            "clear_strategy": settings.fixtures_clear_strategy,
        }
        values.update(overrides)
        return cls(**values)

    @property
    def is_uri(self) -> bool:
        """True when `database` is a full connection locator."""
        return self.database.startswith(URI_SCHEMES)

    @property
    def database_name(self) -> str:
        """Name of the target database."""
        if not self.is_uri:
            return self.database
        return unquote(urlsplit(self.database).path.lstrip("/"))

    @property
    def uri(self) -> str:
        """Connection string passed to the driver."""
        if self.is_uri:
            return self.database
        return f"mongodb://{self.host}:{self.port}/{self.database}"

    def client_options(self) -> dict[str, Any]:
        """Keyword arguments for the motor client."""
        options: dict[str, Any] = {
            "serverSelectionTimeoutMS": self.connect_timeout_ms,
            "w": 1,
        }
        if self.username is not None:
            options["username"] = self.username
            options["password"] = self.password
            options["authSource"] = self.auth_source
        return options
