"""Tests for LoaderConfig and environment settings."""

import pytest
from pydantic import ValidationError

from mongo_fixtures import ClearStrategy, LoaderConfig
from mongo_fixtures.config import Settings


class TestLoaderConfig:
    """Tests for LoaderConfig validation and derived values."""

    def test_defaults(self):
        config = LoaderConfig(database="myapp_test")

        assert config.database_name == "myapp_test"
        assert config.uri == "mongodb://localhost:27017/myapp_test"
        assert config.clear_strategy is ClearStrategy.DROP
        assert config.safe is True

    def test_full_locator(self):
        """Should take the database name from a mongodb:// locator."""
        config = LoaderConfig(database="mongodb://db1:27017,db2:27017/orders?replicaSet=rs0")

        assert config.is_uri
        assert config.database_name == "orders"
        assert config.uri == "mongodb://db1:27017,db2:27017/orders?replicaSet=rs0"

    def test_locator_without_database_rejected(self):
        with pytest.raises(ValidationError, match="does not name a database"):
            LoaderConfig(database="mongodb://localhost:27017/")

    def test_unsafe_writes_rejected(self):
        with pytest.raises(ValidationError, match="safe=False"):
            LoaderConfig(database="myapp_test", safe=False)

    def test_partial_credentials_rejected(self):
        with pytest.raises(ValidationError, match="together"):
            LoaderConfig(database="myapp_test", username="admin")

    def test_empty_database_rejected(self):
        with pytest.raises(ValidationError):
            LoaderConfig(database="")

    def test_frozen(self):
        config = LoaderConfig(database="myapp_test")

        with pytest.raises(ValidationError):
            config.database = "other"

    def test_strategy_from_string(self):
        assert LoaderConfig(database="db", clear_strategy="remove").clear_strategy is ClearStrategy.REMOVE

    def test_client_options_without_credentials(self):
        options = LoaderConfig(database="db", connect_timeout_ms=1000).client_options()

        assert options == {"serverSelectionTimeoutMS": 1000, "w": 1}

    def test_client_options_with_credentials(self):
        options = LoaderConfig(
            database="db", username="u", password="p", auth_source="db"
        ).client_options()

        assert options["username"] == "u"
        assert options["password"] == "p"
        assert options["authSource"] == "db"


class TestSettings:
    """Tests for environment-driven defaults."""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MONGODB_HOST", "mongo.internal")
        monkeypatch.setenv("MONGODB_PORT", "27999")
        monkeypatch.setenv("FIXTURES_CLEAR_STRATEGY", "remove")

        settings = Settings()

        assert settings.mongodb_host == "mongo.internal"
        assert settings.mongodb_port == 27999
        assert settings.fixtures_clear_strategy == "remove"

    def test_from_settings_overrides(self, monkeypatch):
        """Should prefer explicit values and fall back to settings for omitted ones."""
        monkeypatch.setattr("mongo_fixtures.schemas.loader.settings", Settings(mongodb_host="envhost"))

        config = LoaderConfig.from_settings(database="db", port=27020)

        assert config.host == "envhost"
        assert config.port == 27020

    def test_explicit_none_clears_environment_credentials(self, monkeypatch):
        """Should let callers turn off credentials set in the environment."""
        monkeypatch.setattr(
            "mongo_fixtures.schemas.loader.settings",
            Settings(mongodb_username="envuser", mongodb_password="envpass"),
        )

        inherited = LoaderConfig.from_settings(database="db")
        cleared = LoaderConfig.from_settings(database="db", username=None, password=None)

        assert inherited.username == "envuser"
        assert cleared.username is None
        assert cleared.password is None
        assert "username" not in cleared.client_options()
