"""Loader configuration defaults using pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# Find .env file: check backend dir first, then project root
_BACKEND_DIR = Path(__file__).parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _BACKEND_DIR / ".env" if (_BACKEND_DIR / ".env").exists() else _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Default connection settings loaded from environment variables.

    These only supply defaults. Each Loader is built from its own immutable
    LoaderConfig, so tests can point different loaders at different databases
    without touching the environment.
    """

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MongoDB server
    mongodb_host: str = "localhost"
    mongodb_port: int = 27017
    mongodb_database: str = ""

    # Authentication (optional)
    mongodb_username: str | None = None
    mongodb_password: str | None = None
    mongodb_auth_source: str = "admin"

    mongodb_connect_timeout_ms: int = 5000

    # "drop" or "remove", see ClearStrategy
    fixtures_clear_strategy: str = "drop"

    # Logging
    log_level: str = "INFO"


settings = Settings()
