"""Configuration for schema-store."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class StoreConfig(BaseSettings):
    """Settings for an ObjectStore.

    Values can be overridden with SCHEMA_STORE_* environment variables, e.g.
    SCHEMA_STORE_DATABASE_PATH=/var/lib/app/store.db.
    """

    database_path: Optional[Path] = Field(
        default=None,
        description="Path to the SQLite database file. None opens an in-memory database.",
    )
    database_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL. Takes precedence over database_path.",
    )
    schema_version: int = Field(
        default=1,
        ge=1,
        description="Schema version used when setup() is called without an explicit version",
    )
    echo: bool = Field(default=False, description="Echo SQL statements through SQLAlchemy")
    busy_timeout_ms: int = Field(
        default=10000, ge=0, description="SQLite busy timeout in milliseconds"
    )
    wal_mode: bool = Field(
        default=True, description="Enable WAL journal mode for file-backed databases"
    )
    notify_schema_errors: bool = Field(
        default=True,
        description="Send unknown-schema errors through the error callback before raising",
    )
    log_level: LogLevel = Field(
        default="WARNING", description="Log level used by the CLI when --log-level is not given"
    )

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_STORE_",
        extra="ignore",
    )

    @property
    def is_memory(self) -> bool:
        """True when the configured database lives only in memory."""
        if self.database_url:
            return self.database_url.rstrip("/").endswith("sqlite+aiosqlite:") or (
                ":memory:" in self.database_url
            )
        return self.database_path is None

    @property
    def db_url(self) -> str:
        """Get the SQLAlchemy URL for the configured database."""
        if self.database_url:
            return self.database_url
        if self.database_path is None:
            return "sqlite+aiosqlite://"
        return f"sqlite+aiosqlite:///{self.database_path}"
