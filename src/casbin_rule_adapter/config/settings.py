"""
Configuration settings for the casbin rule adapter.

Settings are read from environment variables or a .env file through
Pydantic Settings. The adapter accepts an explicit Settings instance, so
tests and embedding applications can override values without touching the
environment.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Using a plain dict for model_config to avoid ConfigDict typing/overload issues
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    # Application Settings
    app_name: str = "Casbin Rule Adapter"
    debug: bool = Field(default=False, description="Enable debug logging", alias="DEBUG")

    # Database Settings
    database_url: str = Field(
        default="sqlite:///data/casbin.db",
        description="SQLAlchemy URL of the policy store",
        alias="DATABASE_URL",
    )
    database_name: str = Field(
        default="casbin",
        description="Database created and used when DB_SPECIFIED is false",
        alias="DATABASE_NAME",
    )
    db_specified: bool = Field(
        default=False,
        description="Database in DATABASE_URL already exists and is used as-is",
        alias="DB_SPECIFIED",
    )
    table_name: str = Field(
        default="casbin_rule",
        description="Table holding the policy rules",
        alias="CASBIN_TABLE_NAME",
    )
    db_echo: bool = Field(
        default=False, description="Enable SQLAlchemy echo logging", alias="DB_ECHO"
    )
    sqlite_busy_timeout_seconds: int = Field(
        default=30,
        description="SQLite busy timeout (seconds) when the database is locked",
        alias="SQLITE_BUSY_TIMEOUT_SECONDS",
    )
    sqlite_journal_mode: str = Field(
        default="WAL",
        description="SQLite journal mode (e.g. DELETE, WAL, MEMORY)",
        alias="SQLITE_JOURNAL_MODE",
    )
    sqlite_synchronous: str = Field(
        default="NORMAL",
        description="SQLite synchronous setting (e.g. FULL, NORMAL, OFF)",
        alias="SQLITE_SYNCHRONOUS",
    )

    # Logging Settings
    log_level: str = Field(default="INFO", description="Console log level", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(
        default=None, description="Optional log file path", alias="LOG_FILE"
    )

    @field_validator("table_name")
    @classmethod
    def _validate_table_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("table name must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()


# Global settings instance
settings = Settings()
