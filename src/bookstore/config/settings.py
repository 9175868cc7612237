from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase, with_async_driver

class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    # DATABASE_URL is the explicit connection string (e.g. injected by the platform).
    # When it is unset we fall back to DEFAULT_DATABASE_URL.
    DATABASE_URL: str | None = None
    DEFAULT_DATABASE_URL: str = "postgresql+psycopg://localhost/books"
    POSTGRES_DRIVER: str = "psycopg"

    # Test database configuration
    TEST_DATABASE_URL: str = "postgresql+psycopg://localhost/books_test"
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    CREATE_TABLES_ON_STARTUP: bool = True

    # HTTP server (used by `python -m bookstore`)
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/bookstore")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        """
        Return the connection string for the current execution mode.

        - `TESTING=True` always selects TEST_DATABASE_URL, so a test run can never
          touch the regular database.
        - Otherwise DATABASE_URL is used when set, with DEFAULT_DATABASE_URL as fallback.

        Plain `postgres://` / `postgresql://` URLs are rewritten to name the async
        driver (`postgresql+psycopg://`), since the engine is an AsyncEngine.
        """
        if self.TESTING:
            url = self.TEST_DATABASE_URL
        else:
            url = self.DATABASE_URL or self.DEFAULT_DATABASE_URL

        return with_async_driver(url, self.POSTGRES_DRIVER)

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation
        (the logging module expects "DEBUG", "INFO", ...).
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize the LOG_FORMAT environment variable value to lowercase.
        """
        return to_lowercase(v)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

# get_settings() takes no arguments and always returns the same settings from the environment,
# so it is cached with @lru_cache(). Tests that need different values build Settings(...) directly.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
