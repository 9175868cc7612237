import pytest
from pydantic import ValidationError

from bookstore.config.settings import Settings, get_settings
from bookstore.validators.config_validators import with_async_driver

ENV_VARS = ("DATABASE_URL", "TEST_DATABASE_URL", "TESTING", "LOG_LEVEL", "LOG_FORMAT", "DEFAULT_DATABASE_URL")


@pytest.fixture
def clean_env(monkeypatch):
    """Settings built in these tests must not see the runner's environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestDatabaseUrlSelection:

    def test_default_url(self, clean_env):
        assert make_settings().SQLALCHEMY_DATABASE_URL == "postgresql+psycopg://localhost/books"

    def test_explicit_database_url(self, clean_env):
        settings = make_settings(DATABASE_URL="postgresql+psycopg://db.internal/shop")

        assert settings.SQLALCHEMY_DATABASE_URL == "postgresql+psycopg://db.internal/shop"

    def test_testing_flag_selects_test_database(self, clean_env):
        settings = make_settings(TESTING=True, DATABASE_URL="postgresql+psycopg://db.internal/shop")

        assert settings.SQLALCHEMY_DATABASE_URL == "postgresql+psycopg://localhost/books_test"

    def test_testing_flag_from_environment(self, clean_env):
        clean_env.setenv("TESTING", "true")
        clean_env.setenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./ci.db")

        assert make_settings().SQLALCHEMY_DATABASE_URL == "sqlite+aiosqlite:///./ci.db"

    def test_plain_postgres_url_gets_async_driver(self, clean_env):
        settings = make_settings(DATABASE_URL="postgres://user:pw@db:5432/books")

        assert settings.SQLALCHEMY_DATABASE_URL == "postgresql+psycopg://user:pw@db:5432/books"


class TestLoggingSettings:

    def test_log_level_normalized(self, clean_env):
        assert make_settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_log_format_normalized(self, clean_env):
        assert make_settings(LOG_FORMAT="TEXT").LOG_FORMAT == "text"

    def test_invalid_log_level_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            make_settings(LOG_LEVEL="chatty")


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://h/db", "postgresql+psycopg://h/db"),
        ("postgresql://h/db", "postgresql+psycopg://h/db"),
        ("postgresql+asyncpg://h/db", "postgresql+asyncpg://h/db"),
        ("sqlite+aiosqlite:///x.db", "sqlite+aiosqlite:///x.db"),
    ],
)
def test_with_async_driver(url, expected):
    assert with_async_driver(url, "psycopg") == expected


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
