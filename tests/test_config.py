"""Settings validation and derived properties."""

import pytest
from pydantic import ValidationError

from contactbook.config import Settings


class TestSettings:

    def test_log_level_is_normalized(self):
        """Log level names are upper-cased."""
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        """Unknown log levels fail validation."""
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_cors_origins_list(self):
        """Comma-separated origins are split and stripped."""
        settings = Settings(cors_origins="http://a.test, http://b.test,,")

        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_is_sqlite(self):
        """SQLite URLs are recognized."""
        assert Settings(database_url="sqlite+aiosqlite://").is_sqlite
        assert not Settings(database_url="postgresql+asyncpg://u:p@db/contactbook").is_sqlite

    def test_connect_attempts_bounded(self):
        """At least one connection attempt is required."""
        with pytest.raises(ValidationError):
            Settings(store_connect_attempts=0)
