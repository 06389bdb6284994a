# tests/test_settings.py
import logging

import pytest
from pydantic import ValidationError

from top_chart.core.logging import configure_logging
from top_chart.core.settings import Settings


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VOTER_HASH_SALT", "from-env")
    monkeypatch.setenv("BROADCAST_QUEUE_SIZE", "9")
    monkeypatch.setenv("CAPTCHA_PROVIDER", "hcaptcha")
    monkeypatch.setenv("CAPTCHA_SECRET", "s3cret")

    config = Settings()

    assert config.voter_hash_salt == "from-env"
    assert config.broadcast_queue_size == 9
    assert config.captcha_enabled is True


def test_settings_are_frozen() -> None:
    """The salt is fixed for the life of the process."""
    config = Settings(VOTER_HASH_SALT="fixed")
    with pytest.raises(ValidationError):
        config.voter_hash_salt = "changed"


def test_captcha_disabled_without_secret() -> None:
    assert Settings(CAPTCHA_PROVIDER="hcaptcha", CAPTCHA_SECRET="").captcha_enabled is False


def test_database_url_sync_rewrites_asyncpg() -> None:
    config = Settings(DATABASE_URL="postgresql+asyncpg://u:p@db/chart")
    assert config.database_url_sync == "postgresql+psycopg://u:p@db/chart"
    assert Settings(DATABASE_URL="sqlite:///./x.db").database_url_sync == "sqlite:///./x.db"


def test_configure_logging_sets_package_level() -> None:
    configure_logging("debug")
    assert logging.getLogger("top_chart").level == logging.DEBUG
    configure_logging("nonsense")
    assert logging.getLogger("top_chart").level == logging.INFO
