"""
Tests for application settings and environment defaults.
"""

import pytest
from pydantic import ValidationError

from relay.settings import Environment, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ENV",
        "LOG_LEVEL",
        "LOG_CONSOLE_FORMAT",
        "WS_OVERFLOW_POLICY",
        "BROADCAST_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)


def test_development_defaults():
    settings = Settings()

    assert settings.ENV == Environment.DEV
    assert settings.is_development
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_CONSOLE_FORMAT == "human"
    assert settings.PORT == 5000


def test_production_defaults(monkeypatch):
    monkeypatch.setenv("ENV", "production")

    settings = Settings()

    assert settings.is_production
    assert settings.LOG_LEVEL == "WARNING"
    assert settings.LOG_CONSOLE_FORMAT == "json"


def test_explicit_log_level_wins(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    assert Settings().LOG_LEVEL == "DEBUG"


def test_nested_groups(monkeypatch):
    monkeypatch.setenv("WS_OVERFLOW_POLICY", "drop")
    monkeypatch.setenv("BROADCAST_BACKEND", "redis")

    settings = Settings(REDIS_IP="cache", REDIS_PORT=6380)

    assert settings.websocket.OVERFLOW_POLICY == "drop"
    assert settings.websocket.BROADCAST_BACKEND == "redis"
    assert settings.redis.url == "redis://cache:6380"
    assert settings.database.URL == settings.DATABASE_URL


def test_invalid_overflow_policy(monkeypatch):
    monkeypatch.setenv("WS_OVERFLOW_POLICY", "block")

    with pytest.raises(ValidationError):
        Settings()
