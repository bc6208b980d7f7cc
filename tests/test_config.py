"""Unit tests for core/config.py -- the JWT_SECRET startup policy.

Covers:
- production mode (DEBUG unset/false) refuses to start without JWT_SECRET
- debug mode generates a random secret instead
- secrets shorter than 32 characters are rejected in both modes
- JWT_SECRET and DATABASE_URL are read from the environment
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import MIN_SECRET_LENGTH, Settings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_production_requires_secret(monkeypatch):
    monkeypatch.setenv("DEBUG", "false")
    with pytest.raises(ValidationError, match="JWT_SECRET is required"):
        Settings()


def test_debug_generates_secret(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    first = Settings()
    second = Settings()
    assert len(first.jwt_secret) >= MIN_SECRET_LENGTH
    assert first.jwt_secret != second.jwt_secret


@pytest.mark.parametrize("debug", ["true", "false"])
def test_short_secret_rejected(monkeypatch, debug):
    monkeypatch.setenv("DEBUG", debug)
    monkeypatch.setenv("JWT_SECRET", "supersecret")
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings()


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("JWT_SECRET", "s" * 40)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///elsewhere.db")
    settings = get_settings()
    assert settings.jwt_secret == "s" * 40
    assert settings.database_url == "sqlite:///elsewhere.db"
    assert get_settings() is settings
