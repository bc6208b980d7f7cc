"""
tests/conftest.py -- Shared test fixtures for credential service tests.

This module provides:
  - _make_test_store(): creates an isolated in-memory user store
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - settings / tokens / store / flow: unit-level building blocks
  - api_client: TestClient over the real FastAPI app with an isolated store

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the API client because TestClient runs `def` route handlers in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

The DEBUG env var must be set before any api/ import so get_settings()
auto-generates JWT_SECRET in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate JWT_SECRET in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.dependencies import SessionGuard
from auth.flow import AuthFlow
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so tests don't
                   share state.
    """
    return UserStore(db_url=f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: UserStore, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan.

    Wires the test store and token service into app.state so TestClient
    routes see an isolated DB and a known signing secret.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        app.state.auth_flow = AuthFlow(store, tokens)
        app.state.session_guard = SessionGuard(tokens)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET)


@pytest.fixture
def tokens(settings: Settings) -> TokenService:
    return TokenService(settings)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = _make_test_store(uuid.uuid4().hex)
    yield s
    s.close()


@pytest.fixture
def flow(store: UserStore, tokens: TokenService) -> AuthFlow:
    return AuthFlow(store, tokens)


# ---------------------------------------------------------------------------
# API fixture -- fresh app state per test so registrations don't leak
# ---------------------------------------------------------------------------


@pytest.fixture
def api_client(store: UserStore, tokens: TokenService) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app with an isolated store.

    raise_server_exceptions=False so tests can observe the 500 envelope the
    catch-all handler produces.
    """
    app.router.lifespan_context = _patch_lifespan(store, tokens)
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def _register_payload(**overrides) -> dict:
    body = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone_number": "+44 20 7946 0000",
        "password": "analytical-engine",
        "confirm_password": "analytical-engine",
        "profile_image_url": "https://example.com/ada.png",
    }
    body.update(overrides)
    return body


@pytest.fixture
def registration():
    """Factory for a valid registration body; keyword arguments replace or add fields."""
    return _register_payload
