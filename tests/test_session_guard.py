"""Unit tests for auth/dependencies.py -- SessionGuard bearer extraction."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from auth.dependencies import SessionGuard
from auth.models import UserIdentity
from auth.tokens import TokenService

IDENTITY = UserIdentity(id=7, email="grace@example.com")


@pytest.fixture
def guard(tokens: TokenService) -> SessionGuard:
    return SessionGuard(tokens)


def test_valid_bearer_token(guard: SessionGuard, tokens: TokenService):
    assert guard.authenticate(f"Bearer {tokens.issue(IDENTITY)}") == IDENTITY


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer ", "Bearer garbage", "Basic dXNlcjpwYXNz"])
def test_rejected_headers(guard: SessionGuard, header):
    assert guard.authenticate(header) is None


def test_scheme_is_case_sensitive(guard: SessionGuard, tokens: TokenService):
    assert guard.authenticate(f"bearer {tokens.issue(IDENTITY)}") is None


def test_token_without_scheme(guard: SessionGuard, tokens: TokenService):
    assert guard.authenticate(tokens.issue(IDENTITY)) is None


def test_expired_token(guard: SessionGuard, tokens: TokenService):
    stale = tokens.issue(IDENTITY, now=datetime.now(timezone.utc) - timedelta(days=8))
    assert guard.authenticate(f"Bearer {stale}") is None


def test_zero_user_id_is_rejected(guard: SessionGuard, tokens: TokenService):
    """userId 0 never names a stored row; it is treated like a token without a user."""
    token = tokens.issue(UserIdentity(id=0, email="nobody@example.com"))
    assert guard.authenticate(f"Bearer {token}") is None
