"""
auth/models.py -- Domain dataclasses and failure taxonomy for authentication.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; the store, flow and routes do the work.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class User:
    """A registered account as held by the user store.

    password_hash is the bcrypt credential. It is set once at registration and
    never mutated. AuthFlow returns copies with password_hash=None so the
    credential never leaves the auth layer.
    """

    name: str
    email: str
    id: int | None = None
    phone_number: str | None = None
    password_hash: str | None = None
    profile_image_url: str | None = None
    created_at: str | None = None  # ISO 8601, set by the store


@dataclass(frozen=True)
class UserIdentity:
    """The minimal identity asserted by a token: who, and under which email."""

    id: int
    email: str


class AuthFailure(str, Enum):
    """Every expected, caller-safe outcome of an auth operation that is not success."""

    INVALID_INPUT = "INVALID_INPUT"
    PASSWORD_MISMATCH = "PASSWORD_MISMATCH"
    EMAIL_EXISTS = "EMAIL_EXISTS"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHORIZED = "UNAUTHORIZED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INTERNAL = "INTERNAL"


class AuthError(Exception):
    """Typed failure raised by AuthFlow.

    message is user-facing and must never contain internal detail (SQL,
    driver errors, hashes). The HTTP layer maps failure to status and body.
    """

    def __init__(self, failure: AuthFailure, message: str | None = None) -> None:
        super().__init__(message or failure.value)
        self.failure = failure
        self.message = message


@dataclass
class AuthResult:
    """Successful register/login: the public user projection plus a fresh token."""

    user: User
    token: str
