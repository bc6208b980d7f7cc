"""
auth/tokens.py -- Password hashing and JWT issue/verify.

Security design decisions:
  Passwords: bcrypt, cost factor fixed at BCRYPT_ROUNDS. Bcrypt is the right
       choice for low-entropy secrets (passwords) because its cost factor makes
       brute-force expensive, and checkpw() compares in constant time against
       the salt and cost embedded in the stored hash. The _DUMMY_HASH constant
       enables timing equalization in AuthFlow.login() so response time does
       not reveal whether an email is registered.

  JWT: python-jose with HS256. Tokens carry userId and email, are stamped with
       iat, and expire exactly TOKEN_TTL (7 days) after issue. They are
       stateless -- verification never touches the user store, and there is
       no revocation list. Two tokens for the same user are independently
       valid until their own exp.

  Verification result: TokenService.inspect() reports VALID / INVALID /
       EXPIRED so tests can tell the cases apart. TokenService.verify() is the
       public boundary and collapses everything but VALID to None -- callers
       never learn *why* a token was refused.

  Secret: TokenService is constructed once at startup from the Settings
       object. Construction raises if no secret is configured; there is no
       fallback key.

Layer rule: no imports from api/. Import from core/ is allowed -- core/ is the
kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import UserIdentity

if TYPE_CHECKING:
    from core.config import Settings

logger = logging.getLogger("credsvc.auth")

BCRYPT_ROUNDS = 10

# bcrypt only ever looks at the first 72 bytes of input. bcrypt >= 4.1 raises
# instead of truncating silently, so both hash and verify cut at the same
# boundary explicitly.
_BCRYPT_MAX_BYTES = 72

_ALGORITHM = "HS256"

TOKEN_TTL = timedelta(days=7)

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    A fresh salt is drawn on every call, so hashing the same password twice
    yields two different strings that both verify. If the OS entropy source
    is unavailable bcrypt raises, and that error is left to propagate -- there
    is no sensible recovery.
    """
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed hash is a mismatch, not an error.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. AuthFlow.login() verifies against it when the
# email is unknown so both failure paths pay the same bcrypt cost.
_DUMMY_HASH: str = hash_password("credsvc_timing_dummy")


def burn_password_check(plain: str) -> None:
    """Run one bcrypt comparison whose result is discarded."""
    verify_password(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# JWT issue / verify
# ---------------------------------------------------------------------------


class TokenStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TokenCheck:
    status: TokenStatus
    identity: UserIdentity | None = None


_INVALID = TokenCheck(TokenStatus.INVALID)
_EXPIRED = TokenCheck(TokenStatus.EXPIRED)


class TokenService:
    """Issues and verifies signed, time-bound identity tokens.

    Usage:
        tokens = TokenService(get_settings())
        token = tokens.issue(UserIdentity(id=1, email="ada@example.com"))
        identity = tokens.verify(token)   # UserIdentity or None
    """

    def __init__(self, settings: Settings, ttl: timedelta = TOKEN_TTL) -> None:
        if not settings.jwt_secret:
            raise ValueError("TokenService requires a signing secret; refusing to start without JWT_SECRET.")
        self._secret = settings.jwt_secret
        self._ttl = ttl

    def issue(self, identity: UserIdentity, now: datetime | None = None) -> str:
        """Encode a signed JWT asserting identity, valid for the configured TTL.

        now is the issue time; it defaults to the current UTC time and exists
        so tests can mint tokens in the past.
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": identity.id,
            "email": identity.email,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def inspect(self, token: str) -> TokenCheck:
        """Classify a token as VALID, INVALID or EXPIRED.

        Only HS256 is accepted, so tokens with alg "none" or any other
        algorithm are INVALID. A well-signed token whose claims do not carry
        an integer userId and a string email is INVALID too.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except ExpiredSignatureError:
            return _EXPIRED
        except JWTError:
            return _INVALID

        user_id = payload.get("userId")
        email = payload.get("email")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(email, str):
            return _INVALID
        return TokenCheck(TokenStatus.VALID, UserIdentity(id=user_id, email=email))

    def verify(self, token: str) -> UserIdentity | None:
        """Return the token's identity, or None on any failure.

        Expired, forged and malformed tokens are indistinguishable here.
        """
        check = self.inspect(token)
        if check.status is not TokenStatus.VALID:
            logger.debug("Token rejected (%s)", check.status.value)
            return None
        return check.identity
