"""
auth/flow.py -- Registration, login, logout and profile orchestration.

AuthFlow drives the password hasher, the user store and the token service.
Every failure it produces is an AuthError carrying an AuthFailure; the HTTP
layer maps those to status codes. Store failures are logged here and surface
as AuthFailure.INTERNAL with no detail.

Check ordering in register() is part of the public contract. A request with
both a duplicate email and a short password gets EMAIL_EXISTS, because the
store lookup happens before the strength check.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from auth.models import AuthError, AuthFailure, AuthResult, User, UserIdentity
from auth.store import DuplicateEmailError, StoreError, UserStore
from auth.tokens import TokenService, burn_password_check, hash_password, verify_password

logger = logging.getLogger("credsvc.auth")

MIN_PASSWORD_LENGTH = 8


def _public(user: User) -> User:
    return replace(user, password_hash=None)


class AuthFlow:
    def __init__(self, store: UserStore, tokens: TokenService) -> None:
        self._store = store
        self._tokens = tokens

    def register(
        self,
        name: str | None,
        email: str | None,
        phone_number: str | None,
        password: str | None,
        confirm_password: str | None,
        profile_image_url: str | None,
    ) -> AuthResult:
        """Create an account and return it with a fresh token.

        Check order: required fields, password confirmation, existing email,
        password strength. The insert is optimistic; a UNIQUE violation from
        a concurrent registration is reported as EMAIL_EXISTS too.
        """
        if not name or not email or not password or not confirm_password:
            raise AuthError(AuthFailure.INVALID_INPUT)
        if password != confirm_password:
            raise AuthError(AuthFailure.PASSWORD_MISMATCH, "Passwords do not match")

        if self._lookup_email(email) is not None:
            raise AuthError(AuthFailure.EMAIL_EXISTS)

        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(
                AuthFailure.WEAK_PASSWORD, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        candidate = User(
            name=name,
            email=email,
            phone_number=phone_number,
            password_hash=hash_password(password),
            profile_image_url=profile_image_url,
        )
        try:
            user = self._store.create_user(candidate)
        except DuplicateEmailError:
            logger.info("Registration lost a race on an existing email")
            raise AuthError(AuthFailure.EMAIL_EXISTS) from None
        except StoreError:
            logger.exception("User insert failed")
            raise AuthError(AuthFailure.INTERNAL) from None

        logger.info("Registered user id=%d", user.id)
        return AuthResult(user=_public(user), token=self._issue(user))

    def login(self, email: str | None, password: str | None) -> AuthResult:
        """Check credentials and return the user with a fresh token.

        Unknown email and wrong password both raise INVALID_CREDENTIALS, and
        both pay for one bcrypt comparison, so neither the response nor its
        timing tells a caller whether the email is registered.
        """
        if not email or not password:
            raise AuthError(AuthFailure.INVALID_INPUT)

        user = self._lookup_email(email)
        if user is None or user.password_hash is None:
            burn_password_check(password)
            raise AuthError(AuthFailure.INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            logger.info("Failed login for user id=%d", user.id)
            raise AuthError(AuthFailure.INVALID_CREDENTIALS)

        return AuthResult(user=_public(user), token=self._issue(user))

    def logout(self) -> None:
        """Tokens are stateless, so there is nothing to invalidate."""
        return None

    def profile(self, identity: UserIdentity) -> User:
        """Return the public projection of the user a verified token names."""
        try:
            user = self._store.get_by_id(identity.id)
        except StoreError:
            logger.exception("User lookup by id failed")
            raise AuthError(AuthFailure.INTERNAL) from None
        if user is None:
            raise AuthError(AuthFailure.USER_NOT_FOUND)
        return _public(user)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lookup_email(self, email: str) -> User | None:
        try:
            return self._store.get_by_email(email)
        except StoreError:
            logger.exception("User lookup by email failed")
            raise AuthError(AuthFailure.INTERNAL) from None

    def _issue(self, user: User) -> str:
        return self._tokens.issue(UserIdentity(id=user.id, email=user.email))
