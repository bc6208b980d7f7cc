"""
auth/dependencies.py -- Bearer-token guard and its FastAPI Depends() helper.

SessionGuard.authenticate() is the soft check (returns None on failure).
get_current_identity() wraps it and raises HTTP 401 if unauthenticated.

Only the Authorization: Bearer <token> header is accepted. A missing header,
a different scheme, a malformed token, a bad signature and an expired token
all produce the same 401 body, so a caller cannot probe which one it hit.

Layer rule: no imports from api/ or core/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import AuthFailure, UserIdentity
from auth.tokens import TokenService

_BEARER_PREFIX = "Bearer "


class SessionGuard:
    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens

    def authenticate(self, authorization: str | None) -> UserIdentity | None:
        """Return the identity carried by an Authorization header value, or None.

        The scheme prefix is matched literally and case-sensitively.
        """
        if not authorization or not authorization.startswith(_BEARER_PREFIX):
            return None
        identity = self._tokens.verify(authorization[len(_BEARER_PREFIX) :])
        if identity is None or not identity.id:
            return None
        return identity


def get_current_identity(request: Request) -> UserIdentity:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: UserIdentity = Depends(get_current_identity)): ...
    """
    guard: SessionGuard = request.app.state.session_guard
    identity = guard.authenticate(request.headers.get("Authorization"))
    if identity is None:
        raise HTTPException(status_code=401, detail={"error": AuthFailure.UNAUTHORIZED.value})
    return identity
