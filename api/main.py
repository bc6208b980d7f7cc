"""
api/main.py -- FastAPI application entry point for the credential service.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- adds CORS headers for allowed browser origins
  2. log_requests    -- one log line per request with status and latency

Lifespan builds the collaborators once at startup and tears them down on
shutdown. Settings are validated first, so a missing JWT_SECRET stops the
process before it can accept traffic.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.users import router as users_router
from auth.dependencies import SessionGuard
from auth.flow import AuthFlow
from auth.models import AuthError, AuthFailure
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("credsvc.api")

# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. TokenService gets the Settings object by reference here -- it
    never reads the environment itself.
    """
    logger.info("Credential service starting up")
    settings = get_settings()
    app.state.user_store = UserStore(settings.database_url)
    tokens = TokenService(settings)
    app.state.auth_flow = AuthFlow(app.state.user_store, tokens)
    app.state.session_guard = SessionGuard(tokens)
    logger.info("Auth initialized")

    yield

    app.state.user_store.close()
    logger.info("Credential service shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Credential Service",
    description="User registration, login and bearer-token protected profiles.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(users_router, tags=["User"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope ({error, message?}) so
# clients can branch on the error code alone.
# ---------------------------------------------------------------------------

# AuthFailure -> (HTTP status, wire error code). PASSWORD_MISMATCH is reported
# as INVALID_INPUT with a message; INTERNAL never carries detail.
_FAILURE_RESPONSES: dict[AuthFailure, tuple[int, str]] = {
    AuthFailure.INVALID_INPUT: (400, "INVALID_INPUT"),
    AuthFailure.PASSWORD_MISMATCH: (400, "INVALID_INPUT"),
    AuthFailure.WEAK_PASSWORD: (400, "WEAK_PASSWORD"),
    AuthFailure.EMAIL_EXISTS: (409, "EMAIL_ALREADY_EXISTS"),
    AuthFailure.INVALID_CREDENTIALS: (401, "INVALID_CREDENTIALS"),
    AuthFailure.UNAUTHORIZED: (401, "UNAUTHORIZED"),
    AuthFailure.USER_NOT_FOUND: (404, "USER_NOT_FOUND"),
    AuthFailure.INTERNAL: (500, "INTERNAL_ERROR"),
}

_INTERNAL_MESSAGE = "An unexpected error occurred."


def _error_response(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(exclude_none=True),
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render an AuthFlow failure according to the HTTP contract."""
    status_code, code = _FAILURE_RESPONSES[exc.failure]
    message = _INTERNAL_MESSAGE if exc.failure is AuthFailure.INTERNAL else exc.message
    response = _error_response(status_code, code, message)
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """A body that is not JSON, or has wrong field types, is INVALID_INPUT like a missing field."""
    logger.info("Rejected request body on %s: %d validation error(s)", request.url.path, len(exc.errors()))
    return _error_response(400, "INVALID_INPUT")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Dependencies raise HTTPException with an already-shaped dict detail
    (e.g. {"error": "UNAUTHORIZED"}); that dict is the response body as-is.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
    return _error_response(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the server log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "INTERNAL_ERROR", _INTERNAL_MESSAGE)


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. Reports liveness only -- it never
# echoes configuration or connection strings.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return service liveness, version and database reachability."""
    db_ok = request.app.state.user_store.ping()
    return HealthResponse(version=__version__, components={"app": "ok", "database": "ok" if db_ok else "error"})
