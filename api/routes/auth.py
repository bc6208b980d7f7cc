"""
api/routes/auth.py -- Registration, login and logout endpoints.

Routes:
  POST /auth/register   -- create an account; 201 with user and token
  POST /auth/login      -- email/password login; 200 with user and token
  POST /auth/logout     -- stateless; always 204

Failures are AuthError exceptions raised by AuthFlow and rendered by the
handler in api/main.py, so every route returns the same error envelope.

register and login are plain `def` handlers: Starlette runs them on its worker
thread pool, which keeps bcrypt's deliberate slowness off the event loop.

Security:
  Cache-Control: no-store on every response that carries a token.
  Unknown email and wrong password return the identical 401 body.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from api.models import AuthResponse, LoginRequest, RegisterRequest, user_to_response
from auth.flow import AuthFlow
from auth.models import AuthResult

# Auth policy:
# - POST /auth/register: public -- creates the account
# - POST /auth/login:    public -- login endpoint must be unauthenticated
# - POST /auth/logout:   public -- there is no server-side session to check
router = APIRouter()


def _token_response(status_code: int, message: str, result: AuthResult) -> JSONResponse:
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(message=message, user=user_to_response(result.user), token=result.token).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Register a new user and return it with a signed token."""
    flow: AuthFlow = request.app.state.auth_flow
    result = flow.register(
        name=body.name,
        email=body.email,
        phone_number=body.phone_number,
        password=body.password,
        confirm_password=body.confirm_password,
        profile_image_url=body.profile_image_url,
    )
    return _token_response(201, "User registered", result)


@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password."""
    flow: AuthFlow = request.app.state.auth_flow
    result = flow.login(body.email, body.password)
    return _token_response(200, "Login successful", result)


@router.post("/auth/logout", status_code=204)
async def logout(request: Request) -> Response:
    """Acknowledge logout. The client discards its token; nothing is revoked server-side."""
    request.app.state.auth_flow.logout()
    return Response(status_code=204)
