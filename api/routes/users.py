"""
api/routes/users.py -- Profile endpoint for the authenticated user.

Routes:
  GET /user/profile  -- requires a Bearer token; 404 if the account is gone
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import ProfileResponse, user_to_response
from auth.dependencies import get_current_identity
from auth.flow import AuthFlow
from auth.models import UserIdentity

router = APIRouter()


@router.get("/user/profile", response_model=ProfileResponse)
def profile(request: Request, identity: UserIdentity = Depends(get_current_identity)) -> ProfileResponse:
    """Return the profile of the user the token was issued to.

    The token alone proves identity; the store lookup only fetches current
    profile data, and a deleted account yields USER_NOT_FOUND.
    """
    flow: AuthFlow = request.app.state.auth_flow
    return ProfileResponse(user=user_to_response(flow.profile(identity)))
