"""
Bearer-token dependency for the FrisFocus routes.

The token is the Supabase session token the app already holds; it is
checked against Supabase auth and resolved to the user the tour belongs to.
"""

import logging

from fastapi import HTTPException, Header
from pydantic import BaseModel

from frisfocus.db.client import get_service_client

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthenticatedUser(BaseModel):
    """The signed-in FrisFocus user behind a request."""
    id: str
    email: str | None
    access_token: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail)


async def get_current_user(authorization: str = Header(None)) -> AuthenticatedUser:
    """Resolve the request's bearer token to a FrisFocus user, or reject with 401."""
    if not authorization:
        raise _unauthorized("Sign in required")
    if not authorization.startswith(BEARER_PREFIX):
        raise _unauthorized("Expected a bearer token")

    token = authorization.removeprefix(BEARER_PREFIX)

    try:
        response = get_service_client().auth.get_user(token)
    except Exception as e:
        logger.warning(f"Session lookup failed: {e}")
        raise _unauthorized("Session expired, sign in again")

    user = getattr(response, "user", None)
    if user is None:
        raise _unauthorized("Session expired, sign in again")

    return AuthenticatedUser(id=user.id, email=user.email, access_token=token)
