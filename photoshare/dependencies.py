"""
Photoshare Backend - Authorization Guard
=========================================

What:  Turns an `Authorization: Bearer <token>` header into the caller's
       user ID, or rejects the request with 401.
Who:   Every mutating route declares `Depends(get_current_user_id)`.

The guard does not look the user up: a valid token is proof enough that the
ID was issued by us. Operations that need the user row (upload, comment)
load it themselves.
"""

import uuid
from typing import Optional

from fastapi import Request

from photoshare.exceptions import UnauthorizedError
from photoshare.services.token_service import TokenService, token_service

BEARER_SCHEME = "bearer"


def authenticate(
    authorization_header: Optional[str],
    tokens: Optional[TokenService] = None,
) -> uuid.UUID:
    """
    Validate an Authorization header value.

    Raises:
        UnauthorizedError: header missing, not a Bearer credential, or empty
        InvalidTokenError: token failed verification
    """
    if not authorization_header:
        raise UnauthorizedError(message="Authorization header missing")

    scheme, _, credentials = authorization_header.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        raise UnauthorizedError(message="Authorization header must use the Bearer scheme")

    credentials = credentials.strip()
    if not credentials:
        raise UnauthorizedError(message="Bearer token missing")

    return (tokens or token_service).verify(credentials)


async def get_current_user_id(request: Request) -> uuid.UUID:
    """FastAPI dependency wrapping authenticate() around the request header."""
    return authenticate(request.headers.get("Authorization"))
