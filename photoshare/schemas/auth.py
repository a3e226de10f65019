"""
Photoshare Backend - Authentication Schemas
============================================

Request bodies for /auth/register and /auth/login and their responses.
Missing or empty fields fail request validation, which the global handler
reports as 400.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from photoshare.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    username: str = Field(min_length=1, max_length=50, examples=["alice"])
    email: str = Field(min_length=1, max_length=255, examples=["alice@example.com"])
    password: str = Field(min_length=1, examples=["correct horse battery staple"])


class LoginRequest(CamelModel):
    """`emailOrUsername` is matched against both namespaces."""
    email_or_username: str = Field(min_length=1, examples=["alice"])
    password: str = Field(min_length=1)


class UserResponse(CamelModel):
    """User summary returned after registration and login. Never includes the hash."""
    id: uuid.UUID
    username: str
    email: str
    created_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    token: str = Field(description="Bearer token, valid for TOKEN_TTL_DAYS")
    user: UserResponse
