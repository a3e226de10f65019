"""
Photoshare Backend - Shared Schemas
====================================

What:  Base model with the camelCase wire convention, plus the error and
       health payloads used by every router.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every API schema.

    alias_generator:   snake_case attribute → camelCase JSON key
    populate_by_name:  services construct models with snake_case kwargs
    from_attributes:   allows validating straight from ORM rows
    """

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class UserSummary(CamelModel):
    """Public identity of a user, embedded as photo owner and comment author."""
    id: uuid.UUID = Field(description="User identifier")
    username: str = Field(description="Unique username")
    email: str = Field(description="Unique email address")


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    `message` is the single human-readable field; `error` is a stable
    machine-readable code.

    Example:
        {
            "error": "duplicate",
            "message": "Username or email is already registered",
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class StatusResponse(BaseModel):
    """Liveness payload returned by `GET /`."""
    status: str = Field(default="ok")
    message: str = Field(default="Photoshare API is running")


class HealthResponse(BaseModel):
    """Dependency-aware health payload returned by `GET /health`."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
