"""
Photoshare Backend - Photo, Like and Comment Schemas
=====================================================

What:  Response models for the photo feed, like toggling and comments, and
       the comment request body.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from photoshare.schemas.common import CamelModel, UserSummary


class PhotoResponse(CamelModel):
    """
    A photo enriched with its owner and current like count.

    likes_count is computed at read time, never cached.
    """
    id: uuid.UUID = Field(description="Photo identifier")
    owner_id: uuid.UUID = Field(description="Uploader's user ID")
    owner: Optional[UserSummary] = Field(default=None, description="Uploader summary")
    url: str = Field(description="Public URL of the image")
    caption: Optional[str] = Field(default=None)
    likes_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(description="Upload time (UTC)")


class PhotoListResponse(CamelModel):
    """
    Page of the photo feed.

    page and limit echo the values actually applied after defaulting;
    total is the unfiltered count of all photos.
    """
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    items: List[PhotoResponse]


class LikeResponse(CamelModel):
    likes_count: int = Field(ge=0, description="Current number of likes on the photo")


class CommentCreateRequest(CamelModel):
    # Optional here so a missing text is reported by CommentService, same as empty text
    text: Optional[str] = Field(default=None, examples=["Great shot!"])


class CommentResponse(CamelModel):
    id: uuid.UUID
    photo_id: uuid.UUID
    author_id: uuid.UUID
    author: Optional[UserSummary] = None
    text: str
    created_at: datetime
