"""
Photoshare Backend - Photo SQLAlchemy Model
============================================

What:  ORM model for the `photos` table.
Who:   PhotoService for uploads, listing, and like counts.

Table Design:
    - owner_id: immutable back-reference to the uploader
    - url: public path of the stored blob (e.g. /uploads/image-<ms>-<hex>.jpg)
    - caption: optional free text
    - Index on created_at DESC: the feed is always read newest-first

Photos are never updated or deleted by the API.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from photoshare.database import Base


class Photo(Base):
    """An uploaded image owned by exactly one user."""

    __tablename__ = "photos"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Uploader; never reassigned",
    )

    url: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        comment="Public URL path of the stored image blob",
    )

    caption: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Upload time (UTC)",
    )

    def __repr__(self) -> str:
        return f"<Photo(id={self.id}, owner_id={self.owner_id}, url='{self.url}')>"


Index("idx_photos_created_at", Photo.created_at.desc())
