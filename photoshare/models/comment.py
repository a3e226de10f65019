"""
Photoshare Backend - Comment SQLAlchemy Model
==============================================

What:  ORM model for the `comments` table.
Who:   CommentService.

A comment belongs to one photo and one author and is immutable once written.
The composite index serves the only read pattern: all comments of a photo,
oldest first.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy import text as sa_text
from sqlalchemy.orm import Mapped, mapped_column

from photoshare.database import Base


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    photo_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("photos.id", ondelete="CASCADE"),
        nullable=False,
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Shadows sqlalchemy.text inside the class body, hence sa_text below
    # Non-empty, enforced by CommentService before insert
    text: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sa_text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_comments_photo_created", "photo_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, photo_id={self.photo_id}, author_id={self.author_id})>"
