"""
Photoshare Backend - Like SQLAlchemy Model
===========================================

What:  Membership relation between a user and a photo (`likes` join table).

The composite primary key (photo_id, user_id) is the uniqueness constraint:
a pair exists zero or one times. PhotoService inserts with ON CONFLICT DO
NOTHING, so concurrent duplicate likes collapse into a single row instead of
failing.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from photoshare.database import Base


class Like(Base):
    __tablename__ = "likes"

    photo_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("photos.id", ondelete="CASCADE"),
        primary_key=True,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Like(photo_id={self.photo_id}, user_id={self.user_id})>"
