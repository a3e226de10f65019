"""
Photoshare Backend - User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table.
Who:   UserService (registration, login lookup); joined by photo and comment
       queries for owner/author summaries.

Table Design:
    - UUID primary key: non-sequential, safe to expose in URLs
    - username / email: each globally unique (UNIQUE constraints)
    - password_hash: bcrypt output, never serialized in any response
    - created_at: UTC with timezone; rows are never updated after insert
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from photoshare.database import Base


class User(Base):
    """A registered account. Immutable after creation."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    # ── Identity ──────────────────────────────────────────────────────────
    # Login accepts either value in a single field, see UserService.find_by_identifier
    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Public handle, globally unique",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Contact address, globally unique",
    )

    # ── Credentials ───────────────────────────────────────────────────────
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash (salt and cost embedded)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the account was registered (UTC)",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
