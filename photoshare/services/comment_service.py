"""
Photoshare Backend - Comment Service
=====================================

What:  Create and list comments on photos.
Who:   Called by the /photos/{id}/comments routes.

Comments are append-only. Listing is oldest first so a thread reads top to
bottom; each comment carries its author's summary.
"""

import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.exceptions import (
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from photoshare.models.comment import Comment
from photoshare.models.user import User
from photoshare.schemas.photo import CommentResponse
from photoshare.services.photo_service import parse_id, photo_service, user_summary

logger = logging.getLogger(__name__)


def _comment_response(comment: Comment, author: Optional[User]) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        photo_id=comment.photo_id,
        author_id=comment.author_id,
        author=user_summary(author),
        text=comment.text,
        created_at=comment.created_at,
    )


class CommentService:

    async def create_comment(
        self,
        db: AsyncSession,
        photo_id: Union[str, uuid.UUID],
        author_id: uuid.UUID,
        text: Optional[str],
    ) -> CommentResponse:
        """
        Add a comment by `author_id` to a photo.

        The text check runs before the photo lookup, so an empty comment on a
        missing photo is reported as a validation failure.

        Raises:
            ValidationError: text missing, empty, or whitespace-only
            NotFoundError: photo does not exist
            UnauthorizedError: the token's user no longer exists
        """
        if text is None or not text.strip():
            raise ValidationError(message="text is required", field="text")

        pid = parse_id(photo_id)
        if pid is None:
            raise NotFoundError(resource="photo", resource_id=str(photo_id))

        try:
            if not await photo_service.photo_exists(db, pid):
                raise NotFoundError(resource="photo", resource_id=str(photo_id))

            author = await db.get(User, author_id)
            if author is None:
                raise UnauthorizedError(message="Account no longer exists")

            comment = Comment(photo_id=pid, author_id=author_id, text=text)
            db.add(comment)
            await db.flush()

        except SQLAlchemyError as e:
            logger.error("Database error creating comment on %s: %s", pid, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the comment. Please try again.",
                context={"photo_id": str(pid)},
            )

        logger.info("Comment %s added to photo %s", comment.id, pid)
        return _comment_response(comment, author)

    async def list_comments(
        self,
        db: AsyncSession,
        photo_id: Union[str, uuid.UUID],
    ) -> List[CommentResponse]:
        """All comments of a photo, oldest first. Unknown photos have none."""
        pid = parse_id(photo_id)
        if pid is None:
            return []

        try:
            result = await db.execute(
                select(Comment, User)
                .outerjoin(User, User.id == Comment.author_id)
                .where(Comment.photo_id == pid)
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing comments for %s: %s", pid, str(e))
            raise DatabaseError(context={"photo_id": str(pid)})

        return [_comment_response(comment, author) for comment, author in rows]


comment_service = CommentService()
