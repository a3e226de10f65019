"""
Photoshare Backend - Photo Service (Photos & Likes)
====================================================

What:  Photo creation, the paginated feed, single-photo lookup, and the
       like/unlike membership toggle.
Who:   Called by the /photos routes.

Read path:
    Every photo returned is enriched with its owner summary and its current
    like count. The count comes from a correlated subquery evaluated on each
    read (no counter column, no cache), so it is always exact but costs one
    aggregate per row:

        SELECT photos.*, users.*,
               (SELECT count(*) FROM likes WHERE likes.photo_id = photos.id)
        FROM photos LEFT JOIN users ON users.id = photos.owner_id
        ORDER BY photos.created_at DESC, photos.id DESC
        LIMIT :limit OFFSET :offset

Like membership:
    absent ↔ present are the only transitions and both are idempotent.
    like  = INSERT ... ON CONFLICT (photo_id, user_id) DO NOTHING
    unlike = DELETE ... WHERE photo_id = :p AND user_id = :u
    Concurrent duplicate calls from the same user therefore never fail and
    never produce a second row.
"""

import logging
import uuid
from typing import Any, Optional, Tuple, Union

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.config import settings
from photoshare.exceptions import DatabaseError, NotFoundError, UnauthorizedError
from photoshare.models.like import Like
from photoshare.models.photo import Photo
from photoshare.models.user import User
from photoshare.schemas.common import UserSummary
from photoshare.schemas.photo import PhotoListResponse, PhotoResponse

logger = logging.getLogger(__name__)

# Largest OFFSET sent to the database; keeps (page - 1) * limit inside a signed 32-bit int
MAX_OFFSET = 2**31 - 1


def parse_id(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Parse a path ID; anything that is not a UUID identifies nothing."""
    if isinstance(value, uuid.UUID):
        return value
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def normalize_pagination(page: Any = None, limit: Any = None) -> Tuple[int, int]:
    """
    Resolve raw page/limit query values.

    Unspecified, unparsable, or non-positive values fall back to page 1 and
    settings.default_page_size; limit is capped at settings.max_page_size.
    page is capped so the resulting offset stays within MAX_OFFSET; such a
    page is past the end of any real feed and simply comes back empty.
    """
    resolved_limit = min(_positive_int(limit, settings.default_page_size), settings.max_page_size)
    resolved_page = min(_positive_int(page, 1), MAX_OFFSET // resolved_limit + 1)
    return resolved_page, resolved_limit


def user_summary(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, username=user.username, email=user.email)


def _likes_count_column():
    return (
        select(func.count())
        .select_from(Like)
        .where(Like.photo_id == Photo.id)
        .correlate(Photo)
        .scalar_subquery()
        .label("likes_count")
    )


def _photo_response(photo: Photo, owner: Optional[User], likes_count: Optional[int]) -> PhotoResponse:
    return PhotoResponse(
        id=photo.id,
        owner_id=photo.owner_id,
        owner=user_summary(owner),
        url=photo.url,
        caption=photo.caption,
        likes_count=likes_count or 0,
        created_at=photo.created_at,
    )


class PhotoService:
    """
    Resource repository for photos and likes.

    Error Handling:
        Missing photos raise NotFoundError. SQLAlchemy failures are logged
        and wrapped in DatabaseError so the client sees a generic 500.
    """

    async def upload_photo(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        url: str,
        caption: Optional[str] = None,
    ) -> PhotoResponse:
        """
        Persist a new photo for `owner_id`.

        `url` is the public path of an already-stored blob and is not
        inspected. An empty caption is stored as NULL.

        Raises:
            UnauthorizedError: the token's user no longer exists
            DatabaseError: storage failure
        """
        try:
            owner = await db.get(User, owner_id)
            if owner is None:
                raise UnauthorizedError(message="Account no longer exists")

            photo = Photo(owner_id=owner_id, url=url, caption=caption or None)
            db.add(photo)
            await db.flush()

        except SQLAlchemyError as e:
            logger.error("Database error creating photo: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the photo. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Photo %s uploaded by %s", photo.id, owner_id)
        return _photo_response(photo, owner, 0)

    async def list_photos(
        self,
        db: AsyncSession,
        page: Any = None,
        limit: Any = None,
    ) -> PhotoListResponse:
        """
        Return one page of the feed, newest first.

        Args:
            page:  1-based page number (raw query value accepted)
            limit: page size (raw query value accepted)

        Returns:
            PhotoListResponse with the applied page/limit, the total number of
            photos, and the enriched items of this page.
        """
        page, limit = normalize_pagination(page, limit)

        try:
            query = (
                select(Photo, User, _likes_count_column())
                .outerjoin(User, User.id == Photo.owner_id)
                .order_by(Photo.created_at.desc(), Photo.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await db.execute(query)
            rows = result.all()

            count_result = await db.execute(select(func.count()).select_from(Photo))
            total = count_result.scalar() or 0

        except SQLAlchemyError as e:
            logger.error("Database error listing photos: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve photos. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return PhotoListResponse(
            page=page,
            limit=limit,
            total=total,
            items=[_photo_response(photo, owner, count) for photo, owner, count in rows],
        )

    async def get_photo(self, db: AsyncSession, photo_id: Union[str, uuid.UUID]) -> PhotoResponse:
        """
        Fetch a single photo with owner and like count.

        Raises:
            NotFoundError: no photo with this ID (malformed IDs included)
        """
        pid = parse_id(photo_id)
        if pid is None:
            raise NotFoundError(resource="photo", resource_id=str(photo_id))

        try:
            result = await db.execute(
                select(Photo, User, _likes_count_column())
                .outerjoin(User, User.id == Photo.owner_id)
                .where(Photo.id == pid)
            )
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching photo %s: %s", pid, str(e))
            raise DatabaseError(
                message="Could not retrieve the photo. Please try again.",
                context={"photo_id": str(pid)},
            )

        if row is None:
            raise NotFoundError(resource="photo", resource_id=str(photo_id))

        photo, owner, count = row
        return _photo_response(photo, owner, count)

    async def like_photo(
        self,
        db: AsyncSession,
        photo_id: Union[str, uuid.UUID],
        user_id: uuid.UUID,
    ) -> int:
        """
        Ensure `user_id` likes the photo; return the photo's like count.

        Liking twice is a no-op, not an error.

        Raises:
            NotFoundError: photo does not exist
        """
        pid = parse_id(photo_id)
        if pid is None:
            raise NotFoundError(resource="photo", resource_id=str(photo_id))

        try:
            if not await self.photo_exists(db, pid):
                raise NotFoundError(resource="photo", resource_id=str(photo_id))

            await self._insert_like(db, pid, user_id)
            return await self.count_likes(db, pid)

        except SQLAlchemyError as e:
            logger.error("Database error liking photo %s: %s", pid, str(e), exc_info=True)
            raise DatabaseError(context={"photo_id": str(pid)})

    async def unlike_photo(
        self,
        db: AsyncSession,
        photo_id: Union[str, uuid.UUID],
        user_id: uuid.UUID,
    ) -> int:
        """
        Ensure `user_id` does not like the photo; return the updated count.

        A missing like, or a missing photo, is not an error.
        """
        pid = parse_id(photo_id)
        if pid is None:
            return 0

        try:
            await db.execute(
                delete(Like).where(Like.photo_id == pid, Like.user_id == user_id)
            )
            return await self.count_likes(db, pid)

        except SQLAlchemyError as e:
            logger.error("Database error unliking photo %s: %s", pid, str(e), exc_info=True)
            raise DatabaseError(context={"photo_id": str(pid)})

    async def photo_exists(self, db: AsyncSession, photo_id: uuid.UUID) -> bool:
        result = await db.execute(select(Photo.id).where(Photo.id == photo_id))
        return result.first() is not None

    async def count_likes(self, db: AsyncSession, photo_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count()).select_from(Like).where(Like.photo_id == photo_id)
        )
        return result.scalar() or 0

    async def _insert_like(self, db: AsyncSession, photo_id: uuid.UUID, user_id: uuid.UUID) -> None:
        dialect = db.get_bind().dialect.name
        values = {"photo_id": photo_id, "user_id": user_id}

        if dialect == "postgresql":
            stmt = postgresql.insert(Like).values(**values).on_conflict_do_nothing(
                index_elements=["photo_id", "user_id"]
            )
            await db.execute(stmt)
        elif dialect == "sqlite":
            stmt = sqlite.insert(Like).values(**values).on_conflict_do_nothing(
                index_elements=["photo_id", "user_id"]
            )
            await db.execute(stmt)
        else:
            # No portable upsert: a savepoint keeps the outer transaction usable
            try:
                async with db.begin_nested():
                    db.add(Like(**values))
            except IntegrityError:
                logger.debug("Like (%s, %s) already present", photo_id, user_id)


photo_service = PhotoService()
