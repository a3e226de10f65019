"""
Photoshare Backend - Photo Routes
==================================

What:  Upload, feed, single photo, and like/unlike.
Who:   Reads are public; upload and like toggling need a bearer token.

Upload flow:
    1. Auth guard resolves the caller
    2. FileService validates and writes the blob
    3. PhotoService saves the row pointing at the blob's public URL
    4. The route commits, so a failed commit is still seen here
    5. If step 3 or 4 fails the blob is deleted again
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.dependencies import get_current_user_id
from photoshare.exceptions import DatabaseError, ValidationError
from photoshare.schemas.common import ErrorResponse
from photoshare.schemas.photo import LikeResponse, PhotoListResponse, PhotoResponse
from photoshare.services.file_service import file_service
from photoshare.services.photo_service import photo_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["Photos"])


@router.post(
    "",
    status_code=201,
    response_model=PhotoResponse,
    responses={
        400: {"description": "Missing, unsupported or oversized image", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    },
    summary="Upload a photo",
    description="multipart/form-data with an `image` file field and an optional `caption`.",
)
async def upload_photo(
    image: Optional[UploadFile] = File(None, description="Image file (jpg, jpeg, png, gif, webp)"),
    caption: Optional[str] = Form(None, description="Optional caption"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoResponse:
    if image is None:
        raise ValidationError(message="image file is required", field="image")

    try:
        content = await image.read()
    finally:
        await image.close()

    logger.info(
        "Received upload: filename=%s, size=%d bytes",
        image.filename or "unknown",
        len(content),
    )

    absolute_path, url = await file_service.validate_and_store(
        filename=image.filename,
        content=content,
        content_length=image.size,
    )

    try:
        photo = await photo_service.upload_photo(
            db=db,
            owner_id=user_id,
            url=url,
            caption=caption,
        )
        await db.commit()
    except SQLAlchemyError as e:
        await file_service.cleanup_file(absolute_path)
        logger.error("Failed to commit photo for user %s: %s", user_id, str(e))
        raise DatabaseError(
            message="Could not save the photo. Please try again.",
            context={"error_type": type(e).__name__},
        )
    except Exception:
        await file_service.cleanup_file(absolute_path)
        raise

    return photo


@router.get(
    "",
    response_model=PhotoListResponse,
    summary="List photos, newest first",
    description=(
        "Offset pagination. Missing, non-numeric or non-positive `page`/`limit` "
        "fall back to page 1 and the default page size. The total count is also "
        "returned in the X-Total-Count header."
    ),
)
async def list_photos(
    response: Response,
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Items per page"),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoListResponse:
    result = await photo_service.list_photos(db=db, page=page, limit=limit)
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/{photo_id}",
    response_model=PhotoResponse,
    responses={404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Get a single photo",
)
async def get_photo(
    photo_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoResponse:
    return await photo_service.get_photo(db=db, photo_id=photo_id)


@router.post(
    "/{photo_id}/like",
    response_model=LikeResponse,
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Like a photo (idempotent)",
)
async def like_photo(
    photo_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    count = await photo_service.like_photo(db=db, photo_id=photo_id, user_id=user_id)
    return LikeResponse(likes_count=count)


@router.delete(
    "/{photo_id}/like",
    response_model=LikeResponse,
    responses={401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}},
    summary="Remove a like (idempotent)",
)
async def unlike_photo(
    photo_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    count = await photo_service.unlike_photo(db=db, photo_id=photo_id, user_id=user_id)
    return LikeResponse(likes_count=count)
