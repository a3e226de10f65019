"""
Photoshare Backend - Comment Routes
====================================

POST needs a bearer token; GET is public.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.dependencies import get_current_user_id
from photoshare.schemas.common import ErrorResponse
from photoshare.schemas.photo import CommentCreateRequest, CommentResponse
from photoshare.services.comment_service import comment_service

router = APIRouter(prefix="/photos", tags=["Comments"])


@router.post(
    "/{photo_id}/comments",
    status_code=201,
    response_model=CommentResponse,
    responses={
        400: {"description": "Missing or empty text", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Comment on a photo",
)
async def create_comment(
    photo_id: str,
    body: Optional[CommentCreateRequest] = Body(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.create_comment(
        db=db,
        photo_id=photo_id,
        author_id=user_id,
        text=body.text if body else None,
    )


@router.get(
    "/{photo_id}/comments",
    response_model=List[CommentResponse],
    summary="List comments on a photo, oldest first",
)
async def list_comments(
    photo_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return await comment_service.list_comments(db=db, photo_id=photo_id)
