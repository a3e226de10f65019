"""
Photoshare Backend - Uploaded File Route
=========================================

Serves stored images at the public URLs saved on photo rows.
"""

import mimetypes

from fastapi import APIRouter
from fastapi.responses import FileResponse

from photoshare.schemas.common import ErrorResponse
from photoshare.services.file_service import file_service

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{file_path:path}",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Path outside the storage root", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded image",
)
async def serve_file(file_path: str) -> FileResponse:
    path = file_service.resolve(file_path)
    media_type, _ = mimetypes.guess_type(path.name)

    # Names are never reused, so the bytes behind a URL never change
    return FileResponse(
        path=str(path),
        media_type=media_type or "application/octet-stream",
        headers={"Cache-Control": "public, max-age=86400"},
    )
