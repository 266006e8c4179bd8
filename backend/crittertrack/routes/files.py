"""
CritterTrack Backend — File Upload Routes
=========================================

POST /api/upload         multipart image upload (authenticated) → 201 {url}
GET  /api/files/{path}   serve a stored upload

Uploaded files are immutable (UUID names), so downloads are cached hard.
"""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import FileResponse

from crittertrack.dependencies import get_file_service, get_identity
from crittertrack.schemas.common import ErrorResponse, UploadResponse
from crittertrack.services.auth_gate import Identity
from crittertrack.services.file_service import FileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Files"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Not an accepted image or too large", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Upload an image",
    description=(
        "Accepts PNG, JPEG, GIF or WebP. The returned URL can be stored as a "
        "profilePictureUrl."
    ),
)
async def upload_file(
    request: Request,
    file: UploadFile = File(..., description="Image file"),
    identity: Identity = Depends(get_identity),
    files: FileService = Depends(get_file_service),
) -> UploadResponse:
    content_length = request.headers.get("content-length")
    content = await file.read()
    relative_path = await files.validate_and_store(
        filename=file.filename or "",
        content=content,
        content_length=int(content_length) if content_length and content_length.isdigit() else None,
    )
    logger.info("User %s uploaded %s", identity.user_id, relative_path)
    return UploadResponse(url=f"/api/files/{relative_path}")


@router.get(
    "/files/{file_path:path}",
    response_class=FileResponse,
    responses={
        400: {"description": "Invalid path", "model": ErrorResponse},
        404: {"description": "No such file", "model": ErrorResponse},
    },
    summary="Download a stored upload",
)
async def serve_file(
    file_path: str,
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    path = files.resolve(file_path)
    return FileResponse(
        path,
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )
