"""
FamilyEvents Backend — Media Route Handlers
===========================================

What:  /api/events/{id}/media (list, attach metadata, multipart upload,
       delete) and /api/files/{path} (serve stored uploads).

Request Flow (upload):
    1. Client sends multipart/form-data with a 'file' field
    2. Caller must be allowed to upload to the event
    3. FileService validates extension, size and content type, then stores
    4. A Media row is written with url=/api/files/<path>
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity
from app.schemas.common import ERROR_RESPONSES, SuccessResponse
from app.schemas.media import MediaCreate, MediaListResponse, MediaResponse
from app.services.access_control import Identity
from app.services.media_service import media_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Media"], responses=ERROR_RESPONSES)


@router.get("/events/{event_id}/media", response_model=MediaListResponse, summary="List event media")
async def list_media(
    event_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MediaListResponse:
    return MediaListResponse(media=await media_service.list_media(db, identity, event_id))


@router.post(
    "/events/{event_id}/media",
    status_code=status.HTTP_201_CREATED,
    response_model=MediaResponse,
    summary="Attach media metadata to an event",
)
async def attach_media(
    event_id: UUID,
    body: MediaCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MediaResponse:
    return await media_service.attach_media(db, identity, event_id, body)


@router.post(
    "/events/{event_id}/media/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=MediaResponse,
    summary="Upload a media file to an event",
    description="Images (PNG, JPEG, GIF, WebP) and videos (MP4, MOV, WebM).",
)
async def upload_media(
    event_id: UUID,
    file: UploadFile = File(..., description="Image or video file"),
    alt_text: Optional[str] = Form(default=None),
    is_public: bool = Form(default=False),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MediaResponse:
    content = await file.read()
    logger.info(
        "Received media upload for event %s: filename=%s, size=%d bytes",
        event_id,
        file.filename or "unknown",
        len(content),
    )
    try:
        return await media_service.upload_media(
            db,
            identity,
            event_id,
            filename=file.filename or "upload",
            content=content,
            content_length=file.size,
            alt_text=alt_text,
            is_public=is_public,
        )
    finally:
        await file.close()


@router.delete(
    "/events/{event_id}/media/{media_id}",
    response_model=SuccessResponse,
    summary="Delete media (uploader, event creator, or contributor with can_delete)",
)
async def delete_media(
    event_id: UUID,
    media_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await media_service.delete_media(db, identity, event_id, media_id)
    return SuccessResponse(message="Media deleted")


@router.get(
    "/files/{file_path:path}",
    summary="Serve an uploaded file",
    responses={200: {"description": "The stored file"}},
)
async def serve_file(
    file_path: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FileResponse:
    """
    Stream a stored upload. The path must belong to a recorded upload on an
    event the caller may view, and resolve inside STORAGE_ROOT. Content type
    is guessed from the stored (UUID) filename.
    """
    full_path = await media_service.open_stored_file(db, identity, file_path)
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "private, max-age=86400"},
    )
