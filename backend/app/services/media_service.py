"""
FamilyEvents Backend — Media Service
====================================

What:  Lists, attaches, uploads and deletes media on an event.
How:   Two ways in:
       - attach_media(): client sends metadata for a file hosted elsewhere
       - upload_media(): multipart bytes go through FileService first, then
         the Media row is written; the stored file is removed again if that
         write fails
Who:   Called by app.routes.media.
"""

import logging
import uuid
from pathlib import Path
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models.media import Media
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.media import MediaCreate, MediaResponse
from app.services.access_control import EventAction, Identity, access_control
from app.services.file_service import file_service
from app.services.persistence import database_errors

logger = logging.getLogger(__name__)


class MediaService:

    def _to_response(self, media: Media, uploader: User) -> MediaResponse:
        return MediaResponse(
            id=media.id,
            event_id=media.event_id,
            uploaded_by_id=media.uploaded_by_id,
            uploaded_by=UserSummary.model_validate(uploader),
            filename=media.filename,
            original_name=media.original_name,
            mime_type=media.mime_type,
            size=media.size,
            url=media.url,
            alt_text=media.alt_text,
            is_public=media.is_public,
            created_at=media.created_at,
        )

    async def list_media(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID
    ) -> List[MediaResponse]:
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.VIEW)

        with database_errors("list_media", event_id=str(event_id)):
            result = await db.execute(
                select(Media, User)
                .join(User, User.id == Media.uploaded_by_id)
                .where(Media.event_id == event_id)
                .order_by(Media.created_at.desc())
            )
            rows = result.all()
        return [self._to_response(media, uploader) for media, uploader in rows]

    async def _insert(self, db: AsyncSession, identity: Identity, media: Media) -> MediaResponse:
        db.add(media)
        await db.flush()
        uploader = await db.get(User, identity.user_id)
        logger.info("Media %s added to event %s by %s", media.id, media.event_id, identity.user_id)
        return self._to_response(media, uploader)

    async def attach_media(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID, data: MediaCreate
    ) -> MediaResponse:
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.UPLOAD_MEDIA)

        media = Media(event_id=event_id, uploaded_by_id=identity.user_id, **data.model_dump())
        return await self._insert(db, identity, media)

    async def upload_media(
        self,
        db: AsyncSession,
        identity: Identity,
        event_id: uuid.UUID,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
        alt_text: Optional[str] = None,
        is_public: bool = False,
    ) -> MediaResponse:
        """
        Store an uploaded file and record it.

        Permission is checked before the bytes touch the disk.

        Raises:
            ValidationError: bad extension, size or content type
            FileStorageError: disk write / MIME detection failed
            DatabaseError: the Media row could not be written (file removed)
        """
        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.UPLOAD_MEDIA)

        stored = await file_service.validate_and_store(
            filename=filename, content=content, content_length=content_length
        )

        media = Media(
            event_id=event_id,
            uploaded_by_id=identity.user_id,
            filename=stored.filename,
            original_name=filename,
            mime_type=stored.mime_type,
            size=stored.size,
            url=stored.url,
            storage_path=stored.relative_path,
            alt_text=alt_text,
            is_public=is_public,
        )
        try:
            return await self._insert(db, identity, media)
        except SQLAlchemyError as e:
            await file_service.cleanup_file(stored.absolute_path)
            logger.error("Failed to record uploaded media: %s", e, exc_info=True)
            raise DatabaseError(
                message="An error occurred while saving your upload. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def delete_media(
        self, db: AsyncSession, identity: Identity, event_id: uuid.UUID, media_id: uuid.UUID
    ) -> None:
        """
        Uploader, event creator, or a contributor with can_delete.

        The row removal is committed here rather than by get_db_session():
        the file behind an upload is unlinked only once the delete is
        durable, so a failed commit never leaves a row without its file.
        Externally hosted files are left alone.
        """
        access = await access_control.event_access(db, identity, event_id)

        media = (
            await db.execute(
                select(Media).where(Media.id == media_id, Media.event_id == event_id)
            )
        ).scalar_one_or_none()
        if media is None:
            raise NotFoundError(resource="media", message="Media not found")

        access.require(EventAction.DELETE_MEDIA, owner_id=media.uploaded_by_id)

        storage_path = media.storage_path
        with database_errors("delete_media", media_id=str(media_id)):
            await db.delete(media)
            await db.commit()

        await file_service.remove_stored(storage_path)
        logger.info("Media %s deleted from event %s by %s", media_id, event_id, identity.user_id)

    async def open_stored_file(
        self, db: AsyncSession, identity: Identity, relative_path: str
    ) -> Path:
        """
        Resolve /api/files/<relative_path> for a caller who may view the
        event the upload belongs to.

        Raises:
            NotFoundError: no upload is recorded at that path, or the file is gone
            PermissionDeniedError: the caller may not view the owning event
        """
        with database_errors("open_stored_file"):
            event_id = (
                await db.execute(
                    select(Media.event_id).where(Media.storage_path == relative_path).limit(1)
                )
            ).scalar_one_or_none()
        if event_id is None:
            raise NotFoundError(resource="file", message="File not found")

        access = await access_control.event_access(db, identity, event_id)
        access.require(EventAction.VIEW)

        return file_service.resolve_path(relative_path)


# ── Singleton Instance ────────────────────────────────────────────────────
media_service = MediaService()
