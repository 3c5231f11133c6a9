"""
FamilyEvents Backend — Media File Storage Service
=================================================

What:  Validates, stores, serves and cleans up uploaded event media files.
How:   Validates extension, size and sniffed MIME type, then writes the bytes
       to a date-organized directory under STORAGE_ROOT with a UUID name.
Who:   Called by MediaService for multipart uploads and by the file-serving
       route.

Security Model:
    1. Extension check:   cheap first rejection
    2. Size check:        Content-Length first, then the actual byte count
    3. MIME type check:   libmagic reads the header bytes (python-magic), so
                          a renamed executable is rejected
    4. UUID filename:     no user input ever reaches the file system path
    5. resolve_path():    served paths must stay inside STORAGE_ROOT

Directory Structure:
    storage/
    └── 2024/
        └── 06/
            └── 15/
                ├── a1b2c3d4-....jpg
                └── e5f6a7b8-....mp4
"""

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# Sniffed MIME type → extension used for the stored file
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".mp4", ".mov", ".webm"}

# Media.url of files held in local storage
FILES_URL_PREFIX = "/api/files/"


def detect_mime_type(content: bytes) -> str:
    """Sniff the MIME type from the leading bytes with libmagic."""
    # Imported here: libmagic is a system library, only loaded on upload
    import magic

    return magic.from_buffer(content[:2048], mime=True)


@dataclass(frozen=True)
class StoredFile:
    """A file written to storage. relative_path is what the database keeps."""
    absolute_path: str
    relative_path: str
    filename: str
    mime_type: str
    size: int

    @property
    def url(self) -> str:
        return f"{FILES_URL_PREFIX}{self.relative_path}"


class FileService:
    """
    Manages the media file lifecycle.

        1. MediaService hands over filename + bytes → validate_and_store()
        2. Extension, size and MIME checks (cheapest first)
        3. Bytes written under YYYY/MM/DD/<uuid><ext>
        4. If the database write that follows fails, cleanup_file() removes
           the stored file again
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Returns the lower-cased extension; raises ValidationError if not allowed."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Check the reported Content-Length first, then the real byte count
        (clients can send a wrong header). Empty files are rejected too.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=(
                    f"File size ({actual_size / (1024 * 1024):.1f}MB) "
                    f"exceeds maximum of {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")

    def validate_mime_type(self, content: bytes) -> str:
        """
        Returns the sniffed MIME type.

        Raises:
            ValidationError: the content is not an allowed image/video type
            FileStorageError: libmagic is unavailable or failed
        """
        try:
            mime_type = detect_mime_type(content)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            ) from e

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    "The file must be an image (PNG, JPEG, GIF, WebP) or a video (MP4, MOV, WebM)."
                ),
                field="file",
                context={"detected_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new YYYY/MM/DD/<uuid><ext> file."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write the bytes asynchronously (aiofiles).

        Returns:
            (absolute_path, relative_path)
        Raises:
            FileStorageError: directory creation or write failed
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
            logger.info("File stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            ) from e

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort removal of a stored file after a failed database write.

        A missing file is fine; other OS errors are logged, not raised, so
        the original error reaches the client.
        """
        path = Path(file_path)
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> StoredFile:
        """
        Complete validation + storage pipeline (extension → size → MIME → write).

        The stored extension follows the sniffed MIME type, not the name the
        client sent.
        """
        self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        mime_type = self.validate_mime_type(content)

        absolute_path, relative_path = await self.store_file(content, ALLOWED_MIME_TYPES[mime_type])
        return StoredFile(
            absolute_path=absolute_path,
            relative_path=relative_path,
            filename=Path(relative_path).name,
            mime_type=mime_type,
            size=len(content),
        )

    def resolve_path(self, relative_path: str) -> Path:
        """
        Map a /api/files/<relative_path> request onto the storage root.

        Raises:
            ValidationError: the path escapes STORAGE_ROOT (e.g. ../../etc/passwd)
            NotFoundError: no such file
        """
        full_path = (self.storage_root / relative_path).resolve()
        if full_path != self.storage_root and self.storage_root not in full_path.parents:
            raise ValidationError(message="Invalid file path", field="path")
        if not full_path.is_file():
            raise NotFoundError(resource="file", message="File not found")
        return full_path

    async def remove_stored(self, relative_path: Optional[str]) -> None:
        """
        Delete an upload by its Media.storage_path.

        Rows without a storage_path (externally hosted files), paths outside
        STORAGE_ROOT and files already gone are skipped.
        """
        if not relative_path:
            return
        try:
            path = self.resolve_path(relative_path)
        except (ValidationError, NotFoundError) as e:
            logger.warning("Not removing stored file %s: %s", relative_path, e.message)
            return
        await self.cleanup_file(str(path))


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
