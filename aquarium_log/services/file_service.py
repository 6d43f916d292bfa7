"""
Aquarium Log Backend: File Storage Service
============================================

What:  Stores uploaded photos/videos on disk and records them in the
       `attachments` side-table.
How:   Validates extension, size and content type, writes into date-organized
       directories with UUID filenames, and builds public blob URLs.
Who:   Called by the aquarium, visit and user services.
When:  On photo/video/avatar upload and when records are destroyed.

Security Model:
    1. Extension check:   only known image/video extensions are accepted
    2. Size check:        per-kind maximum (photos 10MB, videos 100MB)
    3. Content check:     python-magic reads the real type from the bytes;
                          a renamed file is rejected
    4. UUID filename:     no user input reaches the file system path
    5. Path check:        served paths must resolve inside storage_root

Directory Structure:
    storage/
    └── 2025/
        └── 07/
            └── 06/
                ├── a1b2c3d4-....jpg
                └── e5f6g7h8-....mp4
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

import aiofiles
import magic
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.config import settings
from aquarium_log.exceptions import FileStorageError, ValidationError
from aquarium_log.models.attachment import Attachment, SLOT_VIDEOS

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
PHOTO_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
}

VIDEO_TYPES = {
    ".mp4": "video/mp4",
    ".m4v": "video/x-m4v",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
}

# Content types python-magic may report for the accepted formats
PHOTO_MIME_TYPES = frozenset(PHOTO_TYPES.values()) | {"image/jpg", "image/heif"}
VIDEO_MIME_TYPES = frozenset(VIDEO_TYPES.values()) | {"video/x-matroska"}

KIND_PHOTO = "photo"
KIND_VIDEO = "video"


class UploadedFile(NamedTuple):
    """A multipart file already read into memory by the route."""
    filename: str
    content: bytes


def blob_url(storage_path: str) -> str:
    """Absolute URL under which GET /api/v1/files serves a stored file."""
    return f"{settings.public_base_url.rstrip('/')}/api/v1/files/{storage_path}"


class FileService:
    """
    Manages file validation, storage, attachment rows and cleanup.

    Lifecycle of an uploaded file:
        1. Route reads the multipart UploadFile into memory
        2. attach() validates extension, size and content type
        3. Content is written to YYYY/MM/DD/<uuid><ext>
        4. An Attachment row is added to the session
        5. purge()/purge_records() delete rows and remove files best-effort
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str, kind: str = KIND_PHOTO) -> Tuple[str, str]:
        """
        Check the extension against the allowed list for `kind`.

        Returns: (normalized extension, content type)
        Raises:  ValidationError if the extension is not allowed.
        """
        allowed = VIDEO_TYPES if kind == KIND_VIDEO else PHOTO_TYPES
        ext = Path(filename or "").suffix.lower()
        if ext not in allowed:
            raise ValidationError(
                errors=[
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(allowed))}"
                ],
                context={"extension": ext, "kind": kind},
            )
        return ext, allowed[ext]

    def validate_size(self, actual_size: int, kind: str = KIND_PHOTO) -> None:
        """Raises ValidationError when the file is empty or over the limit."""
        limit = settings.max_video_size if kind == KIND_VIDEO else settings.max_photo_size
        if actual_size == 0:
            raise ValidationError(errors=["File is empty"], context={"kind": kind})
        if actual_size > limit:
            raise ValidationError(
                errors=[
                    f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum "
                    f"of {limit / (1024 * 1024):.0f}MB."
                ],
                context={"max_size": limit, "actual_size": actual_size},
            )

    def validate_mime_type(self, content: bytes, kind: str = KIND_PHOTO) -> str:
        """
        Detect the content type from the file's magic bytes.

        Extension checks alone are bypassed by renaming a file, so the
        bytes decide: a ".jpg" holding HTML is rejected here.

        Returns: detected MIME type (stored as the attachment's content_type)
        Raises:  ValidationError if the type is not an accepted photo/video type,
                 FileStorageError if libmagic fails.
        """
        try:
            mime_type = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        allowed = VIDEO_MIME_TYPES if kind == KIND_VIDEO else PHOTO_MIME_TYPES
        if mime_type not in allowed:
            raise ValidationError(
                errors=[
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid {kind}."
                ],
                context={"detected_mime": mime_type, "kind": kind},
            )
        return mime_type

    # ── Disk I/O ──────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new YYYY/MM/DD/<uuid><ext> file."""
        now = datetime.now(timezone.utc)
        relative_path = f"{now.strftime('%Y/%m/%d')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    def resolve(self, relative_path: str) -> Path:
        """
        Absolute path of a stored file.

        Raises ValidationError when the path escapes storage_root.
        """
        full_path = (self.storage_root / relative_path).resolve()
        if self.storage_root != full_path and self.storage_root not in full_path.parents:
            raise ValidationError(errors=["Invalid file path"])
        return full_path

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write validated content to disk.

        Returns: relative path (stored in attachments.storage_path)
        Raises:  FileStorageError if directory creation or the write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
            logger.info("File stored: %s (%d bytes)", relative_path, len(content))
            return relative_path
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    async def cleanup_file(self, relative_path: str) -> None:
        """
        Remove a stored file. Best-effort: missing files are ignored and
        OS errors are logged, never raised.
        """
        try:
            path = self.resolve(relative_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", relative_path)
            else:
                logger.debug("Cleanup: file already gone: %s", relative_path)
        except (OSError, ValidationError) as e:
            logger.warning("Failed to clean up file %s: %s", relative_path, str(e))

    # ── Attachments ───────────────────────────────────────────────────────

    async def attach(
        self,
        db: AsyncSession,
        record_type: str,
        record_id: int,
        name: str,
        filename: str,
        content: bytes,
    ) -> Attachment:
        """
        Validate, store and record one file for (record_type, record_id, name).

        The row is flushed so its id is available to the caller.
        """
        kind = KIND_VIDEO if name == SLOT_VIDEOS else KIND_PHOTO
        ext, _ = self.validate_extension(filename, kind)
        self.validate_size(len(content), kind)
        content_type = self.validate_mime_type(content, kind)

        storage_path = await self.store_file(content, ext)
        attachment = Attachment(
            record_type=record_type,
            record_id=record_id,
            name=name,
            storage_path=storage_path,
            filename=Path(filename).name[:255],
            content_type=content_type,
            byte_size=len(content),
        )
        db.add(attachment)
        try:
            await db.flush()
        except Exception:
            await self.cleanup_file(storage_path)
            raise
        return attachment

    async def list_attachments(
        self,
        db: AsyncSession,
        record_type: str,
        record_id: int,
        name: str,
    ) -> List[Attachment]:
        result = await db.execute(
            select(Attachment)
            .where(
                Attachment.record_type == record_type,
                Attachment.record_id == record_id,
                Attachment.name == name,
            )
            .order_by(Attachment.created_at.asc(), Attachment.id.asc())
        )
        return list(result.scalars().all())

    async def count_attachments(
        self,
        db: AsyncSession,
        record_type: str,
        record_id: int,
        name: str,
    ) -> int:
        return len(await self.list_attachments(db, record_type, record_id, name))

    async def purge(self, db: AsyncSession, attachment: Attachment) -> None:
        """Delete one attachment row and its file."""
        storage_path = attachment.storage_path
        await db.delete(attachment)
        await db.flush()
        await self.cleanup_file(storage_path)

    async def purge_records(self, db: AsyncSession, record_type: str, record_ids: List[int]) -> int:
        """
        Delete every attachment of the given records (all slots).

        Returns: number of attachments removed.
        """
        if not record_ids:
            return 0
        result = await db.execute(
            select(Attachment.storage_path).where(
                Attachment.record_type == record_type,
                Attachment.record_id.in_(record_ids),
            )
        )
        paths = list(result.scalars().all())
        await db.execute(
            delete(Attachment).where(
                Attachment.record_type == record_type,
                Attachment.record_id.in_(record_ids),
            )
        )
        for path in paths:
            await self.cleanup_file(path)
        return len(paths)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
