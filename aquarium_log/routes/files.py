"""
Aquarium Log Backend: Stored File Serving
===========================================

What:  GET /api/v1/files/{path}: streams a stored photo, video or avatar.
How:   The path is resolved under the storage root (traversal rejected)
       and must belong to an attachment row; the response carries the
       content type detected at upload time.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.database import get_db_session
from aquarium_log.exceptions import NotFoundError, ValidationError
from aquarium_log.models.attachment import Attachment
from aquarium_log.schemas.common import ErrorResponse
from aquarium_log.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/files", tags=["Files"])


@router.get(
    "/{file_path:path}",
    responses={404: {"description": "File not found", "model": ErrorResponse}},
    summary="Serve a stored file",
)
async def serve_file(
    file_path: str,
    db: AsyncSession = Depends(get_db_session),
) -> FileResponse:
    try:
        full_path = file_service.resolve(file_path)
    except ValidationError:
        logger.warning("Rejected file path: %s", file_path)
        raise NotFoundError(resource="File", resource_id=file_path)

    result = await db.execute(select(Attachment).where(Attachment.storage_path == file_path))
    attachment = result.scalars().first()
    if attachment is None or not full_path.is_file():
        raise NotFoundError(resource="File", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        media_type=attachment.content_type or "application/octet-stream",
        headers={"Cache-Control": "public, max-age=86400"},
    )
