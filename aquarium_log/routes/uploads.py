"""Reads multipart UploadFile objects into UploadedFile tuples for the services."""

import logging
from typing import List, Optional

from fastapi import UploadFile

from aquarium_log.services.file_service import UploadedFile

logger = logging.getLogger(__name__)


async def read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    """None for a missing field or an empty file input (no filename)."""
    if upload is None or not upload.filename:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    logger.debug("Received upload %s (%d bytes)", upload.filename, len(content))
    return UploadedFile(filename=upload.filename, content=content)


async def read_uploads(uploads: Optional[List[UploadFile]]) -> List[UploadedFile]:
    files = []
    for upload in uploads or []:
        uploaded = await read_upload(upload)
        if uploaded is not None:
            files.append(uploaded)
    return files
