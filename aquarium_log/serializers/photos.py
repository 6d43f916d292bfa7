"""
Aquarium Log Backend: Photo Lookups
=====================================

What:  Batch queries that resolve attachments into URLs for many records
       at once.
Who:   The aquarium/visit/user serializers and the ranking aggregator.

latest_photo_urls() is best-effort: a failing lookup is logged and every
aquarium gets None, the surrounding request still succeeds.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.models.attachment import (
    Attachment,
    RECORD_VISIT,
    SLOT_PHOTOS,
)
from aquarium_log.models.visit import Visit
from aquarium_log.services.file_service import blob_url

logger = logging.getLogger(__name__)


def attachment_url(attachment: Optional[Attachment]) -> Optional[str]:
    if attachment is None:
        return None
    return blob_url(attachment.storage_path)


async def attachments_by_record(
    db: AsyncSession,
    record_type: str,
    record_ids: Iterable[int],
    name: str,
) -> Dict[int, List[Attachment]]:
    """
    Attachments of one slot for many records.

    Returns: {record_id: [Attachment, ...]} in upload order; records
    without attachments are absent.
    """
    ids = list(set(record_ids))
    grouped: Dict[int, List[Attachment]] = defaultdict(list)
    if not ids:
        return grouped
    result = await db.execute(
        select(Attachment)
        .where(
            Attachment.record_type == record_type,
            Attachment.record_id.in_(ids),
            Attachment.name == name,
        )
        .order_by(Attachment.record_id, Attachment.created_at.asc(), Attachment.id.asc())
    )
    for attachment in result.scalars().all():
        grouped[attachment.record_id].append(attachment)
    return grouped


async def attachments_by_id(db: AsyncSession, attachment_ids: Iterable[int]) -> Dict[int, Attachment]:
    ids = [i for i in set(attachment_ids) if i is not None]
    if not ids:
        return {}
    result = await db.execute(select(Attachment).where(Attachment.id.in_(ids)))
    return {attachment.id: attachment for attachment in result.scalars().all()}


async def latest_photo_urls(db: AsyncSession, aquarium_ids: Iterable[int]) -> Dict[int, Optional[str]]:
    """
    Representative photo per aquarium.

    For each aquarium: the most recently visited visit (visited_at desc,
    then visit id desc) that has at least one photo, and that visit's
    first photo.
    """
    ids = list(set(aquarium_ids))
    urls: Dict[int, Optional[str]] = {aquarium_id: None for aquarium_id in ids}
    if not ids:
        return urls

    stmt = (
        select(Visit.aquarium_id, Attachment)
        .join(
            Attachment,
            (Attachment.record_id == Visit.id)
            & (Attachment.record_type == RECORD_VISIT)
            & (Attachment.name == SLOT_PHOTOS),
        )
        .where(Visit.aquarium_id.in_(ids))
        .order_by(
            Visit.aquarium_id,
            Visit.visited_at.desc(),
            Visit.id.desc(),
            Attachment.created_at.asc(),
            Attachment.id.asc(),
        )
    )
    try:
        # Savepoint: a failed lookup must not abort the request transaction
        async with db.begin_nested():
            rows = (await db.execute(stmt)).all()
    except SQLAlchemyError as e:
        logger.warning("Latest photo lookup failed for %d aquariums: %s", len(ids), str(e))
        return {aquarium_id: None for aquarium_id in ids}
    for aquarium_id, attachment in rows:
        if urls.get(aquarium_id) is None:
            urls[aquarium_id] = attachment_url(attachment)
    return urls
