"""
Aquarium Log Backend: Visit Serializer
========================================

What:  Visit list rows and the visit detail shape.
How:   Aquariums, photo/video attachments and avatars are loaded in batch
       for the whole page, then each visit is projected without further
       queries.
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.attachment import RECORD_VISIT, SLOT_PHOTOS, SLOT_VIDEOS
from aquarium_log.models.user import User
from aquarium_log.models.visit import Visit
from aquarium_log.schemas.visit import (
    VisitAquariumSummary,
    VisitDetail,
    VisitListItem,
    VisitUserSummary,
)
from aquarium_log.serializers.photos import attachment_url, attachments_by_record
from aquarium_log.serializers.user import avatar_urls

LIST_PHOTO_LIMIT = 3
MEMO_PREVIEW_LENGTH = 100


def truncate_text(text: Optional[str], length: int = MEMO_PREVIEW_LENGTH, omission: str = "...") -> Optional[str]:
    """Cut `text` to at most `length` characters, omission included."""
    if text is None or len(text) <= length:
        return text
    return text[: max(0, length - len(omission))] + omission


async def aquariums_by_id(db: AsyncSession, aquarium_ids) -> Dict[int, Aquarium]:
    ids = list(set(aquarium_ids))
    if not ids:
        return {}
    result = await db.execute(select(Aquarium).where(Aquarium.id.in_(ids)))
    return {aquarium.id: aquarium for aquarium in result.scalars().all()}


def _aquarium_summary(aquarium: Aquarium, with_coordinates: bool = False) -> VisitAquariumSummary:
    return VisitAquariumSummary(
        id=aquarium.id,
        name=aquarium.name,
        address=aquarium.address,
        latitude=aquarium.latitude if with_coordinates else None,
        longitude=aquarium.longitude if with_coordinates else None,
    )


async def serialize_visit_list(db: AsyncSession, visits: Sequence[Visit]) -> List[VisitListItem]:
    visit_ids = [visit.id for visit in visits]
    aquariums = await aquariums_by_id(db, [visit.aquarium_id for visit in visits])
    photos = await attachments_by_record(db, RECORD_VISIT, visit_ids, SLOT_PHOTOS)
    videos = await attachments_by_record(db, RECORD_VISIT, visit_ids, SLOT_VIDEOS)

    items = []
    for visit in visits:
        visit_photos = photos.get(visit.id, [])
        items.append(
            VisitListItem(
                id=visit.id,
                aquarium=_aquarium_summary(aquariums[visit.aquarium_id]),
                visited_at=visit.visited_at,
                weather=visit.weather,
                rating=visit.rating,
                memo=truncate_text(visit.memo),
                photo_urls=[attachment_url(a) for a in visit_photos[:LIST_PHOTO_LIMIT]],
                photo_count=len(visit_photos),
                video_count=len(videos.get(visit.id, [])),
                created_at=visit.created_at,
                updated_at=visit.updated_at,
            )
        )
    return items


async def serialize_visit_detail(db: AsyncSession, visit: Visit) -> VisitDetail:
    aquarium = await db.get(Aquarium, visit.aquarium_id)
    user = await db.get(User, visit.user_id)
    photos = await attachments_by_record(db, RECORD_VISIT, [visit.id], SLOT_PHOTOS)
    videos = await attachments_by_record(db, RECORD_VISIT, [visit.id], SLOT_VIDEOS)
    avatars = await avatar_urls(db, [user.id])

    return VisitDetail(
        id=visit.id,
        aquarium=_aquarium_summary(aquarium, with_coordinates=True),
        user=VisitUserSummary(
            id=user.id,
            name=user.name,
            username=user.username,
            avatar_url=avatars.get(user.id),
        ),
        visited_at=visit.visited_at,
        weather=visit.weather,
        rating=visit.rating,
        memo=visit.memo,
        good_exhibits=visit.good_exhibits_list,
        photo_urls=[attachment_url(a) for a in photos.get(visit.id, [])],
        video_urls=[attachment_url(a) for a in videos.get(visit.id, [])],
        created_at=visit.created_at,
        updated_at=visit.updated_at,
    )
