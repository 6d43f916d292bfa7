"""
Aquarium Log Backend: Aquarium Serializer
===========================================

What:  Projects Aquarium rows into the "index" and "detail" API shapes.
How:   Two phases:
           1. build_context() runs a fixed number of batch queries for the
              whole page: caller's visited/wishlist id-sets, rating stats,
              aquarium photos, header photos, latest visit photos.
           2. as_index() / as_detail() are pure functions of
              (aquarium, context); they never query and never mutate the
              entity.
Who:   Aquarium listing, search, nearby, detail and photo management.

Query count per page is constant, whatever the page size:
    visited ids, wishlist ids, stats, photos, header photos, latest photos
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.attachment import (
    Attachment,
    RECORD_AQUARIUM,
    RECORD_VISIT,
    SLOT_PHOTOS,
)
from aquarium_log.models.user import User
from aquarium_log.models.visit import Visit
from aquarium_log.models.wishlist_item import WishlistItem
from aquarium_log.schemas.aquarium import (
    AllPhotoItem,
    AquariumDetail,
    AquariumIndexItem,
    PhotoItem,
    RecentVisitSummary,
)
from aquarium_log.serializers.photos import (
    attachment_url,
    attachments_by_id,
    attachments_by_record,
    latest_photo_urls,
)

logger = logging.getLogger(__name__)

INDEX_PHOTO_LIMIT = 3
RECENT_VISIT_LIMIT = 5


def round_rating(value) -> float:
    """AVG() result for display: 2 decimals, 0.0 when there is nothing to average."""
    if value is None:
        return 0.0
    return round(float(value), 2)


@dataclass
class AquariumContext:
    """Everything the projections need, computed once per request."""
    user: Optional[User] = None
    visited_ids: Set[int] = field(default_factory=set)
    wishlist_ids: Set[int] = field(default_factory=set)
    # aquarium id -> (average rating, visit count)
    stats: Dict[int, Tuple[float, int]] = field(default_factory=dict)
    photos: Dict[int, List[Attachment]] = field(default_factory=dict)
    header_photos: Dict[int, Attachment] = field(default_factory=dict)
    latest_photo_urls: Dict[int, Optional[str]] = field(default_factory=dict)

    def visited(self, aquarium_id: int) -> bool:
        return self.user is not None and aquarium_id in self.visited_ids

    def in_wishlist(self, aquarium_id: int) -> bool:
        return self.user is not None and aquarium_id in self.wishlist_ids


# ══════════════════════════════════════════════════════════════════════════
# Batch Queries
# ══════════════════════════════════════════════════════════════════════════


async def visited_aquarium_ids(db: AsyncSession, user_id: int) -> Set[int]:
    result = await db.execute(
        select(Visit.aquarium_id).where(Visit.user_id == user_id).distinct()
    )
    return set(result.scalars().all())


async def user_relation_ids(db: AsyncSession, user: Optional[User]) -> Tuple[Set[int], Set[int]]:
    """
    (visited aquarium ids, wishlisted aquarium ids) for the caller.

    Both sets are empty for anonymous callers.
    """
    if user is None:
        return set(), set()
    visited_ids = await visited_aquarium_ids(db, user.id)
    result = await db.execute(
        select(WishlistItem.aquarium_id).where(WishlistItem.user_id == user.id)
    )
    return visited_ids, set(result.scalars().all())


async def rating_stats(db: AsyncSession, aquarium_ids: Iterable[int]) -> Dict[int, Tuple[float, int]]:
    """{aquarium_id: (rounded average rating, visit count)} for aquariums with visits."""
    ids = list(set(aquarium_ids))
    if not ids:
        return {}
    result = await db.execute(
        select(Visit.aquarium_id, func.avg(Visit.rating), func.count(Visit.id))
        .where(Visit.aquarium_id.in_(ids))
        .group_by(Visit.aquarium_id)
    )
    return {
        aquarium_id: (round_rating(average), int(count))
        for aquarium_id, average, count in result.all()
    }


async def build_context(
    db: AsyncSession,
    aquariums: Sequence[Aquarium],
    user: Optional[User] = None,
) -> AquariumContext:
    ids = [aquarium.id for aquarium in aquariums]
    visited_ids, wishlist_ids = await user_relation_ids(db, user)
    context = AquariumContext(user=user, visited_ids=visited_ids, wishlist_ids=wishlist_ids)
    if not ids:
        return context

    context.stats = await rating_stats(db, ids)
    context.photos = await attachments_by_record(db, RECORD_AQUARIUM, ids, SLOT_PHOTOS)
    context.header_photos = await attachments_by_id(
        db, [a.header_photo_id for a in aquariums if a.header_photo_id]
    )
    context.latest_photo_urls = await latest_photo_urls(db, ids)
    return context


# ══════════════════════════════════════════════════════════════════════════
# Projections
# ══════════════════════════════════════════════════════════════════════════


def _photo_items(attachments: List[Attachment], limit: Optional[int] = None) -> List[PhotoItem]:
    selected = attachments if limit is None else attachments[:limit]
    return [PhotoItem(id=a.id, url=attachment_url(a)) for a in selected]


def _header_photo_url(aquarium: Aquarium, context: AquariumContext) -> Optional[str]:
    if not aquarium.header_photo_id:
        return None
    return attachment_url(context.header_photos.get(aquarium.header_photo_id))


def as_index(aquarium: Aquarium, context: AquariumContext) -> AquariumIndexItem:
    """Compact list shape; photo_urls/photos carry at most 3 entries."""
    average, count = context.stats.get(aquarium.id, (0.0, 0))
    photos = _photo_items(context.photos.get(aquarium.id, []), INDEX_PHOTO_LIMIT)
    return AquariumIndexItem(
        id=aquarium.id,
        name=aquarium.name,
        address=aquarium.address,
        prefecture=aquarium.prefecture,
        latitude=aquarium.latitude,
        longitude=aquarium.longitude,
        average_rating=average,
        visit_count=count,
        visited=context.visited(aquarium.id),
        in_wishlist=context.in_wishlist(aquarium.id),
        photo_urls=[photo.url for photo in photos],
        photos=photos,
        latest_photo_url=context.latest_photo_urls.get(aquarium.id),
        header_photo_url=_header_photo_url(aquarium, context),
    )


def as_detail(
    aquarium: Aquarium,
    context: AquariumContext,
    recent_visits: List[RecentVisitSummary],
    all_photos: List[AllPhotoItem],
) -> AquariumDetail:
    average, count = context.stats.get(aquarium.id, (0.0, 0))
    photos = _photo_items(context.photos.get(aquarium.id, []))
    return AquariumDetail(
        id=aquarium.id,
        name=aquarium.name,
        description=aquarium.description,
        address=aquarium.address,
        prefecture=aquarium.prefecture,
        latitude=aquarium.latitude,
        longitude=aquarium.longitude,
        phone_number=aquarium.phone_number,
        website=aquarium.website,
        opening_hours=aquarium.opening_hours,
        admission_fee=aquarium.admission_fee,
        average_rating=average,
        visit_count=count,
        visited=context.visited(aquarium.id),
        in_wishlist=context.in_wishlist(aquarium.id),
        created_by=aquarium.user_id,
        header_photo_id=aquarium.header_photo_id,
        header_photo_url=_header_photo_url(aquarium, context),
        photo_urls=[photo.url for photo in photos],
        photos=photos,
        all_photos=all_photos,
        recent_visits=recent_visits,
    )


# ══════════════════════════════════════════════════════════════════════════
# Entry Points
# ══════════════════════════════════════════════════════════════════════════


async def serialize_index(
    db: AsyncSession,
    aquariums: Sequence[Aquarium],
    user: Optional[User] = None,
) -> List[AquariumIndexItem]:
    context = await build_context(db, aquariums, user)
    return [as_index(aquarium, context) for aquarium in aquariums]


async def _recent_visits(db: AsyncSession, aquarium_id: int) -> List[RecentVisitSummary]:
    result = await db.execute(
        select(Visit, User.name)
        .outerjoin(User, User.id == Visit.user_id)
        .where(Visit.aquarium_id == aquarium_id)
        .order_by(Visit.visited_at.desc(), Visit.id.desc())
        .limit(RECENT_VISIT_LIMIT)
    )
    rows = result.all()
    photos = await attachments_by_record(db, RECORD_VISIT, [visit.id for visit, _ in rows], SLOT_PHOTOS)
    return [
        RecentVisitSummary(
            id=visit.id,
            user_name=user_name,
            visited_at=visit.visited_at,
            rating=visit.rating,
            photo_count=len(photos.get(visit.id, [])),
        )
        for visit, user_name in rows
    ]


async def _all_photos(db: AsyncSession, aquarium_id: int, own_photos: List[Attachment]) -> List[AllPhotoItem]:
    """Aquarium photos first, then visit photos newest visit first."""
    items = [
        AllPhotoItem(id=a.id, url=attachment_url(a), source="aquarium")
        for a in own_photos
    ]
    result = await db.execute(
        select(Attachment, Visit.id, Visit.visited_at)
        .join(
            Visit,
            (Attachment.record_id == Visit.id)
            & (Attachment.record_type == RECORD_VISIT)
            & (Attachment.name == SLOT_PHOTOS),
        )
        .where(Visit.aquarium_id == aquarium_id)
        .order_by(Visit.visited_at.desc(), Visit.id.desc(), Attachment.id.asc())
    )
    items.extend(
        AllPhotoItem(
            id=attachment.id,
            url=attachment_url(attachment),
            source="visit",
            visit_id=visit_id,
            visited_at=visited_at,
        )
        for attachment, visit_id, visited_at in result.all()
    )
    return items


async def serialize_detail(
    db: AsyncSession,
    aquarium: Aquarium,
    user: Optional[User] = None,
) -> AquariumDetail:
    context = await build_context(db, [aquarium], user)
    recent_visits = await _recent_visits(db, aquarium.id)
    all_photos = await _all_photos(db, aquarium.id, context.photos.get(aquarium.id, []))
    return as_detail(aquarium, context, recent_visits, all_photos)
