"""
Aquarium Log Backend: User Serializer
=======================================

What:  Session user, public profile and the per-user visit/wishlist
       summaries shown on profile pages.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.attachment import (
    RECORD_USER,
    RECORD_VISIT,
    SLOT_AVATAR,
    SLOT_PHOTOS,
)
from aquarium_log.models.user import User
from aquarium_log.models.visit import Visit
from aquarium_log.models.wishlist_item import WishlistItem
from aquarium_log.schemas.user import (
    AquariumSummary,
    SessionUser,
    UserProfile,
    UserVisitSummary,
    UserWishlistSummary,
)
from aquarium_log.serializers.photos import attachment_url, attachments_by_record


def session_user(user: User) -> SessionUser:
    return SessionUser(
        id=user.id,
        name=user.name,
        email=user.email,
        username=user.username,
        role=user.role,
    )


async def avatar_urls(db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, Optional[str]]:
    """Newest avatar per user; users without one are absent."""
    avatars = await attachments_by_record(db, RECORD_USER, user_ids, SLOT_AVATAR)
    return {
        user_id: attachment_url(attachments[-1])
        for user_id, attachments in avatars.items()
        if attachments
    }


async def _aquarium_summaries(db: AsyncSession, aquarium_ids: Iterable[int]) -> Dict[int, AquariumSummary]:
    ids = list(set(aquarium_ids))
    if not ids:
        return {}
    result = await db.execute(select(Aquarium).where(Aquarium.id.in_(ids)))
    return {
        aquarium.id: AquariumSummary(
            id=aquarium.id,
            name=aquarium.name,
            address=aquarium.address,
            prefecture=aquarium.prefecture,
        )
        for aquarium in result.scalars().all()
    }


async def serialize_profile(db: AsyncSession, user: User) -> UserProfile:
    favorite_ids = user.favorite_ids
    summaries = await _aquarium_summaries(db, favorite_ids)
    visit_count = (
        await db.execute(select(func.count(Visit.id)).where(Visit.user_id == user.id))
    ).scalar_one()
    wishlist_count = (
        await db.execute(select(func.count(WishlistItem.id)).where(WishlistItem.user_id == user.id))
    ).scalar_one()
    avatars = await avatar_urls(db, [user.id])

    return UserProfile(
        id=user.id,
        email=user.email,
        username=user.username,
        name=user.name,
        avatar_url=avatars.get(user.id),
        # Ids of deleted aquariums are skipped
        favorite_aquariums=[summaries[i] for i in favorite_ids if i in summaries],
        visit_count=int(visit_count),
        wishlist_count=int(wishlist_count),
        created_at=user.created_at,
    )


async def serialize_user_visits(db: AsyncSession, visits: Sequence[Visit]) -> List[UserVisitSummary]:
    summaries = await _aquarium_summaries(db, [visit.aquarium_id for visit in visits])
    photos = await attachments_by_record(db, RECORD_VISIT, [visit.id for visit in visits], SLOT_PHOTOS)
    return [
        UserVisitSummary(
            id=visit.id,
            aquarium=summaries[visit.aquarium_id],
            visited_at=visit.visited_at,
            rating=visit.rating,
            weather=visit.weather,
            photo_count=len(photos.get(visit.id, [])),
        )
        for visit in visits
    ]


async def serialize_user_wishlist(db: AsyncSession, items: Sequence[WishlistItem]) -> List[UserWishlistSummary]:
    summaries = await _aquarium_summaries(db, [item.aquarium_id for item in items])
    return [
        UserWishlistSummary(
            id=item.id,
            aquarium=summaries[item.aquarium_id],
            priority=item.priority,
            memo=item.memo,
            created_at=item.created_at,
        )
        for item in items
    ]
