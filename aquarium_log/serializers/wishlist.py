"""Aquarium Log Backend: Wishlist Item Serializer."""

from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.models.wishlist_item import WishlistItem
from aquarium_log.schemas.wishlist import WishlistAquariumSummary, WishlistItemResponse
from aquarium_log.serializers.aquarium import rating_stats
from aquarium_log.serializers.visit import aquariums_by_id, truncate_text


async def serialize_wishlist_items(
    db: AsyncSession,
    items: Sequence[WishlistItem],
    detail: bool = False,
) -> List[WishlistItemResponse]:
    """
    List rows carry a 100-character memo preview; detail=True adds the
    full memo, description, coordinates and updated_at.
    """
    aquariums = await aquariums_by_id(db, [item.aquarium_id for item in items])
    stats = await rating_stats(db, aquariums.keys())

    responses = []
    for item in items:
        aquarium = aquariums[item.aquarium_id]
        average, count = stats.get(aquarium.id, (0.0, 0))
        summary = WishlistAquariumSummary(
            id=aquarium.id,
            name=aquarium.name,
            address=aquarium.address,
            prefecture=aquarium.prefecture,
            average_rating=average,
            visit_count=count,
        )
        if detail:
            summary.description = aquarium.description
            summary.latitude = aquarium.latitude
            summary.longitude = aquarium.longitude
        responses.append(
            WishlistItemResponse(
                id=item.id,
                aquarium=summary,
                priority=item.priority,
                memo=item.memo if detail else truncate_text(item.memo),
                created_at=item.created_at,
                updated_at=item.updated_at if detail else None,
            )
        )
    return responses


async def serialize_wishlist_item(db: AsyncSession, item: WishlistItem) -> WishlistItemResponse:
    return (await serialize_wishlist_items(db, [item], detail=True))[0]
