"""
Aquarium Log Backend: Wishlist Service
========================================

What:  CRUD over the caller's wishlist items.
How:   Every lookup is scoped to the caller, so another user's item id
       answers 404 rather than 403.

Uniqueness of (user, aquarium) is checked before insert to return the
422 message; the table's unique constraint still guards concurrent
inserts, and an IntegrityError from it is mapped to the same 422.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.constants import MSG_ALREADY_IN_WISHLIST
from aquarium_log.exceptions import NotFoundError, ValidationError
from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.user import User
from aquarium_log.models.wishlist_item import WishlistItem
from aquarium_log.schemas.wishlist import (
    WishlistItemCreate,
    WishlistItemListResponse,
    WishlistItemResponse,
    WishlistItemUpdate,
)
from aquarium_log.serializers.wishlist import serialize_wishlist_item, serialize_wishlist_items
from aquarium_log.services.pagination import page_request, paginate

logger = logging.getLogger(__name__)


def by_priority(stmt):
    """Highest priority first, items without priority last, newest first within a priority."""
    return stmt.order_by(
        WishlistItem.priority.desc().nulls_last(),
        WishlistItem.created_at.desc(),
        WishlistItem.id.desc(),
    )


class WishlistService:

    async def get_owned(self, db: AsyncSession, item_id: int, user: User) -> WishlistItem:
        result = await db.execute(
            select(WishlistItem).where(WishlistItem.id == item_id, WishlistItem.user_id == user.id)
        )
        item = result.scalars().first()
        if item is None:
            raise NotFoundError(resource="WishlistItem", resource_id=item_id)
        return item

    async def list_items(self, db: AsyncSession, user: User, page=None, per=None) -> WishlistItemListResponse:
        stmt = by_priority(select(WishlistItem).where(WishlistItem.user_id == user.id))
        items, pagination = await paginate(db, stmt, page_request(page, per))
        return WishlistItemListResponse(
            wishlist_items=await serialize_wishlist_items(db, items),
            pagination=pagination,
        )

    async def show(self, db: AsyncSession, item_id: int, user: User) -> WishlistItemResponse:
        return await serialize_wishlist_item(db, await self.get_owned(db, item_id, user))

    async def _check_aquarium(self, db: AsyncSession, user: User, aquarium_id: int, exclude_id=None) -> None:
        if await db.get(Aquarium, aquarium_id) is None:
            raise ValidationError(errors=["Aquarium must exist"], context={"aquarium_id": aquarium_id})
        stmt = select(WishlistItem.id).where(
            WishlistItem.user_id == user.id,
            WishlistItem.aquarium_id == aquarium_id,
        )
        if exclude_id is not None:
            stmt = stmt.where(WishlistItem.id != exclude_id)
        if (await db.execute(stmt)).first() is not None:
            raise ValidationError(
                errors=[MSG_ALREADY_IN_WISHLIST],
                context={"aquarium_id": aquarium_id, "user_id": user.id},
            )

    async def create(self, db: AsyncSession, user: User, fields: WishlistItemCreate) -> WishlistItemResponse:
        await self._check_aquarium(db, user, fields.aquarium_id)
        item = WishlistItem(
            user_id=user.id,
            aquarium_id=fields.aquarium_id,
            priority=fields.priority,
            memo=fields.memo,
        )
        db.add(item)
        try:
            await db.flush()
        except IntegrityError:
            raise ValidationError(
                errors=[MSG_ALREADY_IN_WISHLIST],
                context={"aquarium_id": fields.aquarium_id, "user_id": user.id},
            )
        logger.info("Wishlist item created: id=%d aquarium=%d user=%d", item.id, item.aquarium_id, user.id)
        return await serialize_wishlist_item(db, item)

    async def update(
        self,
        db: AsyncSession,
        item_id: int,
        user: User,
        fields: WishlistItemUpdate,
    ) -> WishlistItemResponse:
        item = await self.get_owned(db, item_id, user)
        changes = fields.model_dump(exclude_unset=True)
        if "aquarium_id" in changes and changes["aquarium_id"] != item.aquarium_id:
            await self._check_aquarium(db, user, changes["aquarium_id"], exclude_id=item.id)
        for name, value in changes.items():
            setattr(item, name, value)
        await db.flush()
        return await serialize_wishlist_item(db, item)

    async def destroy(self, db: AsyncSession, item_id: int, user: User) -> None:
        item = await self.get_owned(db, item_id, user)
        await db.delete(item)
        await db.flush()
        logger.info("Wishlist item %d removed", item_id)


# ── Singleton Instance ────────────────────────────────────────────────────
wishlist_service = WishlistService()
