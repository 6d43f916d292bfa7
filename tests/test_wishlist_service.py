"""
Aquarium Log Backend: Wishlist Service Tests
==============================================

What we test:
    ✅ Priority ordering (nulls last) and caller scoping
    ✅ One item per (user, aquarium); another user's item answers 404
    ✅ Detail vs list memo shapes
"""

import pytest

from aquarium_log.constants import MSG_ALREADY_IN_WISHLIST
from aquarium_log.exceptions import NotFoundError, ValidationError
from aquarium_log.schemas.wishlist import WishlistItemCreate, WishlistItemUpdate
from aquarium_log.services.wishlist_service import WishlistService


class TestWishlistService:

    def setup_method(self):
        self.service = WishlistService()

    @pytest.mark.asyncio
    async def test_list_by_priority(self, db_session, make_user, make_aquarium, make_wishlist_item):
        me, other = await make_user(), await make_user()
        none = await make_wishlist_item(me, await make_aquarium(), priority=None)
        low = await make_wishlist_item(me, await make_aquarium(), priority=1)
        high = await make_wishlist_item(me, await make_aquarium(), priority=5)
        await make_wishlist_item(other, await make_aquarium(), priority=5)

        result = await self.service.list_items(db_session, me)

        assert [item.id for item in result.wishlist_items] == [high.id, low.id, none.id]
        assert result.pagination.total_count == 3

    @pytest.mark.asyncio
    async def test_list_truncates_memo(self, db_session, make_user, make_aquarium, make_wishlist_item):
        me = await make_user()
        item = await make_wishlist_item(me, await make_aquarium(), memo="あ" * 150)

        listed = (await self.service.list_items(db_session, me)).wishlist_items[0]
        shown = await self.service.show(db_session, item.id, me)

        assert len(listed.memo) == 100
        assert listed.memo.endswith("...")
        assert listed.updated_at is None
        assert shown.memo == "あ" * 150
        assert shown.updated_at is not None

    @pytest.mark.asyncio
    async def test_create(self, db_session, make_user, make_aquarium):
        me = await make_user()
        aquarium = await make_aquarium(name="Enoshima")

        item = await self.service.create(
            db_session, me, WishlistItemCreate(aquarium_id=aquarium.id, priority=3, memo="summer"),
        )

        assert item.aquarium.name == "Enoshima"
        assert item.aquarium.average_rating == 0.0
        assert item.aquarium.visit_count == 0
        assert item.priority == 3

    @pytest.mark.asyncio
    async def test_duplicate(self, db_session, make_user, make_aquarium, make_wishlist_item):
        me = await make_user()
        aquarium = await make_aquarium()
        await make_wishlist_item(me, aquarium)

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create(db_session, me, WishlistItemCreate(aquarium_id=aquarium.id))

        assert exc_info.value.errors == [MSG_ALREADY_IN_WISHLIST]

    @pytest.mark.asyncio
    async def test_same_aquarium_for_different_users(self, db_session, make_user, make_aquarium, make_wishlist_item):
        me, other = await make_user(), await make_user()
        aquarium = await make_aquarium()
        await make_wishlist_item(other, aquarium)

        item = await self.service.create(db_session, me, WishlistItemCreate(aquarium_id=aquarium.id))

        assert item.aquarium.id == aquarium.id

    @pytest.mark.asyncio
    async def test_unknown_aquarium(self, db_session, make_user):
        with pytest.raises(ValidationError):
            await self.service.create(db_session, await make_user(), WishlistItemCreate(aquarium_id=31337))

    @pytest.mark.asyncio
    async def test_other_users_item_is_not_found(self, db_session, make_user, make_aquarium, make_wishlist_item):
        owner, intruder = await make_user(), await make_user()
        item = await make_wishlist_item(owner, await make_aquarium())

        with pytest.raises(NotFoundError):
            await self.service.show(db_session, item.id, intruder)
        with pytest.raises(NotFoundError):
            await self.service.destroy(db_session, item.id, intruder)

    @pytest.mark.asyncio
    async def test_update_priority(self, db_session, make_user, make_aquarium, make_wishlist_item):
        me = await make_user()
        item = await make_wishlist_item(me, await make_aquarium(), priority=1, memo="keep")

        updated = await self.service.update(db_session, item.id, me, WishlistItemUpdate(priority=4))

        assert updated.priority == 4
        assert updated.memo == "keep"

    @pytest.mark.asyncio
    async def test_update_to_listed_aquarium(self, db_session, make_user, make_aquarium, make_wishlist_item):
        me = await make_user()
        first, second = await make_aquarium(), await make_aquarium()
        await make_wishlist_item(me, first)
        item = await make_wishlist_item(me, second)

        with pytest.raises(ValidationError):
            await self.service.update(db_session, item.id, me, WishlistItemUpdate(aquarium_id=first.id))
