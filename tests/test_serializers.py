"""
Aquarium Log Backend: Serializer Tests
========================================

What we test:
    ✅ pure projections (as_index) from a hand-built context
    ✅ index photo limit, header photo, visited/in_wishlist flags
    ✅ detail: all_photos ordering, recent visits
    ✅ visit list memo preview and photo caps
    ✅ latest_photo_urls falls back to None when the lookup fails
"""

from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from aquarium_log.models.attachment import RECORD_AQUARIUM, RECORD_USER, SLOT_AVATAR, SLOT_VIDEOS
from aquarium_log.serializers.aquarium import (
    AquariumContext,
    as_index,
    round_rating,
    serialize_detail,
    serialize_index,
)
from aquarium_log.serializers.photos import latest_photo_urls
from aquarium_log.serializers.user import serialize_profile
from aquarium_log.serializers.visit import serialize_visit_list, truncate_text

FILES = "http://test/api/v1/files/"


def _fake_aquarium(**overrides):
    values = dict(
        id=1, name="Sumida", address="東京都墨田区", prefecture="東京都",
        latitude=35.71, longitude=139.81, header_photo_id=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestHelpers:

    def test_round_rating(self):
        assert round_rating(None) == 0.0
        assert round_rating(4.666666) == 4.67

    def test_truncate_text(self):
        assert truncate_text("short") == "short"
        assert truncate_text(None) is None
        assert truncate_text("a" * 100) == "a" * 100
        truncated = truncate_text("a" * 150)
        assert truncated == "a" * 97 + "..."
        assert len(truncated) == 100


class TestAsIndex:

    def test_anonymous_context(self):
        item = as_index(_fake_aquarium(), AquariumContext())

        assert item.average_rating == 0.0
        assert item.visit_count == 0
        assert item.visited is False
        assert item.in_wishlist is False
        assert item.photo_urls == []
        assert item.latest_photo_url is None

    def test_flags_need_a_user(self):
        # Ids present but no user: still false
        context = AquariumContext(user=None, visited_ids={1}, wishlist_ids={1})
        item = as_index(_fake_aquarium(), context)
        assert item.visited is False
        assert item.in_wishlist is False

    def test_flags_and_stats(self):
        context = AquariumContext(
            user=SimpleNamespace(id=9),
            visited_ids={1},
            wishlist_ids=set(),
            stats={1: (4.5, 2)},
            latest_photo_urls={1: FILES + "latest.jpg"},
        )
        item = as_index(_fake_aquarium(), context)

        assert item.visited is True
        assert item.in_wishlist is False
        assert item.average_rating == 4.5
        assert item.visit_count == 2
        assert item.latest_photo_url == FILES + "latest.jpg"


class TestSerializeIndex:

    @pytest.mark.asyncio
    async def test_photo_limit_and_header(self, db_session, make_aquarium, make_attachment):
        aquarium = await make_aquarium()
        photos = [
            await make_attachment(aquarium.id, record_type=RECORD_AQUARIUM, storage_path=f"p{i}.jpg")
            for i in range(4)
        ]
        aquarium.header_photo_id = photos[3].id
        await db_session.commit()

        [item] = await serialize_index(db_session, [aquarium])

        assert item.photo_urls == [FILES + "p0.jpg", FILES + "p1.jpg", FILES + "p2.jpg"]
        assert [p.id for p in item.photos] == [p.id for p in photos[:3]]
        assert item.header_photo_url == FILES + "p3.jpg"

    @pytest.mark.asyncio
    async def test_empty_page(self, db_session):
        assert await serialize_index(db_session, []) == []


class TestSerializeDetail:

    @pytest.mark.asyncio
    async def test_all_photos_and_recent_visits(
        self, db_session, make_user, make_aquarium, make_visit, make_attachment,
    ):
        user = await make_user(name="Hanako")
        aquarium = await make_aquarium(opening_hours={"weekday": "9:00-17:00"})
        own = await make_attachment(aquarium.id, record_type=RECORD_AQUARIUM, storage_path="own.jpg")
        older = await make_visit(user, aquarium, visited_at=date(2024, 1, 1), rating=3)
        newer = await make_visit(user, aquarium, visited_at=date(2024, 6, 1), rating=5)
        older_photo = await make_attachment(older.id, storage_path="older.jpg")
        newer_photo = await make_attachment(newer.id, storage_path="newer.jpg")

        detail = await serialize_detail(db_session, aquarium, user)

        assert [(p.id, p.source) for p in detail.all_photos] == [
            (own.id, "aquarium"),
            (newer_photo.id, "visit"),
            (older_photo.id, "visit"),
        ]
        assert detail.all_photos[1].visit_id == newer.id
        assert detail.all_photos[1].visited_at == date(2024, 6, 1)
        assert [v.id for v in detail.recent_visits] == [newer.id, older.id]
        assert detail.recent_visits[0].user_name == "Hanako"
        assert detail.recent_visits[0].photo_count == 1
        assert detail.average_rating == 4.0
        assert detail.visited is True
        assert detail.opening_hours == {"weekday": "9:00-17:00"}
        assert detail.photo_urls == [FILES + "own.jpg"]


class TestVisitList:

    @pytest.mark.asyncio
    async def test_preview_and_counts(
        self, db_session, make_user, make_aquarium, make_visit, make_attachment,
    ):
        user = await make_user()
        aquarium = await make_aquarium()
        visit = await make_visit(user, aquarium, memo="あ" * 120)
        for i in range(4):
            await make_attachment(visit.id, storage_path=f"v{i}.jpg")
        await make_attachment(visit.id, name=SLOT_VIDEOS, storage_path="clip.mp4")

        [item] = await serialize_visit_list(db_session, [visit])

        assert item.memo == "あ" * 97 + "..."
        assert len(item.photo_urls) == 3
        assert item.photo_count == 4
        assert item.video_count == 1
        assert item.aquarium.latitude is None


class TestProfile:

    @pytest.mark.asyncio
    async def test_newest_avatar_and_favorites(
        self, db_session, make_user, make_aquarium, make_attachment,
    ):
        aquarium = await make_aquarium(name="Fav")
        user = await make_user(favorite_aquarium_ids=[aquarium.id, 9999])
        await make_attachment(user.id, record_type=RECORD_USER, name=SLOT_AVATAR, storage_path="old.png")
        await make_attachment(user.id, record_type=RECORD_USER, name=SLOT_AVATAR, storage_path="new.png")

        profile = await serialize_profile(db_session, user)

        assert profile.avatar_url == FILES + "new.png"
        assert [a.name for a in profile.favorite_aquariums] == ["Fav"]
        assert profile.visit_count == 0


class TestLatestPhotoUrls:

    @pytest.mark.asyncio
    async def test_lookup_failure_gives_none(self):
        """The failing query runs inside a savepoint that is rolled back."""
        db = MagicMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))
        savepoint = db.begin_nested.return_value
        savepoint.__aenter__ = AsyncMock()
        savepoint.__aexit__ = AsyncMock(return_value=False)

        urls = await latest_photo_urls(db, [1, 2])

        assert urls == {1: None, 2: None}
        db.begin_nested.assert_called_once()
        exc_type = savepoint.__aexit__.await_args.args[0]
        assert exc_type is OperationalError

    @pytest.mark.asyncio
    async def test_session_usable_after_lookup(self, db_session, make_user, make_aquarium, make_visit):
        aquarium = await make_aquarium()
        await make_visit(await make_user(), aquarium)

        assert await latest_photo_urls(db_session, [aquarium.id]) == {aquarium.id: None}
        assert (await serialize_index(db_session, [aquarium]))[0].visit_count == 1

    @pytest.mark.asyncio
    async def test_no_ids(self, db_session):
        assert await latest_photo_urls(db_session, []) == {}
