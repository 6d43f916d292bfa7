"""
Aquarium Log Backend: Aquarium Query Composer Tests
=====================================================

What:  Listing filters, sort keys, search and nearby against the
       in-memory database.

What we test:
    ✅ prefecture and visited filters (visited ignored for anonymous callers)
    ✅ every sort key, including ties by id
    ✅ distance sort and nearby radius
    ✅ search: blank q, name/address match, LIKE wildcards taken literally,
       exhibit filter on Japanese text
"""

from datetime import date

import pytest

from aquarium_log.constants import MSG_LOCATION_REQUIRED
from aquarium_log.exceptions import BadRequestError
from aquarium_log.services.aquarium_query import aquarium_query, parse_origin

TOKYO = (35.6812, 139.7671)


def _names(response):
    return [a.name for a in response.aquariums]


class TestFilters:

    @pytest.mark.asyncio
    async def test_prefecture_filter(self, db_session, make_aquarium):
        await make_aquarium(name="Sumida", prefecture="東京都")
        await make_aquarium(name="Kaiyukan", prefecture="大阪府")

        response = await aquarium_query.list_aquariums(db_session, prefecture="大阪府")

        assert _names(response) == ["Kaiyukan"]
        assert response.pagination.total_count == 1

    @pytest.mark.asyncio
    async def test_visited_filter(self, db_session, make_user, make_aquarium, make_visit):
        user = await make_user()
        seen = await make_aquarium(name="Seen")
        await make_aquarium(name="Unseen")
        await make_visit(user, seen, rating=4)

        visited = await aquarium_query.list_aquariums(db_session, user=user, visited="true")
        not_visited = await aquarium_query.list_aquariums(db_session, user=user, visited="false")

        assert _names(visited) == ["Seen"]
        assert visited.aquariums[0].visited is True
        assert _names(not_visited) == ["Unseen"]

    @pytest.mark.asyncio
    async def test_visited_filter_ignored_for_anonymous(self, db_session, make_aquarium):
        await make_aquarium()
        await make_aquarium()

        response = await aquarium_query.list_aquariums(db_session, user=None, visited="true")

        assert len(response.aquariums) == 2
        assert all(a.visited is False for a in response.aquariums)


class TestSort:

    @pytest.mark.asyncio
    async def test_default_is_newest_first(self, db_session, make_aquarium):
        first = await make_aquarium(name="First")
        second = await make_aquarium(name="Second")
        # Same created_at: id desc decides
        second.created_at = first.created_at
        await db_session.commit()

        response = await aquarium_query.list_aquariums(db_session)

        assert _names(response) == ["Second", "First"]

    @pytest.mark.asyncio
    async def test_rating_sort_unrated_last(self, db_session, make_user, make_aquarium, make_visit):
        user = await make_user()
        unrated = await make_aquarium(name="Unrated")
        good = await make_aquarium(name="Good")
        best = await make_aquarium(name="Best")
        await make_visit(user, good, rating=3)
        await make_visit(user, best, rating=5)
        await make_visit(user, unrated, rating=None)

        response = await aquarium_query.list_aquariums(db_session, sort="rating")

        assert _names(response) == ["Best", "Good", "Unrated"]
        assert response.aquariums[0].average_rating == 5.0
        assert response.aquariums[2].average_rating == 0.0

    @pytest.mark.asyncio
    async def test_visits_sort_ties_by_id(self, db_session, make_user, make_aquarium, make_visit):
        user = await make_user()
        a = await make_aquarium(name="A")
        b = await make_aquarium(name="B")
        c = await make_aquarium(name="C")
        await make_visit(user, c)
        await make_visit(user, c)
        await make_visit(user, a)
        await make_visit(user, b)

        response = await aquarium_query.list_aquariums(db_session, sort="visits")

        assert _names(response) == ["C", "A", "B"]
        assert [x.visit_count for x in response.aquariums] == [2, 1, 1]

    @pytest.mark.asyncio
    async def test_prefecture_sort_north_to_south(self, db_session, make_aquarium):
        await make_aquarium(name="Churaumi", prefecture="沖縄県")
        await make_aquarium(name="Nowhere", prefecture="Atlantis")
        await make_aquarium(name="Otaru", prefecture="北海道")
        await make_aquarium(name="Sunshine", prefecture="東京都")
        await make_aquarium(name="Aqua Park", prefecture="東京都")

        response = await aquarium_query.list_aquariums(db_session, sort="prefecture")

        assert _names(response) == ["Otaru", "Aqua Park", "Sunshine", "Churaumi", "Nowhere"]

    @pytest.mark.asyncio
    async def test_distance_sort_with_coordinates(self, db_session, make_aquarium):
        await make_aquarium(name="Osaka", latitude=34.7025, longitude=135.4959)
        await make_aquarium(name="Shinagawa", latitude=35.6285, longitude=139.7387)
        await make_aquarium(name="Ikebukuro", latitude=35.7289, longitude=139.7186)
        await make_aquarium(name="Station", latitude=35.6813, longitude=139.7670)

        response = await aquarium_query.list_aquariums(
            db_session, sort="distance", lat=TOKYO[0], lng=TOKYO[1], distance=20,
        )

        assert _names(response) == ["Station", "Shinagawa", "Ikebukuro"]
        assert response.pagination.total_count == 3

    @pytest.mark.asyncio
    async def test_distance_sort_without_coordinates_uses_default(self, db_session, make_aquarium):
        await make_aquarium(name="Old")
        await make_aquarium(name="New")

        response = await aquarium_query.list_aquariums(db_session, sort="distance")

        assert len(response.aquariums) == 2

    @pytest.mark.asyncio
    async def test_pagination(self, db_session, make_aquarium):
        for _ in range(5):
            await make_aquarium()

        response = await aquarium_query.list_aquariums(db_session, sort="prefecture", page=2, per=2)

        assert _names(response) == ["Aquarium 3", "Aquarium 4"]
        assert response.pagination.next_page == 3
        assert response.pagination.prev_page == 1


class TestSearch:

    @pytest.mark.asyncio
    async def test_blank_query_returns_nothing(self, db_session, make_aquarium):
        await make_aquarium()

        response = await aquarium_query.search(db_session, q="   ")

        assert response.aquariums == []
        assert response.pagination is None

    @pytest.mark.asyncio
    async def test_matches_name_or_address(self, db_session, make_aquarium):
        await make_aquarium(name="すみだ水族館", address="東京都墨田区押上")
        await make_aquarium(name="Aqua Park", address="港区 品川")
        await make_aquarium(name="Kaiyukan", address="大阪市")

        by_name = await aquarium_query.search(db_session, q="水族館")
        by_address = await aquarium_query.search(db_session, q="品川")

        assert _names(by_name) == ["すみだ水族館"]
        assert _names(by_address) == ["Aqua Park"]

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, db_session, make_aquarium):
        await make_aquarium(name="Aquarium 100%")
        await make_aquarium(name="Aquarium 1000")

        response = await aquarium_query.search(db_session, q="100%")

        assert _names(response) == ["Aquarium 100%"]

    @pytest.mark.asyncio
    async def test_exhibit_filter(self, db_session, make_user, make_aquarium, make_visit):
        user = await make_user()
        penguins = await make_aquarium(name="Penguin Aquarium")
        await make_aquarium(name="Jellyfish Aquarium")
        await make_visit(user, penguins, good_exhibits=["ペンギン", "クラゲ"])

        response = await aquarium_query.search(db_session, q="Aquarium", exhibit="ペンギン")

        assert _names(response) == ["Penguin Aquarium"]


class TestParseOrigin:

    def test_numeric_strings(self):
        assert parse_origin(" 35.68 ", "139.76") == (35.68, 139.76)

    @pytest.mark.parametrize("lat,lng", [
        ("", ""),
        (None, None),
        ("abc", "xyz"),
        ("nan", "inf"),
        ("90.5", "180.5"),
    ])
    def test_unusable_values_are_absent(self, lat, lng):
        assert parse_origin(lat, lng) == (None, None)


class TestNearby:

    @pytest.mark.asyncio
    async def test_missing_coordinate_raises(self, db_session):
        with pytest.raises(BadRequestError) as exc_info:
            await aquarium_query.nearby(db_session, lat="35.6", lng=None)
        assert exc_info.value.message == MSG_LOCATION_REQUIRED

    @pytest.mark.asyncio
    async def test_non_numeric_coordinate_raises(self, db_session):
        with pytest.raises(BadRequestError):
            await aquarium_query.nearby(db_session, lat="north", lng="139.7")

    @pytest.mark.asyncio
    async def test_default_radius_is_50km(self, db_session, make_aquarium):
        await make_aquarium(name="Yokohama", latitude=35.4437, longitude=139.6380)
        await make_aquarium(name="Osaka", latitude=34.7025, longitude=135.4959)

        response = await aquarium_query.nearby(db_session, lat=str(TOKYO[0]), lng=str(TOKYO[1]))

        assert _names(response) == ["Yokohama"]

    @pytest.mark.asyncio
    async def test_flags_for_signed_in_user(
        self, db_session, make_user, make_aquarium, make_visit, make_wishlist_item,
    ):
        user = await make_user()
        visited = await make_aquarium(name="Visited", latitude=35.69, longitude=139.77)
        wished = await make_aquarium(name="Wished", latitude=35.70, longitude=139.77)
        await make_visit(user, visited, visited_at=date(2025, 5, 1))
        await make_wishlist_item(user, wished)

        response = await aquarium_query.nearby(db_session, user=user, lat="35.6812", lng="139.7671")
        by_name = {a.name: a for a in response.aquariums}

        assert by_name["Visited"].visited is True
        assert by_name["Visited"].in_wishlist is False
        assert by_name["Wished"].in_wishlist is True
