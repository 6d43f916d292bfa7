"""
Aquarium Log Backend: Ranking Aggregator Tests
================================================

What:  The five leaderboards against the in-memory database.

What we test:
    ✅ ordering, rank numbering and is_top5
    ✅ HAVING thresholds (min_visits, min_rating, max_visits, at least 2 visits)
    ✅ period, days and prefecture restrictions
    ✅ latest_photo_url picks the most recently visited visit with photos
"""

from datetime import date, timedelta

import pytest

from aquarium_log.config import settings
from aquarium_log.services.ranking_service import period_range, ranking_service


@pytest.fixture
def visits_for(make_user, make_visit):
    """Create `count` visits of `aquarium`, each by a new user."""

    async def factory(aquarium, count, rating=None, visited_at=None):
        for _ in range(count):
            user = await make_user()
            await make_visit(user, aquarium, rating=rating, visited_at=visited_at)

    return factory


def _names(response):
    return [item.name for item in response.rankings]


class TestPeriodRange:

    def test_year(self):
        assert period_range("year", 2024) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_month(self):
        assert period_range("month", today=date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_all(self):
        assert period_range("all") is None



class TestLimit:

    def test_missing_or_not_positive_uses_default(self):
        assert ranking_service._limit(None) == settings.default_ranking_limit
        assert ranking_service._limit(0) == settings.default_ranking_limit

    def test_large_limit_clamped(self):
        assert ranking_service._limit(200) == settings.max_ranking_limit
        assert ranking_service._limit(5) == 5


class TestMostVisited:

    @pytest.mark.asyncio
    async def test_ordering_and_ranks(self, db_session, make_aquarium, visits_for):
        popular = await make_aquarium(name="Popular Aquarium")
        less = await make_aquarium(name="Less Popular")
        another = await make_aquarium(name="Another")
        await visits_for(popular, 10)
        await visits_for(less, 5)
        await visits_for(another, 2)

        response = await ranking_service.most_visited(db_session)

        assert _names(response) == ["Popular Aquarium", "Less Popular", "Another"]
        assert [item.rank for item in response.rankings] == [1, 2, 3]
        assert [item.visit_count for item in response.rankings] == [10, 5, 2]
        assert response.rankings[0].is_top5 is True
        assert response.period == "all"
        assert response.year is None

    @pytest.mark.asyncio
    async def test_is_top5_only_for_first_five(self, db_session, make_aquarium, visits_for):
        for count in range(7, 0, -1):
            aquarium = await make_aquarium()
            await visits_for(aquarium, count)

        response = await ranking_service.most_visited(db_session)

        assert [item.is_top5 for item in response.rankings] == [True] * 5 + [False] * 2

    @pytest.mark.asyncio
    async def test_period_all_includes_unvisited(self, db_session, make_aquarium):
        await make_aquarium(name="Quiet")

        response = await ranking_service.most_visited(db_session, period="all")

        assert _names(response) == ["Quiet"]
        assert response.rankings[0].visit_count == 0
        assert response.rankings[0].latest_visit is None

    @pytest.mark.asyncio
    async def test_period_year_counts_only_that_year(self, db_session, make_aquarium, visits_for):
        old = await make_aquarium(name="Old favourite")
        new = await make_aquarium(name="New favourite")
        await visits_for(old, 3, visited_at=date(2023, 6, 1))
        await visits_for(new, 1, visited_at=date(2024, 6, 1))

        response = await ranking_service.most_visited(db_session, period="year", year=2024)

        assert _names(response) == ["New favourite"]
        assert response.year == 2024
        assert response.rankings[0].latest_visit == date(2024, 6, 1)

    @pytest.mark.asyncio
    async def test_unknown_period_means_all(self, db_session, make_aquarium):
        await make_aquarium()

        response = await ranking_service.most_visited(db_session, period="decade")

        assert response.period == "all"

    @pytest.mark.asyncio
    async def test_limit_and_prefecture(self, db_session, make_aquarium, visits_for):
        tokyo_a = await make_aquarium(prefecture="東京都")
        tokyo_b = await make_aquarium(prefecture="東京都")
        osaka = await make_aquarium(prefecture="大阪府")
        await visits_for(osaka, 5)
        await visits_for(tokyo_a, 1)
        await visits_for(tokyo_b, 2)

        response = await ranking_service.most_visited(db_session, prefecture="東京都", limit=1)

        assert [item.id for item in response.rankings] == [tokyo_b.id]
        assert response.prefecture == "東京都"

    @pytest.mark.asyncio
    async def test_latest_photo_url(
        self, db_session, make_user, make_aquarium, make_visit, make_attachment,
    ):
        user = await make_user()
        aquarium = await make_aquarium()
        older = await make_visit(user, aquarium, visited_at=date(2024, 1, 1))
        newer = await make_visit(user, aquarium, visited_at=date(2024, 3, 1))
        await make_visit(user, aquarium, visited_at=date(2024, 5, 1))  # no photos
        await make_attachment(older.id, storage_path="old.jpg")
        await make_attachment(newer.id, storage_path="first.jpg")
        await make_attachment(newer.id, storage_path="second.jpg")

        response = await ranking_service.most_visited(db_session)

        assert response.rankings[0].latest_photo_url == "http://test/api/v1/files/first.jpg"


class TestHighestRated:

    @pytest.mark.asyncio
    async def test_min_visits_excludes(self, db_session, make_aquarium, visits_for):
        aquarium = await make_aquarium()
        await visits_for(aquarium, 5, rating=5)

        response = await ranking_service.highest_rated(db_session, min_visits=10)

        assert response.rankings == []
        assert response.min_visits == 10

    @pytest.mark.asyncio
    async def test_ordered_by_average(self, db_session, make_aquarium, visits_for):
        good = await make_aquarium(name="Good")
        great = await make_aquarium(name="Great")
        await make_aquarium(name="Unvisited")
        await visits_for(good, 3, rating=3)
        await visits_for(great, 3, rating=5)
        await visits_for(great, 1, rating=None)

        response = await ranking_service.highest_rated(db_session)

        assert _names(response) == ["Great", "Good"]
        assert response.rankings[0].average_rating == 5.0
        # Unrated visits count towards min_visits but not rating_count
        assert response.rankings[0].rating_count == 3


class TestTrending:

    @pytest.mark.asyncio
    async def test_only_recent_visits_count(self, db_session, make_aquarium, visits_for):
        hot = await make_aquarium(name="Hot")
        cold = await make_aquarium(name="Cold")
        await visits_for(hot, 2, rating=4, visited_at=date.today() - timedelta(days=3))
        await visits_for(hot, 1, rating=2, visited_at=date.today() - timedelta(days=400))
        await visits_for(cold, 5, visited_at=date.today() - timedelta(days=90))

        response = await ranking_service.trending(db_session)

        assert _names(response) == ["Hot"]
        assert response.rankings[0].recent_visit_count == 2
        # All-time average
        assert response.rankings[0].average_rating == pytest.approx(3.33)
        assert response.days == 30

    @pytest.mark.asyncio
    async def test_custom_window(self, db_session, make_aquarium, visits_for):
        aquarium = await make_aquarium()
        await visits_for(aquarium, 1, visited_at=date.today() - timedelta(days=90))

        response = await ranking_service.trending(db_session, days=120)

        assert len(response.rankings) == 1


class TestWishlistChampions:

    @pytest.mark.asyncio
    async def test_counts_wishlists(
        self, db_session, make_user, make_aquarium, make_wishlist_item, make_visit,
    ):
        wanted = await make_aquarium(name="Wanted")
        less_wanted = await make_aquarium(name="Less wanted")
        await make_aquarium(name="Nobody")
        for _ in range(3):
            await make_wishlist_item(await make_user(), wanted)
        await make_wishlist_item(await make_user(), less_wanted)
        await make_visit(await make_user(), wanted, rating=4)

        response = await ranking_service.wishlist_champions(db_session)

        assert _names(response) == ["Wanted", "Less wanted"]
        assert response.rankings[0].wishlist_count == 3
        assert response.rankings[0].visit_count == 1
        assert response.rankings[0].average_rating == 4.0
        assert response.rankings[1].visit_count == 0


class TestHiddenGems:

    @pytest.mark.asyncio
    async def test_thresholds(self, db_session, make_aquarium, visits_for):
        gem = await make_aquarium(name="Gem")
        crowded = await make_aquarium(name="Crowded")
        single = await make_aquarium(name="Single")
        await visits_for(gem, 3, rating=5)
        await visits_for(crowded, 20, rating=3)
        await visits_for(single, 1, rating=5)

        response = await ranking_service.hidden_gems(db_session, min_rating=4.5, max_visits=10)

        assert _names(response) == ["Gem"]
        assert response.rankings[0].average_rating == 5.0
        assert response.rankings[0].visit_count == 3
        assert response.min_rating == 4.5
        assert response.max_visits == 10

    @pytest.mark.asyncio
    async def test_too_many_visits_excluded(self, db_session, make_aquarium, visits_for):
        aquarium = await make_aquarium()
        await visits_for(aquarium, 11, rating=5)

        response = await ranking_service.hidden_gems(db_session)

        assert response.rankings == []
