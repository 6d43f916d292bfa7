"""
Aquarium Log Backend: Ranking Aggregator
==========================================

What:  The five leaderboards served under /rankings.
How:   Each leaderboard is one GROUP BY aquariums.id statement over visits
       or wishlist items, with its own HAVING clauses and ordering,
       limited to `limit` rows. Rows are then decorated with their
       1-based rank, the is_top5 flag and a representative photo URL.
Who:   Called by routes/rankings.py. Reads only; nothing is cached.

Leaderboards:
    ┌────────────────────┬──────────────┬──────────────────────────────────┐
    │ most_visited       │ ⟕ visits     │ count desc (period: all/year/    │
    │                    │              │ month)                           │
    │ highest_rated      │ ⋈ visits     │ avg desc, count >= min_visits    │
    │ trending           │ ⋈ visits     │ count of visits in last N days   │
    │ wishlist_champions │ ⟕ wishlist   │ count desc, count > 0            │
    │ hidden_gems        │ ⋈ visits     │ avg desc, avg >= min_rating,     │
    │                    │              │ 2 <= count <= max_visits         │
    └────────────────────┴──────────────┴──────────────────────────────────┘

The prefecture filter is a WHERE clause, so it narrows the aquarium set
before aggregation in every leaderboard. Ties are broken by aquarium id.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.config import settings
from aquarium_log.constants import (
    HIDDEN_GEM_MIN_VISITS,
    PERIOD_ALL,
    PERIOD_MONTH,
    PERIOD_YEAR,
    TOP_RANK_CUTOFF,
)
from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.visit import Visit
from aquarium_log.models.wishlist_item import WishlistItem
from aquarium_log.schemas.ranking import (
    HiddenGemItem,
    HiddenGemsResponse,
    HighestRatedItem,
    HighestRatedResponse,
    MostVisitedItem,
    MostVisitedResponse,
    RankingItem,
    TrendingItem,
    TrendingResponse,
    WishlistChampionItem,
    WishlistChampionsResponse,
)
from aquarium_log.serializers.aquarium import rating_stats, round_rating
from aquarium_log.serializers.photos import latest_photo_urls

logger = logging.getLogger(__name__)

DEFAULT_MIN_VISITS = 3
DEFAULT_TRENDING_DAYS = 30
DEFAULT_MIN_RATING = 4.5
DEFAULT_MAX_VISITS = 10


def period_range(period: str, year: Optional[int] = None, today: Optional[date] = None) -> Optional[Tuple[date, date]]:
    """
    Inclusive visited_at range for a most_visited period.

    year  → Jan 1 .. Dec 31 of `year` (default: current year)
    month → first .. last day of the current month
    all   → None (no restriction)
    """
    today = today or date.today()
    if period == PERIOD_YEAR:
        year = year or today.year
        return date(year, 1, 1), date(year, 12, 31)
    if period == PERIOD_MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    return None


class RankingService:
    """
    Computes leaderboards. Every method takes the session plus the
    leaderboard parameters and returns the response envelope.
    """

    # ── Shared Steps ──────────────────────────────────────────────────────

    def _filter_prefecture(self, stmt: Select, prefecture: Optional[str]) -> Select:
        if prefecture:
            return stmt.where(Aquarium.prefecture == prefecture)
        return stmt

    def _limit(self, limit: Optional[int]) -> int:
        """Default when missing or not positive; larger values are clamped, not rejected."""
        if not limit or limit < 1:
            return settings.default_ranking_limit
        return min(limit, settings.max_ranking_limit)

    async def _decorate(
        self,
        db: AsyncSession,
        rows: Sequence,
        item_class: Type[RankingItem],
        metrics: Callable[..., Dict],
    ) -> List[RankingItem]:
        """
        Turn (Aquarium, *aggregates) rows into ranked items.

        rank is the position in this (already ordered and limited) result,
        so ranks are always 1..len(rows).
        """
        photo_urls = await latest_photo_urls(db, [row[0].id for row in rows])
        items = []
        for index, row in enumerate(rows):
            aquarium = row[0]
            rank = index + 1
            items.append(
                item_class(
                    rank=rank,
                    id=aquarium.id,
                    name=aquarium.name,
                    address=aquarium.address,
                    prefecture=aquarium.prefecture,
                    latitude=aquarium.latitude,
                    longitude=aquarium.longitude,
                    is_top5=rank <= TOP_RANK_CUTOFF,
                    latest_photo_url=photo_urls.get(aquarium.id),
                    **metrics(*row),
                )
            )
        return items

    # ── Leaderboards ──────────────────────────────────────────────────────

    async def most_visited(
        self,
        db: AsyncSession,
        period: Optional[str] = None,
        year: Optional[int] = None,
        prefecture: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> MostVisitedResponse:
        """
        Aquariums by number of visits.

        With period=all every aquarium takes part (zero visits included);
        year/month count only the visits in that range, so aquariums
        without visits in it drop out.
        """
        period = period if period in (PERIOD_YEAR, PERIOD_MONTH) else PERIOD_ALL
        if period == PERIOD_YEAR:
            year = year or date.today().year

        visit_count = func.count(Visit.id).label("visit_count")
        latest_visit = func.max(Visit.visited_at).label("latest_visit")
        stmt = select(Aquarium, visit_count, latest_visit).outerjoin(
            Visit, Visit.aquarium_id == Aquarium.id
        )
        date_range = period_range(period, year)
        if date_range is not None:
            stmt = stmt.where(Visit.visited_at.between(*date_range))
        stmt = (
            self._filter_prefecture(stmt, prefecture)
            .group_by(Aquarium.id)
            .order_by(visit_count.desc(), Aquarium.id.asc())
            .limit(self._limit(limit))
        )
        rows = (await db.execute(stmt)).all()

        rankings = await self._decorate(
            db,
            rows,
            MostVisitedItem,
            lambda aquarium, count, latest: {
                "visit_count": int(count),
                "latest_visit": latest,
            },
        )
        logger.debug("most_visited(period=%s, prefecture=%s): %d rows", period, prefecture, len(rankings))
        return MostVisitedResponse(
            rankings=rankings,
            period=period,
            year=year if period == PERIOD_YEAR else None,
            prefecture=prefecture,
        )

    async def highest_rated(
        self,
        db: AsyncSession,
        min_visits: Optional[int] = None,
        prefecture: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> HighestRatedResponse:
        """Aquariums by average rating among those with >= min_visits visits (default 3)."""
        min_visits = DEFAULT_MIN_VISITS if min_visits is None else min_visits

        average = func.avg(Visit.rating).label("average_rating")
        rating_count = func.count(Visit.rating).label("rating_count")
        stmt = select(Aquarium, average, rating_count).join(Visit, Visit.aquarium_id == Aquarium.id)
        stmt = (
            self._filter_prefecture(stmt, prefecture)
            .group_by(Aquarium.id)
            .having(func.count(Visit.id) >= min_visits)
            .order_by(average.desc().nulls_last(), Aquarium.id.asc())
            .limit(self._limit(limit))
        )
        rows = (await db.execute(stmt)).all()

        rankings = await self._decorate(
            db,
            rows,
            HighestRatedItem,
            lambda aquarium, avg, count: {
                "average_rating": round_rating(avg),
                "rating_count": int(count),
            },
        )
        return HighestRatedResponse(rankings=rankings, min_visits=min_visits, prefecture=prefecture)

    async def trending(
        self,
        db: AsyncSession,
        days: Optional[int] = None,
        prefecture: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> TrendingResponse:
        """
        Aquariums by number of visits since the start of the day `days`
        days ago (default 30). average_rating is the all-time average.
        """
        days = DEFAULT_TRENDING_DAYS if days is None else days
        start_date = date.today() - timedelta(days=days)

        recent_count = func.count(Visit.id).label("recent_visit_count")
        stmt = (
            select(Aquarium, recent_count)
            .join(Visit, Visit.aquarium_id == Aquarium.id)
            .where(Visit.visited_at >= start_date)
        )
        stmt = (
            self._filter_prefecture(stmt, prefecture)
            .group_by(Aquarium.id)
            .order_by(recent_count.desc(), Aquarium.id.asc())
            .limit(self._limit(limit))
        )
        rows = (await db.execute(stmt)).all()
        stats = await rating_stats(db, [row[0].id for row in rows])

        rankings = await self._decorate(
            db,
            rows,
            TrendingItem,
            lambda aquarium, count: {
                "recent_visit_count": int(count),
                "average_rating": stats.get(aquarium.id, (0.0, 0))[0],
            },
        )
        return TrendingResponse(rankings=rankings, days=days, prefecture=prefecture)

    async def wishlist_champions(
        self,
        db: AsyncSession,
        prefecture: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> WishlistChampionsResponse:
        """Aquariums by number of wishlist entries; aquariums nobody wishes for are left out."""
        wishlist_count = func.count(WishlistItem.id).label("wishlist_count")
        stmt = select(Aquarium, wishlist_count).outerjoin(
            WishlistItem, WishlistItem.aquarium_id == Aquarium.id
        )
        stmt = (
            self._filter_prefecture(stmt, prefecture)
            .group_by(Aquarium.id)
            .having(func.count(WishlistItem.id) > 0)
            .order_by(wishlist_count.desc(), Aquarium.id.asc())
            .limit(self._limit(limit))
        )
        rows = (await db.execute(stmt)).all()
        stats = await rating_stats(db, [row[0].id for row in rows])

        def metrics(aquarium, count):
            average, visits = stats.get(aquarium.id, (0.0, 0))
            return {"wishlist_count": int(count), "average_rating": average, "visit_count": visits}

        rankings = await self._decorate(db, rows, WishlistChampionItem, metrics)
        return WishlistChampionsResponse(rankings=rankings, prefecture=prefecture)

    async def hidden_gems(
        self,
        db: AsyncSession,
        min_rating: Optional[float] = None,
        max_visits: Optional[int] = None,
        prefecture: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> HiddenGemsResponse:
        """
        Well rated but rarely visited aquariums:
        AVG(rating) >= min_rating (4.5) and 2 <= visits <= max_visits (10).
        """
        min_rating = DEFAULT_MIN_RATING if min_rating is None else min_rating
        max_visits = DEFAULT_MAX_VISITS if max_visits is None else max_visits

        average = func.avg(Visit.rating).label("average_rating")
        visit_count = func.count(Visit.id).label("visit_count")
        rating_count = func.count(Visit.rating).label("rating_count")
        stmt = select(Aquarium, average, visit_count, rating_count).join(
            Visit, Visit.aquarium_id == Aquarium.id
        )
        stmt = (
            self._filter_prefecture(stmt, prefecture)
            .group_by(Aquarium.id)
            .having(func.avg(Visit.rating) >= min_rating)
            .having(func.count(Visit.id) <= max_visits)
            .having(func.count(Visit.id) >= HIDDEN_GEM_MIN_VISITS)
            .order_by(average.desc(), Aquarium.id.asc())
            .limit(self._limit(limit))
        )
        rows = (await db.execute(stmt)).all()

        rankings = await self._decorate(
            db,
            rows,
            HiddenGemItem,
            lambda aquarium, avg, visits, ratings: {
                "average_rating": round_rating(avg),
                "visit_count": int(visits),
                "rating_count": int(ratings),
            },
        )
        return HiddenGemsResponse(
            rankings=rankings,
            min_rating=min_rating,
            max_visits=max_visits,
            prefecture=prefecture,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
ranking_service = RankingService()
