"""
Aquarium Log Backend: Ranking Route Handlers
==============================================

What:  GET /api/v1/rankings/{most_visited,highest_rated,trending,
       wishlist_champions,hidden_gems}. Public, read-only.
How:   Query parameters are handed to ranking_service; omitted parameters
       fall back to the service defaults, which are echoed in the body.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.database import get_db_session
from aquarium_log.schemas.ranking import (
    HiddenGemsResponse,
    HighestRatedResponse,
    MostVisitedResponse,
    TrendingResponse,
    WishlistChampionsResponse,
)
from aquarium_log.services.ranking_service import ranking_service

router = APIRouter(prefix="/api/v1/rankings", tags=["Rankings"])

LIMIT_QUERY = Query(default=None, ge=1, description="Rows to return (default 10, values above 100 are clamped)")
PREFECTURE_QUERY = Query(default=None, description="Only aquariums in this prefecture")


@router.get(
    "/most_visited",
    response_model=MostVisitedResponse,
    summary="Aquariums with the most visits",
    description="period=all (default), year (optionally with year=YYYY) or month (current month).",
)
async def most_visited(
    period: Optional[str] = Query(default=None, description="all | year | month"),
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    prefecture: Optional[str] = PREFECTURE_QUERY,
    limit: Optional[int] = LIMIT_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> MostVisitedResponse:
    return await ranking_service.most_visited(db, period=period, year=year, prefecture=prefecture, limit=limit)


@router.get(
    "/highest_rated",
    response_model=HighestRatedResponse,
    summary="Aquariums with the best average rating",
    description="Only aquariums with at least min_visits visits (default 3).",
)
async def highest_rated(
    min_visits: Optional[int] = Query(default=None, ge=1),
    prefecture: Optional[str] = PREFECTURE_QUERY,
    limit: Optional[int] = LIMIT_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> HighestRatedResponse:
    return await ranking_service.highest_rated(db, min_visits=min_visits, prefecture=prefecture, limit=limit)


@router.get(
    "/trending",
    response_model=TrendingResponse,
    summary="Most visited over the last N days",
)
async def trending(
    days: Optional[int] = Query(default=None, ge=1, le=3650, description="Window in days (default 30)"),
    prefecture: Optional[str] = PREFECTURE_QUERY,
    limit: Optional[int] = LIMIT_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> TrendingResponse:
    return await ranking_service.trending(db, days=days, prefecture=prefecture, limit=limit)


@router.get(
    "/wishlist_champions",
    response_model=WishlistChampionsResponse,
    summary="Aquariums on the most wishlists",
)
async def wishlist_champions(
    prefecture: Optional[str] = PREFECTURE_QUERY,
    limit: Optional[int] = LIMIT_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> WishlistChampionsResponse:
    return await ranking_service.wishlist_champions(db, prefecture=prefecture, limit=limit)


@router.get(
    "/hidden_gems",
    response_model=HiddenGemsResponse,
    summary="Well rated, rarely visited aquariums",
    description="Average rating >= min_rating (default 4.5) with 2 to max_visits (default 10) visits.",
)
async def hidden_gems(
    min_rating: Optional[float] = Query(default=None, ge=1, le=5),
    max_visits: Optional[int] = Query(default=None, ge=2),
    prefecture: Optional[str] = PREFECTURE_QUERY,
    limit: Optional[int] = LIMIT_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> HiddenGemsResponse:
    return await ranking_service.hidden_gems(
        db, min_rating=min_rating, max_visits=max_visits, prefecture=prefecture, limit=limit,
    )
