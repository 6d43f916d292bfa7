"""
Aquarium Log Backend: Ranking Response Schemas
================================================

What:  One row model per leaderboard (metric-specific fields on top of a
       shared base) and one envelope per endpoint echoing the parameters
       that shaped the result.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class RankingItem(BaseModel):
    rank: int = Field(description="1-based position within this result")
    id: int
    name: str
    address: str
    prefecture: Optional[str]
    latitude: float
    longitude: float
    is_top5: bool
    latest_photo_url: Optional[str] = Field(
        default=None,
        description="First photo of the most recently visited visit that has photos",
    )


class MostVisitedItem(RankingItem):
    visit_count: int
    latest_visit: Optional[date]


class HighestRatedItem(RankingItem):
    average_rating: float
    rating_count: int


class TrendingItem(RankingItem):
    recent_visit_count: int
    average_rating: float


class WishlistChampionItem(RankingItem):
    wishlist_count: int
    average_rating: float
    visit_count: int


class HiddenGemItem(RankingItem):
    average_rating: float
    visit_count: int
    rating_count: int


class MostVisitedResponse(BaseModel):
    rankings: List[MostVisitedItem]
    period: str
    year: Optional[int] = None
    prefecture: Optional[str]


class HighestRatedResponse(BaseModel):
    rankings: List[HighestRatedItem]
    min_visits: int
    prefecture: Optional[str]


class TrendingResponse(BaseModel):
    rankings: List[TrendingItem]
    days: int
    prefecture: Optional[str]


class WishlistChampionsResponse(BaseModel):
    rankings: List[WishlistChampionItem]
    prefecture: Optional[str]


class HiddenGemsResponse(BaseModel):
    rankings: List[HiddenGemItem]
    min_rating: float
    max_visits: int
    prefecture: Optional[str]
