"""
Aquarium Log Backend: Visit Request/Response Schemas
======================================================

What:  API contract for /visits. Bodies arrive as {"visit": {...}};
       media files go through POST /visits/{id}/upload_photos.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from aquarium_log.schemas.common import PaginationMeta


class VisitFields(BaseModel):
    aquarium_id: Optional[int] = None
    visited_at: Optional[date] = None
    weather: Optional[str] = Field(default=None, max_length=50)
    memo: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    good_exhibits: Optional[List[str]] = None

    @field_validator("aquarium_id", "visited_at")
    @classmethod
    def validate_present(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} can't be blank")
        return v

    @field_validator("good_exhibits")
    @classmethod
    def clean_exhibits(cls, v: Optional[List[str]]) -> List[str]:
        # Blank entries come from empty form rows
        return [item.strip() for item in (v or []) if item and item.strip()]


class VisitCreate(VisitFields):
    aquarium_id: int
    visited_at: date


class VisitUpdate(VisitFields):
    """PATCH body: only the supplied fields are applied."""


class VisitCreateRequest(BaseModel):
    visit: VisitCreate


class VisitUpdateRequest(BaseModel):
    visit: VisitUpdate


# ── Responses ─────────────────────────────────────────────────────────────


class VisitAquariumSummary(BaseModel):
    id: int
    name: str
    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class VisitUserSummary(BaseModel):
    id: int
    name: str
    username: str
    avatar_url: Optional[str]


class VisitListItem(BaseModel):
    id: int
    aquarium: VisitAquariumSummary
    visited_at: date
    weather: Optional[str]
    rating: Optional[int]
    memo: Optional[str] = Field(description="Memo truncated to 100 characters")
    photo_urls: List[str] = Field(description="At most 3 photo URLs")
    photo_count: int
    video_count: int
    created_at: datetime
    updated_at: datetime


class VisitDetail(BaseModel):
    id: int
    aquarium: VisitAquariumSummary
    user: VisitUserSummary
    visited_at: date
    weather: Optional[str]
    rating: Optional[int]
    memo: Optional[str]
    good_exhibits: List[str]
    photo_urls: List[str]
    video_urls: List[str]
    created_at: datetime
    updated_at: datetime


class VisitListResponse(BaseModel):
    visits: List[VisitListItem]
    pagination: PaginationMeta
