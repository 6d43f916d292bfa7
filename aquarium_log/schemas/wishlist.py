"""Aquarium Log Backend: Wishlist Request/Response Schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from aquarium_log.schemas.common import PaginationMeta


class WishlistItemFields(BaseModel):
    aquarium_id: Optional[int] = None
    priority: Optional[int] = Field(default=None, ge=1, le=5)
    memo: Optional[str] = None

    @field_validator("aquarium_id")
    @classmethod
    def validate_aquarium_id(cls, v: Optional[int]) -> int:
        if v is None:
            raise ValueError("aquarium_id can't be blank")
        return v


class WishlistItemCreate(WishlistItemFields):
    aquarium_id: int


class WishlistItemUpdate(WishlistItemFields):
    pass


class WishlistItemCreateRequest(BaseModel):
    wishlist_item: WishlistItemCreate


class WishlistItemUpdateRequest(BaseModel):
    wishlist_item: WishlistItemUpdate


class WishlistAquariumSummary(BaseModel):
    id: int
    name: str
    address: str
    prefecture: Optional[str]
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    average_rating: float
    visit_count: int


class WishlistItemResponse(BaseModel):
    id: int
    aquarium: WishlistAquariumSummary
    priority: Optional[int]
    memo: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None


class WishlistItemListResponse(BaseModel):
    wishlist_items: List[WishlistItemResponse]
    pagination: PaginationMeta
