"""
Aquarium Log Backend: Aquarium Request/Response Schemas
=========================================================

What:  Pydantic models defining the aquarium API contract.
How:   Request models validate `{ "aquarium": {...} }` bodies (range checks on
       coordinates, non-blank name/address); response models describe the
       "index" (list) and "detail" shapes produced by AquariumSerializer.

Request validation failures are turned into 422 {"errors": [...]} by the
RequestValidationError handler in main.py.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from aquarium_log.schemas.common import PaginationMeta


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


def _require_text(field: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{field} can't be blank")
    return value.strip()


class AquariumFields(BaseModel):
    """Fields shared by create and update; every field optional here."""
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = Field(default=None, max_length=255)
    prefecture: Optional[str] = Field(default=None, max_length=20)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    phone_number: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=500)
    # Free-form maps: arbitrary keys are kept round-trip
    opening_hours: Optional[Dict[str, Any]] = None
    admission_fee: Optional[Dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        return _require_text("name", v)

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: Optional[str]) -> str:
        return _require_text("address", v)

    @field_validator("latitude", "longitude")
    @classmethod
    def validate_coordinate_present(cls, v: Optional[float], info) -> float:
        # Only runs for explicitly supplied values; an explicit null is rejected
        if v is None:
            raise ValueError(f"{info.field_name} can't be blank")
        return v


class AquariumCreate(AquariumFields):
    """Create requires name, address and coordinates."""
    name: str = Field(max_length=255)
    address: str = Field(max_length=255)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class AquariumUpdate(AquariumFields):
    """PATCH body: only the supplied fields are applied."""


class AquariumCreateRequest(BaseModel):
    aquarium: AquariumCreate


class AquariumUpdateRequest(BaseModel):
    aquarium: AquariumUpdate


class HeaderPhotoRequest(BaseModel):
    photo_id: Optional[int] = Field(default=None, description="Attachment id to use as header photo")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PhotoItem(BaseModel):
    id: int
    url: str


class AllPhotoItem(BaseModel):
    """Aquarium photo or photo of one of its visits."""
    id: int
    url: str
    source: str = Field(description="aquarium | visit")
    visit_id: Optional[int] = None
    visited_at: Optional[date] = None


class RecentVisitSummary(BaseModel):
    id: int
    user_name: Optional[str]
    visited_at: date
    rating: Optional[int]
    photo_count: int


class AquariumIndexItem(BaseModel):
    """
    What:  Compact aquarium shape for list views (index, search, nearby).
    Note:  photo_urls/photos hold at most 3 entries; latest_photo_url is the
           first photo of the most recently visited visit that has one.
    """
    id: int
    name: str
    address: str
    prefecture: Optional[str]
    latitude: float
    longitude: float
    average_rating: float
    visit_count: int
    visited: bool
    in_wishlist: bool
    photo_urls: List[str]
    photos: List[PhotoItem]
    latest_photo_url: Optional[str]
    header_photo_url: Optional[str] = None


class AquariumDetail(BaseModel):
    """What:  Full aquarium shape for the detail page."""
    id: int
    name: str
    description: Optional[str]
    address: str
    prefecture: Optional[str]
    latitude: float
    longitude: float
    phone_number: Optional[str]
    website: Optional[str]
    opening_hours: Optional[Dict[str, Any]]
    admission_fee: Optional[Dict[str, Any]]
    average_rating: float
    visit_count: int
    visited: bool
    in_wishlist: bool
    created_by: Optional[int]
    header_photo_id: Optional[int]
    header_photo_url: Optional[str]
    photo_urls: List[str]
    photos: List[PhotoItem]
    all_photos: List[AllPhotoItem]
    recent_visits: List[RecentVisitSummary]


class AquariumListResponse(BaseModel):
    """
    Wrapper for GET /aquariums and GET /aquariums/search.

    pagination is null when a blank search short-circuits.
    """
    aquariums: List[AquariumIndexItem]
    pagination: Optional[PaginationMeta]


class NearbyResponse(BaseModel):
    aquariums: List[AquariumIndexItem]


class OgImageResponse(BaseModel):
    og_image_url: Optional[str] = Field(default=None, serialization_alias="ogImageUrl")
