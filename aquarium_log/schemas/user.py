"""
Aquarium Log Backend: User & Auth Schemas
===========================================

What:  Contracts for registration, login, the session user and profiles.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from aquarium_log.schemas.common import PaginationMeta


# ── Auth ──────────────────────────────────────────────────────────────────


class RegistrationFields(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)
    password_confirmation: Optional[str] = Field(default=None, max_length=128)
    name: Optional[str] = Field(default=None, max_length=100)
    username: Optional[str] = Field(default=None, max_length=50)


class RegistrationRequest(BaseModel):
    user: RegistrationFields


class LoginRequest(BaseModel):
    email: str = Field(default="", description="Email address or username")
    login: Optional[str] = Field(default=None, description="Alternative to `email`, same meaning")
    password: str = ""

    @property
    def identifier(self) -> str:
        return self.login if self.login and self.login.strip() else self.email


class SessionUser(BaseModel):
    id: int
    name: str
    email: str
    username: Optional[str] = None
    role: Optional[str] = None


class SessionUserResponse(BaseModel):
    user: Optional[SessionUser]


# ── Profiles ──────────────────────────────────────────────────────────────


class UserUpdateFields(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    username: Optional[str] = Field(default=None, max_length=50)
    favorite_aquarium_ids: Optional[List[int]] = None


class UserUpdateRequest(BaseModel):
    user: UserUpdateFields


class AquariumSummary(BaseModel):
    id: int
    name: str
    address: str
    prefecture: Optional[str]


class UserProfile(BaseModel):
    id: int
    email: str
    username: str
    name: str
    avatar_url: Optional[str]
    favorite_aquariums: List[AquariumSummary]
    visit_count: int
    wishlist_count: int
    created_at: datetime


class UserVisitSummary(BaseModel):
    id: int
    aquarium: AquariumSummary
    visited_at: date
    rating: Optional[int]
    weather: Optional[str]
    photo_count: int


class UserVisitListResponse(BaseModel):
    visits: List[UserVisitSummary]
    pagination: PaginationMeta


class UserWishlistSummary(BaseModel):
    id: int
    aquarium: AquariumSummary
    priority: Optional[int]
    memo: Optional[str]
    created_at: datetime


class UserWishlistResponse(BaseModel):
    wishlist_items: List[UserWishlistSummary]
    pagination: PaginationMeta


class AvatarResponse(BaseModel):
    avatar_url: str
