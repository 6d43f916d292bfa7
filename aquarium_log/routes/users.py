"""
Aquarium Log Backend: User Route Handlers
===========================================

What:  /api/v1/users/{id}: public profile, visit and wishlist pages, and
       the self-only profile update and avatar upload.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.database import get_db_session
from aquarium_log.dependencies import require_user
from aquarium_log.models.user import User
from aquarium_log.routes.uploads import read_upload
from aquarium_log.schemas.common import ErrorResponse, ValidationErrorResponse
from aquarium_log.schemas.user import (
    AvatarResponse,
    UserProfile,
    UserUpdateRequest,
    UserVisitListResponse,
    UserWishlistResponse,
)
from aquarium_log.services.user_service import user_service

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}
SELF_ONLY = {
    401: {"description": "Not signed in", "model": ErrorResponse},
    403: {"description": "Not the caller's own account", "model": ErrorResponse},
}


@router.get("/{user_id}", response_model=UserProfile, responses=NOT_FOUND, summary="User profile")
async def get_user(user_id: int, db: AsyncSession = Depends(get_db_session)) -> UserProfile:
    return await user_service.profile(db, user_id)


@router.patch(
    "/{user_id}",
    response_model=UserProfile,
    responses={**SELF_ONLY, 422: {"description": "Invalid fields", "model": ValidationErrorResponse}},
    summary="Update the caller's profile",
)
async def update_user(
    user_id: int,
    body: UserUpdateRequest,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.update(db, user_id, current_user, body.user)


@router.get("/{user_id}/visits", response_model=UserVisitListResponse, responses=NOT_FOUND, summary="A user's visits")
async def get_user_visits(
    user_id: int,
    page: Optional[int] = Query(default=None),
    per: Optional[int] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> UserVisitListResponse:
    return await user_service.visits(db, user_id, page=page, per=per)


@router.get(
    "/{user_id}/wishlist",
    response_model=UserWishlistResponse,
    responses=NOT_FOUND,
    summary="A user's wishlist",
)
async def get_user_wishlist(
    user_id: int,
    page: Optional[int] = Query(default=None),
    per: Optional[int] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> UserWishlistResponse:
    return await user_service.wishlist(db, user_id, page=page, per=per)


@router.post(
    "/{user_id}/upload_avatar",
    response_model=AvatarResponse,
    responses={**SELF_ONLY, 400: {"description": "No avatar sent", "model": ErrorResponse}},
    summary="Replace the caller's avatar",
)
async def upload_avatar(
    user_id: int,
    avatar: Optional[UploadFile] = File(default=None),
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> AvatarResponse:
    return await user_service.upload_avatar(db, user_id, current_user, await read_upload(avatar))
