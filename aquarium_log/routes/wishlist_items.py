"""
Aquarium Log Backend: Wishlist Route Handlers
===============================================

What:  /api/v1/wishlist_items: the signed-in user's wishlist. Items of
       other users are invisible here (404).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.database import get_db_session
from aquarium_log.dependencies import require_user
from aquarium_log.models.user import User
from aquarium_log.schemas.common import ErrorResponse, ValidationErrorResponse
from aquarium_log.schemas.wishlist import (
    WishlistItemCreateRequest,
    WishlistItemListResponse,
    WishlistItemResponse,
    WishlistItemUpdateRequest,
)
from aquarium_log.services.wishlist_service import wishlist_service

router = APIRouter(prefix="/api/v1/wishlist_items", tags=["Wishlist"])

ITEM_RESPONSES = {
    401: {"description": "Not signed in", "model": ErrorResponse},
    404: {"description": "Wishlist item not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=WishlistItemListResponse,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="List the caller's wishlist",
    description="Highest priority first, then newest.",
)
async def list_wishlist_items(
    page: Optional[int] = Query(default=None),
    per: Optional[int] = Query(default=None),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> WishlistItemListResponse:
    return await wishlist_service.list_items(db, user, page=page, per=per)


@router.get("/{item_id}", response_model=WishlistItemResponse, responses=ITEM_RESPONSES, summary="Wishlist item")
async def get_wishlist_item(
    item_id: int,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> WishlistItemResponse:
    return await wishlist_service.show(db, item_id, user)


@router.post(
    "",
    status_code=201,
    response_model=WishlistItemResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        422: {"description": "Unknown aquarium or already on the wishlist", "model": ValidationErrorResponse},
    },
    summary="Add an aquarium to the wishlist",
)
async def create_wishlist_item(
    body: WishlistItemCreateRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> WishlistItemResponse:
    return await wishlist_service.create(db, user, body.wishlist_item)


@router.patch(
    "/{item_id}",
    response_model=WishlistItemResponse,
    responses={**ITEM_RESPONSES, 422: {"description": "Invalid fields", "model": ValidationErrorResponse}},
    summary="Update a wishlist item",
)
async def update_wishlist_item(
    item_id: int,
    body: WishlistItemUpdateRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> WishlistItemResponse:
    return await wishlist_service.update(db, item_id, user, body.wishlist_item)


@router.delete("/{item_id}", status_code=204, responses=ITEM_RESPONSES, summary="Remove a wishlist item")
async def delete_wishlist_item(
    item_id: int,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await wishlist_service.destroy(db, item_id, user)
    return Response(status_code=204)
