"""
Aquarium Log Backend: Aquarium Route Handlers
===============================================

What:  /api/v1/aquariums: listing, search, nearby, detail, og:image and
       the admin-only create/update/destroy and photo management.
How:   Parameters are parsed here and handed, with the current user, to
       the query composer or the aquarium service.

Path order matters: /aquariums/search and /aquariums/nearby are declared
before /aquariums/{aquarium_id}.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.database import get_db_session
from aquarium_log.dependencies import get_current_user, require_admin
from aquarium_log.models.user import User
from aquarium_log.routes.uploads import read_uploads
from aquarium_log.schemas.aquarium import (
    AquariumCreateRequest,
    AquariumDetail,
    AquariumListResponse,
    AquariumUpdateRequest,
    HeaderPhotoRequest,
    NearbyResponse,
    OgImageResponse,
)
from aquarium_log.schemas.common import ErrorResponse, ValidationErrorResponse
from aquarium_log.services.aquarium_query import aquarium_query
from aquarium_log.services.aquarium_service import aquarium_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/aquariums", tags=["Aquariums"])

ADMIN_RESPONSES = {
    401: {"description": "Not signed in", "model": ErrorResponse},
    403: {"description": "Signed-in user is not an admin", "model": ErrorResponse},
    404: {"description": "Aquarium not found", "model": ErrorResponse},
}


# ══════════════════════════════════════════════════════════════════════════
# Listing
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "",
    response_model=AquariumListResponse,
    summary="List aquariums",
    description=(
        "Filters by prefecture and (for signed-in users) visited status, sorts by "
        "rating, visits, prefecture or distance (created_at desc by default), paginated."
    ),
)
async def list_aquariums(
    prefecture: Optional[str] = Query(default=None, description="Exact prefecture name, e.g. 東京都"),
    visited: Optional[str] = Query(default=None, description="'true' keeps visited aquariums, 'false' hides them"),
    sort: Optional[str] = Query(default=None, description="rating | visits | prefecture | distance"),
    lat: Optional[str] = Query(default=None, description="Origin latitude for sort=distance; blank is ignored"),
    lng: Optional[str] = Query(default=None, description="Origin longitude for sort=distance; blank is ignored"),
    distance: Optional[float] = Query(default=None, gt=0, description="Radius in km for sort=distance (default 50)"),
    page: Optional[int] = Query(default=None, description="1-indexed page"),
    per: Optional[int] = Query(default=None, description="Rows per page (default 20, max 100)"),
    user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AquariumListResponse:
    return await aquarium_query.list_aquariums(
        db,
        user=user,
        prefecture=prefecture,
        visited=visited,
        sort=sort,
        lat=lat,
        lng=lng,
        distance=distance,
        page=page,
        per=per,
    )


@router.get(
    "/search",
    response_model=AquariumListResponse,
    summary="Search aquariums by name or address",
    description="Substring match on name or address. A blank q returns {aquariums: [], pagination: null}.",
)
async def search_aquariums(
    q: Optional[str] = Query(default=None, description="Text to find in name or address"),
    exhibit: Optional[str] = Query(default=None, description="Keep aquariums with a visit praising this exhibit"),
    page: Optional[int] = Query(default=None),
    per: Optional[int] = Query(default=None),
    user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AquariumListResponse:
    return await aquarium_query.search(db, user=user, q=q, exhibit=exhibit, page=page, per=per)


@router.get(
    "/nearby",
    response_model=NearbyResponse,
    responses={400: {"description": "lat or lng missing", "model": ErrorResponse}},
    summary="Aquariums near a point",
    description="All aquariums within `distance` km (default 50) of lat/lng, nearest first.",
)
async def nearby_aquariums(
    lat: Optional[str] = Query(default=None),
    lng: Optional[str] = Query(default=None),
    distance: Optional[float] = Query(default=None, gt=0, description="Radius in km"),
    user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NearbyResponse:
    return await aquarium_query.nearby(db, user=user, lat=lat, lng=lng, distance=distance)


# ══════════════════════════════════════════════════════════════════════════
# Single Aquarium
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/{aquarium_id}",
    response_model=AquariumDetail,
    responses={404: {"description": "Aquarium not found", "model": ErrorResponse}},
    summary="Aquarium detail",
)
async def get_aquarium(
    aquarium_id: int,
    user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AquariumDetail:
    return await aquarium_service.detail(db, aquarium_id, user)


@router.get(
    "/{aquarium_id}/og_image",
    response_model=OgImageResponse,
    responses={404: {"description": "Aquarium not found", "model": ErrorResponse}},
    summary="Open Graph image of the aquarium's website",
    description="Best effort: {ogImageUrl: null} whenever the image cannot be determined.",
)
async def get_og_image(
    aquarium_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> OgImageResponse:
    url = await aquarium_service.og_image_url(db, aquarium_id)
    return OgImageResponse(og_image_url=url)


@router.post(
    "",
    status_code=201,
    response_model=AquariumDetail,
    responses={**ADMIN_RESPONSES, 422: {"description": "Invalid fields", "model": ValidationErrorResponse}},
    summary="Create an aquarium (admin)",
)
async def create_aquarium(
    body: AquariumCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AquariumDetail:
    return await aquarium_service.create(db, body.aquarium, admin)


@router.patch(
    "/{aquarium_id}",
    response_model=AquariumDetail,
    responses={**ADMIN_RESPONSES, 422: {"description": "Invalid fields", "model": ValidationErrorResponse}},
    summary="Update an aquarium (admin)",
)
async def update_aquarium(
    aquarium_id: int,
    body: AquariumUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AquariumDetail:
    return await aquarium_service.update(db, aquarium_id, body.aquarium, admin)


@router.delete(
    "/{aquarium_id}",
    status_code=204,
    responses=ADMIN_RESPONSES,
    summary="Delete an aquarium with its visits, wishlist items and photos (admin)",
)
async def delete_aquarium(
    aquarium_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await aquarium_service.destroy(db, aquarium_id)
    return Response(status_code=204)


# ══════════════════════════════════════════════════════════════════════════
# Photos (admin)
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "/{aquarium_id}/upload_photos",
    response_model=AquariumDetail,
    responses={**ADMIN_RESPONSES, 400: {"description": "No photos sent", "model": ErrorResponse}},
    summary="Attach photos to an aquarium (admin)",
)
async def upload_photos(
    aquarium_id: int,
    photos: Optional[List[UploadFile]] = File(default=None, description="Image files"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AquariumDetail:
    files = await read_uploads(photos)
    return await aquarium_service.upload_photos(db, aquarium_id, files, admin)


@router.delete(
    "/{aquarium_id}/photos/{photo_id}",
    response_model=AquariumDetail,
    responses=ADMIN_RESPONSES,
    summary="Remove one of the aquarium's photos (admin)",
)
async def delete_photo(
    aquarium_id: int,
    photo_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AquariumDetail:
    return await aquarium_service.destroy_photo(db, aquarium_id, photo_id, admin)


@router.put(
    "/{aquarium_id}/set_header_photo",
    response_model=AquariumDetail,
    responses={**ADMIN_RESPONSES, 400: {"description": "photo_id missing", "model": ErrorResponse}},
    summary="Choose the header photo (admin)",
    description="The photo may be one of the aquarium's photos or a photo of one of its visits.",
)
async def set_header_photo(
    aquarium_id: int,
    body: HeaderPhotoRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AquariumDetail:
    return await aquarium_service.set_header_photo(db, aquarium_id, body.photo_id, admin)
