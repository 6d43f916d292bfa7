"""
Aquarium Log Backend: Visit Route Handlers
============================================

What:  /api/v1/visits: the signed-in user's visit log (CRUD) and media
       upload. Every endpoint requires a session.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.database import get_db_session
from aquarium_log.dependencies import require_user
from aquarium_log.models.user import User
from aquarium_log.routes.uploads import read_uploads
from aquarium_log.schemas.common import ErrorResponse, ValidationErrorResponse
from aquarium_log.schemas.visit import VisitCreateRequest, VisitDetail, VisitListResponse, VisitUpdateRequest
from aquarium_log.services.visit_service import visit_service

router = APIRouter(prefix="/api/v1/visits", tags=["Visits"])

OWNER_RESPONSES = {
    401: {"description": "Not signed in", "model": ErrorResponse},
    403: {"description": "Visit belongs to another user", "model": ErrorResponse},
    404: {"description": "Visit not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=VisitListResponse,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="List the caller's visits",
    description="Newest first; sort=rating orders by rating (unrated last).",
)
async def list_visits(
    aquarium_id: Optional[int] = Query(default=None),
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12, description="Only used together with year"),
    q: Optional[str] = Query(default=None, description="Text to find in the memo"),
    sort: Optional[str] = Query(default=None, description="rating"),
    page: Optional[int] = Query(default=None),
    per: Optional[int] = Query(default=None),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> VisitListResponse:
    return await visit_service.list_visits(
        db, user, aquarium_id=aquarium_id, year=year, month=month, q=q, sort=sort, page=page, per=per,
    )


@router.get("/{visit_id}", response_model=VisitDetail, responses=OWNER_RESPONSES, summary="Visit detail")
async def get_visit(
    visit_id: int,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> VisitDetail:
    return await visit_service.show(db, visit_id, user)


@router.post(
    "",
    status_code=201,
    response_model=VisitDetail,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        422: {"description": "Invalid fields", "model": ValidationErrorResponse},
    },
    summary="Record a visit",
)
async def create_visit(
    body: VisitCreateRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> VisitDetail:
    return await visit_service.create(db, user, body.visit)


@router.patch(
    "/{visit_id}",
    response_model=VisitDetail,
    responses={**OWNER_RESPONSES, 422: {"description": "Invalid fields", "model": ValidationErrorResponse}},
    summary="Update a visit",
)
async def update_visit(
    visit_id: int,
    body: VisitUpdateRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> VisitDetail:
    return await visit_service.update(db, visit_id, user, body.visit)


@router.delete("/{visit_id}", status_code=204, responses=OWNER_RESPONSES, summary="Delete a visit and its media")
async def delete_visit(
    visit_id: int,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await visit_service.destroy(db, visit_id, user)
    return Response(status_code=204)


@router.post(
    "/{visit_id}/upload_photos",
    response_model=VisitDetail,
    responses=OWNER_RESPONSES,
    summary="Attach photos and videos to a visit",
    description="Files beyond the per-visit limits (10 photos, 3 videos) are skipped.",
)
async def upload_media(
    visit_id: int,
    photos: Optional[List[UploadFile]] = File(default=None),
    videos: Optional[List[UploadFile]] = File(default=None),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> VisitDetail:
    return await visit_service.upload_media(
        db, visit_id, user, photos=await read_uploads(photos), videos=await read_uploads(videos),
    )
