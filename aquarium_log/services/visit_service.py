"""
Aquarium Log Backend: Visit Service
=====================================

What:  The caller's visit log: listing with filters, CRUD and media upload.
Who:   routes/visits.py. Every operation takes the signed-in user; a
       visit of another user answers 403.

Media caps:
    A visit holds at most settings.max_visit_photos photos (10) and
    settings.max_visit_videos videos (3). upload_media attaches files in
    order until a cap is reached and skips the rest without failing the
    request; the number of skipped files is logged.
"""

import calendar
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.config import settings
from aquarium_log.constants import MSG_FORBIDDEN, SORT_RATING
from aquarium_log.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.attachment import RECORD_VISIT, SLOT_PHOTOS, SLOT_VIDEOS
from aquarium_log.models.user import User
from aquarium_log.models.visit import Visit
from aquarium_log.schemas.visit import VisitCreate, VisitDetail, VisitListResponse, VisitUpdate
from aquarium_log.serializers.visit import serialize_visit_detail, serialize_visit_list
from aquarium_log.services.file_service import UploadedFile, file_service
from aquarium_log.services.pagination import page_request, paginate

logger = logging.getLogger(__name__)


def visited_range(year: int, month: Optional[int] = None):
    """Inclusive date range of a calendar year, or of one month in it."""
    if month is None:
        return date(year, 1, 1), date(year, 12, 31)
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


class VisitService:

    async def get_owned(self, db: AsyncSession, visit_id: int, user: User) -> Visit:
        """
        Raises:
            NotFoundError: unknown visit id
            PermissionDeniedError: visit of another user
        """
        visit = await db.get(Visit, visit_id)
        if visit is None:
            raise NotFoundError(resource="Visit", resource_id=visit_id)
        if visit.user_id != user.id:
            raise PermissionDeniedError(
                message=MSG_FORBIDDEN,
                context={"visit_id": visit_id, "user_id": user.id},
            )
        return visit

    async def _ensure_aquarium(self, db: AsyncSession, aquarium_id: int) -> None:
        if await db.get(Aquarium, aquarium_id) is None:
            raise ValidationError(
                errors=["Aquarium must exist"],
                context={"aquarium_id": aquarium_id},
            )

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_visits(
        self,
        db: AsyncSession,
        user: User,
        aquarium_id: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        q: Optional[str] = None,
        sort: Optional[str] = None,
        page: Optional[int] = None,
        per: Optional[int] = None,
    ) -> VisitListResponse:
        """
        The caller's visits.

        Filters: aquarium_id, year (optionally narrowed to month), q as a
        case-insensitive substring of the memo. `month` without `year`
        is ignored.
        """
        stmt = select(Visit).where(Visit.user_id == user.id)
        if aquarium_id is not None:
            stmt = stmt.where(Visit.aquarium_id == aquarium_id)
        if year is not None:
            stmt = stmt.where(Visit.visited_at.between(*visited_range(year, month)))
        if q is not None and q.strip():
            stmt = stmt.where(Visit.memo.icontains(q.strip(), autoescape=True))

        if sort == SORT_RATING:
            stmt = stmt.order_by(Visit.rating.desc().nulls_last(), Visit.visited_at.desc(), Visit.id.desc())
        else:
            stmt = stmt.order_by(Visit.visited_at.desc(), Visit.id.desc())

        visits, pagination = await paginate(db, stmt, page_request(page, per))
        return VisitListResponse(
            visits=await serialize_visit_list(db, visits),
            pagination=pagination,
        )

    async def show(self, db: AsyncSession, visit_id: int, user: User) -> VisitDetail:
        visit = await self.get_owned(db, visit_id, user)
        return await serialize_visit_detail(db, visit)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, user: User, fields: VisitCreate) -> VisitDetail:
        await self._ensure_aquarium(db, fields.aquarium_id)
        visit = Visit(
            user_id=user.id,
            aquarium_id=fields.aquarium_id,
            visited_at=fields.visited_at,
            weather=fields.weather,
            memo=fields.memo,
            rating=fields.rating,
            good_exhibits=fields.good_exhibits or [],
        )
        db.add(visit)
        await db.flush()
        logger.info("Visit created: id=%d aquarium=%d user=%d", visit.id, visit.aquarium_id, user.id)
        return await serialize_visit_detail(db, visit)

    async def update(self, db: AsyncSession, visit_id: int, user: User, fields: VisitUpdate) -> VisitDetail:
        visit = await self.get_owned(db, visit_id, user)
        changes = fields.model_dump(exclude_unset=True)
        if "aquarium_id" in changes:
            await self._ensure_aquarium(db, changes["aquarium_id"])
        for name, value in changes.items():
            setattr(visit, name, value)
        await db.flush()
        logger.info("Visit %d updated: %s", visit.id, sorted(changes))
        return await serialize_visit_detail(db, visit)

    async def destroy(self, db: AsyncSession, visit_id: int, user: User) -> None:
        visit = await self.get_owned(db, visit_id, user)
        purged = await file_service.purge_records(db, RECORD_VISIT, [visit.id])
        await db.delete(visit)
        await db.flush()
        logger.info("Visit %d destroyed with %d attachments", visit_id, purged)

    async def _attach_until_cap(
        self,
        db: AsyncSession,
        visit: Visit,
        name: str,
        files: List[UploadedFile],
        cap: int,
    ) -> int:
        """Attach files in order while the slot holds fewer than `cap`; returns the number attached."""
        existing = await file_service.count_attachments(db, RECORD_VISIT, visit.id, name)
        attached = 0
        for upload in files:
            if existing + attached >= cap:
                break
            await file_service.attach(db, RECORD_VISIT, visit.id, name, upload.filename, upload.content)
            attached += 1
        skipped = len(files) - attached
        if skipped:
            logger.warning(
                "Visit %d: %d %s not attached, limit of %d reached",
                visit.id, skipped, name, cap,
            )
        return attached

    async def upload_media(
        self,
        db: AsyncSession,
        visit_id: int,
        user: User,
        photos: Optional[List[UploadedFile]] = None,
        videos: Optional[List[UploadedFile]] = None,
    ) -> VisitDetail:
        visit = await self.get_owned(db, visit_id, user)
        if photos:
            await self._attach_until_cap(db, visit, SLOT_PHOTOS, photos, settings.max_visit_photos)
        if videos:
            await self._attach_until_cap(db, visit, SLOT_VIDEOS, videos, settings.max_visit_videos)
        return await serialize_visit_detail(db, visit)


# ── Singleton Instance ────────────────────────────────────────────────────
visit_service = VisitService()
