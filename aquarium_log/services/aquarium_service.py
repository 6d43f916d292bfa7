"""
Aquarium Log Backend: Aquarium Service
========================================

What:  Aquarium CRUD and photo management.
Who:   routes/aquariums.py. Every mutation here is admin-only; the route
       enforces that with require_admin before calling in.
When:  Create/update/destroy, photo upload/removal, header photo choice
       and the og:image lookup of the detail page.

Destroy cascade (explicit, so it holds on SQLite without FK enforcement):
    attachments of the aquarium's visits → visits → wishlist items
    → attachments of the aquarium → aquarium
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.constants import (
    MSG_HEADER_PHOTO_NOT_FOUND,
    MSG_PHOTO_ID_REQUIRED,
    MSG_PHOTO_NOT_FOUND,
    MSG_PHOTOS_REQUIRED,
)
from aquarium_log.exceptions import BadRequestError, NotFoundError
from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.attachment import (
    Attachment,
    RECORD_AQUARIUM,
    RECORD_VISIT,
    SLOT_PHOTOS,
)
from aquarium_log.models.user import User
from aquarium_log.models.visit import Visit
from aquarium_log.models.wishlist_item import WishlistItem
from aquarium_log.schemas.aquarium import AquariumCreate, AquariumDetail, AquariumUpdate
from aquarium_log.serializers.aquarium import serialize_detail
from aquarium_log.services.file_service import UploadedFile, file_service
from aquarium_log.services.og_image_fetcher import og_image_fetcher

logger = logging.getLogger(__name__)


class AquariumService:

    async def get(self, db: AsyncSession, aquarium_id: int) -> Aquarium:
        """Raises NotFoundError for unknown ids."""
        aquarium = await db.get(Aquarium, aquarium_id)
        if aquarium is None:
            raise NotFoundError(resource="Aquarium", resource_id=aquarium_id)
        return aquarium

    async def detail(self, db: AsyncSession, aquarium_id: int, user: Optional[User] = None) -> AquariumDetail:
        aquarium = await self.get(db, aquarium_id)
        return await serialize_detail(db, aquarium, user)

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, fields: AquariumCreate, user: User) -> AquariumDetail:
        aquarium = Aquarium(**fields.model_dump(), user_id=user.id)
        db.add(aquarium)
        await db.flush()
        logger.info("Aquarium created: id=%d name=%s by user %d", aquarium.id, aquarium.name, user.id)
        return await serialize_detail(db, aquarium, user)

    async def update(
        self,
        db: AsyncSession,
        aquarium_id: int,
        fields: AquariumUpdate,
        user: User,
    ) -> AquariumDetail:
        """Applies only the fields present in the request body."""
        aquarium = await self.get(db, aquarium_id)
        changes = fields.model_dump(exclude_unset=True)
        for name, value in changes.items():
            setattr(aquarium, name, value)
        await db.flush()
        logger.info("Aquarium %d updated: %s", aquarium.id, sorted(changes))
        return await serialize_detail(db, aquarium, user)

    async def destroy(self, db: AsyncSession, aquarium_id: int) -> None:
        aquarium = await self.get(db, aquarium_id)

        visit_ids = list(
            (await db.execute(select(Visit.id).where(Visit.aquarium_id == aquarium.id))).scalars().all()
        )
        purged = await file_service.purge_records(db, RECORD_VISIT, visit_ids)
        await db.execute(delete(Visit).where(Visit.aquarium_id == aquarium.id))
        await db.execute(delete(WishlistItem).where(WishlistItem.aquarium_id == aquarium.id))
        purged += await file_service.purge_records(db, RECORD_AQUARIUM, [aquarium.id])
        await db.delete(aquarium)
        await db.flush()
        logger.info(
            "Aquarium %d destroyed with %d visits and %d attachments",
            aquarium_id, len(visit_ids), purged,
        )

    # ── Photos ────────────────────────────────────────────────────────────

    async def upload_photos(
        self,
        db: AsyncSession,
        aquarium_id: int,
        photos: List[UploadedFile],
        user: User,
    ) -> AquariumDetail:
        aquarium = await self.get(db, aquarium_id)
        if not photos:
            raise BadRequestError(message=MSG_PHOTOS_REQUIRED)
        for photo in photos:
            await file_service.attach(
                db, RECORD_AQUARIUM, aquarium.id, SLOT_PHOTOS, photo.filename, photo.content,
            )
        logger.info("Attached %d photos to aquarium %d", len(photos), aquarium.id)
        return await serialize_detail(db, aquarium, user)

    async def destroy_photo(
        self,
        db: AsyncSession,
        aquarium_id: int,
        photo_id: int,
        user: User,
    ) -> AquariumDetail:
        """Only the aquarium's own photos can be removed here; visit photos belong to their visit."""
        aquarium = await self.get(db, aquarium_id)
        result = await db.execute(
            select(Attachment).where(
                Attachment.id == photo_id,
                Attachment.record_type == RECORD_AQUARIUM,
                Attachment.record_id == aquarium.id,
                Attachment.name == SLOT_PHOTOS,
            )
        )
        attachment = result.scalars().first()
        if attachment is None:
            raise NotFoundError(resource="Photo", resource_id=photo_id, message=MSG_PHOTO_NOT_FOUND)

        await file_service.purge(db, attachment)
        if aquarium.header_photo_id == photo_id:
            aquarium.header_photo_id = None
            await db.flush()
        logger.info("Photo %d removed from aquarium %d", photo_id, aquarium.id)
        return await serialize_detail(db, aquarium, user)

    async def set_header_photo(
        self,
        db: AsyncSession,
        aquarium_id: int,
        photo_id: Optional[int],
        user: User,
    ) -> AquariumDetail:
        """The photo must belong to the aquarium or to one of its visits."""
        aquarium = await self.get(db, aquarium_id)
        if photo_id is None:
            raise BadRequestError(message=MSG_PHOTO_ID_REQUIRED)

        own_photo = select(Attachment.id).where(
            Attachment.id == photo_id,
            Attachment.record_type == RECORD_AQUARIUM,
            Attachment.record_id == aquarium.id,
            Attachment.name == SLOT_PHOTOS,
        )
        visit_photo = (
            select(Attachment.id)
            .join(Visit, Visit.id == Attachment.record_id)
            .where(
                Attachment.id == photo_id,
                Attachment.record_type == RECORD_VISIT,
                Attachment.name == SLOT_PHOTOS,
                Visit.aquarium_id == aquarium.id,
            )
        )
        found = (await db.execute(own_photo)).first() or (await db.execute(visit_photo)).first()
        if found is None:
            raise NotFoundError(resource="Photo", resource_id=photo_id, message=MSG_HEADER_PHOTO_NOT_FOUND)

        aquarium.header_photo_id = photo_id
        await db.flush()
        logger.info("Aquarium %d header photo set to %d", aquarium.id, photo_id)
        return await serialize_detail(db, aquarium, user)

    # ── Open Graph ────────────────────────────────────────────────────────

    async def og_image_url(self, db: AsyncSession, aquarium_id: int) -> Optional[str]:
        """og:image of the aquarium's website; None when there is no website or nothing usable."""
        aquarium = await self.get(db, aquarium_id)
        if not aquarium.website:
            return None
        return await og_image_fetcher.fetch(aquarium.website)


# ── Singleton Instance ────────────────────────────────────────────────────
aquarium_service = AquariumService()
