"""
Aquarium Log Backend: User Service
====================================

What:  Public profiles, profile updates, per-user visit/wishlist pages and
       avatar upload.
Who:   routes/users.py. Updates and avatar upload are self-only (403 for
       anyone else, admins included).
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.constants import MSG_AVATAR_REQUIRED, MSG_FORBIDDEN
from aquarium_log.exceptions import BadRequestError, NotFoundError, PermissionDeniedError, ValidationError
from aquarium_log.models.attachment import RECORD_USER, SLOT_AVATAR
from aquarium_log.models.user import User
from aquarium_log.models.visit import Visit
from aquarium_log.models.wishlist_item import WishlistItem
from aquarium_log.schemas.user import (
    AvatarResponse,
    UserProfile,
    UserUpdateFields,
    UserVisitListResponse,
    UserWishlistResponse,
)
from aquarium_log.serializers.photos import attachment_url
from aquarium_log.serializers.user import (
    serialize_profile,
    serialize_user_visits,
    serialize_user_wishlist,
)
from aquarium_log.services.auth_service import auth_service
from aquarium_log.services.file_service import UploadedFile, file_service
from aquarium_log.services.pagination import page_request, paginate
from aquarium_log.services.wishlist_service import by_priority

logger = logging.getLogger(__name__)


class UserService:

    async def get(self, db: AsyncSession, user_id: int) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="User", resource_id=user_id)
        return user

    def _ensure_self(self, user_id: int, current_user: User) -> None:
        if current_user.id != user_id:
            raise PermissionDeniedError(
                message=MSG_FORBIDDEN,
                context={"user_id": user_id, "current_user_id": current_user.id},
            )

    async def profile(self, db: AsyncSession, user_id: int) -> UserProfile:
        return await serialize_profile(db, await self.get(db, user_id))

    async def update(
        self,
        db: AsyncSession,
        user_id: int,
        current_user: User,
        fields: UserUpdateFields,
    ) -> UserProfile:
        self._ensure_self(user_id, current_user)
        changes = fields.model_dump(exclude_unset=True)

        errors: List[str] = []
        if "name" in changes and (changes["name"] is None or not changes["name"].strip()):
            errors.append("Name can't be blank")
        if "username" in changes:
            username = changes["username"]
            if username is None or not username.strip():
                errors.append("Username can't be blank")
            elif await auth_service.username_taken(db, username, exclude_user_id=current_user.id):
                errors.append("Username has already been taken")
        if errors:
            raise ValidationError(errors=errors, context={"user_id": user_id})

        if "name" in changes:
            current_user.name = changes["name"].strip()
        if "username" in changes:
            current_user.username = changes["username"].strip()
        if "favorite_aquarium_ids" in changes:
            current_user.favorite_ids = changes["favorite_aquarium_ids"] or []
        await db.flush()
        logger.info("User %d updated: %s", current_user.id, sorted(changes))
        return await serialize_profile(db, current_user)

    async def visits(self, db: AsyncSession, user_id: int, page=None, per=None) -> UserVisitListResponse:
        user = await self.get(db, user_id)
        stmt = (
            select(Visit)
            .where(Visit.user_id == user.id)
            .order_by(Visit.visited_at.desc(), Visit.id.desc())
        )
        visits, pagination = await paginate(db, stmt, page_request(page, per))
        return UserVisitListResponse(
            visits=await serialize_user_visits(db, visits),
            pagination=pagination,
        )

    async def wishlist(self, db: AsyncSession, user_id: int, page=None, per=None) -> UserWishlistResponse:
        user = await self.get(db, user_id)
        stmt = by_priority(select(WishlistItem).where(WishlistItem.user_id == user.id))
        items, pagination = await paginate(db, stmt, page_request(page, per))
        return UserWishlistResponse(
            wishlist_items=await serialize_user_wishlist(db, items),
            pagination=pagination,
        )

    async def upload_avatar(
        self,
        db: AsyncSession,
        user_id: int,
        current_user: User,
        avatar: Optional[UploadedFile],
    ) -> AvatarResponse:
        """Replaces any previous avatar."""
        self._ensure_self(user_id, current_user)
        if avatar is None or not avatar.filename:
            raise BadRequestError(message=MSG_AVATAR_REQUIRED)

        previous = await file_service.list_attachments(db, RECORD_USER, current_user.id, SLOT_AVATAR)
        attachment = await file_service.attach(
            db, RECORD_USER, current_user.id, SLOT_AVATAR, avatar.filename, avatar.content,
        )
        for old in previous:
            await file_service.purge(db, old)
        logger.info("Avatar updated for user %d", current_user.id)
        return AvatarResponse(avatar_url=attachment_url(attachment))


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
