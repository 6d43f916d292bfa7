"""
Aquarium Log Backend: Request Dependencies
============================================

What:  FastAPI dependencies resolving the signed-in user from the cookie
       session.
How:   SessionMiddleware (itsdangerous-signed cookie) exposes
       request.session; login stores the user's id under SESSION_USER_KEY.

    get_current_user  → User | None   (public endpoints)
    require_user      → User          (401 when anonymous)
    require_admin     → User          (401 anonymous, 403 non-admin)

The resolved user is handed to services explicitly.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.constants import MSG_ADMIN_REQUIRED
from aquarium_log.database import get_db_session
from aquarium_log.exceptions import AuthenticationError, PermissionDeniedError
from aquarium_log.models.user import User

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    user = await db.get(User, user_id)
    if user is None:
        # Account removed while the cookie was still valid
        logger.info("Dropping session for missing user %s", user_id)
        request.session.pop(SESSION_USER_KEY, None)
    return user


async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise AuthenticationError()
    return user


async def require_admin(user: User = Depends(require_user)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError(
            message=MSG_ADMIN_REQUIRED,
            context={"user_id": user.id},
        )
    return user
