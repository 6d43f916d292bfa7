"""
Aquarium Log Backend: Session Route Handlers
==============================================

What:  Registration, login, logout and "who am I" under /api/v1.
How:   The user id is stored in the signed cookie session
       (SessionMiddleware); dependencies.get_current_user reads it back.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.database import get_db_session
from aquarium_log.dependencies import SESSION_USER_KEY, get_current_user
from aquarium_log.models.user import User
from aquarium_log.schemas.common import ErrorResponse, ValidationErrorResponse
from aquarium_log.schemas.user import LoginRequest, RegistrationRequest, SessionUserResponse
from aquarium_log.serializers.user import session_user
from aquarium_log.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Sessions"])


def _sign_in(request: Request, user: User) -> None:
    # A fresh session on every sign-in
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


@router.post(
    "/register",
    status_code=201,
    response_model=SessionUserResponse,
    responses={422: {"description": "Invalid registration fields", "model": ValidationErrorResponse}},
    summary="Create an account and sign in",
)
async def register(
    body: RegistrationRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> SessionUserResponse:
    user = await auth_service.register(db, body.user)
    _sign_in(request, user)
    return SessionUserResponse(user=session_user(user))


@router.post(
    "/login",
    response_model=SessionUserResponse,
    responses={401: {"description": "Wrong email or password", "model": ErrorResponse}},
    summary="Sign in with email and password",
)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> SessionUserResponse:
    user = await auth_service.authenticate(db, body.identifier, body.password)
    _sign_in(request, user)
    logger.info("User %d signed in", user.id)
    return SessionUserResponse(user=session_user(user))


@router.delete("/logout", status_code=204, summary="Sign out")
async def logout(request: Request) -> Response:
    request.session.clear()
    return Response(status_code=204)


@router.get(
    "/me",
    response_model=SessionUserResponse,
    summary="Current session user",
    description="{user: null} when nobody is signed in.",
)
async def me(user: Optional[User] = Depends(get_current_user)) -> SessionUserResponse:
    return SessionUserResponse(user=session_user(user) if user is not None else None)
