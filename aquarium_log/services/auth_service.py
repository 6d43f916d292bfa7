"""
Aquarium Log Backend: Auth Service
====================================

What:  Registration, credential checks and password hashing.
How:   Passwords are stored as salted PBKDF2-SHA256:

           pbkdf2_sha256$<iterations>$<salt>$<hex digest>

       and compared in constant time. Sessions themselves are handled by
       Starlette's SessionMiddleware; this service only decides who the
       user is.
Who:   routes/sessions.py (register, login).
"""

import hashlib
import hmac
import logging
import secrets
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.constants import MSG_INVALID_CREDENTIALS
from aquarium_log.exceptions import AuthenticationError, ValidationError
from aquarium_log.models.user import ROLE_USER, User
from aquarium_log.schemas.user import RegistrationFields

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = 260_000
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str, salt: Optional[str] = None, iterations: int = HASH_ITERATIONS) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """False for a wrong password or a malformed/unknown hash format."""
    try:
        algorithm, iterations, salt, _ = encoded.split("$", 3)
        rounds = int(iterations)
    except (AttributeError, ValueError):
        return False
    if algorithm != HASH_ALGORITHM:
        return False
    return hmac.compare_digest(hash_password(password, salt, rounds), encoded)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AuthService:

    async def email_taken(self, db: AsyncSession, email: str) -> bool:
        result = await db.execute(
            select(User.id).where(func.lower(User.email) == email.strip().lower())
        )
        return result.first() is not None

    async def username_taken(self, db: AsyncSession, username: str, exclude_user_id: Optional[int] = None) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        return (await db.execute(stmt)).first() is not None

    async def register(self, db: AsyncSession, fields: RegistrationFields) -> User:
        """
        Create a user with role "user".

        Raises: ValidationError listing every failing rule.
        """
        errors: List[str] = []
        if _blank(fields.email):
            errors.append("Email can't be blank")
        elif "@" not in fields.email:
            errors.append("Email is invalid")
        elif await self.email_taken(db, fields.email):
            errors.append("Email has already been taken")

        if not fields.password:
            errors.append("Password can't be blank")
        elif len(fields.password) < MIN_PASSWORD_LENGTH:
            errors.append(f"Password is too short (minimum is {MIN_PASSWORD_LENGTH} characters)")
        if fields.password_confirmation is not None and fields.password_confirmation != fields.password:
            errors.append("Password confirmation doesn't match Password")

        if _blank(fields.name):
            errors.append("Name can't be blank")
        if _blank(fields.username):
            errors.append("Username can't be blank")
        elif await self.username_taken(db, fields.username):
            errors.append("Username has already been taken")

        if errors:
            raise ValidationError(errors=errors, context={"email": fields.email})

        user = User(
            email=fields.email.strip().lower(),
            password_hash=hash_password(fields.password),
            name=fields.name.strip(),
            username=fields.username.strip(),
            role=ROLE_USER,
            favorite_aquarium_ids=[],
        )
        db.add(user)
        await db.flush()
        logger.info("User registered: id=%d username=%s", user.id, user.username)
        return user

    async def find_for_login(self, db: AsyncSession, identifier: str) -> Optional[User]:
        """User whose email or username equals `identifier`, ignoring case; email wins."""
        key = identifier.strip().lower()
        result = await db.execute(
            select(User)
            .where(or_(func.lower(User.email) == key, func.lower(User.username) == key))
            .order_by((func.lower(User.email) == key).desc(), User.id.asc())
        )
        return result.scalars().first()

    async def authenticate(self, db: AsyncSession, identifier: str, password: str) -> User:
        """
        `identifier` is an email address or a username.

        Raises: AuthenticationError with the same message for an unknown
        account and a wrong password.
        """
        user = None
        if identifier and identifier.strip():
            user = await self.find_for_login(db, identifier)
        if user is None or not verify_password(password or "", user.password_hash):
            logger.info("Failed login for %s", identifier)
            raise AuthenticationError(message=MSG_INVALID_CREDENTIALS)
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
