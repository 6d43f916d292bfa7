"""
Aquarium Log Backend: User SQLAlchemy Model
=============================================

What:  ORM model representing the `users` table.

Columns of note:
    - password_hash: "pbkdf2_sha256$<iterations>$<salt>$<hash>", produced and
      checked by services.auth_service. The plain password never reaches
      the table.
    - role: "admin" | "user". Admins manage the aquarium catalog.
    - favorite_aquarium_ids: JSON array of aquarium ids.
"""

from typing import List, Optional

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from aquarium_log.database import Base
from aquarium_log.models.mixins import TimestampMixin

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER)

    favorite_aquarium_ids: Mapped[Optional[List[int]]] = mapped_column(
        JSON, nullable=True, default=list,
    )

    __table_args__ = (
        Index("idx_users_email", "email", unique=True),
        Index("idx_users_username", "username", unique=True),
        Index("idx_users_role", "role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def favorite_ids(self) -> List[int]:
        return [int(i) for i in (self.favorite_aquarium_ids or [])]

    @favorite_ids.setter
    def favorite_ids(self, ids: List[int]) -> None:
        # Drop duplicates, keep first-seen order
        self.favorite_aquarium_ids = list(dict.fromkeys(int(i) for i in ids))

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
