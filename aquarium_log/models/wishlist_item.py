"""Aquarium Log Backend: WishlistItem SQLAlchemy Model."""

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from aquarium_log.database import Base
from aquarium_log.models.mixins import TimestampMixin


class WishlistItem(TimestampMixin, Base):
    """
    An aquarium a user wants to visit.

    (user_id, aquarium_id) is unique. WishlistService checks it first so the
    client gets a 422 message; the constraint catches concurrent inserts.
    """

    __tablename__ = "wishlist_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    aquarium_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("aquariums.id", ondelete="CASCADE"),
        nullable=False,
    )
    priority: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    memo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "aquarium_id", name="uq_wishlist_items_user_aquarium"),
        Index("idx_wishlist_items_aquarium_id", "aquarium_id"),
    )

    def __repr__(self) -> str:
        return f"<WishlistItem(id={self.id}, user_id={self.user_id}, aquarium_id={self.aquarium_id})>"
