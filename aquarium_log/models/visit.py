"""
Aquarium Log Backend: Visit SQLAlchemy Model
==============================================

What:  ORM model representing the `visits` table: one user's visit to one
       aquarium, with rating, weather, memo and a list of favourite exhibits.

Columns of note:
    - rating: 1..5 or NULL. AVG() in rankings ignores NULL ratings while
      COUNT(visits.id) still counts the visit.
    - good_exhibits: JSON array of strings.
    - visited_at: calendar date; ranking periods and "latest photo"
      ordering are based on it, not on created_at.

Photos and videos live in `attachments` (record_type='Visit').
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import JSON, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from aquarium_log.database import Base
from aquarium_log.models.mixins import TimestampMixin


class Visit(TimestampMixin, Base):
    __tablename__ = "visits"

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

    visited_at: Mapped[date] = mapped_column(Date, nullable=False)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weather: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    memo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    good_exhibits: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        Index("idx_visits_user_id", "user_id"),
        Index("idx_visits_aquarium_id", "aquarium_id"),
        Index("idx_visits_visited_at", "visited_at"),
    )

    @property
    def good_exhibits_list(self) -> List[str]:
        return list(self.good_exhibits or [])

    def __repr__(self) -> str:
        return (
            f"<Visit(id={self.id}, aquarium_id={self.aquarium_id}, "
            f"user_id={self.user_id}, visited_at='{self.visited_at}')>"
        )
