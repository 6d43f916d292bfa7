"""
Aquarium Log Backend: Aquarium SQLAlchemy Model
=================================================

What:  ORM model representing the `aquariums` table.
Who:   Queried by the aquarium query composer, the ranking aggregator and
       the aquarium CRUD service.

Table Design:
    - opening_hours / admission_fee: free-form JSON objects. Keys are not
      enumerated; whatever the client sends is stored and returned as is.
    - latitude / longitude: WGS84 degrees, range-checked by the request
      schemas before they reach the table.
    - header_photo_id: id of an `attachments` row (an aquarium photo or a
      photo of one of its visits). Plain integer, not a foreign key, since
      the attachment can belong to either record type.

Indexes:
    - name:                 search by name
    - prefecture:           prefecture filter on listing and rankings
    - (latitude, longitude): bounding-box prefilter for nearby/distance
"""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from aquarium_log.database import Base
from aquarium_log.models.mixins import TimestampMixin


class Aquarium(TimestampMixin, Base):
    """
    An aquarium in the catalog.

    Lifecycle:
        Created/updated/destroyed by admins only. Destroying an aquarium
        removes its visits, wishlist items and attachments (see
        AquariumService.destroy); there is no soft delete.
    """

    __tablename__ = "aquariums"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    prefecture: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    opening_hours: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    admission_fee: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Creator; kept when the creating user is removed
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    header_photo_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("idx_aquariums_name", "name"),
        Index("idx_aquariums_prefecture", "prefecture"),
        Index("idx_aquariums_lat_lng", "latitude", "longitude"),
        Index("idx_aquariums_user_id", "user_id"),
        Index("idx_aquariums_header_photo_id", "header_photo_id"),
    )

    def __repr__(self) -> str:
        return f"<Aquarium(id={self.id}, name='{self.name}', prefecture='{self.prefecture}')>"
