"""
Aquarium Log Backend: Attachment SQLAlchemy Model
===================================================

What:  Blob side-table linking stored files to aquariums, visits and users.
How:   Polymorphic (record_type, record_id) pair plus a slot name:
           ("Aquarium", id, "photos")
           ("Visit",    id, "photos" | "videos")
           ("User",     id, "avatar")
       The file itself lives under settings.storage_root at storage_path
       (YYYY/MM/DD/<uuid>.<ext>) and is written by FileService.

Ordering: attachments of one slot are ordered by (created_at, id); the
"first photo" of a visit is the lowest id in that order.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from aquarium_log.database import Base
from aquarium_log.models.mixins import utcnow

RECORD_AQUARIUM = "Aquarium"
RECORD_VISIT = "Visit"
RECORD_USER = "User"

SLOT_PHOTOS = "photos"
SLOT_VIDEOS = "videos"
SLOT_AVATAR = "avatar"


class Attachment(Base):
    __tablename__ = "attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    record_type: Mapped[str] = mapped_column(String(20), nullable=False)
    record_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(20), nullable=False)

    storage_path: Mapped[str] = mapped_column(String(255), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    byte_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("idx_attachments_record", "record_type", "record_id", "name"),
        Index("idx_attachments_storage_path", "storage_path", unique=True),
    )

    def __repr__(self) -> str:
        return (
            f"<Attachment(id={self.id}, record='{self.record_type}:{self.record_id}', "
            f"name='{self.name}', path='{self.storage_path}')>"
        )
