"""
Aquarium Log Backend: ORM Models
==================================

What:  SQLAlchemy models for the five persisted tables.
How:   Importing this package registers every model with Base.metadata,
       which Alembic (--autogenerate) and the test suite rely on.

Entities are linked by foreign keys only; there are no relationship
attributes, so every cross-table read is an explicit query.
"""

from aquarium_log.models.attachment import Attachment
from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.user import User
from aquarium_log.models.visit import Visit
from aquarium_log.models.wishlist_item import WishlistItem

__all__ = ["Attachment", "Aquarium", "User", "Visit", "WishlistItem"]
