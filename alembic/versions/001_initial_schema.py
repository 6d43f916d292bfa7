"""Create users, aquariums, visits, wishlist_items and attachments

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("favorite_aquarium_ids", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_users_email", "users", ["email"], unique=True)
    op.create_index("idx_users_username", "users", ["username"], unique=True)
    op.create_index("idx_users_role", "users", ["role"])

    op.create_table(
        "aquariums",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("prefecture", sa.String(20), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("opening_hours", sa.JSON(), nullable=True),
        sa.Column("admission_fee", sa.JSON(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("header_photo_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_aquariums_name", "aquariums", ["name"])
    op.create_index("idx_aquariums_prefecture", "aquariums", ["prefecture"])
    op.create_index("idx_aquariums_lat_lng", "aquariums", ["latitude", "longitude"])
    op.create_index("idx_aquariums_user_id", "aquariums", ["user_id"])
    op.create_index("idx_aquariums_header_photo_id", "aquariums", ["header_photo_id"])

    op.create_table(
        "visits",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("aquarium_id", sa.Integer(), nullable=False),
        sa.Column("visited_at", sa.Date(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("weather", sa.String(50), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column("good_exhibits", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["aquarium_id"], ["aquariums.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_visits_user_id", "visits", ["user_id"])
    op.create_index("idx_visits_aquarium_id", "visits", ["aquarium_id"])
    op.create_index("idx_visits_visited_at", "visits", ["visited_at"])

    op.create_table(
        "wishlist_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("aquarium_id", sa.Integer(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["aquarium_id"], ["aquariums.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "aquarium_id", name="uq_wishlist_items_user_aquarium"),
    )
    op.create_index("idx_wishlist_items_aquarium_id", "wishlist_items", ["aquarium_id"])

    op.create_table(
        "attachments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("record_type", sa.String(20), nullable=False),
        sa.Column("record_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(20), nullable=False),
        sa.Column("storage_path", sa.String(255), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=False),
        sa.Column("byte_size", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_attachments_record", "attachments", ["record_type", "record_id", "name"])
    op.create_index("idx_attachments_storage_path", "attachments", ["storage_path"], unique=True)


def downgrade() -> None:
    op.drop_index("idx_attachments_storage_path", table_name="attachments")
    op.drop_index("idx_attachments_record", table_name="attachments")
    op.drop_table("attachments")
    op.drop_index("idx_wishlist_items_aquarium_id", table_name="wishlist_items")
    op.drop_table("wishlist_items")
    op.drop_index("idx_visits_visited_at", table_name="visits")
    op.drop_index("idx_visits_aquarium_id", table_name="visits")
    op.drop_index("idx_visits_user_id", table_name="visits")
    op.drop_table("visits")
    for index in (
        "idx_aquariums_header_photo_id",
        "idx_aquariums_user_id",
        "idx_aquariums_lat_lng",
        "idx_aquariums_prefecture",
        "idx_aquariums_name",
    ):
        op.drop_index(index, table_name="aquariums")
    op.drop_table("aquariums")
    op.drop_index("idx_users_role", table_name="users")
    op.drop_index("idx_users_username", table_name="users")
    op.drop_index("idx_users_email", table_name="users")
    op.drop_table("users")
