"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2024-01-01 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # User profiles with their denormalized listing references
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(128), primary_key=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("picture", sa.String(2048), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("saved_listings", JSONB(), nullable=False, server_default="[]"),
        sa.Column("active_listings", JSONB(), nullable=False, server_default="[]"),
        sa.Column("listings_to_rate", JSONB(), nullable=False, server_default="[]"),
    )
    op.create_index("ix_users_name", "users", ["name"])
    op.create_index("ix_users_email", "users", ["email"])

    # Listings, keyed by (listing_id, creation_time)
    op.create_table(
        "listings",
        sa.Column("listing_id", sa.String(128), nullable=False),
        sa.Column("creation_time", sa.String(32), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("search_title", sa.String(512), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String(512), nullable=False),
        sa.Column("tags", JSONB(), nullable=False, server_default="[]"),
        sa.Column("pictures", JSONB(), nullable=False, server_default="[]"),
        sa.Column("sold", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sold_to", sa.String(128), nullable=True),
        sa.Column("saved_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comments", JSONB(), nullable=False, server_default="[]"),
        sa.PrimaryKeyConstraint("listing_id", "creation_time"),
        sa.CheckConstraint("saved_count >= 0", name="ck_listings_saved_count_non_negative"),
    )
    op.create_index("ix_listings_user_id", "listings", ["user_id"])
    op.create_index("ix_listings_search_title", "listings", ["search_title"])

    # Tag → listings reverse index
    op.create_table(
        "tags",
        sa.Column("name", sa.String(256), primary_key=True),
        sa.Column("listings", JSONB(), nullable=False, server_default="[]"),
    )


def downgrade() -> None:
    op.drop_table("tags")
    op.drop_index("ix_listings_search_title", table_name="listings")
    op.drop_index("ix_listings_user_id", table_name="listings")
    op.drop_table("listings")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_name", table_name="users")
    op.drop_table("users")
