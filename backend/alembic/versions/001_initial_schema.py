"""Initial schema: users, tags, places, place_tags

Revision ID: 001
Revises: None
Create Date: 2024-01-28 00:00:00.000000+00:00

What:  Admin users, tags, places and the place/tag junction table.
How:   UUID keys generated by gen_random_uuid() (PostgreSQL 13+),
       timestamptz columns defaulting to now().

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp_columns():
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "tags",
        _id_column(),
        sa.Column(
            "value",
            sa.String(100),
            nullable=False,
            comment="Slug used in URLs and filters (lowercase, digits, hyphens)",
        ),
        sa.Column("display", sa.String(255), nullable=False, comment="Human-readable label"),
        sa.Column("sort_order", sa.Integer(), server_default=sa.text("0"), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("value"),
    )

    op.create_table(
        "places",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("phone", sa.String(10), nullable=True, comment="Digits only"),
        sa.Column("url", sa.String(500), nullable=True),
        sa.Column(
            "specials",
            sa.Text(),
            nullable=True,
            comment="Happy hour specials, line breaks stored as <br/>",
        ),
        sa.Column("categories", sa.Text(), nullable=True),
        sa.Column(
            "notes",
            sa.Text(),
            nullable=True,
            comment="Free-form notes, line breaks stored as <br/>",
        ),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "place_tags",
        sa.Column("place_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tag_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(["place_id"], ["places.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("place_id", "tag_id"),
    )

    op.create_index("idx_places_name", "places", ["name"])
    op.create_index("idx_places_created_at", "places", ["created_at"])
    op.create_index("idx_places_updated_at", "places", ["updated_at"])
    op.create_index("idx_tags_sort_order", "tags", ["sort_order"])
    op.create_index("idx_place_tags_tag_id", "place_tags", ["tag_id"])


def downgrade() -> None:
    op.drop_index("idx_place_tags_tag_id", table_name="place_tags")
    op.drop_index("idx_tags_sort_order", table_name="tags")
    op.drop_index("idx_places_updated_at", table_name="places")
    op.drop_index("idx_places_created_at", table_name="places")
    op.drop_index("idx_places_name", table_name="places")
    op.drop_table("place_tags")
    op.drop_table("places")
    op.drop_table("tags")
    op.drop_table("users")
