"""Add parent tags

Revision ID: 003
Revises: 002
Create Date: 2024-01-28 00:00:02.000000+00:00

What:  One-level tag hierarchy.
       - parent_tag_id: self-reference, NULL for top-level tags; deleting a
         parent deletes its children
       - has_children:  derived flag, recomputed by TagService on every write
         that changes a tag's child set
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "tags",
        sa.Column(
            "parent_tag_id",
            postgresql.UUID(as_uuid=True),
            nullable=True,
            comment="Parent tag (NULL = top-level)",
        ),
    )
    op.create_foreign_key(
        "tags_parent_tag_id_fkey",
        "tags",
        "tags",
        ["parent_tag_id"],
        ["id"],
        ondelete="CASCADE",
    )
    op.add_column(
        "tags",
        sa.Column(
            "has_children",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
            comment="True if some tag has this one as parent (maintained on write)",
        ),
    )
    op.create_index("idx_tags_parent_tag_id", "tags", ["parent_tag_id"])


def downgrade() -> None:
    op.drop_index("idx_tags_parent_tag_id", table_name="tags")
    op.drop_column("tags", "has_children")
    op.drop_constraint("tags_parent_tag_id_fkey", "tags", type_="foreignkey")
    op.drop_column("tags", "parent_tag_id")
