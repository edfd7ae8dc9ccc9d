"""
East Village Everything — Tag SQLAlchemy Model
================================================

What:  ORM model for the `tags` table: the filter taxonomy of the directory.
How:   Self-referencing adjacency list (parent_tag_id → tags.id) with a
       denormalized has_children flag maintained by TagService on write.

Table Design:
    - value:         Unique slug used in URLs and CSS classes (e.g. "happy-hour")
    - display:       Label shown in the UI (e.g. "Happy Hour")
    - sort_order:    UI ordering; ties broken by value
    - parent_tag_id: NULL for top-level tags; ON DELETE CASCADE removes children
    - has_children:  True iff some tag points at this one as its parent.
                     Always recomputed with an EXISTS query, never counted.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
    false,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tag(Base):
    """A filter tag, optionally nested one level under a parent tag."""

    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    value: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Internal identifier (lowercase letters, digits, hyphens)",
    )

    display: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Human-readable display name",
    )

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    parent_tag_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=True,
        comment="Parent tag ID for nested tags (NULL = top-level)",
    )

    has_children: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="True if this tag has child tags (maintained on write)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_tags_sort_order", "sort_order"),
        Index("idx_tags_parent_tag_id", "parent_tag_id"),
    )

    def __repr__(self) -> str:
        return f"<Tag(value='{self.value}', parent_tag_id={self.parent_tag_id})>"
