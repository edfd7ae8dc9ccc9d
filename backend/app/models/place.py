"""
East Village Everything — Place SQLAlchemy Model
==================================================

What:  ORM model for the `places` table and the `place_tags` junction table.
How:   Many-to-many Place ↔ Tag through place_tags. Both junction foreign keys
       cascade on delete, so removing a place or a tag never leaves orphaned
       association rows.

Column notes:
    - phone:    Exactly 10 digits or NULL (normalized in app.services.text)
    - specials: Free text stored with <br/> in place of newlines
    - notes:    Same encoding as specials
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.tag import Tag


# ── Junction Table ────────────────────────────────────────────────────────
place_tags = Table(
    "place_tags",
    Base.metadata,
    Column("place_id", Uuid, ForeignKey("places.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Index("idx_place_tags_tag_id", "tag_id"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Place(Base):
    """
    A venue listed in the directory.

    The `tags` relationship is read-only from the ORM's point of view:
    PlaceService rewrites the junction rows with plain DELETE/INSERT
    statements, and foreign-key cascades clean up after deletes.
    """

    __tablename__ = "places"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    phone: Mapped[Optional[str]] = mapped_column(
        String(10),
        nullable=True,
        comment="Normalized to digits only",
    )

    url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    specials: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Happy hour specials, stored with HTML line breaks",
    )

    categories: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Product/service categories",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Additional notes, stored with HTML line breaks",
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

    tags: Mapped[List[Tag]] = relationship(
        Tag,
        secondary=place_tags,
        order_by=[Tag.sort_order, Tag.value],
        viewonly=True,
    )

    __table_args__ = (
        Index("idx_places_name", "name"),
        Index("idx_places_created_at", "created_at"),
        Index("idx_places_updated_at", "updated_at"),
    )

    @property
    def tag_values(self) -> List[str]:
        """Tag slugs in display order."""
        return [tag.value for tag in self.tags]

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, name='{self.name}')>"
