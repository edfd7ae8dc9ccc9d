"""
East Village Everything — Place Service (Place Repository)
============================================================

What:  CRUD over venues and their many-to-many tag associations.
Who:   Called by the admin place routes and the public places API.

Write flow (create / update):
    ┌──────────────┐    ┌────────────────────┐    ┌──────────────┐
    │  Normalize   │───▶│  INSERT / UPDATE   │───▶│  Replace     │──▶ re-read
    │  (text.py)   │    │  places row        │    │  place_tags  │
    └──────────────┘    └────────────────────┘    └──────────────┘

    Tag replacement is a full delete-and-reinsert of the place's junction
    rows. Values that match no tag are ignored. On update it only happens
    when the patch carries `tags`, independently of the other fields.

Normalization (identical on create and update):
    phone            → 10 digits or NULL
    specials, notes  → newlines stored as <br/>
    other optionals  → "" stored as NULL
"""

import logging
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import DatabaseError
from app.models.place import Place, place_tags
from app.models.tag import Tag
from app.schemas.place import EditablePlace, PlaceCreate, PlaceResponse, PlaceUpdate
from app.services.text import (
    empty_to_none,
    from_html_breaks,
    normalize_phone,
    to_html_breaks,
)
from app.services.update_builder import plan_update

logger = logging.getLogger(__name__)

# Column order of the SET clause for partial updates
PLACE_UPDATE_FIELDS = ("name", "address", "phone", "url", "specials", "categories", "notes")

PLACE_TRANSFORMS = {
    "address": empty_to_none,
    "phone": normalize_phone,
    "url": empty_to_none,
    "specials": to_html_breaks,
    "categories": empty_to_none,
    "notes": to_html_breaks,
}

SORT_COLUMNS = {
    "name": func.lower(Place.name),
    "created_at": Place.created_at,
    "updated_at": Place.updated_at,
}


class PlaceService:
    """
    Business logic for places.

    Not-found is reported as None (get/update/editable) or False (delete).
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list(self, db: AsyncSession, tag: Optional[str] = None) -> List[PlaceResponse]:
        """
        All places sorted by name, each with its tag values.

        Args:
            tag: Optional tag value; restricts the result to places carrying it
        """
        query = select(Place).options(selectinload(Place.tags))
        if tag:
            tagged = (
                select(place_tags.c.place_id)
                .join(Tag, Tag.id == place_tags.c.tag_id)
                .where(Tag.value == tag)
            )
            query = query.where(Place.id.in_(tagged))
        query = query.order_by(Place.name.asc())
        return await self._run(db, query)

    async def list_sorted(
        self,
        db: AsyncSession,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> List[PlaceResponse]:
        """
        Admin listing. Unknown sort_by falls back to name (case-insensitive);
        anything other than "desc" sorts ascending.
        """
        column = SORT_COLUMNS.get(sort_by, SORT_COLUMNS["name"])
        ordering = column.desc() if sort_order == "desc" else column.asc()
        query = select(Place).options(selectinload(Place.tags)).order_by(ordering)
        return await self._run(db, query)

    async def get(self, db: AsyncSession, place_id: UUID) -> Optional[PlaceResponse]:
        query = select(Place).options(selectinload(Place.tags)).where(Place.id == place_id)
        places = await self._run(db, query)
        return places[0] if places else None

    async def editable(self, db: AsyncSession, place_id: UUID) -> Optional[EditablePlace]:
        """The place with <br/> markup turned back into newlines, for edit forms."""
        place = await self.get(db, place_id)
        if place is None:
            return None
        return EditablePlace(
            **place.model_dump(exclude={"specials", "notes"}),
            specials=from_html_breaks(place.specials),
            notes=from_html_breaks(place.notes),
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, data: PlaceCreate) -> PlaceResponse:
        """
        Insert a place and its tag associations, then return the stored record.

        Raises:
            DatabaseError: insert failed (the request transaction rolls back)
        """
        try:
            place = Place(
                name=data.name,
                **{
                    field: PLACE_TRANSFORMS[field](getattr(data, field))
                    for field in PLACE_UPDATE_FIELDS
                    if field != "name"
                },
            )
            db.add(place)
            await db.flush()

            await self._replace_tags(db, place.id, data.tags)
            logger.info("Place created: %s (%s), tags=%s", place.name, place.id, data.tags)

        except SQLAlchemyError as e:
            logger.error("Database error creating place %r: %s", data.name, str(e))
            raise DatabaseError(
                message="Could not create the place. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return await self.get(db, place.id)

    async def update(
        self,
        db: AsyncSession,
        place_id: UUID,
        patch: PlaceUpdate,
    ) -> Optional[PlaceResponse]:
        """
        Apply the supplied fields of `patch`.

        - no real field supplied: the row is left alone (updated_at included)
        - fields supplied but no row matched: None
        - `tags` supplied: junction rows replaced, whatever else changed

        Returns:
            The refreshed place, or None if it does not exist.
        """
        plan = plan_update(patch, PLACE_UPDATE_FIELDS, PLACE_TRANSFORMS)

        try:
            if plan.has_changes:
                result = await db.execute(
                    update(Place)
                    .where(Place.id == place_id)
                    .values(**plan.values())
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    return None
            elif not await self._exists(db, place_id):
                return None

            if "tags" in patch.model_fields_set:
                await self._replace_tags(db, place_id, patch.tags or [])

        except SQLAlchemyError as e:
            logger.error("Database error updating place %s: %s", place_id, str(e))
            raise DatabaseError(
                message="Could not update the place. Please try again.",
                context={"place_id": str(place_id)},
            )

        if plan.has_changes or "tags" in patch.model_fields_set:
            logger.info("Place %s updated: %s", place_id, ", ".join(plan.columns))
        return await self.get(db, place_id)

    async def delete(self, db: AsyncSession, place_id: UUID) -> bool:
        """Delete a place; its junction rows go with it by cascade."""
        result = await db.execute(
            delete(Place)
            .where(Place.id == place_id)
            .execution_options(synchronize_session=False)
        )
        deleted = (result.rowcount or 0) > 0
        if deleted:
            logger.info("Place deleted: %s", place_id)
        return deleted

    # ── Internals ─────────────────────────────────────────────────────────

    async def _run(self, db: AsyncSession, query) -> List[PlaceResponse]:
        result = await db.execute(query.execution_options(populate_existing=True))
        return [self._to_response(place) for place in result.scalars().all()]

    async def _exists(self, db: AsyncSession, place_id: UUID) -> bool:
        result = await db.execute(select(Place.id).where(Place.id == place_id))
        return result.scalar_one_or_none() is not None

    async def _replace_tags(
        self,
        db: AsyncSession,
        place_id: UUID,
        tag_values: Sequence[str],
    ) -> None:
        """Delete all of the place's associations, then insert the matching ones."""
        await db.execute(delete(place_tags).where(place_tags.c.place_id == place_id))
        if not tag_values:
            return

        result = await db.execute(select(Tag.id).where(Tag.value.in_(list(tag_values))))
        rows: List[Dict[str, UUID]] = [
            {"place_id": place_id, "tag_id": tag_id} for tag_id in result.scalars().all()
        ]
        if rows:
            await db.execute(insert(place_tags), rows)

    @staticmethod
    def _to_response(place: Place) -> PlaceResponse:
        return PlaceResponse(
            id=place.id,
            name=place.name,
            address=place.address,
            phone=place.phone,
            url=place.url,
            specials=place.specials,
            categories=place.categories,
            notes=place.notes,
            tags=place.tag_values,
            created_at=place.created_at,
            updated_at=place.updated_at,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
place_service = PlaceService()
