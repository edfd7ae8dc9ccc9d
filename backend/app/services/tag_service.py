"""
East Village Everything — Tag Service (Tag Hierarchy Store)
=============================================================

What:  CRUD over tags plus the maintenance of the derived has_children flag.
Who:   Called by the admin and public tag routes.

Hierarchy rules:
    - A tag may point at a top-level tag as its parent (one level deep).
    - has_children(T) is true iff some tag has parent_tag_id == T.id.
      It is recomputed with an EXISTS query after every write that can
      change T's child set (create with parent, reparent, delete), in the
      same transaction as that write. Never incremented or decremented.
    - Deleting a tag removes its place associations; the database cascades
      the delete to its children (and their associations).

Transactions:
    Every method runs inside the caller's session. The request dependency
    (app.database.get_db_session) commits once the route returns and rolls
    back on any exception, so a mutation and its recomputation are applied
    together or not at all.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Set
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.exceptions import DatabaseError, ValidationError
from app.models.place import Place, place_tags
from app.models.tag import Tag
from app.schemas.place import PlaceSummary
from app.schemas.tag import (
    StructuredTagsResponse,
    TagBulkItem,
    TagCreate,
    TagResponse,
    TagUpdate,
)
from app.services.tag_presenter import structure_tags
from app.services.update_builder import plan_update

logger = logging.getLogger(__name__)

TAG_VALUE_PATTERN = re.compile(r"^[a-z0-9-]+$")

# Column order of the SET clause for single-tag updates
TAG_UPDATE_FIELDS = ("value", "display", "sort_order", "parent_tag_id")


def validate_tag_value(value: str) -> None:
    """Raise ValidationError unless value is a non-empty lowercase slug."""
    if not value:
        raise ValidationError(message="Value is required", field="value")
    if not TAG_VALUE_PATTERN.match(value):
        raise ValidationError(
            message="Value must contain only lowercase letters, numbers, and hyphens",
            field="value",
            context={"value": value},
        )


def integrity_error_to_validation(error: IntegrityError) -> ValidationError:
    """Map a constraint failure on the tags table to a client-facing error."""
    detail = str(error.orig).lower()
    if "unique" in detail or "duplicate key" in detail:
        return ValidationError(
            message="A tag with this value already exists", field="value"
        )
    return ValidationError(
        message="Tag could not be saved; a referenced tag no longer exists",
        field="parent_tag_id",
    )


class TagService:
    """
    Business logic for tags.

    Not-found is reported as None (get/update) or False (delete); routes
    translate it to 404.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list(self, db: AsyncSession) -> List[TagResponse]:
        """All tags ordered by (sort_order, value)."""
        result = await db.execute(
            select(Tag)
            .order_by(Tag.sort_order.asc(), Tag.value.asc())
            .execution_options(populate_existing=True)
        )
        return [TagResponse.model_validate(tag) for tag in result.scalars().all()]

    async def list_structured(self, db: AsyncSession) -> StructuredTagsResponse:
        return structure_tags(await self.list(db))

    async def get(self, db: AsyncSession, tag_id: UUID) -> Optional[TagResponse]:
        tag = await self._fetch(db, tag_id)
        return TagResponse.model_validate(tag) if tag else None

    async def find_by_value(self, db: AsyncSession, value: str) -> Optional[TagResponse]:
        result = await db.execute(
            select(Tag).where(Tag.value == value).execution_options(populate_existing=True)
        )
        tag = result.scalar_one_or_none()
        return TagResponse.model_validate(tag) if tag else None

    async def potential_parents(
        self,
        db: AsyncSession,
        exclude_id: Optional[UUID] = None,
    ) -> List[TagResponse]:
        """
        Top-level tags a tag could be nested under.

        The excluded tag's own children are never top-level, so filtering
        on parent_tag_id IS NULL already drops them.
        """
        query = select(Tag).where(Tag.parent_tag_id.is_(None))
        if exclude_id is not None:
            query = query.where(Tag.id != exclude_id)
        result = await db.execute(
            query.order_by(Tag.sort_order.asc(), Tag.value.asc())
            .execution_options(populate_existing=True)
        )
        return [TagResponse.model_validate(tag) for tag in result.scalars().all()]

    async def places_for_tag(self, db: AsyncSession, tag_id: UUID) -> List[PlaceSummary]:
        """Places currently carrying this tag (shown before a delete)."""
        result = await db.execute(
            select(Place)
            .join(place_tags, place_tags.c.place_id == Place.id)
            .where(place_tags.c.tag_id == tag_id)
            .order_by(Place.name.asc())
        )
        return [PlaceSummary.model_validate(place) for place in result.scalars().all()]

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, data: TagCreate) -> TagResponse:
        """
        Insert a tag.

        Raises:
            ValidationError: malformed or duplicate value, or invalid parent
            DatabaseError:   insert failed
        """
        validate_tag_value(data.value)
        if await self.find_by_value(db, data.value):
            logger.warning("Refusing duplicate tag value '%s'", data.value)
            raise ValidationError(
                message="A tag with this value already exists", field="value"
            )
        if data.parent_tag_id is not None:
            await self._validate_parent(db, data.parent_tag_id)

        try:
            tag = Tag(
                value=data.value,
                display=data.display,
                sort_order=data.sort_order,
                parent_tag_id=data.parent_tag_id,
            )
            db.add(tag)
            await db.flush()

            if data.parent_tag_id is not None:
                await self._refresh_has_children(db, data.parent_tag_id)

            logger.info("Tag created: %s (parent=%s)", tag.value, tag.parent_tag_id)
            return TagResponse.model_validate(await self._fetch(db, tag.id))

        except IntegrityError as e:
            logger.warning("Constraint failure creating tag %s: %s", data.value, str(e.orig))
            raise integrity_error_to_validation(e)
        except SQLAlchemyError as e:
            logger.error("Database error creating tag %s: %s", data.value, str(e))
            raise DatabaseError(
                message="Could not create the tag. Please try again.",
                context={"value": data.value},
            )

    async def update(
        self,
        db: AsyncSession,
        tag_id: UUID,
        patch: TagUpdate,
    ) -> Optional[TagResponse]:
        """
        Apply the supplied fields of `patch` to a tag.

        When parent_tag_id actually changes, has_children is recomputed for
        the old parent and the new one.

        Returns:
            The refreshed tag, or None if it does not exist.
        """
        tag = await self._fetch(db, tag_id)
        if tag is None:
            return None

        plan = plan_update(patch, TAG_UPDATE_FIELDS)
        if not plan.has_changes:
            return TagResponse.model_validate(tag)

        if "value" in plan:
            new_value = plan.get("value")
            validate_tag_value(new_value)
            existing = await self.find_by_value(db, new_value)
            if existing and existing.id != tag_id:
                raise ValidationError(
                    message="A tag with this value already exists", field="value"
                )

        old_parent = tag.parent_tag_id
        new_parent = plan.get("parent_tag_id", old_parent)
        parent_changed = "parent_tag_id" in plan and new_parent != old_parent
        if parent_changed and new_parent is not None:
            await self._validate_parent(db, new_parent, tag_id=tag_id)

        try:
            result = await db.execute(
                update(Tag)
                .where(Tag.id == tag_id)
                .values(**plan.values())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None

            if parent_changed:
                for parent_id in (old_parent, new_parent):
                    if parent_id is not None:
                        await self._refresh_has_children(db, parent_id)

            logger.info("Tag %s updated: %s", tag_id, ", ".join(plan.columns))
            return TagResponse.model_validate(await self._fetch(db, tag_id))

        except IntegrityError as e:
            logger.warning("Constraint failure updating tag %s: %s", tag_id, str(e.orig))
            raise integrity_error_to_validation(e)
        except SQLAlchemyError as e:
            logger.error("Database error updating tag %s: %s", tag_id, str(e))
            raise DatabaseError(
                message="Could not update the tag. Please try again.",
                context={"tag_id": str(tag_id)},
            )

    async def delete(self, db: AsyncSession, tag_id: UUID) -> bool:
        """
        Delete a tag, its place associations and (by cascade) its children.

        Returns:
            True if a row was deleted.
        """
        tag = await self._fetch(db, tag_id)
        if tag is None:
            return False
        parent_id = tag.parent_tag_id

        await db.execute(delete(place_tags).where(place_tags.c.tag_id == tag_id))
        result = await db.execute(
            delete(Tag)
            .where(Tag.id == tag_id)
            .execution_options(synchronize_session=False)
        )

        if parent_id is not None:
            await self._refresh_has_children(db, parent_id)

        deleted = (result.rowcount or 0) > 0
        if deleted:
            logger.info("Tag deleted: %s (%s)", tag.value, tag_id)
        return deleted

    async def bulk_save(
        self,
        db: AsyncSession,
        items: Sequence[TagBulkItem],
    ) -> List[TagResponse]:
        """
        Reconcile the whole tag table against `items`, matched by value.

        - tags whose value is missing from items are deleted
        - matching tags get display and sort_order updated
        - new values are inserted as top-level tags

        parent_tag_id is never changed here. If a deleted tag takes children
        with it through the cascade while those children's values are still
        listed, they come back as new top-level tags, so saving the same list
        twice gives the same result. Surviving parents that lost a child get
        has_children recomputed.
        """
        seen: Set[str] = set()
        for item in items:
            validate_tag_value(item.value)
            if item.value in seen:
                raise ValidationError(
                    message=f"Duplicate tag value '{item.value}' in submission",
                    field="value",
                )
            seen.add(item.value)

        try:
            result = await db.execute(
                select(Tag).execution_options(populate_existing=True)
            )
            existing = list(result.scalars().all())
            by_value: Dict[str, Tag] = {tag.value: tag for tag in existing}

            removed_ids = {tag.id for tag in existing if tag.value not in seen}
            doomed = self._with_descendants(existing, removed_ids)
            parents_to_refresh = {
                tag.parent_tag_id
                for tag in existing
                if tag.id in doomed
                and tag.parent_tag_id is not None
                and tag.parent_tag_id not in doomed
            }

            if removed_ids:
                await db.execute(
                    delete(Tag)
                    .where(Tag.id.in_(list(removed_ids)))
                    .execution_options(synchronize_session=False)
                )

            now = datetime.now(timezone.utc)
            inserted = 0
            for item in items:
                current = by_value.get(item.value)
                if current is not None and current.id not in doomed:
                    await db.execute(
                        update(Tag)
                        .where(Tag.id == current.id)
                        .values(
                            display=item.display,
                            sort_order=item.sort_order,
                            updated_at=now,
                        )
                        .execution_options(synchronize_session=False)
                    )
                else:
                    db.add(Tag(value=item.value, display=item.display, sort_order=item.sort_order))
                    inserted += 1
            await db.flush()

            for parent_id in parents_to_refresh:
                await self._refresh_has_children(db, parent_id)

            logger.info(
                "Bulk tag save: %d submitted, %d deleted, %d inserted",
                len(items), len(doomed), inserted,
            )
        except SQLAlchemyError as e:
            logger.error("Database error during bulk tag save: %s", str(e))
            raise DatabaseError(
                message="Could not save tags. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return await self.list(db)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _fetch(self, db: AsyncSession, tag_id: UUID) -> Optional[Tag]:
        result = await db.execute(
            select(Tag).where(Tag.id == tag_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _validate_parent(
        self,
        db: AsyncSession,
        parent_id: UUID,
        tag_id: Optional[UUID] = None,
    ) -> None:
        """
        Parent must exist, be top-level, and not be the tag itself. A tag
        that already has children cannot be given a parent.
        """
        if tag_id is not None and parent_id == tag_id:
            raise ValidationError(
                message="A tag cannot be its own parent", field="parent_tag_id"
            )
        if tag_id is not None:
            child = aliased(Tag)
            result = await db.execute(
                select(select(child.id).where(child.parent_tag_id == tag_id).exists())
            )
            if result.scalar():
                raise ValidationError(
                    message="A tag with child tags cannot be nested under another tag",
                    field="parent_tag_id",
                )
        parent = await self._fetch(db, parent_id)
        if parent is None:
            raise ValidationError(
                message="Parent tag does not exist",
                field="parent_tag_id",
                context={"parent_tag_id": str(parent_id)},
            )
        if parent.parent_tag_id is not None:
            raise ValidationError(
                message="Parent tag must be a top-level tag", field="parent_tag_id"
            )

    async def _refresh_has_children(self, db: AsyncSession, parent_id: UUID) -> None:
        """Set has_children from an EXISTS check on the current rows."""
        child = aliased(Tag)
        has_any = select(child.id).where(child.parent_tag_id == parent_id).exists()
        await db.execute(
            update(Tag)
            .where(Tag.id == parent_id)
            .values(has_children=has_any)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _with_descendants(tags: Sequence[Tag], roots: Set[UUID]) -> Set[UUID]:
        """Ids in `roots` plus every tag the FK cascade would delete with them."""
        doomed = set(roots)
        grew = True
        while grew:
            grew = False
            for tag in tags:
                if tag.id not in doomed and tag.parent_tag_id in doomed:
                    doomed.add(tag.id)
                    grew = True
        return doomed


# ── Singleton Instance ────────────────────────────────────────────────────
tag_service = TagService()
