"""
East Village Everything — Partial Update Builder
==================================================

What:  Turns a patch model into the ordered SET clause of an UPDATE.
How:   Walks a fixed field order and keeps only the fields the client
       actually sent (pydantic's model_fields_set), applying an optional
       per-field transform, then always appends an updated_at bump.

Presence vs. value:
    A field sent as null or "" is present and gets written (possibly as
    NULL); a field that was omitted is absent and left alone. This is the
    difference between "clear the phone number" and "don't touch it".

Example:
    plan = plan_update(
        PlaceUpdate(name="New Name"),
        fields=("name", "address", "phone"),
        transforms={"phone": normalize_phone},
    )
    plan.assignments   # [("name", "New Name"), ("updated_at", <now>)]
    plan.has_changes   # True
    await db.execute(update(Place).where(...).values(**plan.values()))
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel

UPDATED_AT = "updated_at"

Transform = Callable[[Any], Any]


class UpdatePlan:
    """Ordered (column, value) assignments for one UPDATE statement."""

    def __init__(self, assignments: List[Tuple[str, Any]]):
        self.assignments = assignments

    @property
    def has_changes(self) -> bool:
        """False when the only assignment is the updated_at bump."""
        return any(column != UPDATED_AT for column, _ in self.assignments)

    @property
    def columns(self) -> List[str]:
        return [column for column, _ in self.assignments]

    def values(self) -> Dict[str, Any]:
        # dicts keep insertion order, so the SET clause follows field order
        return dict(self.assignments)

    def get(self, column: str, default: Any = None) -> Any:
        for name, value in self.assignments:
            if name == column:
                return value
        return default

    def __contains__(self, column: str) -> bool:
        return column in self.columns

    def __repr__(self) -> str:
        return f"<UpdatePlan(columns={self.columns})>"


def plan_update(
    patch: BaseModel,
    fields: Iterable[str],
    transforms: Optional[Mapping[str, Transform]] = None,
    now: Optional[datetime] = None,
) -> UpdatePlan:
    """
    Build the UpdatePlan for a patch.

    Args:
        patch:      Pydantic model; presence is read from model_fields_set
        fields:     Updatable columns in the order they should be assigned
        transforms: Optional column → function applied to the supplied value
        now:        Timestamp for updated_at (defaults to current UTC time)
    """
    transforms = transforms or {}
    supplied = patch.model_fields_set
    assignments: List[Tuple[str, Any]] = []

    for field in fields:
        if field not in supplied:
            continue
        value = getattr(patch, field)
        transform = transforms.get(field)
        if transform is not None:
            value = transform(value)
        assignments.append((field, value))

    assignments.append((UPDATED_AT, now or datetime.now(timezone.utc)))
    return UpdatePlan(assignments)
