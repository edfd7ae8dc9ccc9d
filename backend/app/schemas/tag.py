"""
East Village Everything — Tag Request/Response Schemas
========================================================

What:  Pydantic models for the tag endpoints (admin CRUD, bulk editor,
       structured tree, public list).

Patch semantics:
    TagUpdate fields are all optional. A field counts as supplied only if the
    client sent it (model_fields_set), so {"parent_tag_id": null} means
    "make this tag top-level" while {} changes nothing.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _strip(v):
    return v.strip() if isinstance(v, str) else v


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class TagCreate(BaseModel):
    value: str = Field(description="Slug: lowercase letters, digits and hyphens")
    display: str = Field(min_length=1, description="Human-readable label")
    sort_order: int = Field(default=0, description="UI ordering (ascending)")
    parent_tag_id: Optional[uuid.UUID] = Field(
        default=None,
        description="Top-level tag to nest this tag under",
    )

    @field_validator("value", "display", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _strip(v)


class TagUpdate(BaseModel):
    value: Optional[str] = None
    display: Optional[str] = Field(default=None, min_length=1)
    sort_order: Optional[int] = None
    parent_tag_id: Optional[uuid.UUID] = None

    @field_validator("value", "display", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _strip(v)

    @field_validator("value", "display", "sort_order")
    @classmethod
    def reject_null(cls, v):
        # Only parent_tag_id may be explicitly cleared
        if v is None:
            raise ValueError("may not be null")
        return v


class TagBulkItem(BaseModel):
    """One row of the bulk tag editor; parent links are not editable here."""
    value: str
    display: str = Field(min_length=1)
    sort_order: int = 0

    @field_validator("value", "display", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _strip(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TagResponse(BaseModel):
    id: uuid.UUID
    value: str
    display: str
    sort_order: int
    parent_tag_id: Optional[uuid.UUID] = None
    has_children: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TagTreeNode(TagResponse):
    """A parent tag with its direct children nested under it."""
    children: List[TagResponse] = Field(default_factory=list)


class StructuredTagsResponse(BaseModel):
    """
    Tag tree for filter UIs.

    parents:    tags with has_children, each carrying its children
    standalone: top-level tags without children
    Child tags appear only inside their parent's `children`.
    """
    parents: List[TagTreeNode] = Field(default_factory=list)
    standalone: List[TagResponse] = Field(default_factory=list)


class PublicTag(BaseModel):
    """Public API shape; `order` is a string for compatibility with the old site."""
    value: str
    display: str
    order: str
