"""
East Village Everything — Place Request/Response Schemas
==========================================================

What:  Pydantic models for place create/update input and the admin and
       public response shapes.

Input normalization done here:
    - name is trimmed and must be non-empty
    - short text fields (address, phone, url, categories) are trimmed
    - tags accepts a single string (HTML form with one checkbox) or a list
Storage normalization (phone digits, <br/> encoding) happens in
PlaceService so it applies to every caller.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _as_list(v):
    if v is None:
        return []
    if isinstance(v, str):
        return [v]
    return v


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PlaceCreate(BaseModel):
    name: str = Field(description="Venue name (required)")
    address: Optional[str] = None
    phone: Optional[str] = Field(default=None, description="Any format; kept only if 10 digits")
    url: Optional[str] = None
    specials: Optional[str] = Field(default=None, description="Free text; newlines preserved")
    categories: Optional[str] = None
    notes: Optional[str] = Field(default=None, description="Free text; newlines preserved")
    tags: List[str] = Field(default_factory=list, description="Tag values to attach")

    @field_validator("name", "address", "phone", "url", "categories", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _strip(v)

    @field_validator("tags", mode="before")
    @classmethod
    def tags_as_list(cls, v):
        return _as_list(v)

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Name is required")
        return v


class PlaceUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are written;
    `tags`, when present, replaces the whole tag set.
    """
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    url: Optional[str] = None
    specials: Optional[str] = None
    categories: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("name", "address", "phone", "url", "categories", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _strip(v)

    @field_validator("tags", mode="before")
    @classmethod
    def tags_as_list(cls, v):
        return _as_list(v)

    @field_validator("name")
    @classmethod
    def name_required(cls, v: Optional[str]) -> str:
        if not v:
            raise ValueError("Name is required")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PlaceResponse(BaseModel):
    id: uuid.UUID
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    url: Optional[str] = None
    specials: Optional[str] = None
    categories: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list, description="Tag values in display order")
    created_at: datetime
    updated_at: datetime


class EditablePlace(PlaceResponse):
    """Place as loaded into an edit form: <br/> markup turned back into newlines."""
    specials: str = ""
    notes: str = ""


class PlaceSummary(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class PublicPlace(BaseModel):
    """Public API shape; the id is exposed as `key` like the old site's API."""
    key: uuid.UUID
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    url: Optional[str] = None
    specials: Optional[str] = None
    categories: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
