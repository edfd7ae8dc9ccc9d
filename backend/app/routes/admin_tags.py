"""
East Village Everything — Admin Tag Routes
============================================

What:  Tag management for the admin console under /admin/api/tags.
Who:   Logged-in admins only (require_admin on the whole router).

Endpoints:
    GET    /admin/api/tags                        all tags (sort_order, value)
    PUT    /admin/api/tags                        bulk save from the tag editor
    GET    /admin/api/tags/structured             parents/standalone tree
    GET    /admin/api/tags/potential-parents      parent choices for a form
    GET    /admin/api/tags/{id}                   one tag
    GET    /admin/api/tags/{id}/places            places carrying the tag
    POST   /admin/api/tags                        create (201)
    PATCH  /admin/api/tags/{id}                   partial update
    DELETE /admin/api/tags/{id}                   delete with children (204)
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import NotFoundError
from app.middleware.auth import require_admin
from app.schemas.common import ErrorResponse
from app.schemas.place import PlaceSummary
from app.schemas.tag import (
    StructuredTagsResponse,
    TagBulkItem,
    TagCreate,
    TagResponse,
    TagUpdate,
)
from app.services.tag_service import tag_service

router = APIRouter(
    prefix="/admin/api/tags",
    tags=["Admin: Tags"],
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Not logged in", "model": ErrorResponse}},
)

NOT_FOUND = {404: {"description": "Tag not found", "model": ErrorResponse}}
INVALID = {400: {"description": "Invalid tag", "model": ErrorResponse}}


@router.get("", response_model=List[TagResponse], summary="List tags")
async def list_tags(db: AsyncSession = Depends(get_db_session)) -> List[TagResponse]:
    return await tag_service.list(db)


@router.put(
    "",
    response_model=List[TagResponse],
    responses=INVALID,
    summary="Replace the tag set (matched by value)",
    description=(
        "Tags missing from the body are deleted, matching tags get display and "
        "sort_order updated, new values are created top-level. Parent links are "
        "left unchanged."
    ),
)
async def bulk_save_tags(
    items: List[TagBulkItem],
    db: AsyncSession = Depends(get_db_session),
) -> List[TagResponse]:
    return await tag_service.bulk_save(db, items)


@router.get("/structured", response_model=StructuredTagsResponse)
async def structured_tags(
    db: AsyncSession = Depends(get_db_session),
) -> StructuredTagsResponse:
    return await tag_service.list_structured(db)


@router.get("/potential-parents", response_model=List[TagResponse])
async def potential_parents(
    exclude_id: Optional[UUID] = Query(
        default=None,
        description="Tag being edited; it is left out of the choices",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[TagResponse]:
    return await tag_service.potential_parents(db, exclude_id=exclude_id)


@router.get("/{tag_id}", response_model=TagResponse, responses=NOT_FOUND)
async def get_tag(
    tag_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    tag = await tag_service.get(db, tag_id)
    if tag is None:
        raise NotFoundError(resource="tag", resource_id=str(tag_id))
    return tag


@router.get(
    "/{tag_id}/places",
    response_model=List[PlaceSummary],
    responses=NOT_FOUND,
    summary="Places that would lose this tag if it were deleted",
)
async def tag_places(
    tag_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> List[PlaceSummary]:
    if await tag_service.get(db, tag_id) is None:
        raise NotFoundError(resource="tag", resource_id=str(tag_id))
    return await tag_service.places_for_tag(db, tag_id)


@router.post(
    "",
    response_model=TagResponse,
    status_code=201,
    responses=INVALID,
    summary="Create a tag",
)
async def create_tag(
    data: TagCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    return await tag_service.create(db, data)


@router.patch(
    "/{tag_id}",
    response_model=TagResponse,
    responses={**NOT_FOUND, **INVALID},
)
async def update_tag(
    tag_id: UUID,
    patch: TagUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    tag = await tag_service.update(db, tag_id, patch)
    if tag is None:
        raise NotFoundError(resource="tag", resource_id=str(tag_id))
    return tag


@router.delete("/{tag_id}", status_code=204, responses=NOT_FOUND)
async def delete_tag(
    tag_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    if not await tag_service.delete(db, tag_id):
        raise NotFoundError(resource="tag", resource_id=str(tag_id))
    return Response(status_code=204)
