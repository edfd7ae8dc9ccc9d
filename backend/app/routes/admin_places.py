"""
East Village Everything — Admin Place Routes
==============================================

What:  Place CRUD for the admin console under /admin/api/places.
Who:   Logged-in admins only (require_admin on the whole router).

Missing places are answered with 404; a PUT body is a partial update in
which only the fields sent are written and `tags` replaces the whole set.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import NotFoundError
from app.middleware.auth import require_admin
from app.schemas.common import ErrorResponse
from app.schemas.place import EditablePlace, PlaceCreate, PlaceResponse, PlaceUpdate
from app.services.place_service import place_service

router = APIRouter(
    prefix="/admin/api/places",
    tags=["Admin: Places"],
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Not logged in", "model": ErrorResponse}},
)

NOT_FOUND = {404: {"description": "Place not found", "model": ErrorResponse}}


@router.get("", response_model=List[PlaceResponse], summary="List places")
async def list_places(
    sort_by: str = Query(default="name", description="name, created_at or updated_at"),
    sort_order: str = Query(default="asc", description="asc or desc"),
    db: AsyncSession = Depends(get_db_session),
) -> List[PlaceResponse]:
    return await place_service.list_sorted(db, sort_by=sort_by, sort_order=sort_order)


@router.get("/{place_id}", response_model=PlaceResponse, responses=NOT_FOUND)
async def get_place(
    place_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> PlaceResponse:
    place = await place_service.get(db, place_id)
    if place is None:
        raise NotFoundError(resource="place", resource_id=str(place_id))
    return place


@router.get(
    "/{place_id}/edit",
    response_model=EditablePlace,
    responses=NOT_FOUND,
    summary="Place prepared for an edit form (newlines instead of <br/>)",
)
async def edit_place(
    place_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> EditablePlace:
    place = await place_service.editable(db, place_id)
    if place is None:
        raise NotFoundError(resource="place", resource_id=str(place_id))
    return place


@router.post("", response_model=PlaceResponse, status_code=201, summary="Create a place")
async def create_place(
    data: PlaceCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PlaceResponse:
    return await place_service.create(db, data)


@router.put("/{place_id}", response_model=PlaceResponse, responses=NOT_FOUND)
async def update_place(
    place_id: UUID,
    patch: PlaceUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> PlaceResponse:
    place = await place_service.update(db, place_id, patch)
    if place is None:
        raise NotFoundError(resource="place", resource_id=str(place_id))
    return place


@router.delete("/{place_id}", status_code=204, responses=NOT_FOUND)
async def delete_place(
    place_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    if not await place_service.delete(db, place_id):
        raise NotFoundError(resource="place", resource_id=str(place_id))
    return Response(status_code=204)
