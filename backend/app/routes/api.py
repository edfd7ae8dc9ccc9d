"""
East Village Everything — Public API Routes
=============================================

What:  Read-only JSON consumed by the public site and the mobile app.
Who:   Anonymous clients; no session required.

Endpoints:
    GET /api/places?tag=      places (optionally filtered by tag value)
    GET /api/tags             flat tag list: {value, display, order}
    GET /api/tags/structured  tag tree: {parents, standalone}

Field naming follows the legacy site's API (`key` for the place id, `order`
as a string) so existing clients keep working.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.place import PublicPlace
from app.schemas.tag import PublicTag, StructuredTagsResponse
from app.services.place_service import place_service
from app.services.tag_service import tag_service

router = APIRouter(prefix="/api", tags=["Public"])

# Directory data changes a few times a week at most
PUBLIC_CACHE_CONTROL = "public, max-age=60"


@router.get(
    "/places",
    response_model=List[PublicPlace],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List places",
)
async def list_places(
    response: Response,
    tag: Optional[str] = Query(
        default=None,
        description="Only places carrying this tag value",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[PublicPlace]:
    places = await place_service.list(db, tag=tag or None)
    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    response.headers["X-Total-Count"] = str(len(places))
    return [
        PublicPlace(key=place.id, **place.model_dump(exclude={"id"}))
        for place in places
    ]


@router.get(
    "/tags",
    response_model=List[PublicTag],
    summary="List tags",
)
async def list_tags(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> List[PublicTag]:
    tags = await tag_service.list(db)
    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return [
        PublicTag(value=tag.value, display=tag.display, order=str(tag.sort_order))
        for tag in tags
    ]


@router.get(
    "/tags/structured",
    response_model=StructuredTagsResponse,
    summary="Tags grouped into parents with children, plus standalone tags",
)
async def list_structured_tags(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> StructuredTagsResponse:
    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return await tag_service.list_structured(db)
