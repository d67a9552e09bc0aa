"""
Resource Catalog — Resource Route Handlers
==========================================

What:  Every /resources endpoint: resources, their ratings and their feedback.
How:   Parses path/query/body, delegates to CatalogService, returns the model.
       No business rules live here; errors raised by the service are mapped
       to HTTP by the global exception handlers in main.py.

Response shapes:
    list                → ResourceSummary[]   (averageRating, no feedback)
    get / update        → ResourceDetail      (averageRating + feedback[])
    create              → ResourceOut         (stored record, not enriched)
    rate / add feedback → ResourceDetail of the resource
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from catalog.deps import get_catalog_service
from catalog.schemas import (
    ErrorResponse,
    FeedbackCreate,
    FeedbackOut,
    FeedbackUpdate,
    RatingCreate,
    RatingOut,
    ResourceCreate,
    ResourceDetail,
    ResourceOut,
    ResourceSummary,
    ResourceUpdate,
)
from catalog.services import CatalogService

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/resources", tags=["Resources"])

NOT_FOUND = {404: {"description": "Resource not found", "model": ErrorResponse}}
INVALID = {400: {"description": "Invalid input", "model": ErrorResponse}}


# ── Resources ─────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=List[ResourceSummary],
    summary="List resources",
    description="All resources, optionally filtered by type and author, each with its average rating.",
)
async def list_resources(
    resource_type: Optional[str] = Query(default=None, alias="type", description="Exact resource type"),
    author_id: Optional[str] = Query(default=None, alias="authorId", description="Exact author ID"),
    service: CatalogService = Depends(get_catalog_service),
) -> List[ResourceSummary]:
    return await service.list_resources(resource_type=resource_type, author_id=author_id)


@router.get(
    "/{resource_id}",
    response_model=ResourceDetail,
    responses=NOT_FOUND,
    summary="Get a resource with its rating and feedback",
)
async def get_resource(
    resource_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> ResourceDetail:
    return await service.get_resource(resource_id)


@router.post(
    "",
    status_code=201,
    response_model=ResourceOut,
    responses=INVALID,
    summary="Create a resource",
    description=(
        "Stores the resource with every field sent. `title` and `type` are required. "
        "The server assigns `id`, `createdAt` and `updatedAt`."
    ),
)
async def create_resource(
    payload: ResourceCreate,
    service: CatalogService = Depends(get_catalog_service),
) -> ResourceOut:
    return await service.create_resource(payload.to_record())


@router.put(
    "/{resource_id}",
    response_model=ResourceDetail,
    responses={**NOT_FOUND, **INVALID},
    summary="Update a resource",
    description="Partial update: the fields sent are merged over the stored resource.",
)
@router.patch(
    "/{resource_id}",
    response_model=ResourceDetail,
    responses={**NOT_FOUND, **INVALID},
    summary="Update a resource (PATCH alias)",
)
async def update_resource(
    resource_id: str,
    payload: ResourceUpdate,
    service: CatalogService = Depends(get_catalog_service),
) -> ResourceDetail:
    return await service.update_resource(resource_id, payload.to_record())


@router.delete(
    "/{resource_id}",
    status_code=204,
    response_class=Response,
    responses=NOT_FOUND,
    summary="Delete a resource with its ratings and feedback",
)
async def delete_resource(
    resource_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> Response:
    await service.delete_resource(resource_id)
    return Response(status_code=204)


# ── Ratings ───────────────────────────────────────────────────────────────

@router.post(
    "/{resource_id}/ratings",
    status_code=201,
    response_model=ResourceDetail,
    responses={**NOT_FOUND, **INVALID},
    summary="Rate a resource (1 to 5)",
)
async def create_rating(
    resource_id: str,
    payload: RatingCreate,
    service: CatalogService = Depends(get_catalog_service),
) -> ResourceDetail:
    return await service.create_rating(resource_id, payload.rating_value, payload.user_id)


@router.get(
    "/{resource_id}/ratings",
    response_model=List[RatingOut],
    responses=NOT_FOUND,
    summary="List the ratings of a resource",
)
async def list_ratings(
    resource_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> List[RatingOut]:
    return await service.list_ratings(resource_id)


# ── Feedback ──────────────────────────────────────────────────────────────

@router.post(
    "/{resource_id}/feedback",
    status_code=201,
    response_model=ResourceDetail,
    responses={**NOT_FOUND, **INVALID},
    summary="Add feedback to a resource",
)
async def create_feedback(
    resource_id: str,
    payload: FeedbackCreate,
    service: CatalogService = Depends(get_catalog_service),
) -> ResourceDetail:
    return await service.create_feedback(resource_id, payload.feedback_text, payload.user_id)


@router.get(
    "/{resource_id}/feedback",
    response_model=List[FeedbackOut],
    responses=NOT_FOUND,
    summary="List the feedback of a resource",
)
async def list_feedback(
    resource_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> List[FeedbackOut]:
    return await service.list_feedback(resource_id)


@router.put(
    "/{resource_id}/feedback/{feedback_id}",
    response_model=FeedbackOut,
    responses={**NOT_FOUND, **INVALID},
    summary="Edit feedback text",
    description="The feedback must belong to the resource in the path, otherwise 404.",
)
async def update_feedback(
    resource_id: str,
    feedback_id: str,
    payload: FeedbackUpdate,
    service: CatalogService = Depends(get_catalog_service),
) -> FeedbackOut:
    return await service.update_feedback(resource_id, feedback_id, payload.feedback_text)


@router.delete(
    "/{resource_id}/feedback/{feedback_id}",
    status_code=204,
    response_class=Response,
    responses=NOT_FOUND,
    summary="Delete feedback",
)
async def delete_feedback(
    resource_id: str,
    feedback_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> Response:
    await service.delete_feedback(resource_id, feedback_id)
    return Response(status_code=204)
