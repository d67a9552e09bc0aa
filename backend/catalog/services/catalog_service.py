"""
Resource Catalog — Catalog Service (Business Logic Orchestrator)
================================================================

What:  Every catalog operation: resource CRUD, ratings, feedback.
How:   Validates input, mutates the EntityStore, then re-reads current
       state through the EnrichmentService to build the response.
Who:   Called by the route handlers; calls the store and the enrichment
       layer. Knows nothing about HTTP.

Operation Flow (POST /resources/{id}/ratings):
    ┌──────────┐    ┌────────────┐    ┌────────────┐    ┌──────────────┐
    │ Validate │───▶│  Resource  │───▶│   Insert   │───▶│ Enrich detail│
    │  value   │    │  exists?   │    │   rating   │    │ (fresh read) │
    └──────────┘    └────────────┘    └────────────┘    └──────────────┘
         │ 400            │ 404

Cross-Entity Rules:
    - Input is validated before any lookup, so a bad body on an unknown
      resource reports 400.
    - Ratings and feedback may only be created for an existing resource.
    - Feedback is addressed by the (resource_id, feedback_id) pair. A
      feedback id that belongs to another resource is "not found".
    - Deleting a resource cascades to its ratings and feedback. The
      cascade is best effort: a failing dependent delete is logged and
      the resource deletion still stands.
"""

import logging
from datetime import datetime, timedelta, timezone
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional

from catalog.exceptions import NotFoundError, StoreError, ValidationError
from catalog.schemas import (
    FeedbackOut,
    RatingOut,
    ResourceDetail,
    ResourceOut,
    ResourceSummary,
)
from catalog.schemas.resource import SERVER_OWNED_FIELDS
from catalog.services.aggregation import AggregationEngine
from catalog.services.enrichment import EnrichmentService
from catalog.store import Collection, EntityStore, Record

logger = logging.getLogger(__name__)

RATING_MIN = 1
RATING_MAX = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CatalogService:
    """
    Business logic layer for the catalog.

    One instance is created at startup and shared by all requests; it holds
    no per-request state, only the store handle and configuration.
    """

    def __init__(
        self,
        store: EntityStore,
        precision: int = 2,
        default_user_id: str = "anonymous",
    ):
        self.store = store
        self.default_user_id = default_user_id
        self.aggregation = AggregationEngine(store, precision)
        self.enrichment = EnrichmentService(self.aggregation)

    # ── Validation ─────────────────────────────────────────────────────────

    @staticmethod
    def validate_rating_value(value: Any) -> float:
        """
        Accept an int or float in [1, 5].

        Booleans and numeric strings are rejected even though Python (and
        JSON coercion) would happily treat them as numbers. The range check
        runs on the parsed number itself, so huge integers and NaN/Infinity
        are rejected without converting them.
        """
        if (
            isinstance(value, bool)
            or not isinstance(value, Real)
            or not RATING_MIN <= value <= RATING_MAX
        ):
            # repr(): NaN and Infinity are not valid JSON in the error body
            raise ValidationError(
                "ratingValue must be a number between 1 and 5",
                field="ratingValue",
                context={"value": repr(value)},
            )
        return float(value)

    @staticmethod
    def validate_feedback_text(text: Any) -> str:
        """Return the trimmed text, or raise if nothing is left."""
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("feedbackText is required", field="feedbackText")
        return text.strip()

    @staticmethod
    def _require_text(data: Mapping[str, Any], field: str, wire_name: str) -> None:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{wire_name} is required and must not be empty", field=wire_name)

    def _user(self, user_id: Optional[str]) -> str:
        return user_id if user_id else self.default_user_id

    # ── Resources ──────────────────────────────────────────────────────────

    async def _load_resource(self, resource_id: str) -> Record:
        resource = await self.store.get(Collection.RESOURCES, resource_id)
        if resource is None:
            raise NotFoundError("Resource", resource_id)
        return resource

    async def list_resources(
        self,
        resource_type: Optional[str] = None,
        author_id: Optional[str] = None,
    ) -> List[ResourceSummary]:
        """Every resource matching the filters, each with its average rating."""
        resources = await self.store.list(
            Collection.RESOURCES, {"type": resource_type, "author_id": author_id}
        )
        return await self.enrichment.enrich_summaries(resources)

    async def get_resource(self, resource_id: str) -> ResourceDetail:
        resource = await self._load_resource(resource_id)
        return await self.enrichment.enrich_detail(resource)

    async def create_resource(self, data: Mapping[str, Any]) -> ResourceOut:
        """
        Store a new resource.

        Free fields are kept as sent. The server assigns `id`, `created_at`
        and an initial `updated_at` equal to `created_at`.
        """
        record = {k: v for k, v in data.items() if k not in SERVER_OWNED_FIELDS}
        self._require_text(record, "title", "title")
        self._require_text(record, "type", "type")

        now = utcnow()
        record["created_at"] = now
        record["updated_at"] = now

        stored = await self.store.insert(Collection.RESOURCES, record)
        logger.info(
            "Created resource",
            extra={"resource_id": stored["id"], "resource_type": stored["type"]},
        )
        return ResourceOut.model_validate(stored)

    async def update_resource(self, resource_id: str, partial: Mapping[str, Any]) -> ResourceDetail:
        """Shallow-merge `partial` over the resource and return the fresh detail view."""
        changes: Dict[str, Any] = {k: v for k, v in partial.items() if k not in SERVER_OWNED_FIELDS}
        if not changes:
            raise ValidationError("No fields to update were provided")
        for field in ("title", "type"):
            if field in changes:
                self._require_text(changes, field, field)

        current = await self._load_resource(resource_id)

        # Strictly later than the previous value even on a coarse clock
        now = utcnow()
        previous = current.get("updated_at")
        if isinstance(previous, datetime) and now <= previous:
            now = previous + timedelta(microseconds=1)
        changes["updated_at"] = now

        updated = await self.store.update(Collection.RESOURCES, resource_id, changes)
        if updated is None:
            raise NotFoundError("Resource", resource_id)
        logger.info("Updated resource", extra={"resource_id": resource_id, "fields": sorted(changes)})
        return await self.enrichment.enrich_detail(updated)

    async def delete_resource(self, resource_id: str) -> None:
        """Delete the resource, then its ratings and feedback."""
        if not await self.store.delete(Collection.RESOURCES, resource_id):
            raise NotFoundError("Resource", resource_id)

        for collection in (Collection.RATINGS, Collection.FEEDBACK):
            try:
                removed = await self.store.delete_many(collection, {"resource_id": resource_id})
            except StoreError as e:
                logger.error(
                    "Cascade delete failed; orphaned records may remain",
                    extra={
                        "resource_id": resource_id,
                        "collection": collection.value,
                        "error": e.message,
                        **e.context,
                    },
                )
                continue
            logger.debug(
                "Cascade removed %d %s for resource %s", removed, collection.value, resource_id
            )

        logger.info("Deleted resource", extra={"resource_id": resource_id})

    # ── Ratings ────────────────────────────────────────────────────────────

    async def create_rating(
        self,
        resource_id: str,
        rating_value: Any,
        user_id: Optional[str] = None,
    ) -> ResourceDetail:
        value = self.validate_rating_value(rating_value)
        await self._load_resource(resource_id)

        await self.store.insert(
            Collection.RATINGS,
            {
                "resource_id": resource_id,
                "rating_value": value,
                "user_id": self._user(user_id),
                "timestamp": utcnow(),
            },
        )
        logger.info("Rated resource", extra={"resource_id": resource_id, "rating_value": value})

        # Re-read: a concurrent delete surfaces here as not-found
        return await self.get_resource(resource_id)

    async def list_ratings(self, resource_id: str) -> List[RatingOut]:
        await self._load_resource(resource_id)
        ratings = await self.aggregation.ratings_for(resource_id)
        return [RatingOut.model_validate(r) for r in ratings]

    # ── Feedback ───────────────────────────────────────────────────────────

    async def _load_feedback(self, resource_id: str, feedback_id: str) -> Record:
        feedback = await self.store.get(Collection.FEEDBACK, feedback_id)
        if feedback is None or str(feedback.get("resource_id")) != str(resource_id):
            raise NotFoundError(
                "Feedback", feedback_id, context={"for_resource_id": resource_id}
            )
        return feedback

    async def create_feedback(
        self,
        resource_id: str,
        feedback_text: Any,
        user_id: Optional[str] = None,
    ) -> ResourceDetail:
        text = self.validate_feedback_text(feedback_text)
        await self._load_resource(resource_id)

        await self.store.insert(
            Collection.FEEDBACK,
            {
                "resource_id": resource_id,
                "feedback_text": text,
                "user_id": self._user(user_id),
                "timestamp": utcnow(),
            },
        )
        logger.info("Added feedback", extra={"resource_id": resource_id})
        return await self.get_resource(resource_id)

    async def list_feedback(self, resource_id: str) -> List[FeedbackOut]:
        await self._load_resource(resource_id)
        feedback = await self.aggregation.feedback_for(resource_id)
        return [FeedbackOut.model_validate(f) for f in feedback]

    async def update_feedback(
        self,
        resource_id: str,
        feedback_id: str,
        feedback_text: Any,
    ) -> FeedbackOut:
        """Replace the text and refresh the timestamp of one feedback entry."""
        text = self.validate_feedback_text(feedback_text)
        await self._load_feedback(resource_id, feedback_id)

        updated = await self.store.update(
            Collection.FEEDBACK,
            feedback_id,
            {"feedback_text": text, "timestamp": utcnow()},
        )
        if updated is None:
            raise NotFoundError("Feedback", feedback_id)
        logger.info("Updated feedback", extra={"resource_id": resource_id, "feedback_id": feedback_id})
        return FeedbackOut.model_validate(updated)

    async def delete_feedback(self, resource_id: str, feedback_id: str) -> None:
        await self._load_feedback(resource_id, feedback_id)
        if not await self.store.delete(Collection.FEEDBACK, feedback_id):
            raise NotFoundError("Feedback", feedback_id)
        logger.info("Deleted feedback", extra={"resource_id": resource_id, "feedback_id": feedback_id})
