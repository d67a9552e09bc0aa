"""
Resource Catalog — Resource Request/Response Schemas
====================================================

What:  API contract for resources, including both enriched shapes.
How:   Request models only check shape and types; catalog rules (non-empty
       title/type, non-empty partial) are enforced by CatalogService so
       they hold for every caller, not only HTTP.

Shapes:
    ResourceOut      stored record, returned by POST /resources
    ResourceSummary  ResourceOut + averageRating           (list view)
    ResourceDetail   ResourceSummary + feedback[]           (detail view)

Resources accept free-form extra fields (e.g. "level", "url"); they are
stored and returned under the key the client used.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from catalog.schemas.common import CamelModel
from catalog.schemas.feedback import FeedbackOut

# Identity and bookkeeping fields the server owns, in both spellings
SERVER_OWNED_FIELDS = frozenset(
    {"id", "created_at", "createdAt", "updated_at", "updatedAt"}
)


class _ResourcePayload(CamelModel):
    model_config = ConfigDict(extra="allow")

    def to_record(self) -> Dict[str, Any]:
        """Fields the client actually sent, snake_case for known ones."""
        data = {name: getattr(self, name) for name in self.model_fields_set if name in type(self).model_fields}
        data.update(self.model_extra or {})
        return {k: v for k, v in data.items() if k not in SERVER_OWNED_FIELDS}


class ResourceCreate(_ResourcePayload):
    title: str = Field(description="Resource title (required, non-empty)")
    type: str = Field(description="Free-form category, e.g. 'video' or 'article'")
    description: Optional[str] = None
    author_id: Optional[str] = None


class ResourceUpdate(_ResourcePayload):
    """Partial update: only the fields sent are merged over the record."""
    title: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    author_id: Optional[str] = None


class ResourceOut(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    type: str
    description: Optional[str] = None
    author_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ResourceSummary(ResourceOut):
    average_rating: float = Field(description="Mean rating, 0 when unrated")


class ResourceDetail(ResourceSummary):
    feedback: List[FeedbackOut] = Field(default_factory=list)
