"""Rating request/response schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from catalog.schemas.common import CamelModel


class RatingCreate(CamelModel):
    # Number and range checks: CatalogService.validate_rating_value
    rating_value: Any = Field(
        description="Score between 1 and 5 (integer or decimal)",
        json_schema_extra={"type": "number", "minimum": 1, "maximum": 5},
    )
    user_id: Optional[str] = Field(default=None, description="Defaults to 'anonymous'")


class RatingOut(CamelModel):
    id: str
    resource_id: str
    rating_value: float
    user_id: str
    timestamp: datetime
