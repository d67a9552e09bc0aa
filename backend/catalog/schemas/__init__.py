from catalog.schemas.common import CamelModel, ErrorResponse, HealthResponse
from catalog.schemas.feedback import FeedbackCreate, FeedbackOut, FeedbackUpdate
from catalog.schemas.rating import RatingCreate, RatingOut
from catalog.schemas.resource import (
    ResourceCreate,
    ResourceDetail,
    ResourceOut,
    ResourceSummary,
    ResourceUpdate,
)

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "FeedbackCreate",
    "FeedbackOut",
    "FeedbackUpdate",
    "HealthResponse",
    "RatingCreate",
    "RatingOut",
    "ResourceCreate",
    "ResourceDetail",
    "ResourceOut",
    "ResourceSummary",
    "ResourceUpdate",
]
