"""
Resource Catalog — Shared Schema Pieces
=======================================

What:  The camelCase base model and the error/health response models.
How:   CamelModel generates camelCase aliases (`author_id` ↔ `authorId`).
       Inputs accept either spelling; FastAPI serializes responses by alias,
       so clients only ever see camelCase.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx response.

    Example:
        {
            "error": "not_found",
            "message": "resource with ID 'abc' was not found",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Store backend name")
    store_status: str = Field(description="available or unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
