"""Feedback request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from catalog.schemas.common import CamelModel


class FeedbackCreate(CamelModel):
    feedback_text: str = Field(description="Comment text (required, non-empty; stored trimmed)")
    user_id: Optional[str] = Field(default=None, description="Defaults to 'anonymous'")


class FeedbackUpdate(CamelModel):
    feedback_text: str = Field(description="Replacement text (required, non-empty)")


class FeedbackOut(CamelModel):
    id: str
    resource_id: str
    feedback_text: str
    user_id: str
    timestamp: datetime
