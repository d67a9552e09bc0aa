"""ORM model for the `feedback` table."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class FeedbackRow(Base):
    """Free-text feedback on one resource; `timestamp` moves on every edit."""

    __tablename__ = "feedback"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    resource_id: Mapped[str] = mapped_column(String(36), nullable=False)
    feedback_text: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_feedback_resource_id", "resource_id"),)

    def __repr__(self) -> str:
        return f"<FeedbackRow(id={self.id}, resource_id={self.resource_id})>"
