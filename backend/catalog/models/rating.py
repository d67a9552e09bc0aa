"""ORM model for the `ratings` table (append-only)."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class RatingRow(Base):
    """
    A single 1-5 score for one resource.

    resource_id is not a foreign key; the catalog service
    checks the resource at creation time and cascades on resource delete.
    """

    __tablename__ = "ratings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    resource_id: Mapped[str] = mapped_column(String(36), nullable=False)
    rating_value: Mapped[float] = mapped_column(Float, nullable=False)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_ratings_resource_id", "resource_id"),)

    def __repr__(self) -> str:
        return f"<RatingRow(id={self.id}, resource_id={self.resource_id}, value={self.rating_value})>"
