"""
Resource Catalog — Resource SQLAlchemy Model
============================================

What:  ORM model for the `resources` table.
Who:   SqlStore (CRUD) and Alembic (schema).

Table Design:
    - String id: opaque UUID text, generated by the store, portable across
      PostgreSQL and SQLite
    - title/type: required catalog fields, type indexed for list filtering;
      client-supplied text columns are unbounded Text
    - author_id: optional, indexed for list filtering
    - attributes: JSON object holding any other client-supplied fields;
      SqlStore flattens it back into the record on read
    - created_at/updated_at: timezone-aware UTC
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class ResourceRow(Base):
    """A catalogued learning resource."""

    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    attributes: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_resources_type", "type"),
        Index("idx_resources_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<ResourceRow(id={self.id}, title='{self.title}', type='{self.type}')>"
