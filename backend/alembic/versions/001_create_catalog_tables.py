"""Create resources, ratings and feedback tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  The three catalog collections as tables.
How:   No foreign keys between them. ratings/feedback reference resources
       by resource_id only; the service checks existence on create and
       cascades on delete. resource_id is indexed for the per-resource reads.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "resources",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("author_id", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        # Client-supplied fields beyond the known columns
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_resources_type", "resources", ["type"])
    op.create_index("idx_resources_author_id", "resources", ["author_id"])

    op.create_table(
        "ratings",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("resource_id", sa.String(36), nullable=False),
        sa.Column("rating_value", sa.Float(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_ratings_resource_id", "ratings", ["resource_id"])

    op.create_table(
        "feedback",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("resource_id", sa.String(36), nullable=False),
        sa.Column("feedback_text", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_feedback_resource_id", "feedback", ["resource_id"])


def downgrade() -> None:
    op.drop_index("idx_feedback_resource_id", table_name="feedback")
    op.drop_table("feedback")
    op.drop_index("idx_ratings_resource_id", table_name="ratings")
    op.drop_table("ratings")
    op.drop_index("idx_resources_author_id", table_name="resources")
    op.drop_index("idx_resources_type", table_name="resources")
    op.drop_table("resources")
