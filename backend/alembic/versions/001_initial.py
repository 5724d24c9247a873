"""Initial schema: extractions, insee_rental_reference_index, jobs

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "extractions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=True),
        sa.Column("extracted_data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("rent_schedule", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("schedule_error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "insee_rental_reference_index",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("index_type", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.Integer(), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("index_type", "year", "quarter", name="uq_insee_index_type_year_quarter"),
    )
    op.create_index(
        "ix_insee_rental_reference_index_index_type",
        "insee_rental_reference_index",
        ["index_type"],
        unique=False,
    )

    op.create_table(
        "jobs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("extraction_id", sa.String(), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_jobs_extraction_id", "jobs", ["extraction_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_jobs_extraction_id", table_name="jobs")
    op.drop_table("jobs")
    op.drop_index("ix_insee_rental_reference_index_index_type", table_name="insee_rental_reference_index")
    op.drop_table("insee_rental_reference_index")
    op.drop_table("extractions")
