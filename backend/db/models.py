"""SQLAlchemy models. Use Alembic for migrations."""
from __future__ import annotations

import enum
from datetime import datetime
from sqlalchemy import Column, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

from .session import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
JSONColumn = JSON().with_variant(JSONB(), "postgresql")


class JobType(str, enum.Enum):
    rent_schedule = "rent_schedule"


class JobStatus(str, enum.Enum):
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class Extraction(Base):
    """A lease extraction record and the rent schedule computed from it."""
    __tablename__ = "extractions"

    id = Column(String, primary_key=True)
    file_name = Column("file_name", String, nullable=True)
    extracted_data = Column("extracted_data", JSONColumn, nullable=False)
    rent_schedule = Column("rent_schedule", JSONColumn, nullable=True)
    schedule_error = Column("schedule_error", Text, nullable=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)
    updated_at = Column("updated_at", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class InseeRentalIndex(Base):
    __tablename__ = "insee_rental_reference_index"
    __table_args__ = (
        UniqueConstraint("index_type", "year", "quarter", name="uq_insee_index_type_year_quarter"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    index_type = Column("index_type", String, nullable=False, index=True)
    year = Column(Integer, nullable=False)
    quarter = Column(Integer, nullable=False)
    value = Column(Float, nullable=False)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)
    updated_at = Column("updated_at", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)  # JobType value
    status = Column(String, nullable=False, default=JobStatus.pending.value)
    extraction_id = Column("extraction_id", String, nullable=True, index=True)
    payload = Column(JSONColumn, nullable=True)
    error = Column(Text, nullable=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)
    completed_at = Column("completed_at", DateTime, nullable=True)
