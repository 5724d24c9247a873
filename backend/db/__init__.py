"""Persistence: SQLAlchemy session plus the extraction, index series and job tables."""
from .session import Base, SessionLocal, engine, get_db
from .models import Extraction, InseeRentalIndex, Job, JobStatus, JobType

__all__ = [
    "Base",
    "Extraction",
    "InseeRentalIndex",
    "Job",
    "JobStatus",
    "JobType",
    "SessionLocal",
    "engine",
    "get_db",
]
