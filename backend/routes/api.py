"""
Rent schedule API: direct computation, computation from a stored extraction,
INSEE index series, background jobs.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from db.session import get_db
from db.models import Job as JobModel, JobStatus, JobType
from engine import ScheduleConfigurationError, compute_lease_rent_schedule
from models import (
    ComputeLeaseRentScheduleResult,
    ComputeScheduleRequest,
    ComputeScheduleResponse,
    IndexSeriesResponse,
    InseeRentalIndexPoint,
    JobOut,
    ScheduleInput,
)
from services.index_series import get_index_series, normalize_index_type, upsert_index_series
from services.rent_calculation import calculate_for_extraction, load_extraction, store_outcome

router = APIRouter(prefix="/api/v1", tags=["api"])

_LOG = logging.getLogger("uvicorn.error")

INSUFFICIENT_DATA_MESSAGE = (
    "Données insuffisantes pour calculer l'échéancier. "
    "Vérifiez le loyer, la fréquence de paiement et les dates."
)
EXTRACTION_NOT_FOUND = "Extraction non trouvée"


def _job_out(job: JobModel) -> JobOut:
    return JobOut(
        id=job.id,
        type=job.type,
        status=job.status,
        extraction_id=job.extraction_id,
        error=job.error,
    )


def _require_extraction_id(body: Optional[ComputeScheduleRequest]) -> str:
    extraction_id = ((body.extraction_id if body else None) or "").strip()
    if not extraction_id:
        raise HTTPException(status_code=400, detail="extractionId is required")
    return extraction_id


def _enqueue_rent_job(job_id: str, extraction_id: str) -> None:
    from jobs.tasks import rent_schedule_task

    rent_schedule_task.delay(job_id, extraction_id)


# --- Schedule ---

@router.post("/rent/schedule", response_model=ComputeLeaseRentScheduleResult, response_model_by_alias=True)
def compute_schedule(body: ScheduleInput):
    """Compute a rent schedule from explicit lease terms."""
    try:
        return compute_lease_rent_schedule(body)
    except ScheduleConfigurationError as e:
        _LOG.info("SCHEDULE_CONFIG_ERR err=%s", e)
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/rent/compute-schedule", response_model=ComputeScheduleResponse, response_model_by_alias=True)
def compute_schedule_from_extraction(
    body: Optional[ComputeScheduleRequest] = None,
    db: Session = Depends(get_db),
):
    """Compute the schedule of a stored extraction and persist it on the extraction."""
    extraction_id = _require_extraction_id(body)
    row = load_extraction(db, extraction_id)
    if row is None:
        raise HTTPException(status_code=404, detail=EXTRACTION_NOT_FOUND)

    outcome = calculate_for_extraction(db, row)
    store_outcome(db, row, outcome)
    if outcome.schedule_input is None:
        raise HTTPException(status_code=400, detail=f"{INSUFFICIENT_DATA_MESSAGE} ({outcome.reason})")
    if not outcome.schedule_success or outcome.rent_schedule is None:
        raise HTTPException(status_code=400, detail=outcome.reason or outcome.error_message)
    return ComputeScheduleResponse(schedule=outcome.rent_schedule)


# --- Index series ---

@router.get("/rent/index-series", response_model=IndexSeriesResponse, response_model_by_alias=True)
def read_index_series(
    index_type: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    used, points = get_index_series(db, index_type)
    return IndexSeriesResponse(
        index_type=used,
        requested_index_type=normalize_index_type(index_type),
        points=points,
    )


@router.put("/rent/index-series/{index_type}", response_model=IndexSeriesResponse, response_model_by_alias=True)
def write_index_series(
    index_type: str,
    points: List[InseeRentalIndexPoint],
    db: Session = Depends(get_db),
):
    """Insert or update quarterly values; returns the stored series."""
    upsert_index_series(db, index_type, points)
    key = normalize_index_type(index_type)
    used, stored = get_index_series(db, key)
    return IndexSeriesResponse(index_type=used, requested_index_type=key, points=stored)


# --- Jobs ---

@router.post("/rent/jobs", response_model=JobOut, response_model_by_alias=True)
def create_rent_job(
    body: Optional[ComputeScheduleRequest] = None,
    db: Session = Depends(get_db),
):
    """Enqueue a rent schedule job for an extraction; poll GET /rent/jobs/{id}."""
    extraction_id = _require_extraction_id(body)
    if load_extraction(db, extraction_id) is None:
        raise HTTPException(status_code=404, detail=EXTRACTION_NOT_FOUND)
    job = JobModel(
        id=str(uuid.uuid4()),
        type=JobType.rent_schedule.value,
        status=JobStatus.pending.value,
        extraction_id=extraction_id,
        payload={"extraction_id": extraction_id},
    )
    db.add(job)
    db.commit()
    try:
        _enqueue_rent_job(job.id, extraction_id)
    except Exception as e:
        _LOG.warning("RENT_JOB_ENQUEUE_ERR job_id=%s err=%s", job.id, str(e)[:400])
    return _job_out(job)


@router.get("/rent/jobs/{job_id}", response_model=JobOut, response_model_by_alias=True)
def get_rent_job(job_id: str, db: Session = Depends(get_db)):
    job = db.query(JobModel).filter(JobModel.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_out(job)


@router.post("/rent/jobs/{job_id}/cancel", response_model=JobOut, response_model_by_alias=True)
def cancel_rent_job(job_id: str, db: Session = Depends(get_db)):
    """Cancel a pending or running job. Finished jobs cannot be cancelled (409)."""
    job = db.query(JobModel).filter(JobModel.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.status not in (JobStatus.pending.value, JobStatus.running.value):
        raise HTTPException(status_code=409, detail=f"Job already {job.status}")
    job.status = JobStatus.cancelled.value
    db.commit()
    _LOG.info("RENT_JOB_CANCELLED job_id=%s", job_id)
    return _job_out(job)
