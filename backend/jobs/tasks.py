"""
Background job tasks: rent schedule computation for a stored extraction.
Run worker from backend dir: celery -A jobs.tasks worker -l info
Requires: REDIS_URL, DATABASE_URL.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from celery import Celery
from sqlalchemy.orm import Session

# Ensure backend root is on path for DB imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from db.models import Job, JobStatus  # noqa: E402
from services.rent_calculation import calculate_for_extraction, load_extraction, store_outcome  # noqa: E402

_LOG = logging.getLogger("uvicorn.error")

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
celery_app = Celery("lease_rent", broker=REDIS_URL, backend=REDIS_URL)
celery_app.conf.task_routes = {"jobs.tasks.*": {"queue": "lease_rent"}}


def _finish(db: Session, job: Job, status: JobStatus, error: str | None = None) -> None:
    job.status = status.value
    job.error = error
    job.completed_at = datetime.utcnow()
    db.commit()


def _is_cancelled(db: Session, job: Job) -> bool:
    db.refresh(job)
    return job.status == JobStatus.cancelled.value


def run_rent_schedule_job(db: Session, job_id: str, extraction_id: str) -> dict:
    """
    Compute and store the rent schedule of extraction_id under job job_id.
    A job cancelled while running keeps its status and its result is discarded.
    """
    job = db.query(Job).filter(Job.id == job_id).first()
    if job is None:
        _LOG.warning("RENT_JOB_MISSING job_id=%s", job_id)
        return {"ok": False, "error": "Job not found"}
    if job.status == JobStatus.cancelled.value:
        _LOG.info("RENT_JOB_SKIPPED job_id=%s status=cancelled", job_id)
        return {"ok": False, "error": "cancelled"}

    job.status = JobStatus.running.value
    db.commit()
    _LOG.info("RENT_JOB_START job_id=%s extraction_id=%s", job_id, extraction_id)

    row = load_extraction(db, extraction_id)
    if row is None:
        _finish(db, job, JobStatus.failed, "Extraction non trouvée")
        return {"ok": False, "error": "Extraction non trouvée"}

    try:
        outcome = calculate_for_extraction(db, row)
    except Exception as e:
        _LOG.exception("RENT_JOB_ERR job_id=%s err=%s", job_id, str(e)[:400])
        db.rollback()
        _finish(db, job, JobStatus.failed, str(e)[:400])
        return {"ok": False, "error": str(e)[:400]}

    if _is_cancelled(db, job):
        _LOG.info("RENT_JOB_DISCARDED job_id=%s status=cancelled", job_id)
        return {"ok": False, "error": "cancelled"}

    store_outcome(db, row, outcome)
    if outcome.schedule_success:
        _finish(db, job, JobStatus.completed)
    else:
        _finish(db, job, JobStatus.failed, outcome.error_message)
    _LOG.info("RENT_JOB_DONE job_id=%s status=%s", job_id, job.status)
    return {"ok": outcome.schedule_success, "error": outcome.error_message}


@celery_app.task(bind=True)
def rent_schedule_task(self, job_id: str, extraction_id: str):
    from db.session import SessionLocal

    db = SessionLocal()
    try:
        return run_rent_schedule_job(db, job_id, extraction_id)
    finally:
        db.close()
