"""
Rent schedule computation for a stored lease extraction.

A failed calculation never loses the extraction: the outcome carries the
extracted data with schedule=None and "échéancier non calculé: <reason>".
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from db.models import Extraction
from engine import ScheduleConfigurationError, compute_lease_rent_schedule
from models import InseeRentalIndexPoint, LeaseExtraction, RentCalculationOutcome
from services.extraction_input import build_schedule_input_from_extraction, index_type_for
from services.index_series import get_index_series

_LOG = logging.getLogger("uvicorn.error")

SCHEDULE_NOT_COMPUTED = "échéancier non calculé"


def _failed(extraction: LeaseExtraction, reason: str, schedule_input=None) -> RentCalculationOutcome:
    return RentCalculationOutcome(
        extracted_data=extraction,
        schedule_input=schedule_input,
        schedule_success=False,
        error_message=f"{SCHEDULE_NOT_COMPUTED}: {reason}",
        reason=reason,
    )


def compute_rent_schedule_for_extraction(
    extraction: LeaseExtraction,
    series: List[InseeRentalIndexPoint],
    horizon_years: Optional[float] = None,
) -> RentCalculationOutcome:
    """Build the calculator input from the extraction and run it."""
    try:
        schedule_input, reason = build_schedule_input_from_extraction(extraction, series, horizon_years)
    except ValidationError as e:
        return _failed(extraction, str(e).splitlines()[0])
    if schedule_input is None:
        return _failed(extraction, reason or "données insuffisantes")

    try:
        result = compute_lease_rent_schedule(schedule_input)
    except ScheduleConfigurationError as e:
        return _failed(extraction, str(e), schedule_input=schedule_input)

    return RentCalculationOutcome(
        extracted_data=extraction,
        schedule_input=schedule_input,
        rent_schedule=result,
        schedule_success=True,
    )


def load_extraction(db: Session, extraction_id: str) -> Optional[Extraction]:
    return db.query(Extraction).filter(Extraction.id == extraction_id).first()


def calculate_for_extraction(db: Session, row: Extraction) -> RentCalculationOutcome:
    """Compute from the stored extraction with its index series."""
    try:
        extraction = LeaseExtraction.model_validate(row.extracted_data or {})
    except ValidationError as e:
        return _failed(LeaseExtraction(), f"extraction illisible ({str(e).splitlines()[0]})")
    _, series = get_index_series(db, index_type_for(extraction))
    return compute_rent_schedule_for_extraction(extraction, series)


def store_outcome(db: Session, row: Extraction, outcome: RentCalculationOutcome) -> None:
    """Persist the schedule (or the error) on the extraction; extracted_data is left untouched."""
    if outcome.schedule_success and outcome.rent_schedule is not None:
        row.rent_schedule = outcome.rent_schedule.model_dump(mode="json", by_alias=True)
        row.schedule_error = None
    else:
        row.schedule_error = outcome.error_message
    db.commit()
    _LOG.info(
        "RENT_SCHEDULE_STORED extraction_id=%s success=%s error=%s",
        row.id,
        outcome.schedule_success,
        outcome.error_message,
    )
