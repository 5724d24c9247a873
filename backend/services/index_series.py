"""
INSEE rent reference index series (ILAT, ILC, ICC).

Quarterly values are stored per index type in insee_rental_reference_index.
A lease gets its base value from the quarter of its start date and one known
point per anniversary, taken from the same quarter of each following year.
"""

from __future__ import annotations

import logging
import os
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from db.models import InseeRentalIndex
from engine.dates import add_years, quarter_of
from models import InseeRentalIndexPoint, KnownIndexPoint

_LOG = logging.getLogger("uvicorn.error")

DEFAULT_LEASE_INDEX_TYPE = (os.environ.get("DEFAULT_LEASE_INDEX_TYPE") or "ILAT").strip().upper() or "ILAT"


def normalize_index_type(index_type: Optional[str]) -> str:
    s = (index_type or "").strip().upper()
    return s or DEFAULT_LEASE_INDEX_TYPE


def _load_series(db: Session, index_type: str) -> List[InseeRentalIndexPoint]:
    rows = (
        db.query(InseeRentalIndex)
        .filter(InseeRentalIndex.index_type == index_type)
        .order_by(InseeRentalIndex.year.asc(), InseeRentalIndex.quarter.asc())
        .all()
    )
    return [InseeRentalIndexPoint(year=r.year, quarter=r.quarter, value=r.value) for r in rows]


def get_index_series(db: Session, index_type: Optional[str] = None) -> Tuple[str, List[InseeRentalIndexPoint]]:
    """
    Ordered quarterly series for index_type.
    Falls back to the default index type when the requested one has no rows.
    Returns (index type actually used, points).
    """
    requested = normalize_index_type(index_type)
    points = _load_series(db, requested)
    if not points and requested != DEFAULT_LEASE_INDEX_TYPE:
        _LOG.warning(
            "INDEX_SERIES_FALLBACK requested=%s rows=0 fallback=%s",
            requested,
            DEFAULT_LEASE_INDEX_TYPE,
        )
        return DEFAULT_LEASE_INDEX_TYPE, _load_series(db, DEFAULT_LEASE_INDEX_TYPE)
    return requested, points


def upsert_index_series(
    db: Session,
    index_type: str,
    points: Iterable[InseeRentalIndexPoint],
) -> int:
    """Insert or update (year, quarter) values for index_type. Returns the number of points written."""
    key = normalize_index_type(index_type)
    existing = {
        (r.year, r.quarter): r
        for r in db.query(InseeRentalIndex).filter(InseeRentalIndex.index_type == key).all()
    }
    count = 0
    for p in points:
        row = existing.get((p.year, p.quarter))
        if row is None:
            row = InseeRentalIndex(index_type=key, year=p.year, quarter=p.quarter, value=p.value)
            db.add(row)
            existing[(p.year, p.quarter)] = row
        else:
            row.value = p.value
        count += 1
    db.commit()
    _LOG.info("INDEX_SERIES_UPSERT index_type=%s points=%s", key, count)
    return count


def _anniversary(start_date: date, year: int) -> date:
    # add_years clamps Feb 29 to Feb 28 in non-leap years
    return add_years(start_date, year - start_date.year)


def build_index_inputs_for_lease(
    start_date: date,
    horizon_years: float,
    series: List[InseeRentalIndexPoint],
) -> Tuple[Optional[float], List[KnownIndexPoint]]:
    """
    Base index value and known index points for a lease starting on start_date.

    Base: the row for the start date's (year, quarter), else the latest row.
    Points: the anniversary of each year from the start year up to
    start year + horizon, wherever the same-quarter row exists.
    Returns (None, []) for an empty series.
    """
    if not series:
        return None, []

    base_quarter = quarter_of(start_date)
    by_key = {(p.year, p.quarter): p.value for p in series}
    base_value = by_key.get((start_date.year, base_quarter), series[-1].value)

    horizon_end_year = start_date.year + max(1, int(round(horizon_years)))
    known: List[KnownIndexPoint] = []
    for year in range(start_date.year, horizon_end_year + 1):
        value = by_key.get((year, base_quarter))
        if value is not None:
            known.append(KnownIndexPoint(effective_date=_anniversary(start_date, year), index_value=value))
    return base_value, known
