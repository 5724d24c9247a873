"""
Map a lease extraction record to calculator input.

Extracted amounts are annual or quarterly; the calculator wants amounts per
billing period. Returns (input, None) or (None, reason) when a required
field is missing.
"""

from __future__ import annotations

import os
from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from engine.compose import round_currency
from engine.dates import add_horizon, add_years
from models import (
    ExtractedValue,
    InseeRentalIndexPoint,
    LeaseExtraction,
    PaymentFrequency,
    ScheduleInput,
)
from services.index_series import build_index_inputs_for_lease, normalize_index_type

DEFAULT_HORIZON_YEARS = float(os.environ.get("RENT_SCHEDULE_HORIZON_YEARS", "3") or 3)

REASON_MISSING_START = "Date de début manquante"
REASON_INVALID_FREQUENCY = "Fréquence de paiement manquante ou invalide"
REASON_MISSING_OFFICE_RENT = "Loyer bureaux manquant"
REASON_MISSING_INDEX = "Impossible de récupérer l'indice INSEE de base"


def _number(field: Optional[ExtractedValue]) -> Optional[float]:
    """Numeric value of an extracted field; accepts '12 500,50' style strings."""
    if field is None or field.value is None or isinstance(field.value, bool):
        return None
    v = field.value
    if isinstance(v, (int, float)):
        return float(v)
    if isinstance(v, str):
        s = v.replace("\u00a0", "").replace(" ", "").replace("€", "").replace(",", ".")
        try:
            return float(s)
        except ValueError:
            return None
    return None


def _date(field: Optional[ExtractedValue]) -> Optional[date]:
    if field is None or field.value is None:
        return None
    v = field.value
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str) and v.strip():
        try:
            return datetime.fromisoformat(v.strip().replace("Z", "+00:00").split("T")[0]).date()
        except ValueError:
            return None
    return None


def _frequency(field: Optional[ExtractedValue]) -> Optional[PaymentFrequency]:
    if field is None or not isinstance(field.value, str):
        return None
    try:
        return PaymentFrequency(field.value.strip().lower())
    except ValueError:
        return None


def _per_period(
    annual: Optional[float],
    quarterly: Optional[float],
    frequency: PaymentFrequency,
) -> Optional[float]:
    """Quarterly billing prefers the quarterly figure, monthly billing the annual one."""
    if frequency is PaymentFrequency.QUARTERLY:
        if quarterly is not None:
            out = quarterly
        elif annual is not None:
            out = annual / 4
        else:
            return None
    else:
        if annual is not None:
            out = annual / 12
        elif quarterly is not None:
            out = quarterly / 3
        else:
            return None
    return round_currency(out)


def _taxes_per_period(extraction: LeaseExtraction, frequency: PaymentFrequency) -> Optional[float]:
    property_tax = _number(extraction.taxes.property_tax_amount)
    office_tax = _number(extraction.taxes.office_tax_amount)
    if property_tax is None and office_tax is None:
        return None
    annual = (property_tax or 0.0) + (office_tax or 0.0)
    return round_currency(annual / frequency.periods_per_year)


def _end_date(extraction: LeaseExtraction, start: date, horizon_years: float) -> date:
    explicit = _date(extraction.calendar.end_date)
    if explicit is not None:
        return explicit
    duration = _number(extraction.calendar.duration)
    if duration is not None:
        return add_years(start, max(1, int(round(duration))))
    return add_horizon(start, horizon_years)


def index_type_for(extraction: LeaseExtraction) -> str:
    v = extraction.indexation.indexation_type.value
    return normalize_index_type(v if isinstance(v, str) else None)


def lease_start_date(extraction: LeaseExtraction) -> Optional[date]:
    return _date(extraction.calendar.effective_date) or _date(extraction.calendar.signature_date)


def build_schedule_input_from_extraction(
    extraction: LeaseExtraction,
    series: List[InseeRentalIndexPoint],
    horizon_years: Optional[float] = None,
) -> Tuple[Optional[ScheduleInput], Optional[str]]:
    horizon = horizon_years if horizon_years is not None else DEFAULT_HORIZON_YEARS

    start = lease_start_date(extraction)
    if start is None:
        return None, REASON_MISSING_START

    frequency = _frequency(extraction.rent.payment_frequency)
    if frequency is None:
        return None, REASON_INVALID_FREQUENCY

    rent = extraction.rent
    office = _per_period(
        _number(rent.annual_rent_excl_tax_excl_charges),
        _number(rent.quarterly_rent_excl_tax_excl_charges),
        frequency,
    )
    if not office:
        return None, REASON_MISSING_OFFICE_RENT
    parking = _per_period(
        _number(rent.annual_parking_rent_excl_charges),
        _number(rent.quarterly_parking_rent_excl_charges),
        frequency,
    )
    charges = _per_period(
        _number(extraction.charges.annual_charges_provision_excl_tax),
        _number(extraction.charges.quarterly_charges_provision_excl_tax),
        frequency,
    )
    taxes = _taxes_per_period(extraction, frequency)

    base_index_value, known_points = build_index_inputs_for_lease(start, horizon, series)
    if not base_index_value:
        return None, REASON_MISSING_INDEX

    raw_franchise = _number(extraction.support_measures.rent_free_period_months)
    franchise_months = int(round(raw_franchise)) if raw_franchise and raw_franchise > 0 else None

    deposit_months = None
    deposit = _number(extraction.securities.security_deposit_amount)
    if deposit is not None and deposit > 0:
        monthly_office = office / frequency.months_per_period
        deposit_months = round(deposit / monthly_office, 4)

    schedule_input = ScheduleInput(
        start_date=start,
        end_date=_end_date(extraction, start, horizon),
        payment_frequency=frequency,
        base_index_value=base_index_value,
        known_index_points=known_points,
        office_rent_ht=office,
        parking_rent_ht=parking or None,
        charges_ht=charges or None,
        taxes_ht=taxes or None,
        franchise_months=franchise_months or None,
        deposit_months=deposit_months,
        horizon_years=horizon,
    )
    return schedule_input, None
