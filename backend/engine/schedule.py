"""
Lease rent schedule calculator.

Pure function of its input: periods are generated, priced against the index
and growth factors, adjusted for franchise and incentive, then rolled up.
"""

from __future__ import annotations

import logging
from datetime import date

from models import ComputeLeaseRentScheduleResult, ScheduleInput

from engine.aggregate import build_summary, deposit_amount
from engine.compose import RentComposer
from engine.dates import add_horizon
from engine.errors import ScheduleConfigurationError
from engine.indexation import IndexResolver
from engine.periods import generate_periods

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_YEARS = 3


def effective_end_date(data: ScheduleInput) -> date:
    """min(end_date, start_date + horizon_years)."""
    horizon = data.horizon_years if data.horizon_years is not None else DEFAULT_HORIZON_YEARS
    if horizon <= 0:
        raise ScheduleConfigurationError("horizon_years must be greater than zero.")
    return min(data.end_date, add_horizon(data.start_date, horizon))


def compute_lease_rent_schedule(data: ScheduleInput) -> ComputeLeaseRentScheduleResult:
    """
    Project rent due period by period over the lease (capped by the horizon).

    Raises ScheduleConfigurationError when the input is inconsistent.
    """
    if data.start_date > data.end_date:
        raise ScheduleConfigurationError(
            f"end_date ({data.end_date.isoformat()}) must be on or after start_date ({data.start_date.isoformat()})."
        )
    end = effective_end_date(data)
    periods = generate_periods(data.start_date, end, data.payment_frequency)
    resolver = IndexResolver(data.base_index_value, data.start_date, data.known_index_points)
    composer = RentComposer(data, resolver)

    composed = composer.compose(periods, degenerate=data.start_date == end)
    deposit_ht = deposit_amount(
        data.deposit_months,
        periods,
        composed.periods,
        composer.rates,
        data.payment_frequency.months_per_period,
    )
    summary = build_summary(composed.periods, deposit_ht, composed.boundary_conditions)

    logger.debug(
        "rent schedule computed start=%s end=%s frequency=%s periods=%d total_net=%.2f",
        data.start_date,
        end,
        data.payment_frequency.value,
        len(composed.periods),
        summary.total_net_rent_ht,
    )
    return ComputeLeaseRentScheduleResult(summary=summary, schedule=composed.periods)
