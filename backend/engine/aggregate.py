from __future__ import annotations

from functools import reduce
from itertools import groupby
from typing import Iterable, List, Optional, Sequence

from models import (
    BoundaryCondition,
    RentSchedulePeriod,
    ScheduleSummary,
    YearlyTotalSummary,
)

from engine.compose import Rates, round_currency
from engine.periods import DAYS_IN_YEAR, BillingPeriod


def _base_rent(row: RentSchedulePeriod) -> float:
    return row.office_rent_ht + row.parking_rent_ht


def _charges(row: RentSchedulePeriod) -> float:
    return row.charges_ht + row.taxes_ht + row.other_costs_ht


def _add_row(total: YearlyTotalSummary, row: RentSchedulePeriod) -> YearlyTotalSummary:
    return YearlyTotalSummary(
        year=total.year,
        base_rent_ht=total.base_rent_ht + _base_rent(row),
        charges_ht=total.charges_ht + _charges(row),
        franchise_ht=total.franchise_ht + row.franchise_ht,
        incentives_ht=total.incentives_ht + row.incentives_ht,
        net_rent_ht=total.net_rent_ht + row.net_rent_ht,
    )


def _rounded(total: YearlyTotalSummary) -> YearlyTotalSummary:
    return YearlyTotalSummary(
        year=total.year,
        base_rent_ht=round_currency(total.base_rent_ht),
        charges_ht=round_currency(total.charges_ht),
        franchise_ht=round_currency(total.franchise_ht),
        incentives_ht=round_currency(total.incentives_ht),
        net_rent_ht=round_currency(total.net_rent_ht),
    )


def yearly_totals(schedule: Sequence[RentSchedulePeriod]) -> List[YearlyTotalSummary]:
    """Per calendar year of period_start; the schedule is chronological so years are contiguous."""
    out: List[YearlyTotalSummary] = []
    for year, rows in groupby(schedule, key=lambda r: r.year):
        out.append(_rounded(reduce(_add_row, rows, YearlyTotalSummary(year=year))))
    return out


def deposit_amount(
    deposit_months: Optional[float],
    periods: Sequence[BillingPeriod],
    schedule: Sequence[RentSchedulePeriod],
    rates: Rates,
    months_per_period: int,
) -> float:
    """
    Deposit = months x monthly equivalent of the first full period's gross rent
    (office, parking, charges, taxes, other costs; before franchise/incentive).
    Falls back to the contractual amounts when the lease has no full period.
    """
    months = float(deposit_months or 0.0)
    if months <= 0:
        return 0.0
    period_total = rates.total
    for period, row in zip(periods, schedule):
        if not period.is_partial:
            period_total = _base_rent(row) + _charges(row)
            break
    return round_currency(months * period_total / months_per_period)


def compute_tcam(schedule: Sequence[RentSchedulePeriod]) -> float:
    """Compound annual growth of net rent between the first and last periods."""
    if len(schedule) < 2:
        return 0.0
    first, last = schedule[0], schedule[-1]
    if first.net_rent_ht <= 0 or last.net_rent_ht < 0:
        return 0.0
    years = (last.period_start - first.period_start).days / DAYS_IN_YEAR
    if years <= 0:
        return 0.0
    return round((last.net_rent_ht / first.net_rent_ht) ** (1.0 / years) - 1.0, 6)


def build_summary(
    schedule: Sequence[RentSchedulePeriod],
    deposit_ht: float,
    boundary_conditions: Iterable[BoundaryCondition] = (),
) -> ScheduleSummary:
    totals = yearly_totals(schedule)
    return ScheduleSummary(
        yearly_totals=totals,
        total_base_rent_ht=round_currency(sum(t.base_rent_ht for t in totals)),
        total_charges_ht=round_currency(sum(t.charges_ht for t in totals)),
        total_net_rent_ht=round_currency(sum(t.net_rent_ht for t in totals)),
        deposit_ht=deposit_ht,
        tcam=compute_tcam(schedule),
        boundary_conditions=list(boundary_conditions),
    )
