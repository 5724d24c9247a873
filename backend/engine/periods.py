from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List

from models import PaymentFrequency

from engine.dates import (
    days_inclusive,
    end_of_month,
    end_of_quarter,
    quarter_of,
    start_of_month,
    start_of_quarter,
)
from engine.errors import ScheduleConfigurationError

DAYS_IN_YEAR = 365


@dataclass(frozen=True)
class BillingPeriod:
    """
    One billing period of the schedule.

    start/end are the billed bounds (inclusive). anchor_start/anchor_end are
    the calendar month or quarter the period belongs to; they differ from
    start/end only for the first and last periods of the lease.
    """
    start: date
    end: date
    anchor_start: date
    anchor_end: date
    frequency: PaymentFrequency

    @property
    def days(self) -> int:
        return days_inclusive(self.start, self.end)

    @property
    def is_partial(self) -> bool:
        return self.start != self.anchor_start or self.end != self.anchor_end

    @property
    def nominal_days(self) -> float:
        """Average length of a billing period in days (365 / periods per year)."""
        return DAYS_IN_YEAR / self.frequency.periods_per_year

    @property
    def period_type(self) -> str:
        return "month" if self.frequency is PaymentFrequency.MONTHLY else "quarter"

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def month(self) -> int | None:
        return self.start.month if self.frequency is PaymentFrequency.MONTHLY else None

    @property
    def quarter(self) -> int | None:
        return quarter_of(self.start) if self.frequency is PaymentFrequency.QUARTERLY else None


def _anchor_bounds(d: date, frequency: PaymentFrequency) -> tuple[date, date]:
    if frequency is PaymentFrequency.MONTHLY:
        return start_of_month(d), end_of_month(d)
    return start_of_quarter(d), end_of_quarter(d)


def generate_periods(
    start_date: date,
    end_date: date,
    frequency: PaymentFrequency,
) -> List[BillingPeriod]:
    """
    Enumerate contiguous billing periods covering [start_date, end_date].

    Periods follow calendar months or calendar quarters. When start_date equals
    end_date a single one-day period is returned.
    """
    if start_date > end_date:
        raise ScheduleConfigurationError(
            f"end_date ({end_date.isoformat()}) must be on or after start_date ({start_date.isoformat()})."
        )

    periods: List[BillingPeriod] = []
    cursor = start_date
    while cursor <= end_date:
        anchor_start, anchor_end = _anchor_bounds(cursor, frequency)
        period_end = min(anchor_end, end_date)
        periods.append(
            BillingPeriod(
                start=cursor,
                end=period_end,
                anchor_start=anchor_start,
                anchor_end=anchor_end,
                frequency=frequency,
            )
        )
        cursor = period_end + timedelta(days=1)
    return periods
