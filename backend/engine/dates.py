"""Calendar helpers for period generation. Dates only, no time of day."""

from __future__ import annotations

import calendar
from datetime import date, timedelta


def add_months(d: date, months: int) -> date:
    """Same day `months` months later, clamped to the target month's length."""
    year = d.year
    month = d.month + months
    while month > 12:
        month -= 12
        year += 1
    while month < 1:
        month += 12
        year -= 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(d: date, years: int) -> date:
    return add_months(d, 12 * years)


def add_horizon(d: date, horizon_years: float) -> date:
    """Fractional horizons are rounded to whole months."""
    if float(horizon_years).is_integer():
        return add_years(d, int(horizon_years))
    return add_months(d, int(round(horizon_years * 12)))


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def quarter_of(d: date) -> int:
    return (d.month - 1) // 3 + 1


def start_of_quarter(d: date) -> date:
    return date(d.year, 3 * (quarter_of(d) - 1) + 1, 1)


def end_of_quarter(d: date) -> date:
    return end_of_month(date(d.year, 3 * quarter_of(d), 1))


def days_inclusive(start: date, end: date) -> int:
    """Number of calendar days in [start, end]; 0 when end precedes start."""
    return max(0, (end - start).days + 1)


def full_years_since(start: date, target: date) -> int:
    """Completed lease years at `target` (anniversaries reached)."""
    years = target.year - start.year
    if target < add_years(start, years):
        years -= 1
    return max(0, years)


def anniversaries_within(start: date, period_start: date, period_end: date) -> list[date]:
    """Lease anniversaries t with period_start < t <= period_end."""
    out: list[date] = []
    k = max(1, period_start.year - start.year)
    while True:
        anniversary = add_years(start, k)
        if anniversary > period_end:
            break
        if anniversary > period_start:
            out.append(anniversary)
        k += 1
    return out


def day_before(d: date) -> date:
    return d - timedelta(days=1)
