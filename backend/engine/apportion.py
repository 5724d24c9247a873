"""
Day-weighted apportionment of a billing period.

A period is cut into sub-intervals at every boundary date falling inside it
(index revision, lease anniversary, end of franchise). Each sub-interval is
billed at the daily rate (period rate / nominal period length) times the
factor in force on its first day. A full period with no boundary inside is
billed at the period rate with no proration.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List

from engine.dates import day_before, days_inclusive
from engine.periods import BillingPeriod

FactorAt = Callable[[date], float]


@dataclass(frozen=True)
class SubInterval:
    start: date
    end: date

    @property
    def days(self) -> int:
        return days_inclusive(self.start, self.end)


def split_period(period: BillingPeriod, boundaries: Iterable[date]) -> List[SubInterval]:
    """Cut [period.start, period.end] so that each boundary starts a new sub-interval."""
    cuts = sorted({b for b in boundaries if period.start < b <= period.end})
    out: List[SubInterval] = []
    cursor = period.start
    for cut in cuts:
        out.append(SubInterval(cursor, day_before(cut)))
        cursor = cut
    out.append(SubInterval(cursor, period.end))
    return out


def day_weight(days: int, nominal_days: float) -> float:
    if nominal_days <= 0:
        return 0.0
    return days / nominal_days


def needs_proration(period: BillingPeriod, parts: List[SubInterval]) -> bool:
    return period.is_partial or len(parts) > 1


def apportion(
    rate: float,
    period: BillingPeriod,
    parts: List[SubInterval],
    factor_at: FactorAt,
) -> float:
    """Amount due for `rate` (per full period) over the given sub-intervals."""
    if rate == 0:
        return 0.0
    if not needs_proration(period, parts):
        return rate * factor_at(period.start)
    return sum(
        rate * day_weight(part.days, period.nominal_days) * factor_at(part.start)
        for part in parts
    )


def blended_factor(parts: List[SubInterval], factor_at: FactorAt) -> float:
    """Day-weighted average factor over the sub-intervals (display only)."""
    total_days = sum(part.days for part in parts)
    if total_days <= 0:
        return factor_at(parts[0].start) if parts else 1.0
    return sum(part.days * factor_at(part.start) for part in parts) / total_days
