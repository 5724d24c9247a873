from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from models import BoundaryCondition, RentSchedulePeriod, ScheduleInput

from engine.apportion import apportion, blended_factor, day_weight, split_period
from engine.dates import add_months, anniversaries_within, full_years_since
from engine.indexation import IndexResolver
from engine.periods import BillingPeriod


def round_currency(value: float) -> float:
    return round(value, 2)


def _deduction(amount: float) -> float:
    """Amounts taken off the rent are reported negative (and never as -0.0)."""
    return -amount if amount else 0.0


@dataclass(frozen=True)
class Rates:
    """Contractual per-period amounts with absent components resolved to 0."""
    office: float = 0.0
    parking: float = 0.0
    charges: float = 0.0
    taxes: float = 0.0
    other_costs: float = 0.0
    charges_growth_rate: float = 0.0

    @classmethod
    def from_input(cls, data: ScheduleInput) -> "Rates":
        return cls(
            office=float(data.office_rent_ht or 0.0),
            parking=float(data.parking_rent_ht or 0.0),
            charges=float(data.charges_ht or 0.0),
            taxes=float(data.taxes_ht or 0.0),
            other_costs=float(data.other_costs_ht or 0.0),
            charges_growth_rate=float(data.charges_growth_rate or 0.0),
        )

    @property
    def rent(self) -> float:
        return self.office + self.parking

    @property
    def total(self) -> float:
        return self.office + self.parking + self.charges + self.taxes + self.other_costs


@dataclass
class ComposedSchedule:
    periods: List[RentSchedulePeriod] = field(default_factory=list)
    boundary_conditions: List[BoundaryCondition] = field(default_factory=list)


class RentComposer:
    """
    Turns billing periods into priced schedule rows.

    Rent (office, parking) follows the index; charges, taxes and other costs
    follow charges_growth_rate, compounded on each lease anniversary.
    """

    def __init__(self, data: ScheduleInput, resolver: IndexResolver) -> None:
        self.data = data
        self.resolver = resolver
        self.rates = Rates.from_input(data)
        months = int(data.franchise_months or 0)
        self.franchise_end: Optional[date] = add_months(data.start_date, months) if months > 0 else None
        self.incentive = float(data.incentive_amount or 0.0)

    def growth_factor_at(self, d: date) -> float:
        g = self.rates.charges_growth_rate
        if g == 0:
            return 1.0
        return (1.0 + g) ** full_years_since(self.data.start_date, d)

    def _growth_boundaries(self, period: BillingPeriod) -> List[date]:
        if self.rates.charges_growth_rate == 0:
            return []
        return anniversaries_within(self.data.start_date, period.start, period.end)

    def _franchise_waiver(self, period: BillingPeriod, index_dates: List[date], gross_rent: float) -> float:
        """Office + parking waived in this period (positive amount)."""
        if self.franchise_end is None or period.start >= self.franchise_end:
            return 0.0
        if period.end < self.franchise_end:
            return gross_rent
        parts = split_period(period, [*index_dates, self.franchise_end])
        waived = sum(
            self.rates.rent * day_weight(p.days, period.nominal_days) * self.resolver.factor_at(p.start)
            for p in parts
            if p.end < self.franchise_end
        )
        return min(round_currency(waived), gross_rent)

    def price_period(self, period: BillingPeriod) -> RentSchedulePeriod:
        index_dates = self.resolver.revision_dates_within(period.start, period.end)
        index_parts = split_period(period, index_dates)
        growth_parts = split_period(period, self._growth_boundaries(period))

        factor = blended_factor(index_parts, self.resolver.factor_at)
        office = round_currency(apportion(self.rates.office, period, index_parts, self.resolver.factor_at))
        parking = round_currency(apportion(self.rates.parking, period, index_parts, self.resolver.factor_at))
        charges = round_currency(apportion(self.rates.charges, period, growth_parts, self.growth_factor_at))
        taxes = round_currency(apportion(self.rates.taxes, period, growth_parts, self.growth_factor_at))
        other_costs = round_currency(apportion(self.rates.other_costs, period, growth_parts, self.growth_factor_at))
        franchise = _deduction(self._franchise_waiver(period, index_dates, round_currency(office + parking)))

        return RentSchedulePeriod(
            period_start=period.start,
            period_end=period.end,
            period_type=period.period_type,
            year=period.year,
            month=period.month,
            quarter=period.quarter,
            index_value=round(factor * self.resolver.base_index_value, 4),
            index_factor=round(factor, 6),
            office_rent_ht=office,
            parking_rent_ht=parking,
            charges_ht=charges,
            taxes_ht=taxes,
            other_costs_ht=other_costs,
            franchise_ht=franchise,
            incentives_ht=0.0,
            net_rent_ht=round_currency(office + parking + charges + taxes + other_costs + franchise),
        )

    def zero_period(self, period: BillingPeriod) -> RentSchedulePeriod:
        """Row for a zero-duration lease: index reported, nothing billed."""
        reading = self.resolver.resolve(period.start)
        return RentSchedulePeriod(
            period_start=period.start,
            period_end=period.end,
            period_type=period.period_type,
            year=period.year,
            month=period.month,
            quarter=period.quarter,
            index_value=round(reading.value, 4),
            index_factor=round(reading.factor, 6),
        )

    def apply_incentive(self, row: RentSchedulePeriod) -> tuple[RentSchedulePeriod, Optional[BoundaryCondition]]:
        """Deduct the incentive from the first row, never below zero."""
        if self.incentive <= 0:
            return row, None
        available = max(0.0, row.net_rent_ht)
        applied = round_currency(min(self.incentive, available))
        updated = row.model_copy(
            update={
                "incentives_ht": _deduction(applied),
                "net_rent_ht": round_currency(row.net_rent_ht - applied),
            }
        )
        condition = None
        if self.incentive > available:
            condition = BoundaryCondition(
                code="incentive_clamped",
                period_start=row.period_start,
                message="Incentive exceeds first period rent; net rent clamped to zero.",
                requested=round_currency(self.incentive),
                applied=applied,
            )
        return updated, condition

    def compose(self, periods: List[BillingPeriod], degenerate: bool = False) -> ComposedSchedule:
        out = ComposedSchedule()
        for i, period in enumerate(periods):
            row = self.zero_period(period) if degenerate else self.price_period(period)
            if i == 0:
                row, condition = self.apply_incentive(row)
                if condition is not None:
                    out.boundary_conditions.append(condition)
            out.periods.append(row)
        return out
