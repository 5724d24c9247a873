from datetime import date, timedelta

import pytest

from engine import ScheduleConfigurationError, compute_lease_rent_schedule
from models import KnownIndexPoint, PaymentFrequency, ScheduleInput


def _input(**overrides) -> ScheduleInput:
    data = dict(
        start_date=date(2024, 4, 5),
        end_date=date(2027, 4, 4),
        payment_frequency=PaymentFrequency.QUARTERLY,
        base_index_value=100.0,
        known_index_points=[KnownIndexPoint(effective_date=date(2025, 4, 5), index_value=110.0)],
        office_rent_ht=912.5,
    )
    data.update(overrides)
    return ScheduleInput(**data)


def _by_start(result):
    return {row.period_start: row for row in result.schedule}


def test_quarterly_schedule_with_mid_period_revision():
    result = compute_lease_rent_schedule(_input())
    rows = result.schedule

    assert len(rows) == 13
    assert rows[0].period_start == date(2024, 4, 5)
    assert rows[0].period_end == date(2024, 6, 30)
    assert rows[0].office_rent_ht == pytest.approx(870.00)
    for row in rows[1:4]:
        assert row.office_rent_ht == pytest.approx(912.50)
        assert row.index_factor == pytest.approx(1.0)

    q2_2025 = rows[4]
    assert q2_2025.period_start == date(2025, 4, 1)
    assert q2_2025.office_rent_ht == pytest.approx(997.00)
    assert 1.0 < q2_2025.index_factor < 1.1

    for row in rows[5:12]:
        assert row.office_rent_ht == pytest.approx(1003.75)
        assert row.index_value == pytest.approx(110.0)
        assert row.index_factor == pytest.approx(1.1)

    last = rows[-1]
    assert last.period_start == date(2027, 4, 1)
    assert last.period_end == date(2027, 4, 4)
    assert last.office_rent_ht == pytest.approx(44.00)


def test_rows_carry_period_labels():
    rows = compute_lease_rent_schedule(_input()).schedule
    assert all(r.period_type == "quarter" and r.month is None for r in rows)
    assert [r.quarter for r in rows[:4]] == [2, 3, 4, 1]
    assert [r.year for r in rows[:4]] == [2024, 2024, 2024, 2025]

    monthly = compute_lease_rent_schedule(
        _input(payment_frequency=PaymentFrequency.MONTHLY, end_date=date(2024, 6, 30))
    ).schedule
    assert [r.month for r in monthly] == [4, 5, 6]
    assert all(r.period_type == "month" and r.quarter is None for r in monthly)


def test_periods_cover_lease_without_gaps():
    data = _input(payment_frequency=PaymentFrequency.MONTHLY, end_date=date(2026, 2, 17))
    rows = compute_lease_rent_schedule(data).schedule

    assert rows[0].period_start == data.start_date
    assert rows[-1].period_end == data.end_date
    for prev, nxt in zip(rows, rows[1:]):
        assert nxt.period_start == prev.period_end + timedelta(days=1)
        assert prev.period_start <= prev.period_end


def test_horizon_caps_the_schedule():
    data = _input(
        start_date=date(2024, 1, 1),
        end_date=date(2040, 12, 31),
        known_index_points=[],
        horizon_years=2,
    )
    rows = compute_lease_rent_schedule(data).schedule
    assert rows[-1].period_end == date(2026, 1, 1)


def test_default_horizon_is_three_years():
    data = _input(start_date=date(2024, 1, 1), end_date=date(2040, 12, 31), known_index_points=[])
    rows = compute_lease_rent_schedule(data).schedule
    assert rows[-1].period_end == date(2027, 1, 1)


def test_rent_never_decreases_with_rising_index():
    points = [
        KnownIndexPoint(effective_date=date(2025, 4, 5), index_value=104.0),
        KnownIndexPoint(effective_date=date(2026, 4, 5), index_value=109.0),
    ]
    data = _input(payment_frequency=PaymentFrequency.MONTHLY, known_index_points=points)
    rows = compute_lease_rent_schedule(data).schedule
    full = [r for r in rows if r.period_start.day == 1 and r.period_end.month == r.period_start.month]
    # Compare per-day amounts so shorter months do not count as decreases.
    daily = [r.office_rent_ht / ((r.period_end - r.period_start).days + 1) for r in full]
    factors = [r.index_factor for r in full]
    assert factors == sorted(factors)
    assert max(daily) > min(daily)


def test_full_franchise_months_zero_the_rent():
    data = _input(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        payment_frequency=PaymentFrequency.MONTHLY,
        known_index_points=[],
        office_rent_ht=1000.0,
        charges_ht=100.0,
        franchise_months=3,
    )
    rows = compute_lease_rent_schedule(data).schedule

    for row in rows[:3]:
        assert row.franchise_ht == pytest.approx(-1000.0)
        assert row.net_rent_ht == pytest.approx(100.0)
    assert rows[3].franchise_ht == 0.0
    assert rows[3].net_rent_ht == pytest.approx(1100.0)


def test_franchise_ending_mid_period_waives_covered_days():
    data = _input(
        start_date=date(2024, 1, 15),
        end_date=date(2024, 6, 30),
        payment_frequency=PaymentFrequency.MONTHLY,
        known_index_points=[],
        office_rent_ht=1000.0,
        franchise_months=1,
    )
    rows = compute_lease_rent_schedule(data).schedule

    assert rows[0].net_rent_ht == 0.0
    feb = rows[1]
    assert feb.office_rent_ht == pytest.approx(1000.0)
    assert feb.franchise_ht == pytest.approx(-460.27)
    assert feb.net_rent_ht == pytest.approx(539.73)
    assert rows[2].franchise_ht == 0.0


def test_franchise_longer_than_lease_never_goes_negative():
    data = _input(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 6, 30),
        known_index_points=[],
        office_rent_ht=3000.0,
        franchise_months=24,
    )
    rows = compute_lease_rent_schedule(data).schedule
    assert all(r.net_rent_ht == 0.0 for r in rows)
    assert all(r.franchise_ht == -r.office_rent_ht for r in rows)


def test_incentive_applied_to_first_period():
    data = _input(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        payment_frequency=PaymentFrequency.MONTHLY,
        known_index_points=[],
        office_rent_ht=1000.0,
        incentive_amount=300.0,
    )
    result = compute_lease_rent_schedule(data)
    first, second = result.schedule[0], result.schedule[1]

    assert first.incentives_ht == pytest.approx(-300.0)
    assert first.net_rent_ht == pytest.approx(700.0)
    assert second.incentives_ht == 0.0
    assert second.net_rent_ht == pytest.approx(1000.0)
    assert result.summary.boundary_conditions == []


def test_incentive_larger_than_first_period_is_clamped():
    data = _input(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        payment_frequency=PaymentFrequency.MONTHLY,
        known_index_points=[],
        office_rent_ht=1000.0,
        incentive_amount=1500.0,
    )
    result = compute_lease_rent_schedule(data)
    first = result.schedule[0]

    assert first.net_rent_ht == 0.0
    assert first.incentives_ht == pytest.approx(-1000.0)
    [condition] = result.summary.boundary_conditions
    assert condition.code == "incentive_clamped"
    assert condition.requested == pytest.approx(1500.0)
    assert condition.applied == pytest.approx(1000.0)
    assert all(r.net_rent_ht >= 0 for r in result.schedule)


def test_charges_grow_on_anniversary():
    data = _input(
        start_date=date(2024, 1, 1),
        end_date=date(2025, 12, 31),
        known_index_points=[],
        office_rent_ht=1000.0,
        charges_ht=100.0,
        taxes_ht=50.0,
        charges_growth_rate=0.1,
    )
    rows = compute_lease_rent_schedule(data).schedule

    assert [r.charges_ht for r in rows[:4]] == [100.0] * 4
    assert [r.charges_ht for r in rows[4:]] == [pytest.approx(110.0)] * 4
    assert rows[4].taxes_ht == pytest.approx(55.0)
    # Rent follows the index only.
    assert all(r.office_rent_ht == pytest.approx(1000.0) for r in rows)


def test_charges_growth_splits_period_on_mid_period_anniversary():
    data = _input(
        start_date=date(2024, 2, 15),
        end_date=date(2025, 12, 31),
        known_index_points=[],
        office_rent_ht=1000.0,
        charges_ht=100.0,
        charges_growth_rate=0.1,
    )
    by_start = _by_start(compute_lease_rent_schedule(data))
    assert by_start[date(2025, 1, 1)].charges_ht == pytest.approx(103.56)
    assert by_start[date(2025, 4, 1)].charges_ht == pytest.approx(110.0)


def test_net_rent_adds_up_row_components():
    data = _input(
        parking_rent_ht=150.0,
        charges_ht=200.0,
        taxes_ht=80.0,
        other_costs_ht=20.0,
        franchise_months=2,
        incentive_amount=100.0,
    )
    for row in compute_lease_rent_schedule(data).schedule:
        total = (
            row.office_rent_ht
            + row.parking_rent_ht
            + row.charges_ht
            + row.taxes_ht
            + row.other_costs_ht
            + row.franchise_ht
            + row.incentives_ht
        )
        assert row.net_rent_ht == pytest.approx(total, abs=0.011)


def test_yearly_totals_aggregate_rows():
    result = compute_lease_rent_schedule(_input(charges_ht=100.0))
    summary = result.summary

    assert [t.year for t in summary.yearly_totals] == [2024, 2025, 2026, 2027]
    base_2024 = summary.yearly_totals[0]
    assert base_2024.base_rent_ht == pytest.approx(870.0 + 912.5 * 2)
    assert summary.yearly_totals[1].base_rent_ht == pytest.approx(912.5 + 997.0 + 1003.75 * 2)
    for total in summary.yearly_totals:
        rows = [r for r in result.schedule if r.year == total.year]
        assert total.net_rent_ht == pytest.approx(sum(r.net_rent_ht for r in rows), abs=0.01)
        assert total.charges_ht == pytest.approx(sum(r.charges_ht for r in rows), abs=0.01)

    assert summary.total_net_rent_ht == pytest.approx(
        sum(t.net_rent_ht for t in summary.yearly_totals), abs=0.01
    )
    assert summary.total_base_rent_ht == pytest.approx(2695.0 + 3917.0 + 4015.0 + 1047.75)


def test_deposit_uses_first_full_period():
    data = _input(charges_ht=87.5, deposit_months=3)
    summary = compute_lease_rent_schedule(data).summary
    assert summary.deposit_ht == pytest.approx(1000.0)


def test_deposit_falls_back_to_contract_amounts_without_full_period():
    data = _input(end_date=date(2024, 5, 31), deposit_months=3)
    summary = compute_lease_rent_schedule(data).summary
    assert summary.deposit_ht == pytest.approx(912.5)


def test_tcam_between_first_and_last_period():
    data = _input(
        start_date=date(2024, 1, 1),
        end_date=date(2025, 3, 31),
        known_index_points=[KnownIndexPoint(effective_date=date(2025, 1, 1), index_value=110.0)],
        office_rent_ht=1000.0,
    )
    result = compute_lease_rent_schedule(data)
    assert result.schedule[-1].net_rent_ht == pytest.approx(1100.0)
    assert result.summary.tcam == pytest.approx(1.1 ** (365 / 366) - 1, abs=1e-6)


def test_tcam_is_zero_for_single_period_or_free_first_period():
    single = _input(end_date=date(2024, 6, 30))
    assert compute_lease_rent_schedule(single).summary.tcam == 0.0

    free_start = _input(franchise_months=3)
    assert compute_lease_rent_schedule(free_start).summary.tcam == 0.0


def test_zero_length_lease_yields_single_zero_row():
    d = date(2024, 3, 10)
    data = _input(start_date=d, end_date=d, known_index_points=[], charges_ht=100.0, deposit_months=0)
    result = compute_lease_rent_schedule(data)

    [row] = result.schedule
    assert row.period_start == d and row.period_end == d
    assert row.net_rent_ht == 0.0
    assert row.office_rent_ht == 0.0
    assert row.index_value == pytest.approx(100.0)
    assert result.summary.total_net_rent_ht == 0.0
    assert result.summary.tcam == 0.0


def test_end_before_start_is_a_configuration_error():
    data = _input(start_date=date(2024, 5, 1), end_date=date(2024, 4, 30))
    with pytest.raises(ScheduleConfigurationError):
        compute_lease_rent_schedule(data)
    assert issubclass(ScheduleConfigurationError, ValueError)


def test_invalid_amounts_are_rejected_by_validation():
    with pytest.raises(ValueError):
        _input(office_rent_ht=-1.0)
    with pytest.raises(ValueError):
        _input(payment_frequency="weekly")
    with pytest.raises(ValueError):
        _input(base_index_value=0)


def test_frequency_accepts_casing_variants():
    assert _input(payment_frequency=" Quarterly ").payment_frequency is PaymentFrequency.QUARTERLY


def test_computation_is_idempotent():
    data = _input(parking_rent_ht=120.0, charges_ht=50.0, franchise_months=1, incentive_amount=80.0)
    first = compute_lease_rent_schedule(data)
    second = compute_lease_rent_schedule(data)
    assert first.model_dump() == second.model_dump()


def test_result_serializes_camel_case():
    payload = compute_lease_rent_schedule(_input()).model_dump(mode="json", by_alias=True)
    assert "yearlyTotals" in payload["summary"]
    assert "netRentHT" in payload["schedule"][0]
    assert payload["schedule"][0]["periodStart"] == "2024-04-05"
    summary = payload["summary"]
    assert {"totalBaseRentHT", "totalChargesHT", "totalNetRentHT", "depositHT"} <= set(summary)
    assert "baseRentHT" in summary["yearlyTotals"][0]


def test_input_accepts_ht_wire_names_and_snake_case():
    wire = ScheduleInput.model_validate(
        {
            "startDate": "2024-04-05",
            "endDate": "2027-04-04",
            "paymentFrequency": "quarterly",
            "baseIndexValue": 100,
            "officeRentHT": 912.5,
            "parkingRentHT": 50,
            "chargesHT": 100,
            "taxesHT": 20,
            "otherCostsHT": 5,
        }
    )
    assert wire.office_rent_ht == 912.5
    assert (wire.parking_rent_ht, wire.charges_ht, wire.taxes_ht, wire.other_costs_ht) == (50, 100, 20, 5)

    snake = ScheduleInput.model_validate(
        {
            "start_date": "2024-04-05",
            "end_date": "2027-04-04",
            "payment_frequency": "quarterly",
            "base_index_value": 100,
            "office_rent_ht": 912.5,
        }
    )
    assert snake.office_rent_ht == 912.5


def test_unknown_input_fields_are_rejected():
    with pytest.raises(ValueError):
        ScheduleInput.model_validate(
            {
                "startDate": "2024-04-05",
                "endDate": "2027-04-04",
                "paymentFrequency": "quarterly",
                "baseIndexValue": 100,
                "officeRentHt": 912.5,
            }
        )
