"""Tests for the booking cost calculator."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from app.domain.bookings.pricing import (
    BookingDetails,
    ExtraPriceType,
    PricedExtra,
    calculate_total_booking_cost,
    count_nights,
    extra_cost_preview,
    extra_multiplier,
)
from app.exceptions import ValidationError


def _extra(extra_id=1, price_eur="20", price_mga="90000", price_type=ExtraPriceType.PER_PERSON, name="Breakfast"):
    return PricedExtra(
        id=extra_id,
        name=name,
        price_eur=Decimal(price_eur),
        price_mga=Decimal(price_mga),
        price_type=price_type,
    )


def _details(nights=3, guests=2):
    start = date(2024, 6, 10)
    return BookingDetails(start, date(2024, 6, 10 + nights), guests)


# --- calculate_total_booking_cost ---


def test_per_person_extra_scenario():
    """100€ × 3 nights + 20€ per person × 2 guests."""
    breakdown = calculate_total_booking_cost(100, 3, [_extra()], _details(3, 2))

    assert breakdown.base_total == Decimal("300.00")
    assert breakdown.extras_total == Decimal("40.00")
    assert breakdown.grand_total == Decimal("340.00")
    assert breakdown.number_of_nights == 3
    assert len(breakdown.lines) == 1
    assert breakdown.lines[0].multiplier == 2
    assert breakdown.lines[0].description == "20.00€ × 2 guests = 40.00€"


def test_grand_total_is_base_plus_extras():
    extras = [
        _extra(1, "12.5", price_type=ExtraPriceType.PER_DAY, name="Parking"),
        _extra(2, "7.33", price_type=ExtraPriceType.PER_DAY_PERSON, name="Towels"),
        _extra(3, "49.99", price_type=ExtraPriceType.PER_BOOKING, name="Cleaning"),
    ]
    breakdown = calculate_total_booking_cost("89.90", 4, extras, _details(4, 3))

    assert breakdown.base_total == breakdown.base_price_per_night * 4
    assert breakdown.grand_total == breakdown.base_total + breakdown.extras_total
    assert breakdown.extras_total == sum(line.cost for line in breakdown.lines)


def test_per_day_per_person_extra():
    extra = _extra(price_eur="5", price_type=ExtraPriceType.PER_DAY_PERSON)
    breakdown = calculate_total_booking_cost(100, 3, [extra], _details(3, 2))

    assert breakdown.lines[0].cost == Decimal("5.00") * 3 * 2
    assert breakdown.lines[0].description == "5.00€ × 3 nights × 2 guests = 30.00€"


def test_identical_inputs_give_identical_quotes():
    extras = [_extra(), _extra(2, "15", price_type=ExtraPriceType.PER_DAY, name="Parking")]
    first = calculate_total_booking_cost(100, 3, extras, _details())
    second = calculate_total_booking_cost(100, 3, extras, _details())
    assert first == second


def test_mga_amounts_have_no_minor_unit():
    breakdown = calculate_total_booking_cost(
        "450000.4", 2, [_extra(price_mga="15000.6", price_type=ExtraPriceType.PER_BOOKING)], _details(2, 1), "MGA"
    )
    assert breakdown.base_price_per_night == Decimal("450000")
    assert breakdown.extras_total == Decimal("15001")
    assert breakdown.grand_total == Decimal("915001")
    assert breakdown.lines[0].description == "15001Ar per booking"


def test_no_extras():
    breakdown = calculate_total_booking_cost(80, 2, [], _details(2, 1))
    assert breakdown.extras_total == Decimal("0.00")
    assert breakdown.grand_total == Decimal("160.00")


def test_rejects_non_positive_nights():
    with pytest.raises(ValidationError):
        calculate_total_booking_cost(100, 0, [], _details())


def test_rejects_non_positive_guests():
    with pytest.raises(ValidationError):
        calculate_total_booking_cost(100, 2, [], BookingDetails(date(2024, 6, 1), date(2024, 6, 3), 0))


# --- count_nights / multipliers ---


def test_count_nights_dates():
    assert count_nights(date(2024, 6, 10), date(2024, 6, 15)) == 5


def test_count_nights_rounds_partial_days_up():
    assert count_nights(datetime(2024, 6, 10, 15), datetime(2024, 6, 12, 11)) == 2
    assert count_nights(datetime(2024, 6, 10, 10), datetime(2024, 6, 12, 11)) == 3


def test_count_nights_rejects_empty_stay():
    with pytest.raises(ValidationError):
        count_nights(date(2024, 6, 10), date(2024, 6, 10))


@pytest.mark.parametrize(
    "price_type,expected",
    [
        (ExtraPriceType.PER_DAY, 4),
        (ExtraPriceType.PER_PERSON, 3),
        (ExtraPriceType.PER_DAY_PERSON, 12),
        (ExtraPriceType.PER_BOOKING, 1),
    ],
)
def test_extra_multiplier(price_type, expected):
    assert extra_multiplier(price_type, nights=4, guests=3) == expected


def test_preview_single_night_is_singular():
    line = extra_cost_preview(_extra(price_eur="10", price_type=ExtraPriceType.PER_DAY), nights=1, guests=2)
    assert line.description == "10.00€ × 1 night = 10.00€"
