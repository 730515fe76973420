"""Booking cost calculation

Pure functions: no database access, identical inputs always give identical
quotes. Amounts are Decimals rounded to the currency's minor unit.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Sequence, Union

from ...exceptions import ValidationError
from ...shared.validators import Number, quantize_amount, to_decimal
from ..commissions.calculator import CommissionBreakdown
from ..promotions.pricing import StayPrice

CURRENCY_SYMBOLS = {"EUR": "€", "MGA": "Ar"}


class ExtraPriceType(str, Enum):
    PER_DAY = "PER_DAY"
    PER_PERSON = "PER_PERSON"
    PER_DAY_PERSON = "PER_DAY_PERSON"
    PER_BOOKING = "PER_BOOKING"


@dataclass(frozen=True)
class PricedExtra:
    """An extra as seen by the calculator: unit prices in both currencies"""

    id: int
    name: str
    price_eur: Decimal
    price_mga: Decimal
    price_type: ExtraPriceType

    @classmethod
    def from_model(cls, extra) -> "PricedExtra":
        return cls(
            id=extra.id,
            name=extra.name,
            price_eur=to_decimal(extra.price_eur or 0),
            price_mga=to_decimal(extra.price_mga or 0),
            price_type=ExtraPriceType(extra.price_type),
        )

    def unit_price(self, currency: str) -> Decimal:
        return self.price_eur if currency == "EUR" else self.price_mga


@dataclass(frozen=True)
class BookingDetails:
    start_date: Union[date, datetime]
    end_date: Union[date, datetime]
    guest_count: int


@dataclass(frozen=True)
class ExtraCostLine:
    extra_id: int
    name: str
    price_type: ExtraPriceType
    unit_price: Decimal
    multiplier: int
    cost: Decimal
    description: str


@dataclass(frozen=True)
class BookingCostBreakdown:
    number_of_nights: int
    currency: str
    base_price_per_night: Decimal
    base_total: Decimal
    extras_total: Decimal
    grand_total: Decimal
    lines: list[ExtraCostLine] = field(default_factory=list)


def count_nights(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """
    Whole nights between two dates, rounding partial days up.

    Raises:
        ValidationError: If the stay is not at least one night long
    """
    if isinstance(start, datetime) and isinstance(end, datetime):
        nights = math.ceil((end - start).total_seconds() / 86400)
    else:
        start_day = start.date() if isinstance(start, datetime) else start
        end_day = end.date() if isinstance(end, datetime) else end
        nights = (end_day - start_day).days

    if nights <= 0:
        raise ValidationError("End date must be after start date")
    return nights


def extra_multiplier(price_type: ExtraPriceType, nights: int, guests: int) -> int:
    if price_type == ExtraPriceType.PER_DAY:
        return nights
    if price_type == ExtraPriceType.PER_PERSON:
        return guests
    if price_type == ExtraPriceType.PER_DAY_PERSON:
        return nights * guests
    return 1


def _format_amount(amount: Decimal, currency: str) -> str:
    return f"{amount}{CURRENCY_SYMBOLS.get(currency, currency)}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def extra_cost_preview(
    extra: PricedExtra, nights: int, guests: int, currency: str = "EUR"
) -> ExtraCostLine:
    """Cost of one extra for a stay, with a human-readable explanation"""
    unit = quantize_amount(extra.unit_price(currency), currency)
    multiplier = extra_multiplier(extra.price_type, nights, guests)
    cost = quantize_amount(unit * multiplier, currency)

    unit_label = _format_amount(unit, currency)
    total_label = _format_amount(cost, currency)
    if extra.price_type == ExtraPriceType.PER_DAY:
        description = f"{unit_label} × {_plural(nights, 'night')} = {total_label}"
    elif extra.price_type == ExtraPriceType.PER_PERSON:
        description = f"{unit_label} × {_plural(guests, 'guest')} = {total_label}"
    elif extra.price_type == ExtraPriceType.PER_DAY_PERSON:
        description = (
            f"{unit_label} × {_plural(nights, 'night')} × {_plural(guests, 'guest')} = {total_label}"
        )
    else:
        description = f"{unit_label} per booking"

    return ExtraCostLine(
        extra_id=extra.id,
        name=extra.name,
        price_type=extra.price_type,
        unit_price=unit,
        multiplier=multiplier,
        cost=cost,
        description=description,
    )


def calculate_extras_cost(
    selected_extras: Sequence[PricedExtra], nights: int, guests: int, currency: str = "EUR"
) -> tuple[Decimal, list[ExtraCostLine]]:
    lines = [extra_cost_preview(extra, nights, guests, currency) for extra in selected_extras]
    total = sum((line.cost for line in lines), Decimal(0))
    return quantize_amount(total, currency), lines


def calculate_total_booking_cost(
    base_price_per_night: Number,
    number_of_nights: int,
    selected_extras: Sequence[PricedExtra],
    booking_details: BookingDetails,
    currency: str = "EUR",
) -> BookingCostBreakdown:
    """
    base_total = nightly price × nights, extras_total = Σ unit price × multiplier,
    grand_total = base_total + extras_total.

    No currency conversion happens: the nightly price must already be in `currency`.
    """
    if number_of_nights <= 0:
        raise ValidationError("Number of nights must be positive")
    guests = booking_details.guest_count
    if guests <= 0:
        raise ValidationError("Guest count must be positive")

    nightly = quantize_amount(base_price_per_night, currency)
    base_total = quantize_amount(nightly * number_of_nights, currency)
    extras_total, lines = calculate_extras_cost(selected_extras, number_of_nights, guests, currency)

    return BookingCostBreakdown(
        number_of_nights=number_of_nights,
        currency=currency,
        base_price_per_night=nightly,
        base_total=base_total,
        extras_total=extras_total,
        grand_total=base_total + extras_total,
        lines=lines,
    )


@dataclass(frozen=True)
class BookingPrice:
    """
    What a guest is charged for a stay: nights priced one by one (promotions,
    special prices), then extras, then commissions on the sum.
    """

    stay: StayPrice
    extras_total: Decimal
    lines: list[ExtraCostLine]
    commission: CommissionBreakdown

    @property
    def subtotal_before_commission(self) -> Decimal:
        return self.stay.subtotal + self.extras_total

    @property
    def total_amount(self) -> Decimal:
        return self.commission.client_pays
