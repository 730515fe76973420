"""
Promotion and special price arithmetic

Pure functions. Promotion dates are inclusive on both ends, unlike stays and
blackout periods.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from ...exceptions import ValidationError
from ...shared.validators import WEEKDAYS, Number, quantize_amount, to_decimal
from ..commissions.calculator import CommissionRates, compute_commission


class PricingPriority(str, Enum):
    PROMOTION_FIRST = "PROMOTION_FIRST"
    SPECIAL_PRICE_FIRST = "SPECIAL_PRICE_FIRST"
    MOST_ADVANTAGEOUS = "MOST_ADVANTAGEOUS"
    STACK_DISCOUNTS = "STACK_DISCOUNTS"


# Hosts who never chose get the lowest price for their guests
DEFAULT_PRIORITY = PricingPriority.MOST_ADVANTAGEOUS


@dataclass(frozen=True)
class PriceResult:
    base_price: Decimal
    final_price: Decimal
    promotion_applied: bool = False
    promotion_discount: Optional[float] = None
    special_price_applied: bool = False
    special_price_value: Optional[Decimal] = None

    @property
    def savings(self) -> Decimal:
        return self.base_price - self.final_price


def promotions_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive ranges: sharing a single day counts as an overlap"""
    return a_start <= b_end and b_start <= a_end


def is_promotion_active(promotion, on_date: date) -> bool:
    return bool(promotion.is_active) and promotion.start_date <= on_date <= promotion.end_date


def promotion_status(promotion, on_date: date) -> str:
    """Lifecycle state derived at read time; expiry is never stored"""
    if not promotion.is_active:
        return "replaced" if promotion.replaced_by_id else "cancelled"
    if on_date > promotion.end_date:
        return "expired"
    if on_date < promotion.start_date:
        return "scheduled"
    return "active"


def validate_promotion_data(discount_percentage: float, start_date: date, end_date: date, current_date: date) -> None:
    """
    Raises:
        ValidationError: If the discount is outside (0, 100], the range is empty,
            or the promotion would start in the past
    """
    if discount_percentage is None or discount_percentage <= 0 or discount_percentage > 100:
        raise ValidationError("Discount percentage must be greater than 0 and at most 100")
    if end_date <= start_date:
        raise ValidationError("End date must be after start date")
    if start_date < current_date:
        raise ValidationError("Start date cannot be in the past")


def apply_discount(price: Number, discount_percentage: float) -> Decimal:
    return to_decimal(price) * (1 - to_decimal(discount_percentage) / 100)


def special_price_applies(special_price, on_date: date) -> bool:
    """Active, scheduled for that weekday, and within its optional date bounds"""
    if not special_price.is_active:
        return False
    if WEEKDAYS[on_date.weekday()] not in (special_price.days or []):
        return False
    if special_price.start_date and on_date < special_price.start_date:
        return False
    if special_price.end_date and on_date > special_price.end_date:
        return False
    return True


def apply_pricing_policy(
    base_price: Number,
    promotion_discount: Optional[float],
    special_price: Optional[Number],
    priority: PricingPriority = DEFAULT_PRIORITY,
    currency: str = "EUR",
) -> PriceResult:
    """
    Combine a promotion (percentage) and a special price (absolute override)
    according to the host's priority.

    STACK_DISCOUNTS turns the special price into a ratio of the base price and
    compounds it with the promotion: two 10% reductions give 19%, not 20%.
    """
    base = quantize_amount(base_price, currency)
    promo_price = apply_discount(base, promotion_discount) if promotion_discount else None
    special = to_decimal(special_price) if special_price is not None else None

    def with_promotion() -> PriceResult:
        return PriceResult(
            base_price=base,
            final_price=quantize_amount(promo_price, currency),
            promotion_applied=True,
            promotion_discount=promotion_discount,
        )

    def with_special() -> PriceResult:
        return PriceResult(
            base_price=base,
            final_price=quantize_amount(special, currency),
            special_price_applied=True,
            special_price_value=special,
        )

    priority = PricingPriority(priority)

    if priority == PricingPriority.PROMOTION_FIRST:
        if promo_price is not None:
            return with_promotion()
        if special is not None:
            return with_special()

    elif priority == PricingPriority.SPECIAL_PRICE_FIRST:
        if special is not None:
            return with_special()
        if promo_price is not None:
            return with_promotion()

    elif priority == PricingPriority.MOST_ADVANTAGEOUS:
        candidates = [base]
        if promo_price is not None:
            candidates.append(promo_price)
        if special is not None:
            candidates.append(special)
        lowest = min(candidates)
        # Ties go to the promotion
        if promo_price is not None and promo_price == lowest:
            return with_promotion()
        if special is not None and special == lowest and special < base:
            return with_special()

    elif priority == PricingPriority.STACK_DISCOUNTS:
        final = base
        if promo_price is not None:
            final = promo_price
        if special is not None and base > 0:
            special_ratio = (base - special) / base
            final = final * (1 - special_ratio)
        if promo_price is not None or special is not None:
            return PriceResult(
                base_price=base,
                final_price=quantize_amount(final, currency),
                promotion_applied=promo_price is not None,
                promotion_discount=promotion_discount,
                special_price_applied=special is not None,
                special_price_value=special,
            )

    return PriceResult(base_price=base, final_price=base)


def is_discount_commission_safe(
    base_price: Number,
    discount_percentage: float,
    rates: CommissionRates,
    min_platform_revenue: Number = 0,
) -> bool:
    """
    A discount is acceptable when, on the discounted price, the price itself,
    the client commission and the host payout are all non-negative and the
    platform still earns at least `min_platform_revenue`.
    """
    discounted = apply_discount(base_price, discount_percentage)
    if discounted < 0:
        return False
    if not rates.is_configured:
        return True

    breakdown = compute_commission(discounted, rates)
    return (
        breakdown.client_commission >= 0
        and breakdown.host_receives >= 0
        and breakdown.platform_revenue >= to_decimal(min_platform_revenue)
    )


@dataclass(frozen=True)
class NightConditions:
    """What applies on one night of a stay: the running promotion and the weekday special price"""

    night: date
    promotion_discount: Optional[float] = None
    special_price: Optional[Number] = None


@dataclass(frozen=True)
class NightPrice:
    night: date
    price: PriceResult


@dataclass(frozen=True)
class StayPrice:
    currency: str
    priority: PricingPriority
    nights: list[NightPrice] = field(default_factory=list)

    @property
    def number_of_nights(self) -> int:
        return len(self.nights)

    @property
    def subtotal(self) -> Decimal:
        return sum((n.price.final_price for n in self.nights), Decimal(0))

    @property
    def total_savings(self) -> Decimal:
        return sum((n.price.savings for n in self.nights), Decimal(0))

    @property
    def average_nightly_price(self) -> Decimal:
        return quantize_amount(self.subtotal / self.number_of_nights, self.currency)

    @property
    def promotion_applied(self) -> bool:
        return any(n.price.promotion_applied for n in self.nights)

    @property
    def special_price_applied(self) -> bool:
        return any(n.price.special_price_applied for n in self.nights)


def stay_nights(start_date: date, end_date: date) -> list[date]:
    """Nights charged for [start, end): the departure day is not one of them"""
    return [start_date + timedelta(days=offset) for offset in range((end_date - start_date).days)]


def active_promotion_on(promotions, on_date: date):
    """The most recent active promotion covering `on_date`, or None"""
    running = [p for p in promotions if is_promotion_active(p, on_date)]
    if not running:
        return None
    return max(running, key=lambda p: p.id)


def price_stay(
    base_price: Number,
    nights: Sequence[NightConditions],
    priority: PricingPriority = DEFAULT_PRIORITY,
    currency: str = "EUR",
) -> StayPrice:
    """
    Price every night of a stay on its own: a promotion ending mid-stay or a
    weekend special price only changes the nights it covers.
    """
    if not nights:
        raise ValidationError("A stay must last at least one night")
    priority = PricingPriority(priority)
    return StayPrice(
        currency=currency,
        priority=priority,
        nights=[
            NightPrice(
                night=n.night,
                price=apply_pricing_policy(
                    base_price, n.promotion_discount, n.special_price, priority, currency
                ),
            )
            for n in nights
        ],
    )
