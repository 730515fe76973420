"""Shared validation utilities"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..config import SUPPORTED_CURRENCIES

# Minor units per currency: cents for EUR, Ariary has no minor unit in practice
CURRENCY_EXPONENTS = {"EUR": 2, "MGA": 0}

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

Number = Union[int, float, Decimal, str]


def today() -> date:
    """Current date (date-only comparisons ignore the time of day)"""
    return date.today()


def validate_currency(currency: Optional[str]) -> str:
    """
    Normalize a currency code.

    Raises:
        ValueError: If the currency is not one of the supported currencies
    """
    if not currency:
        return SUPPORTED_CURRENCIES[0]
    code = currency.strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValueError(f"Currency must be one of {', '.join(SUPPORTED_CURRENCIES)}")
    return code


def validate_rate(value: float) -> float:
    """Commission rates are fractions in [0, 1]"""
    if value is None or value < 0 or value > 1:
        raise ValueError("Commission rate must be between 0 and 1")
    return value


def validate_non_negative(value: Number) -> Number:
    if value is None or Decimal(str(value)) < 0:
        raise ValueError("Amount must be greater than or equal to 0")
    return value


def validate_weekdays(days: list[str]) -> list[str]:
    """Normalize weekday names to their capitalized English form"""
    normalized = []
    for day in days:
        name = day.strip().capitalize()
        if name not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        if name not in normalized:
            normalized.append(name)
    return normalized


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_amount(value: Number, currency: str = "EUR") -> Decimal:
    """Round a money amount to the currency's minor unit"""
    exponent = CURRENCY_EXPONENTS.get(currency, 2)
    return to_decimal(value).quantize(Decimal(1).scaleb(-exponent), rounding=ROUND_HALF_UP)
