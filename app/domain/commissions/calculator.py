"""
Commission arithmetic

host_commission   = amount × host rate + host fixed
client_commission = amount × client rate + client fixed
host_receives     = amount - host_commission
client_pays       = amount + client_commission
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Optional

from ...shared.validators import Number, quantize_amount, to_decimal


@dataclass(frozen=True)
class CommissionRates:
    """The rates that apply to one property type, resolved from a rule or the fallbacks"""

    host_commission_rate: float = 0.0
    host_commission_fixed: float = 0.0
    client_commission_rate: float = 0.0
    client_commission_fixed: float = 0.0
    rule_id: Optional[int] = None
    scope: str = "none"  # type, global or none

    @classmethod
    def from_model(cls, rule, scope: str) -> "CommissionRates":
        return cls(
            host_commission_rate=float(rule.host_commission_rate or 0),
            host_commission_fixed=float(rule.host_commission_fixed or 0),
            client_commission_rate=float(rule.client_commission_rate or 0),
            client_commission_fixed=float(rule.client_commission_fixed or 0),
            rule_id=rule.id,
            scope=scope,
        )

    @classmethod
    def from_cache(cls, data: dict) -> "CommissionRates":
        return cls(**data)

    def to_cache(self) -> dict:
        return asdict(self)

    @property
    def is_configured(self) -> bool:
        return self.rule_id is not None


ZERO_RATES = CommissionRates()


@dataclass(frozen=True)
class CommissionBreakdown:
    amount: Decimal
    host_commission: Decimal
    client_commission: Decimal
    host_receives: Decimal
    client_pays: Decimal
    rates: CommissionRates

    @property
    def platform_revenue(self) -> Decimal:
        return self.host_commission + self.client_commission


def compute_commission(amount: Number, rates: CommissionRates, currency: str = "EUR") -> CommissionBreakdown:
    amount = to_decimal(amount)
    host_commission = quantize_amount(
        amount * to_decimal(rates.host_commission_rate) + to_decimal(rates.host_commission_fixed),
        currency,
    )
    client_commission = quantize_amount(
        amount * to_decimal(rates.client_commission_rate) + to_decimal(rates.client_commission_fixed),
        currency,
    )
    amount = quantize_amount(amount, currency)
    return CommissionBreakdown(
        amount=amount,
        host_commission=host_commission,
        client_commission=client_commission,
        host_receives=amount - host_commission,
        client_pays=amount + client_commission,
        rates=rates,
    )


def stay_amount(base_price: Number, number_of_nights: int, additional_fees: Number = 0) -> Decimal:
    """Amount commissions are charged on for a multi-night stay"""
    return to_decimal(base_price) * number_of_nights + to_decimal(additional_fees or 0)
