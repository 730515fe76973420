"""Booking domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_currency
from .pricing import ExtraPriceType


class BookingCostRequest(BaseModel):
    """Schema for quoting a stay"""

    propertyId: int
    startDate: date
    endDate: date
    guestCount: int = Field(..., gt=0)
    selectedExtraIds: list[int] = Field(default_factory=list)
    currency: str = "EUR"

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v):
        return validate_currency(v)


class ExtraBreakdownItem(BaseModel):
    extraId: int
    name: str
    type: ExtraPriceType
    unitPrice: float
    multiplier: int
    cost: float
    description: str


class BookingCostResponse(BaseModel):
    propertyId: int
    currency: str
    startDate: date
    endDate: date
    guestCount: int
    numberOfNights: int
    basePricePerNight: float
    baseTotal: float
    extrasTotal: float
    grandTotal: float
    perExtraBreakdown: list[ExtraBreakdownItem]


class BookingCreate(BookingCostRequest):
    """Schema for reserving a stay"""


class ReservationResponse(BaseModel):
    id: int
    propertyId: int
    userId: int
    startDate: date
    endDate: date
    guestCount: int
    status: str
    totalPrice: Optional[float] = None
    currency: str


class NightlyPriceItem(BaseModel):
    night: date
    basePrice: float
    finalPrice: float
    savings: float
    promotionApplied: bool
    promotionDiscount: Optional[float] = None
    specialPriceApplied: bool
    specialPriceValue: Optional[float] = None


class BookingPriceResponse(BaseModel):
    """Client-facing price: nightly breakdown, extras and commissions"""

    propertyId: int
    currency: str
    startDate: date
    endDate: date
    guestCount: int
    priority: str
    numberOfNights: int
    nightlyBreakdown: list[NightlyPriceItem]
    subtotal: float
    totalSavings: float
    averageNightlyPrice: float
    promotionApplied: bool
    specialPriceApplied: bool
    extrasTotal: float
    perExtraBreakdown: list[ExtraBreakdownItem]
    subtotalBeforeCommission: float
    hostCommission: float
    clientCommission: float
    hostReceives: float
    platformRevenue: float
    totalAmount: float
