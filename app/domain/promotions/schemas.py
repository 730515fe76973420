"""Promotion domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_weekdays
from .pricing import PricingPriority


class PromotionCreate(BaseModel):
    """Schema for proposing a promotion"""

    propertyId: int
    discountPercentage: float = Field(..., gt=0, le=100)
    startDate: date
    endDate: date

    @model_validator(mode="after")
    def validate_range(self):
        if self.endDate <= self.startDate:
            raise ValueError("End date must be after start date")
        return self


class PromotionConfirmOverlap(BaseModel):
    """Schema for confirming a promotion that replaces overlapping ones"""

    promotionData: PromotionCreate
    overlappingIds: list[int] = Field(..., min_length=1)


class PromotionUpdate(BaseModel):
    discountPercentage: Optional[float] = Field(None, gt=0, le=100)
    startDate: Optional[date] = None
    endDate: Optional[date] = None


class PromotionResponse(BaseModel):
    id: int
    propertyId: int
    propertyName: Optional[str] = None
    discountPercentage: float
    startDate: date
    endDate: date
    isActive: bool
    isExpired: bool
    status: str
    replacedById: Optional[int] = None
    createdById: int


class CommissionCheckRequest(BaseModel):
    propertyId: int
    discountPercentage: float = Field(..., gt=0)


class CommissionCheckResponse(BaseModel):
    valid: bool
    message: str


class OnPromotionItem(BaseModel):
    promotionId: int
    propertyId: int
    propertyName: str
    discountPercentage: float
    originalPrice: float
    discountedPrice: float
    savings: float
    endDate: date


class FinalPriceResponse(BaseModel):
    propertyId: int
    onDate: date
    currency: str
    priority: PricingPriority
    originalPrice: float
    finalPrice: float
    savings: float
    promotionApplied: bool
    promotionId: Optional[int] = None
    promotionDiscount: Optional[float] = None
    specialPriceApplied: bool
    specialPriceId: Optional[int] = None
    specialPriceValue: Optional[float] = None
    hostCommission: float
    clientCommission: float
    hostReceives: float
    clientPays: float


class PricingSettingsUpdate(BaseModel):
    promotionPriority: PricingPriority


class PricingSettingsResponse(BaseModel):
    userId: int
    promotionPriority: PricingPriority


class SpecialPriceBase(BaseModel):
    priceEUR: float = Field(..., ge=0)
    priceMGA: Optional[float] = Field(None, ge=0)
    days: list[str] = Field(..., min_length=1)
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    isActive: bool = True

    @field_validator("days")
    @classmethod
    def normalize_days(cls, v):
        return validate_weekdays(v)

    @model_validator(mode="after")
    def validate_range(self):
        if self.startDate and self.endDate and self.endDate < self.startDate:
            raise ValueError("End date must not be before start date")
        return self


class SpecialPriceCreate(SpecialPriceBase):
    """Schema for creating a weekday price override"""


class SpecialPriceUpdate(BaseModel):
    priceEUR: Optional[float] = Field(None, ge=0)
    priceMGA: Optional[float] = Field(None, ge=0)
    days: Optional[list[str]] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    isActive: Optional[bool] = None

    @field_validator("days")
    @classmethod
    def normalize_days(cls, v):
        if v is None:
            return v
        if not v:
            raise ValueError("At least one weekday is required")
        return validate_weekdays(v)


class SpecialPriceResponse(BaseModel):
    id: int
    propertyId: int
    priceEUR: float
    priceMGA: Optional[float] = None
    days: list[str]
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    isActive: bool

