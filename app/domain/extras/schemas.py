"""Extras domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..bookings.pricing import ExtraPriceType


class ExtraBase(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    priceEUR: float = Field(..., ge=0)
    priceMGA: float = Field(0, ge=0)
    type: ExtraPriceType = ExtraPriceType.PER_BOOKING

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class ExtraCreate(ExtraBase):
    """Schema for creating an extra; global extras are admin-only"""

    isGlobal: bool = False
    propertyIds: list[int] = Field(default_factory=list)


class ExtraUpdate(BaseModel):
    """Schema for updating an extra"""

    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    priceEUR: Optional[float] = Field(None, ge=0)
    priceMGA: Optional[float] = Field(None, ge=0)
    type: Optional[ExtraPriceType] = None
    propertyIds: Optional[list[int]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Name is required")
        return v.strip() if v else v


class ExtraResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    priceEUR: float
    priceMGA: float
    type: ExtraPriceType
    ownerId: Optional[int] = None
    isGlobal: bool
    propertyIds: list[int] = Field(default_factory=list)
