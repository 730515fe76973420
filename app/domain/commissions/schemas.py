"""Commission domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_non_negative, validate_rate


class CommissionRuleBase(BaseModel):
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    hostCommissionRate: float = 0
    hostCommissionFixed: float = 0
    clientCommissionRate: float = 0
    clientCommissionFixed: float = 0

    @field_validator("hostCommissionRate", "clientCommissionRate")
    @classmethod
    def check_rate(cls, v):
        return validate_rate(v)

    @field_validator("hostCommissionFixed", "clientCommissionFixed")
    @classmethod
    def check_fixed(cls, v):
        return validate_non_negative(v)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class CommissionRuleCreate(CommissionRuleBase):
    """Schema for creating a rule; no propertyTypeId means the global fallback rule"""

    propertyTypeId: Optional[int] = None
    isActive: bool = True


class CommissionRuleUpdate(BaseModel):
    """Schema for updating a rule; only the fields sent are changed"""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    hostCommissionRate: Optional[float] = None
    hostCommissionFixed: Optional[float] = None
    clientCommissionRate: Optional[float] = None
    clientCommissionFixed: Optional[float] = None
    propertyTypeId: Optional[int] = None
    isActive: Optional[bool] = None

    @field_validator("hostCommissionRate", "clientCommissionRate")
    @classmethod
    def check_rate(cls, v):
        return v if v is None else validate_rate(v)

    @field_validator("hostCommissionFixed", "clientCommissionFixed")
    @classmethod
    def check_fixed(cls, v):
        return v if v is None else validate_non_negative(v)


class CommissionRuleResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    hostCommissionRate: float
    hostCommissionFixed: float
    clientCommissionRate: float
    clientCommissionFixed: float
    propertyTypeId: Optional[int] = None
    propertyTypeName: Optional[str] = None
    isActive: bool


class CommissionCalculateRequest(BaseModel):
    """Commission quote for a nightly price, optionally over several nights plus fees"""

    basePrice: float = Field(..., ge=0)
    numberOfNights: int = Field(1, ge=1)
    additionalFees: float = Field(0, ge=0)
    propertyTypeId: Optional[int] = None
    propertyId: Optional[int] = None


class CommissionRatesResponse(BaseModel):
    hostCommissionRate: float
    hostCommissionFixed: float
    clientCommissionRate: float
    clientCommissionFixed: float
    ruleId: Optional[int] = None
    scope: str


class CommissionCalculateResponse(BaseModel):
    basePrice: float
    hostCommission: float
    clientCommission: float
    hostReceives: float
    clientPays: float
    platformRevenue: float
    breakdown: CommissionRatesResponse
