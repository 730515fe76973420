"""Availability domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class AvailabilityCheckRequest(BaseModel):
    """Schema for checking a property's calendar"""

    propertyId: int
    startDate: date
    endDate: date


class ConflictingEntity(BaseModel):
    """The reservation or blackout period that blocks the requested dates"""

    type: Literal["reservation", "blackout"]
    id: int
    startDate: date
    endDate: date
    title: Optional[str] = None


class AvailabilityCheckResponse(BaseModel):
    available: bool
    conflictingEntity: Optional[ConflictingEntity] = None


class BlackoutCreate(BaseModel):
    """Schema for blocking a date range"""

    propertyId: int
    startDate: date
    endDate: date
    title: str = Field(..., max_length=255)
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class BlackoutUpdate(BaseModel):
    """Schema for updating a blackout period"""

    startDate: Optional[date] = None
    endDate: Optional[date] = None
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title is required")
        return v.strip() if v else v

    @model_validator(mode="after")
    def validate_range(self):
        if self.startDate and self.endDate and self.endDate <= self.startDate:
            raise ValueError("End date must be after start date")
        return self


class BlackoutResponse(BaseModel):
    id: int
    propertyId: int
    propertyName: Optional[str] = None
    startDate: date
    endDate: date
    title: str
    description: Optional[str] = None
    type: Literal["blackout"] = "blackout"


class CalendarFeedResponse(BaseModel):
    """Subscription details for external calendars (Airbnb, Google, Outlook)"""

    propertyId: int
    token: str
    url: str
