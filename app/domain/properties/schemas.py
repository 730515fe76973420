"""Property domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel


class NearbyPropertyResponse(BaseModel):
    id: int
    name: str
    typeId: Optional[int] = None
    basePrice: float
    latitude: float
    longitude: float
    distanceKm: float
