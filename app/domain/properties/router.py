"""Property router - Location search"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import NearbyPropertyResponse
from .service import PropertyService

router = APIRouter(prefix="/properties", tags=["Properties"])


def get_property_service(db: Session = Depends(get_db)) -> PropertyService:
    return PropertyService(db)


@router.get("/nearby", response_model=list[NearbyPropertyResponse])
async def find_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radiusKm: Optional[float] = Query(None, gt=0, le=500),
    typeId: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    service: PropertyService = Depends(get_property_service),
):
    """Properties within `radiusKm` of (lat, lon), closest first"""
    return service.find_nearby(lat, lon, radiusKm, typeId, limit)
