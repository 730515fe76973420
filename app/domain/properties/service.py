"""Property service - Radius search around a point"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...config import DEFAULT_SEARCH_RADIUS_KM
from ...shared.geo import filter_by_radius
from .repository import PropertyRepository

logger = logging.getLogger(__name__)


class PropertyService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = PropertyRepository()

    def find_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: Optional[float] = None,
        property_type_id: Optional[int] = None,
        limit: int = 50,
    ) -> list[dict]:
        """Properties within the radius, closest first"""
        radius_km = radius_km if radius_km is not None else DEFAULT_SEARCH_RADIUS_KM
        candidates = self.repo.list_geocoded(self.db, property_type_id)
        matches = filter_by_radius(candidates, latitude, longitude, radius_km)
        logger.debug(
            f"📍 {len(matches)}/{len(candidates)} properties within {radius_km}km of "
            f"({latitude}, {longitude})"
        )
        return [
            {
                "id": prop.id,
                "name": prop.name,
                "typeId": prop.type_id,
                "basePrice": float(prop.base_price),
                "latitude": prop.latitude,
                "longitude": prop.longitude,
                "distanceKm": round(distance, 2),
            }
            for prop, distance in matches[:limit]
        ]
