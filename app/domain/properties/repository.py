"""Property repository - Read access for location search"""

from typing import Optional

from sqlalchemy import and_, not_
from sqlalchemy.orm import Session

from ...models import Property


class PropertyRepository:
    """Repository for property database operations"""

    @staticmethod
    def list_geocoded(db: Session, property_type_id: Optional[int] = None) -> list[Property]:
        """Properties with real coordinates; (0, 0) marks a listing that was never geocoded"""
        query = db.query(Property).filter(
            Property.latitude.isnot(None),
            Property.longitude.isnot(None),
            not_(and_(Property.latitude == 0, Property.longitude == 0)),
        )
        if property_type_id is not None:
            query = query.filter(Property.type_id == property_type_id)
        return query.all()
