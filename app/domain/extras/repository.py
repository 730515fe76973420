"""Extras repository - Database operations for priced extras"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ...models import Extra, Property


class ExtraRepository:
    """Repository for extra database operations"""

    @staticmethod
    def get_by_id(db: Session, extra_id: int) -> Optional[Extra]:
        return (
            db.query(Extra)
            .options(selectinload(Extra.properties))
            .filter(Extra.id == extra_id)
            .first()
        )

    @staticmethod
    def list_visible_to(db: Session, owner_id: Optional[int]) -> list[Extra]:
        """Global extras plus the ones owned by `owner_id` (all of them when None)"""
        query = db.query(Extra).options(selectinload(Extra.properties))
        if owner_id is not None:
            query = query.filter(or_(Extra.owner_id.is_(None), Extra.owner_id == owner_id))
        return query.order_by(Extra.name.asc()).all()

    @staticmethod
    def list_for_property(db: Session, property_id: int) -> list[Extra]:
        return (
            db.query(Extra)
            .join(Extra.properties)
            .filter(Property.id == property_id)
            .order_by(Extra.name.asc())
            .all()
        )

    @staticmethod
    def get_properties(db: Session, property_ids: list[int]) -> list[Property]:
        if not property_ids:
            return []
        return db.query(Property).filter(Property.id.in_(property_ids)).all()

    @staticmethod
    def create(db: Session, properties: list[Property], **data) -> Extra:
        extra = Extra(**data)
        extra.properties = properties
        db.add(extra)
        db.flush()
        return extra

    @staticmethod
    def update(db: Session, extra: Extra, properties: Optional[list[Property]] = None, **data) -> Extra:
        for key, value in data.items():
            setattr(extra, key, value)
        if properties is not None:
            extra.properties = properties
        db.flush()
        return extra

    @staticmethod
    def delete(db: Session, extra: Extra) -> None:
        db.delete(extra)
        db.flush()
