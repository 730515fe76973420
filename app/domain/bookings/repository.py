"""Booking repository - Database operations for quotes and reservations"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Extra, Property, Reservation, property_extras


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_property(db: Session, property_id: int) -> Optional[Property]:
        return db.query(Property).filter(Property.id == property_id).first()

    @staticmethod
    def get_property_extras(db: Session, property_id: int, extra_ids: list[int]) -> list[Extra]:
        """Extras among `extra_ids` that are offered on the property"""
        if not extra_ids:
            return []
        return (
            db.query(Extra)
            .join(property_extras, property_extras.c.extra_id == Extra.id)
            .filter(property_extras.c.property_id == property_id, Extra.id.in_(extra_ids))
            .order_by(Extra.id.asc())
            .all()
        )

    @staticmethod
    def get_reservation(db: Session, reservation_id: int) -> Optional[Reservation]:
        return (
            db.query(Reservation)
            .options(joinedload(Reservation.property))
            .filter(Reservation.id == reservation_id)
            .first()
        )

    @staticmethod
    def create_reservation(db: Session, **data) -> Reservation:
        reservation = Reservation(**data)
        db.add(reservation)
        db.flush()
        return reservation

    @staticmethod
    def update_status(db: Session, reservation: Reservation, status: str) -> Reservation:
        reservation.status = status
        db.flush()
        return reservation
