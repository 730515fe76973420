"""Availability repository - Database operations for reservations and blackout periods"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import BLOCKING_RESERVATION_STATUSES, BlackoutPeriod, Property, Reservation


class AvailabilityRepository:
    """Repository for calendar database operations

    Writes only flush; the calling service owns the transaction.
    """

    @staticmethod
    def get_property(db: Session, property_id: int) -> Optional[Property]:
        return db.query(Property).filter(Property.id == property_id).first()

    @staticmethod
    def get_blocking_reservations(
        db: Session,
        property_id: int,
        ending_after: date,
        exclude_reservation_id: Optional[int] = None,
    ) -> list[Reservation]:
        """Reservations that occupy the calendar and end after the given date"""
        query = db.query(Reservation).filter(
            Reservation.property_id == property_id,
            Reservation.status.in_(BLOCKING_RESERVATION_STATUSES),
            Reservation.end_date > ending_after,
        )
        if exclude_reservation_id is not None:
            query = query.filter(Reservation.id != exclude_reservation_id)
        return query.order_by(Reservation.start_date.asc()).all()

    @staticmethod
    def get_blackouts_ending_after(
        db: Session,
        property_id: int,
        ending_after: date,
        exclude_blackout_id: Optional[int] = None,
    ) -> list[BlackoutPeriod]:
        query = db.query(BlackoutPeriod).filter(
            BlackoutPeriod.property_id == property_id,
            BlackoutPeriod.end_date > ending_after,
        )
        if exclude_blackout_id is not None:
            query = query.filter(BlackoutPeriod.id != exclude_blackout_id)
        return query.order_by(BlackoutPeriod.start_date.asc()).all()

    @staticmethod
    def get_blackout(db: Session, blackout_id: int) -> Optional[BlackoutPeriod]:
        return (
            db.query(BlackoutPeriod)
            .options(joinedload(BlackoutPeriod.property))
            .filter(BlackoutPeriod.id == blackout_id)
            .first()
        )

    @staticmethod
    def create_blackout(db: Session, property_id: int, **data) -> BlackoutPeriod:
        blackout = BlackoutPeriod(property_id=property_id, **data)
        db.add(blackout)
        db.flush()
        return blackout

    @staticmethod
    def update_blackout(db: Session, blackout: BlackoutPeriod, **updates) -> BlackoutPeriod:
        for key, value in updates.items():
            if hasattr(blackout, key):
                setattr(blackout, key, value)
        db.flush()
        return blackout

    @staticmethod
    def delete_blackout(db: Session, blackout: BlackoutPeriod) -> None:
        db.delete(blackout)
        db.flush()

    @staticmethod
    def list_blackouts_for_property(db: Session, property_id: int) -> list[BlackoutPeriod]:
        return (
            db.query(BlackoutPeriod)
            .filter(BlackoutPeriod.property_id == property_id)
            .order_by(BlackoutPeriod.start_date.asc())
            .all()
        )

    @staticmethod
    def list_blackouts_for_host(db: Session, host_id: int) -> list[BlackoutPeriod]:
        return (
            db.query(BlackoutPeriod)
            .join(Property, BlackoutPeriod.property_id == Property.id)
            .options(joinedload(BlackoutPeriod.property))
            .filter(Property.owner_id == host_id)
            .order_by(BlackoutPeriod.start_date.asc())
            .all()
        )

    @staticmethod
    def list_blocking_reservations_for_property(db: Session, property_id: int) -> list[Reservation]:
        return (
            db.query(Reservation)
            .options(joinedload(Reservation.user))
            .filter(
                Reservation.property_id == property_id,
                Reservation.status.in_(BLOCKING_RESERVATION_STATUSES),
            )
            .order_by(Reservation.start_date.asc())
            .all()
        )

    @staticmethod
    def set_calendar_feed_token(db: Session, prop: Property, token: str) -> Property:
        prop.calendar_feed_token = token
        db.flush()
        return prop
