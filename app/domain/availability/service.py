"""Availability service - Calendar conflict detection and blackout periods"""

import logging
import secrets
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import ensure_can_manage_property
from ...database import run_in_transaction
from ...exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...models import BlackoutPeriod, Property, User
from ...shared.validators import today
from .calendar import build_property_calendar
from .intervals import find_first_overlap, validate_stay_dates
from .repository import AvailabilityRepository
from .schemas import BlackoutCreate, BlackoutUpdate

logger = logging.getLogger(__name__)


def describe_conflict(entity, kind: str) -> dict:
    conflict = {
        "type": kind,
        "id": entity.id,
        "startDate": entity.start_date,
        "endDate": entity.end_date,
    }
    if kind == "blackout":
        conflict["title"] = entity.title
    return conflict


class AvailabilityService:
    """Service layer for availability checks"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def get_property(self, property_id: int) -> Property:
        prop = self.repo.get_property(self.db, property_id)
        if not prop:
            raise NotFoundError("Property not found")
        return prop

    def find_conflict(
        self,
        property_id: int,
        start_date: date,
        end_date: date,
        exclude_blackout_id: Optional[int] = None,
        exclude_reservation_id: Optional[int] = None,
    ) -> Optional[dict]:
        """Describe the first reservation or blackout overlapping [start, end), if any"""
        reservations = self.repo.get_blocking_reservations(
            self.db, property_id, start_date, exclude_reservation_id
        )
        reservation = find_first_overlap(reservations, start_date, end_date)
        if reservation:
            return describe_conflict(reservation, "reservation")

        blackouts = self.repo.get_blackouts_ending_after(
            self.db, property_id, start_date, exclude_blackout_id
        )
        blackout = find_first_overlap(blackouts, start_date, end_date)
        if blackout:
            return describe_conflict(blackout, "blackout")

        return None

    def ensure_available(
        self,
        property_id: int,
        start_date: date,
        end_date: date,
        exclude_blackout_id: Optional[int] = None,
        exclude_reservation_id: Optional[int] = None,
    ) -> None:
        conflict = self.find_conflict(
            property_id, start_date, end_date, exclude_blackout_id, exclude_reservation_id
        )
        if conflict:
            kind = "reservation" if conflict["type"] == "reservation" else "blackout period"
            logger.info(
                f"📅 Conflict on property {property_id} for {start_date} → {end_date}: "
                f"{kind} #{conflict['id']}"
            )
            raise ConflictError(
                f"Dates overlap an existing {kind} "
                f"({conflict['startDate'].isoformat()} → {conflict['endDate'].isoformat()})",
                conflicts=[conflict],
            )

    def check_availability(self, property_id: int, start_date: date, end_date: date) -> dict:
        """Read-only check used before booking or blocking dates"""
        validate_stay_dates(start_date, end_date, today())
        self.get_property(property_id)

        conflict = self.find_conflict(property_id, start_date, end_date)
        return {"available": conflict is None, "conflictingEntity": conflict}

    # ------------------------------------------------------------------
    # Blackout periods
    # ------------------------------------------------------------------

    def create_blackout(self, data: BlackoutCreate, user: User) -> BlackoutPeriod:
        """Block a date range; the conflict check and the insert share one transaction"""
        validate_stay_dates(data.startDate, data.endDate, today())
        prop = self.get_property(data.propertyId)
        ensure_can_manage_property(user, prop)

        def work(db: Session) -> BlackoutPeriod:
            self.ensure_available(prop.id, data.startDate, data.endDate)
            return self.repo.create_blackout(
                db,
                prop.id,
                start_date=data.startDate,
                end_date=data.endDate,
                title=data.title,
                description=(data.description or "").strip() or None,
            )

        blackout = run_in_transaction(self.db, work)
        logger.info(f"🚫 Blackout #{blackout.id} created on property {blackout.property_id}")
        return blackout

    def get_blackout(self, blackout_id: int, user: User) -> BlackoutPeriod:
        blackout = self.repo.get_blackout(self.db, blackout_id)
        if not blackout:
            raise NotFoundError("Blackout period not found")
        ensure_can_manage_property(user, blackout.property)
        return blackout

    def update_blackout(self, blackout_id: int, data: BlackoutUpdate, user: User) -> BlackoutPeriod:
        blackout = self.get_blackout(blackout_id, user)

        start_date = data.startDate or blackout.start_date
        end_date = data.endDate or blackout.end_date
        if data.startDate is not None:
            validate_stay_dates(start_date, end_date, today())
        elif end_date <= start_date:
            raise ValidationError("End date must be after start date")

        updates = {}
        if data.startDate is not None:
            updates["start_date"] = data.startDate
        if data.endDate is not None:
            updates["end_date"] = data.endDate
        if data.title is not None:
            updates["title"] = data.title
        if data.description is not None:
            updates["description"] = data.description.strip() or None

        blackout_id = blackout.id
        property_id = blackout.property_id

        def work(db: Session) -> BlackoutPeriod:
            current = self.repo.get_blackout(db, blackout_id)
            if "start_date" in updates or "end_date" in updates:
                self.ensure_available(
                    property_id, start_date, end_date, exclude_blackout_id=blackout_id
                )
            return self.repo.update_blackout(db, current, **updates)

        return run_in_transaction(self.db, work)

    def delete_blackout(self, blackout_id: int, user: User) -> dict:
        blackout = self.get_blackout(blackout_id, user)
        self.repo.delete_blackout(self.db, blackout)
        self.db.commit()
        logger.info(f"🗑️ Blackout #{blackout_id} deleted by user {user.id}")
        return {"success": True}

    def list_blackouts(self, user: User, property_id: Optional[int] = None) -> list[BlackoutPeriod]:
        if property_id is not None:
            prop = self.get_property(property_id)
            ensure_can_manage_property(user, prop)
            return self.repo.list_blackouts_for_property(self.db, property_id)
        return self.repo.list_blackouts_for_host(self.db, user.id)

    # ------------------------------------------------------------------
    # ICS calendar feed
    # ------------------------------------------------------------------

    def get_calendar_feed_token(self, property_id: int, user: User) -> str:
        """Token of the property's feed, created on first request"""
        prop = self.get_property(property_id)
        ensure_can_manage_property(user, prop)
        if prop.calendar_feed_token:
            return prop.calendar_feed_token
        return self._store_feed_token(prop)

    def regenerate_calendar_feed_token(self, property_id: int, user: User) -> str:
        """Replace the token; subscribers holding the old URL lose access"""
        prop = self.get_property(property_id)
        ensure_can_manage_property(user, prop)
        token = self._store_feed_token(prop)
        logger.info(f"🔑 Calendar feed token regenerated for property {property_id} by user {user.id}")
        return token

    def _store_feed_token(self, prop: Property) -> str:
        token = secrets.token_urlsafe(32)
        self.repo.set_calendar_feed_token(self.db, prop, token)
        self.db.commit()
        return token

    def export_calendar(self, property_id: int, token: Optional[str]) -> bytes:
        """ICS document of every blocking reservation and blackout period"""
        prop = self.get_property(property_id)
        if not token or not prop.calendar_feed_token or not secrets.compare_digest(
            token, prop.calendar_feed_token
        ):
            logger.warning(f"⚠️ Invalid calendar feed token for property {property_id}")
            raise ForbiddenError("Invalid calendar feed token")

        reservations = self.repo.list_blocking_reservations_for_property(self.db, property_id)
        blackouts = self.repo.list_blackouts_for_property(self.db, property_id)
        logger.debug(
            f"📆 ICS feed for property {property_id}: "
            f"{len(reservations)} reservations, {len(blackouts)} blackouts"
        )
        return build_property_calendar(prop, reservations, blackouts)
