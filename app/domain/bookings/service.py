"""Booking service - Quotes and reservation holds"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import is_manager
from ...database import run_in_transaction
from ...exceptions import ForbiddenError, NotFoundError, ValidationError
from ...models import Property, Reservation, User
from ...shared.validators import today
from ..availability.intervals import validate_stay_dates
from ..availability.service import AvailabilityService
from ..commissions.calculator import compute_commission
from ..promotions.service import PromotionService
from .pricing import (
    BookingCostBreakdown,
    BookingDetails,
    BookingPrice,
    PricedExtra,
    calculate_extras_cost,
    calculate_total_booking_cost,
    count_nights,
)
from .repository import BookingRepository
from .schemas import BookingCostRequest, BookingCreate

logger = logging.getLogger(__name__)

CANCELLABLE_STATUSES = ("pending", "confirmed")


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.availability = AvailabilityService(db)
        self.promotions = PromotionService(db)

    def get_property(self, property_id: int) -> Property:
        prop = self.repo.get_property(self.db, property_id)
        if not prop:
            raise NotFoundError("Property not found")
        return prop

    def load_extras(self, property_id: int, extra_ids: list[int]) -> list[PricedExtra]:
        """Selected extras; each must be offered on the property"""
        unique_ids = list(dict.fromkeys(extra_ids))
        extras = self.repo.get_property_extras(self.db, property_id, unique_ids)
        missing = set(unique_ids) - {extra.id for extra in extras}
        if missing:
            raise NotFoundError(
                f"Extra not available on this property: {', '.join(str(i) for i in sorted(missing))}"
            )
        return [PricedExtra.from_model(extra) for extra in extras]

    def quote(self, data: BookingCostRequest) -> tuple[Property, BookingCostBreakdown]:
        """Price a stay without reserving it"""
        nights = count_nights(data.startDate, data.endDate)
        prop = self.get_property(data.propertyId)
        extras = self.load_extras(prop.id, data.selectedExtraIds)

        breakdown = calculate_total_booking_cost(
            self.promotions.nightly_base_price(prop, data.currency),
            nights,
            extras,
            BookingDetails(data.startDate, data.endDate, data.guestCount),
            data.currency,
        )
        logger.debug(
            f"💰 Quote for property {prop.id}: {nights} nights, "
            f"{breakdown.grand_total} {breakdown.currency}"
        )
        return prop, breakdown

    def price_booking(self, data: BookingCostRequest) -> tuple[Property, BookingPrice]:
        """
        Full price of a stay: every night under the owner's pricing priority,
        then extras, then commissions on nights + extras.
        """
        nights = count_nights(data.startDate, data.endDate)
        prop = self.get_property(data.propertyId)
        extras = self.load_extras(prop.id, data.selectedExtraIds)

        stay = self.promotions.price_stay(prop, data.startDate, data.endDate, data.currency)
        extras_total, lines = calculate_extras_cost(extras, nights, data.guestCount, data.currency)
        rates = self.promotions.commissions.get_rates_for_property(prop)
        commission = compute_commission(stay.subtotal + extras_total, rates, data.currency)

        price = BookingPrice(stay=stay, extras_total=extras_total, lines=lines, commission=commission)
        logger.debug(
            f"💰 Price for property {prop.id}: {nights} nights under {stay.priority.value}, "
            f"{price.total_amount} {data.currency} (saved {stay.total_savings})"
        )
        return prop, price

    def create_reservation(self, data: BookingCreate, user: User) -> Reservation:
        """Hold the dates: availability check and insert run in one transaction"""
        validate_stay_dates(data.startDate, data.endDate, today())
        prop, price = self.price_booking(data)
        property_id = prop.id
        user_id = user.id

        def work(db: Session) -> Reservation:
            self.availability.ensure_available(property_id, data.startDate, data.endDate)
            return self.repo.create_reservation(
                db,
                property_id=property_id,
                user_id=user_id,
                start_date=data.startDate,
                end_date=data.endDate,
                guest_count=data.guestCount,
                status="confirmed",
                total_price=price.total_amount,
                currency=data.currency,
            )

        reservation = run_in_transaction(self.db, work)
        logger.info(
            f"✅ Reservation #{reservation.id} confirmed on property {property_id} "
            f"({data.startDate} → {data.endDate})"
        )
        return reservation

    def get_reservation(self, reservation_id: int, user: User) -> Reservation:
        reservation = self.repo.get_reservation(self.db, reservation_id)
        if not reservation:
            raise NotFoundError("Reservation not found")
        if not (
            is_manager(user)
            or reservation.user_id == user.id
            or reservation.property.owner_id == user.id
        ):
            raise ForbiddenError("You cannot access this reservation")
        return reservation

    def cancel_reservation(self, reservation_id: int, user: User, reason: Optional[str] = None) -> Reservation:
        reservation = self.get_reservation(reservation_id, user)
        if reservation.status not in CANCELLABLE_STATUSES:
            raise ValidationError(f"A {reservation.status} reservation cannot be cancelled")

        self.repo.update_status(self.db, reservation, "cancelled")
        self.db.commit()
        logger.info(
            f"❌ Reservation #{reservation_id} cancelled by user {user.id}"
            + (f": {reason}" if reason else "")
        )
        return reservation
