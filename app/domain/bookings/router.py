"""Booking router - FastAPI endpoints for quotes and reservations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Reservation, User
from .schemas import (
    BookingCostRequest,
    BookingCostResponse,
    BookingCreate,
    BookingPriceResponse,
    ExtraBreakdownItem,
    NightlyPriceItem,
    ReservationResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def to_reservation_response(reservation: Reservation) -> ReservationResponse:
    return ReservationResponse(
        id=reservation.id,
        propertyId=reservation.property_id,
        userId=reservation.user_id,
        startDate=reservation.start_date,
        endDate=reservation.end_date,
        guestCount=reservation.guest_count,
        status=reservation.status,
        totalPrice=float(reservation.total_price) if reservation.total_price is not None else None,
        currency=reservation.currency,
    )


def to_extra_items(lines) -> list[ExtraBreakdownItem]:
    return [
        ExtraBreakdownItem(
            extraId=line.extra_id,
            name=line.name,
            type=line.price_type,
            unitPrice=float(line.unit_price),
            multiplier=line.multiplier,
            cost=float(line.cost),
            description=line.description,
        )
        for line in lines
    ]


@router.post("/cost", response_model=BookingCostResponse)
async def calculate_cost(
    body: BookingCostRequest,
    _user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Price a stay: nightly base price plus the selected extras"""
    prop, breakdown = service.quote(body)
    return BookingCostResponse(
        propertyId=prop.id,
        currency=breakdown.currency,
        startDate=body.startDate,
        endDate=body.endDate,
        guestCount=body.guestCount,
        numberOfNights=breakdown.number_of_nights,
        basePricePerNight=float(breakdown.base_price_per_night),
        baseTotal=float(breakdown.base_total),
        extrasTotal=float(breakdown.extras_total),
        grandTotal=float(breakdown.grand_total),
        perExtraBreakdown=to_extra_items(breakdown.lines),
    )


@router.post("/price", response_model=BookingPriceResponse)
async def calculate_price(
    body: BookingCostRequest,
    _user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """
    Price a stay the way it will be charged: promotions and special prices
    night by night under the host's priority, extras, then commissions
    """
    prop, price = service.price_booking(body)
    stay = price.stay
    commission = price.commission
    return BookingPriceResponse(
        propertyId=prop.id,
        currency=stay.currency,
        startDate=body.startDate,
        endDate=body.endDate,
        guestCount=body.guestCount,
        priority=stay.priority.value,
        numberOfNights=stay.number_of_nights,
        nightlyBreakdown=[
            NightlyPriceItem(
                night=n.night,
                basePrice=float(n.price.base_price),
                finalPrice=float(n.price.final_price),
                savings=float(n.price.savings),
                promotionApplied=n.price.promotion_applied,
                promotionDiscount=n.price.promotion_discount if n.price.promotion_applied else None,
                specialPriceApplied=n.price.special_price_applied,
                specialPriceValue=(
                    float(n.price.special_price_value) if n.price.special_price_applied else None
                ),
            )
            for n in stay.nights
        ],
        subtotal=float(stay.subtotal),
        totalSavings=float(stay.total_savings),
        averageNightlyPrice=float(stay.average_nightly_price),
        promotionApplied=stay.promotion_applied,
        specialPriceApplied=stay.special_price_applied,
        extrasTotal=float(price.extras_total),
        perExtraBreakdown=to_extra_items(price.lines),
        subtotalBeforeCommission=float(price.subtotal_before_commission),
        hostCommission=float(commission.host_commission),
        clientCommission=float(commission.client_commission),
        hostReceives=float(commission.host_receives),
        platformRevenue=float(commission.platform_revenue),
        totalAmount=float(price.total_amount),
    )


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    body: BookingCreate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Reserve a stay if the dates are free"""
    return to_reservation_response(service.create_reservation(body, current_user))


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return to_reservation_response(service.get_reservation(reservation_id, current_user))


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Cancel a reservation; its dates become bookable again"""
    return to_reservation_response(service.cancel_reservation(reservation_id, current_user))
