"""Availability router - FastAPI endpoints for calendar checks and blackout periods"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_host
from ...database import get_db
from ...models import BlackoutPeriod, User
from .schemas import (
    AvailabilityCheckRequest,
    AvailabilityCheckResponse,
    BlackoutCreate,
    BlackoutResponse,
    BlackoutUpdate,
    CalendarFeedResponse,
)
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


def to_blackout_response(blackout: BlackoutPeriod) -> BlackoutResponse:
    return BlackoutResponse(
        id=blackout.id,
        propertyId=blackout.property_id,
        propertyName=blackout.property.name if blackout.property else None,
        startDate=blackout.start_date,
        endDate=blackout.end_date,
        title=blackout.title,
        description=blackout.description,
    )


@router.post("/check", response_model=AvailabilityCheckResponse)
async def check_availability(
    body: AvailabilityCheckRequest,
    _user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Check whether a date range is free of reservations and blackout periods"""
    return service.check_availability(body.propertyId, body.startDate, body.endDate)


# ============================================================================
# BLACKOUT PERIODS
# ============================================================================


@router.get("/blackouts", response_model=list[BlackoutResponse])
async def list_blackouts(
    propertyId: Optional[int] = Query(None),
    current_user: User = Depends(require_host),
    service: AvailabilityService = Depends(get_availability_service),
):
    """List blackout periods of one property, or of all the host's properties"""
    return [to_blackout_response(b) for b in service.list_blackouts(current_user, propertyId)]


@router.post("/blackouts", response_model=BlackoutResponse, status_code=201)
async def create_blackout(
    data: BlackoutCreate,
    current_user: User = Depends(require_host),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Block a date range on a property"""
    return to_blackout_response(service.create_blackout(data, current_user))


@router.put("/blackouts/{blackout_id}", response_model=BlackoutResponse)
async def update_blackout(
    blackout_id: int,
    data: BlackoutUpdate,
    current_user: User = Depends(require_host),
    service: AvailabilityService = Depends(get_availability_service),
):
    return to_blackout_response(service.update_blackout(blackout_id, data, current_user))


@router.delete("/blackouts/{blackout_id}")
async def delete_blackout(
    blackout_id: int,
    current_user: User = Depends(require_host),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.delete_blackout(blackout_id, current_user)


# ============================================================================
# ICS CALENDAR FEED
# ============================================================================


def to_feed_response(request: Request, property_id: int, token: str) -> CalendarFeedResponse:
    url = request.url_for("get_calendar_ics", property_id=property_id)
    return CalendarFeedResponse(propertyId=property_id, token=token, url=f"{url}?token={token}")


@router.get("/{property_id}/calendar-feed", response_model=CalendarFeedResponse)
async def get_calendar_feed(
    property_id: int,
    request: Request,
    current_user: User = Depends(require_host),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Subscription URL of the property's ICS feed"""
    token = service.get_calendar_feed_token(property_id, current_user)
    return to_feed_response(request, property_id, token)


@router.post("/{property_id}/calendar-feed/regenerate", response_model=CalendarFeedResponse)
async def regenerate_calendar_feed(
    property_id: int,
    request: Request,
    current_user: User = Depends(require_host),
    service: AvailabilityService = Depends(get_availability_service),
):
    token = service.regenerate_calendar_feed_token(property_id, current_user)
    return to_feed_response(request, property_id, token)


@router.get("/{property_id}/calendar.ics")
async def get_calendar_ics(
    property_id: int,
    token: Optional[str] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Public ICS feed; the token in the URL is the only credential"""
    content = service.export_calendar(property_id, token)
    return Response(
        content=content,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="property-{property_id}.ics"'},
    )
