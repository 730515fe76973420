"""Extras router - FastAPI endpoints for priced add-ons"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_host
from ...database import get_db
from ...models import Extra, User
from .schemas import ExtraCreate, ExtraResponse, ExtraUpdate
from .service import ExtraService

router = APIRouter(prefix="/extras", tags=["Extras"])


def get_extra_service(db: Session = Depends(get_db)) -> ExtraService:
    return ExtraService(db)


def to_extra_response(extra: Extra) -> ExtraResponse:
    return ExtraResponse(
        id=extra.id,
        name=extra.name,
        description=extra.description,
        priceEUR=float(extra.price_eur or 0),
        priceMGA=float(extra.price_mga or 0),
        type=extra.price_type,
        ownerId=extra.owner_id,
        isGlobal=extra.owner_id is None,
        propertyIds=[p.id for p in extra.properties],
    )


@router.get("", response_model=list[ExtraResponse])
async def list_extras(
    propertyId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ExtraService = Depends(get_extra_service),
):
    """Extras offered on one property, or the global and own extras of the caller"""
    return [to_extra_response(e) for e in service.list_extras(current_user, propertyId)]


@router.post("", response_model=ExtraResponse, status_code=201)
async def create_extra(
    data: ExtraCreate,
    current_user: User = Depends(require_host),
    service: ExtraService = Depends(get_extra_service),
):
    return to_extra_response(service.create_extra(data, current_user))


@router.put("/{extra_id}", response_model=ExtraResponse)
async def update_extra(
    extra_id: int,
    data: ExtraUpdate,
    current_user: User = Depends(require_host),
    service: ExtraService = Depends(get_extra_service),
):
    return to_extra_response(service.update_extra(extra_id, data, current_user))


@router.delete("/{extra_id}")
async def delete_extra(
    extra_id: int,
    current_user: User = Depends(require_host),
    service: ExtraService = Depends(get_extra_service),
):
    return service.delete_extra(extra_id, current_user)
