"""Promotion router - FastAPI endpoints for promotions, special prices and pricing settings"""

import logging
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_host
from ...database import get_db
from ...models import Promotion, SpecialPrice, User
from ...shared.validators import today
from .pricing import promotion_status
from .schemas import (
    CommissionCheckRequest,
    CommissionCheckResponse,
    FinalPriceResponse,
    OnPromotionItem,
    PricingSettingsResponse,
    PricingSettingsUpdate,
    PromotionConfirmOverlap,
    PromotionCreate,
    PromotionResponse,
    PromotionUpdate,
    SpecialPriceCreate,
    SpecialPriceResponse,
    SpecialPriceUpdate,
)
from .service import COMMISSION_REJECTED_MESSAGE, PromotionService, SpecialPriceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/promotions", tags=["Promotions"])
special_price_router = APIRouter(tags=["Special Prices"])


def get_promotion_service(db: Session = Depends(get_db)) -> PromotionService:
    """Dependency injection for PromotionService"""
    return PromotionService(db)


def get_special_price_service(db: Session = Depends(get_db)) -> SpecialPriceService:
    return SpecialPriceService(db)


def to_promotion_response(promotion: Promotion) -> PromotionResponse:
    status = promotion_status(promotion, today())
    return PromotionResponse(
        id=promotion.id,
        propertyId=promotion.property_id,
        propertyName=promotion.property.name if promotion.property else None,
        discountPercentage=promotion.discount_percentage,
        startDate=promotion.start_date,
        endDate=promotion.end_date,
        isActive=promotion.is_active,
        isExpired=status == "expired",
        status=status,
        replacedById=promotion.replaced_by_id,
        createdById=promotion.created_by_id,
    )


def to_special_price_response(special_price: SpecialPrice) -> SpecialPriceResponse:
    return SpecialPriceResponse(
        id=special_price.id,
        propertyId=special_price.property_id,
        priceEUR=float(special_price.price_eur),
        priceMGA=float(special_price.price_mga) if special_price.price_mga is not None else None,
        days=special_price.days or [],
        startDate=special_price.start_date,
        endDate=special_price.end_date,
        isActive=special_price.is_active,
    )


# ============================================================================
# PROMOTIONS
# ============================================================================


@router.get("", response_model=list[PromotionResponse])
async def list_promotions(
    propertyId: Optional[int] = Query(None),
    current_user: User = Depends(require_host),
    service: PromotionService = Depends(get_promotion_service),
):
    """Promotions of the host's properties; managers see every promotion"""
    return [to_promotion_response(p) for p in service.list_promotions(current_user, propertyId)]


@router.post("", response_model=PromotionResponse, status_code=201)
async def create_promotion(
    data: PromotionCreate,
    current_user: User = Depends(require_host),
    service: PromotionService = Depends(get_promotion_service),
):
    """
    Create a promotion.

    Responds 409 with `overlappingPromotions` when active promotions share days
    with the new one; resubmit through /promotions/confirm-overlap to replace them.
    """
    return to_promotion_response(service.create_promotion(data, current_user))


@router.post("/confirm-overlap", response_model=PromotionResponse, status_code=201)
async def confirm_overlap(
    body: PromotionConfirmOverlap,
    current_user: User = Depends(require_host),
    service: PromotionService = Depends(get_promotion_service),
):
    """Create the promotion and deactivate the listed overlapping ones atomically"""
    promotion = service.confirm_promotion_with_overlap(
        body.promotionData, body.overlappingIds, current_user
    )
    return to_promotion_response(promotion)


@router.post("/validate-commission", response_model=CommissionCheckResponse)
async def validate_commission(
    body: CommissionCheckRequest,
    _user: User = Depends(require_host),
    service: PromotionService = Depends(get_promotion_service),
):
    valid = service.validate_promotion_commission(body.propertyId, body.discountPercentage)
    return CommissionCheckResponse(
        valid=valid,
        message="Discount is compatible with the platform commission" if valid else COMMISSION_REJECTED_MESSAGE,
    )


@router.get("/on-promotion", response_model=list[OnPromotionItem])
async def list_on_promotion(
    typeId: Optional[int] = Query(None),
    minDiscount: Optional[float] = Query(None, ge=0, le=100),
    sortBy: Literal["discount", "endDate", "price"] = Query("discount"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: PromotionService = Depends(get_promotion_service),
):
    """Public listing of properties with a promotion running today"""
    return service.list_properties_on_promotion(typeId, minDiscount, sortBy, limit, offset)


@router.get("/final-price/{property_id}", response_model=FinalPriceResponse)
async def get_final_price(
    property_id: int,
    on_date: Optional[date] = Query(None, alias="date"),
    currency: str = Query("EUR"),
    service: PromotionService = Depends(get_promotion_service),
):
    """Nightly price after promotions, special prices and commissions"""
    return service.calculate_final_price(property_id, on_date, currency)


@router.get("/settings", response_model=PricingSettingsResponse)
async def get_pricing_settings(
    current_user: User = Depends(require_host),
    service: PromotionService = Depends(get_promotion_service),
):
    settings = service.get_pricing_settings(current_user)
    return PricingSettingsResponse(userId=settings.user_id, promotionPriority=settings.promotion_priority)


@router.put("/settings", response_model=PricingSettingsResponse)
async def update_pricing_settings(
    data: PricingSettingsUpdate,
    current_user: User = Depends(require_host),
    service: PromotionService = Depends(get_promotion_service),
):
    """Choose how promotions and special prices combine on the host's properties"""
    settings = service.update_pricing_priority(current_user, data.promotionPriority)
    return PricingSettingsResponse(userId=settings.user_id, promotionPriority=settings.promotion_priority)


@router.put("/{promotion_id}", response_model=PromotionResponse)
async def update_promotion(
    promotion_id: int,
    data: PromotionUpdate,
    current_user: User = Depends(require_host),
    service: PromotionService = Depends(get_promotion_service),
):
    return to_promotion_response(service.update_promotion(promotion_id, data, current_user))


@router.delete("/{promotion_id}", response_model=PromotionResponse)
async def cancel_promotion(
    promotion_id: int,
    current_user: User = Depends(require_host),
    service: PromotionService = Depends(get_promotion_service),
):
    return to_promotion_response(service.cancel_promotion(promotion_id, current_user))


# ============================================================================
# SPECIAL PRICES
# ============================================================================


@special_price_router.get("/properties/{property_id}/special-prices", response_model=list[SpecialPriceResponse])
async def list_special_prices(
    property_id: int,
    current_user: User = Depends(require_host),
    service: SpecialPriceService = Depends(get_special_price_service),
):
    return [to_special_price_response(sp) for sp in service.list_special_prices(property_id, current_user)]


@special_price_router.post(
    "/properties/{property_id}/special-prices", response_model=SpecialPriceResponse, status_code=201
)
async def create_special_price(
    property_id: int,
    data: SpecialPriceCreate,
    current_user: User = Depends(require_host),
    service: SpecialPriceService = Depends(get_special_price_service),
):
    """Override the nightly price on given weekdays, optionally within a date range"""
    return to_special_price_response(service.create_special_price(property_id, data, current_user))


@special_price_router.put("/special-prices/{special_price_id}", response_model=SpecialPriceResponse)
async def update_special_price(
    special_price_id: int,
    data: SpecialPriceUpdate,
    current_user: User = Depends(require_host),
    service: SpecialPriceService = Depends(get_special_price_service),
):
    return to_special_price_response(service.update_special_price(special_price_id, data, current_user))


@special_price_router.delete("/special-prices/{special_price_id}")
async def delete_special_price(
    special_price_id: int,
    current_user: User = Depends(require_host),
    service: SpecialPriceService = Depends(get_special_price_service),
):
    return service.delete_special_price(special_price_id, current_user)
