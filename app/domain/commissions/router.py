"""Commission router - Admin rule management and commission quotes"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import CommissionRule, User
from .calculator import CommissionBreakdown
from .schemas import (
    CommissionCalculateRequest,
    CommissionCalculateResponse,
    CommissionRatesResponse,
    CommissionRuleCreate,
    CommissionRuleResponse,
    CommissionRuleUpdate,
)
from .service import CommissionService

admin_router = APIRouter(prefix="/admin/commissions", tags=["Admin Commissions"])
router = APIRouter(prefix="/commissions", tags=["Commissions"])


def get_commission_service(db: Session = Depends(get_db)) -> CommissionService:
    """Dependency injection for CommissionService"""
    return CommissionService(db)


def to_rule_response(rule: CommissionRule) -> CommissionRuleResponse:
    return CommissionRuleResponse(
        id=rule.id,
        title=rule.title,
        description=rule.description,
        hostCommissionRate=rule.host_commission_rate,
        hostCommissionFixed=float(rule.host_commission_fixed or 0),
        clientCommissionRate=rule.client_commission_rate,
        clientCommissionFixed=float(rule.client_commission_fixed or 0),
        propertyTypeId=rule.property_type_id,
        propertyTypeName=rule.property_type.name if rule.property_type else None,
        isActive=rule.is_active,
    )


def to_calculation_response(result: CommissionBreakdown) -> CommissionCalculateResponse:
    rates = result.rates
    return CommissionCalculateResponse(
        basePrice=float(result.amount),
        hostCommission=float(result.host_commission),
        clientCommission=float(result.client_commission),
        hostReceives=float(result.host_receives),
        clientPays=float(result.client_pays),
        platformRevenue=float(result.platform_revenue),
        breakdown=CommissionRatesResponse(
            hostCommissionRate=rates.host_commission_rate,
            hostCommissionFixed=rates.host_commission_fixed,
            clientCommissionRate=rates.client_commission_rate,
            clientCommissionFixed=rates.client_commission_fixed,
            ruleId=rates.rule_id,
            scope=rates.scope,
        ),
    )


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=list[CommissionRuleResponse])
async def list_rules(
    _admin: User = Depends(require_admin),
    service: CommissionService = Depends(get_commission_service),
):
    return [to_rule_response(r) for r in service.list_rules()]


@admin_router.post("", response_model=CommissionRuleResponse, status_code=201)
async def create_rule(
    data: CommissionRuleCreate,
    admin: User = Depends(require_admin),
    service: CommissionService = Depends(get_commission_service),
):
    """Create the commission rule of a property type (or the global fallback)"""
    return to_rule_response(service.create_rule(data, admin))


@admin_router.get("/{rule_id}", response_model=CommissionRuleResponse)
async def get_rule(
    rule_id: int,
    _admin: User = Depends(require_admin),
    service: CommissionService = Depends(get_commission_service),
):
    return to_rule_response(service.get_rule(rule_id))


@admin_router.put("/{rule_id}", response_model=CommissionRuleResponse)
async def update_rule(
    rule_id: int,
    data: CommissionRuleUpdate,
    _admin: User = Depends(require_admin),
    service: CommissionService = Depends(get_commission_service),
):
    return to_rule_response(service.update_rule(rule_id, data))


@admin_router.delete("/{rule_id}")
async def delete_rule(
    rule_id: int,
    _admin: User = Depends(require_admin),
    service: CommissionService = Depends(get_commission_service),
):
    return service.delete_rule(rule_id)


# ============================================================================
# QUOTES
# ============================================================================


@router.post("/calculate", response_model=CommissionCalculateResponse)
async def calculate_commission(
    body: CommissionCalculateRequest,
    _user: User = Depends(get_current_user),
    service: CommissionService = Depends(get_commission_service),
):
    """Host payout and client price for a stay, using the rule of the property's type"""
    type_id = service.resolve_type_id(body.propertyTypeId, body.propertyId)
    result = service.calculate_for_stay(
        body.basePrice, body.numberOfNights, body.additionalFees, type_id
    )
    return to_calculation_response(result)
