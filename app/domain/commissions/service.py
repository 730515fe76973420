"""Commission service - Rule lookup with fallback, caching and admin management"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...cache import get_commission_rule_cached, invalidate_commission_cache, set_commission_rule_cached
from ...exceptions import ConflictError, NotFoundError
from ...models import CommissionRule, Property, User
from ...shared.validators import Number
from .calculator import (
    ZERO_RATES,
    CommissionBreakdown,
    CommissionRates,
    compute_commission,
    stay_amount,
)
from .repository import CommissionRepository
from .schemas import CommissionRuleCreate, CommissionRuleUpdate

logger = logging.getLogger(__name__)

RULE_FIELDS = {
    "title": "title",
    "description": "description",
    "hostCommissionRate": "host_commission_rate",
    "hostCommissionFixed": "host_commission_fixed",
    "clientCommissionRate": "client_commission_rate",
    "clientCommissionFixed": "client_commission_fixed",
    "isActive": "is_active",
}


class CommissionService:
    """Service layer for commission rules"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CommissionRepository()

    # ------------------------------------------------------------------
    # Rule resolution
    # ------------------------------------------------------------------

    def _load_global_rates(self) -> CommissionRates:
        rule = self.repo.get_active_by_type(self.db, None)
        if rule:
            return CommissionRates.from_model(rule, "global")
        return ZERO_RATES

    def get_rule_for_type(self, property_type_id: Optional[int]) -> CommissionRates:
        """
        Rates for a property type.

        Falls back to the active global rule when the type has no active rule,
        and to zero commissions when there is no global rule either. Results
        are cached per type until a rule changes.
        """
        cached = get_commission_rule_cached(property_type_id)
        if cached:
            return CommissionRates.from_cache(cached)

        rates = None
        if property_type_id is not None:
            rule = self.repo.get_active_by_type(self.db, property_type_id)
            if rule:
                rates = CommissionRates.from_model(rule, "type")
            else:
                logger.debug(f"No commission rule for type {property_type_id}, using global rule")
        if rates is None:
            rates = self._load_global_rates()

        set_commission_rule_cached(property_type_id, rates.to_cache())
        return rates

    def get_rates_for_property(self, prop: Property) -> CommissionRates:
        return self.get_rule_for_type(prop.type_id)

    def calculate(self, amount: Number, property_type_id: Optional[int], currency: str = "EUR") -> CommissionBreakdown:
        return compute_commission(amount, self.get_rule_for_type(property_type_id), currency)

    def calculate_for_stay(
        self,
        base_price: Number,
        number_of_nights: int,
        additional_fees: Number = 0,
        property_type_id: Optional[int] = None,
        currency: str = "EUR",
    ) -> CommissionBreakdown:
        """Commissions on (nightly price × nights + additional fees)"""
        amount = stay_amount(base_price, number_of_nights, additional_fees)
        return self.calculate(amount, property_type_id, currency)

    def resolve_type_id(self, property_type_id: Optional[int], property_id: Optional[int]) -> Optional[int]:
        if property_id is None:
            return property_type_id
        prop = self.db.query(Property).filter(Property.id == property_id).first()
        if not prop:
            raise NotFoundError("Property not found")
        return prop.type_id

    # ------------------------------------------------------------------
    # Admin management
    # ------------------------------------------------------------------

    def list_rules(self) -> list[CommissionRule]:
        return self.repo.list_all(self.db)

    def get_rule(self, rule_id: int) -> CommissionRule:
        rule = self.repo.get_by_id(self.db, rule_id)
        if not rule:
            raise NotFoundError("Commission rule not found")
        return rule

    def _ensure_type_is_free(self, property_type_id: Optional[int], exclude_rule_id: Optional[int] = None) -> None:
        if property_type_id is not None and not self.repo.get_property_type(self.db, property_type_id):
            raise NotFoundError("Property type not found")
        existing = self.repo.get_by_type(self.db, property_type_id)
        if existing and existing.id != exclude_rule_id:
            scope = "this property type" if property_type_id is not None else "the global scope"
            raise ConflictError(
                f"A commission rule already exists for {scope}",
                conflicts=[{"type": "commission_rule", "id": existing.id}],
            )

    def _invalidate(self, property_type_id: Optional[int]) -> None:
        # Types without their own rule cache the global rule under their key,
        # so a global rule change drops every cached entry
        invalidate_commission_cache(property_type_id)

    def create_rule(self, data: CommissionRuleCreate, user: User) -> CommissionRule:
        self._ensure_type_is_free(data.propertyTypeId)

        rule = self.repo.create(
            self.db,
            title=data.title,
            description=data.description,
            host_commission_rate=data.hostCommissionRate,
            host_commission_fixed=data.hostCommissionFixed,
            client_commission_rate=data.clientCommissionRate,
            client_commission_fixed=data.clientCommissionFixed,
            property_type_id=data.propertyTypeId,
            is_active=data.isActive,
            created_by=user.id,
        )
        self.db.commit()
        self.db.refresh(rule)
        self._invalidate(rule.property_type_id)

        logger.info(
            f"💼 Commission rule #{rule.id} created for type {rule.property_type_id or 'global'} "
            f"by admin {user.id}"
        )
        return rule

    def update_rule(self, rule_id: int, data: CommissionRuleUpdate) -> CommissionRule:
        rule = self.get_rule(rule_id)
        old_type_id = rule.property_type_id

        updates = {}
        for field_name, column in RULE_FIELDS.items():
            value = getattr(data, field_name)
            if value is not None:
                updates[column] = value

        if "propertyTypeId" in data.model_fields_set and data.propertyTypeId != old_type_id:
            self._ensure_type_is_free(data.propertyTypeId, exclude_rule_id=rule.id)
            updates["property_type_id"] = data.propertyTypeId

        self.repo.update(self.db, rule, **updates)
        self.db.commit()
        self.db.refresh(rule)

        self._invalidate(old_type_id)
        if rule.property_type_id != old_type_id:
            self._invalidate(rule.property_type_id)
        return rule

    def delete_rule(self, rule_id: int) -> dict:
        rule = self.get_rule(rule_id)
        property_type_id = rule.property_type_id
        self.repo.delete(self.db, rule)
        self.db.commit()
        self._invalidate(property_type_id)
        logger.info(f"🗑️ Commission rule #{rule_id} deleted")
        return {"success": True}
