"""Promotion service - Promotions, special prices and final price computation"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import ensure_can_manage_property, is_manager
from ...config import MIN_PLATFORM_REVENUE
from ...database import run_in_transaction
from ...exceptions import ConflictError, NotFoundError, ValidationError
from ...models import HostPricingSettings, Promotion, Property, SpecialPrice, User
from ...shared.validators import quantize_amount, today, validate_currency
from ..commissions.calculator import compute_commission
from ..commissions.service import CommissionService
from .pricing import (
    DEFAULT_PRIORITY,
    NightConditions,
    PricingPriority,
    StayPrice,
    active_promotion_on,
    apply_discount,
    apply_pricing_policy,
    is_discount_commission_safe,
    price_stay,
    promotions_overlap,
    special_price_applies,
    stay_nights,
    validate_promotion_data,
)
from .repository import PricingSettingsRepository, PromotionRepository, SpecialPriceRepository
from .schemas import (
    PromotionCreate,
    PromotionUpdate,
    SpecialPriceCreate,
    SpecialPriceUpdate,
)

logger = logging.getLogger(__name__)

COMMISSION_REJECTED_MESSAGE = (
    "This discount is too large: the platform could not cover its fees. "
    "Please reduce the discount percentage."
)


def describe_promotion(promotion: Promotion) -> dict:
    return {
        "type": "promotion",
        "id": promotion.id,
        "propertyId": promotion.property_id,
        "discountPercentage": promotion.discount_percentage,
        "startDate": promotion.start_date,
        "endDate": promotion.end_date,
    }


class PromotionService:
    """Service layer for promotion business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PromotionRepository()
        self.settings_repo = PricingSettingsRepository()
        self.special_repo = SpecialPriceRepository()
        self.commissions = CommissionService(db)

    def get_property(self, property_id: int) -> Property:
        prop = self.repo.get_property(self.db, property_id)
        if not prop:
            raise NotFoundError("Property not found")
        return prop

    def get_promotion(self, promotion_id: int, user: User) -> Promotion:
        promotion = self.repo.get_by_id(self.db, promotion_id)
        if not promotion:
            raise NotFoundError("Promotion not found")
        ensure_can_manage_property(user, promotion.property)
        return promotion

    def find_overlapping(
        self, property_id: int, start_date: date, end_date: date, exclude_ids=()
    ) -> list[Promotion]:
        return self.repo.find_overlapping(self.db, property_id, start_date, end_date, exclude_ids)

    # ------------------------------------------------------------------
    # Commission guard
    # ------------------------------------------------------------------

    def validate_promotion_commission(self, property_id: int, discount_percentage: float) -> bool:
        """True when the discounted nightly price still leaves the platform its commission"""
        prop = self.get_property(property_id)
        rates = self.commissions.get_rates_for_property(prop)
        valid = is_discount_commission_safe(
            prop.base_price, discount_percentage, rates, MIN_PLATFORM_REVENUE
        )
        if not valid:
            logger.info(
                f"❌ Discount of {discount_percentage}% rejected on property {property_id} "
                f"(base {prop.base_price}, rule {rates.rule_id})"
            )
        return valid

    def _ensure_commission_allows(self, property_id: int, discount_percentage: float) -> None:
        if not self.validate_promotion_commission(property_id, discount_percentage):
            raise ValidationError(COMMISSION_REJECTED_MESSAGE)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _prepare(self, data: PromotionCreate, user: User) -> Property:
        validate_promotion_data(data.discountPercentage, data.startDate, data.endDate, today())
        prop = self.get_property(data.propertyId)
        ensure_can_manage_property(user, prop)
        return prop

    def _raise_overlap(self, overlapping: list[Promotion]) -> None:
        described = [describe_promotion(p) for p in overlapping]
        raise ConflictError(
            "This promotion overlaps existing active promotions. "
            "Confirm to replace them.",
            conflicts=described,
            requiresConfirmation=True,
            overlappingPromotions=described,
        )

    def create_promotion(self, data: PromotionCreate, user: User) -> Promotion:
        """
        Create a promotion, or refuse with the overlapping ones.

        Raises:
            ConflictError: Active promotions share days with the new range;
                the caller must confirm the replacement explicitly
        """
        prop = self._prepare(data, user)

        overlapping = self.find_overlapping(prop.id, data.startDate, data.endDate)
        if overlapping:
            logger.info(
                f"⚠️ Promotion on property {prop.id} overlaps "
                f"{[p.id for p in overlapping]}, confirmation required"
            )
            self._raise_overlap(overlapping)

        self._ensure_commission_allows(prop.id, data.discountPercentage)
        property_id = prop.id
        user_id = user.id

        def work(db: Session) -> Promotion:
            # Re-checked inside the transaction so a concurrent insert cannot slip in
            concurrent = self.repo.find_overlapping(db, property_id, data.startDate, data.endDate)
            if concurrent:
                self._raise_overlap(concurrent)
            return self.repo.create(
                db,
                property_id=property_id,
                discount_percentage=data.discountPercentage,
                start_date=data.startDate,
                end_date=data.endDate,
                created_by_id=user_id,
                is_active=True,
            )

        promotion = run_in_transaction(self.db, work)
        logger.info(
            f"🏷️ Promotion #{promotion.id} (-{promotion.discount_percentage}%) created on property "
            f"{property_id} ({promotion.start_date} → {promotion.end_date})"
        )
        return promotion

    def confirm_promotion_with_overlap(
        self, data: PromotionCreate, overlapping_ids: list[int], user: User
    ) -> Promotion:
        """
        Replace the named promotions with a new one.

        Deactivation and insertion share one serializable transaction: either
        the old promotions are all replaced or nothing changes.
        """
        prop = self._prepare(data, user)
        self._ensure_commission_allows(prop.id, data.discountPercentage)

        property_id = prop.id
        user_id = user.id
        replaced_ids = list(dict.fromkeys(overlapping_ids))

        def work(db: Session) -> Promotion:
            replaced = self.repo.get_by_ids(db, replaced_ids)
            if len(replaced) != len(replaced_ids):
                raise NotFoundError("Promotion not found")
            if any(p.property_id != property_id for p in replaced):
                raise ValidationError("Overlapping promotions must belong to the same property")
            unrelated = [
                p.id
                for p in replaced
                if not p.is_active
                or not promotions_overlap(p.start_date, p.end_date, data.startDate, data.endDate)
            ]
            if unrelated:
                raise ValidationError(
                    f"Promotions {unrelated} are not active promotions overlapping the new dates"
                )

            remaining = self.repo.find_overlapping(
                db, property_id, data.startDate, data.endDate, exclude_ids=replaced_ids
            )
            if remaining:
                self._raise_overlap(remaining)

            promotion = self.repo.create(
                db,
                property_id=property_id,
                discount_percentage=data.discountPercentage,
                start_date=data.startDate,
                end_date=data.endDate,
                created_by_id=user_id,
                is_active=True,
            )
            self.repo.deactivate(db, replaced, replaced_by_id=promotion.id)
            return promotion

        promotion = run_in_transaction(self.db, work)
        logger.info(
            f"🔄 Promotion #{promotion.id} created on property {property_id}, "
            f"replacing {replaced_ids}"
        )
        return promotion

    def update_promotion(self, promotion_id: int, data: PromotionUpdate, user: User) -> Promotion:
        promotion = self.get_promotion(promotion_id, user)

        start_date = data.startDate or promotion.start_date
        end_date = data.endDate or promotion.end_date
        discount = data.discountPercentage or promotion.discount_percentage
        if end_date <= start_date:
            raise ValidationError("End date must be after start date")
        if data.startDate is not None and data.startDate < today():
            raise ValidationError("Start date cannot be in the past")

        updates = {}
        if data.discountPercentage is not None:
            self._ensure_commission_allows(promotion.property_id, discount)
            updates["discount_percentage"] = discount
        if data.startDate is not None:
            updates["start_date"] = start_date
        if data.endDate is not None:
            updates["end_date"] = end_date

        promotion_id = promotion.id
        property_id = promotion.property_id
        check_overlap = promotion.is_active and ("start_date" in updates or "end_date" in updates)

        def work(db: Session) -> Promotion:
            current = self.repo.get_by_id(db, promotion_id)
            if check_overlap:
                overlapping = self.repo.find_overlapping(
                    db, property_id, start_date, end_date, exclude_ids=[promotion_id]
                )
                if overlapping:
                    raise ConflictError(
                        "The new dates overlap another active promotion",
                        conflicts=[describe_promotion(p) for p in overlapping],
                    )
            return self.repo.update(db, current, **updates)

        return run_in_transaction(self.db, work)

    def cancel_promotion(self, promotion_id: int, user: User) -> Promotion:
        """Soft delete: the promotion stays in history but no longer applies"""
        promotion = self.get_promotion(promotion_id, user)
        self.repo.deactivate(self.db, [promotion])
        self.db.commit()
        logger.info(f"🚫 Promotion #{promotion_id} cancelled by user {user.id}")
        return promotion

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_active_promotion(self, property_id: int, on_date: Optional[date] = None) -> Optional[Promotion]:
        return self.repo.get_active_for_date(self.db, property_id, on_date or today())

    def list_promotions(self, user: User, property_id: Optional[int] = None) -> list[Promotion]:
        if is_manager(user):
            return self.repo.list_promotions(self.db, property_id=property_id)
        return self.repo.list_promotions(self.db, owner_id=user.id, property_id=property_id)

    def list_properties_on_promotion(
        self,
        property_type_id: Optional[int] = None,
        min_discount: Optional[float] = None,
        sort_by: str = "discount",
        limit: int = 50,
        offset: int = 0,
    ) -> list[dict]:
        running = self.repo.list_running_on(
            self.db, today(), property_type_id, min_discount, sort_by, limit, offset
        )
        items = []
        for promotion in running:
            prop = promotion.property
            original = quantize_amount(prop.base_price)
            discounted = quantize_amount(apply_discount(original, promotion.discount_percentage))
            items.append(
                {
                    "promotionId": promotion.id,
                    "propertyId": prop.id,
                    "propertyName": prop.name,
                    "discountPercentage": promotion.discount_percentage,
                    "originalPrice": float(original),
                    "discountedPrice": float(discounted),
                    "savings": float(original - discounted),
                    "endDate": promotion.end_date,
                }
            )
        return items

    # ------------------------------------------------------------------
    # Pricing priority
    # ------------------------------------------------------------------

    def get_pricing_priority(self, user_id: int) -> PricingPriority:
        settings = self.settings_repo.get_for_user(self.db, user_id)
        if settings is None:
            return DEFAULT_PRIORITY
        return PricingPriority(settings.promotion_priority)

    def get_pricing_settings(self, user: User) -> HostPricingSettings:
        """The host's settings, saved with the default priority on first read"""
        settings = self.settings_repo.get_for_user(self.db, user.id)
        if settings is None:
            settings = self.settings_repo.upsert(self.db, user.id, DEFAULT_PRIORITY.value)
            self.db.commit()
            logger.info(f"⚙️ Default pricing priority {settings.promotion_priority} saved for host {user.id}")
        return settings

    def update_pricing_priority(self, user: User, priority: PricingPriority) -> HostPricingSettings:
        settings = self.settings_repo.upsert(self.db, user.id, PricingPriority(priority).value)
        self.db.commit()
        logger.info(f"⚙️ Pricing priority of host {user.id} set to {settings.promotion_priority}")
        return settings

    # ------------------------------------------------------------------
    # Final price
    # ------------------------------------------------------------------

    @staticmethod
    def nightly_base_price(prop: Property, currency: str):
        base_price = prop.base_price if currency == "EUR" else prop.base_price_mga
        if base_price is None:
            raise ValidationError(f"Property has no nightly price in {currency}")
        return base_price

    @staticmethod
    def pick_special_price(
        special_prices: list[SpecialPrice], on_date: date, currency: str
    ) -> tuple[Optional[SpecialPrice], Optional[float]]:
        """First special price scheduled on `on_date`; ignored when it has no amount in `currency`"""
        for special_price in special_prices:
            if special_price_applies(special_price, on_date):
                value = special_price.price_eur if currency == "EUR" else special_price.price_mga
                if value is None:
                    return None, None
                return special_price, value
        return None, None

    def price_stay(self, prop: Property, start_date: date, end_date: date, currency: str = "EUR") -> StayPrice:
        """
        Nightly prices of a stay under the owner's priority. Promotions and
        special prices are loaded once and matched night by night.
        """
        base_price = self.nightly_base_price(prop, currency)
        nights = stay_nights(start_date, end_date)
        if not nights:
            raise ValidationError("End date must be after start date")

        promotions = self.repo.find_overlapping(self.db, prop.id, nights[0], nights[-1])
        special_prices = self.special_repo.list_for_property(self.db, prop.id, active_only=True)
        priority = self.get_pricing_priority(prop.owner_id)

        conditions = []
        for night in nights:
            promotion = active_promotion_on(promotions, night)
            _, special_value = self.pick_special_price(special_prices, night, currency)
            conditions.append(
                NightConditions(
                    night=night,
                    promotion_discount=promotion.discount_percentage if promotion else None,
                    special_price=special_value,
                )
            )
        return price_stay(base_price, conditions, priority, currency)

    def calculate_final_price(
        self, property_id: int, on_date: Optional[date] = None, currency: str = "EUR"
    ) -> dict:
        """
        Nightly price a client pays on `on_date`: the owner's priority decides
        how the running promotion and the weekday special price combine, then
        commissions are computed on the result.
        """
        try:
            currency = validate_currency(currency)
        except ValueError as e:
            raise ValidationError(str(e))

        on_date = on_date or today()
        prop = self.get_property(property_id)
        base_price = self.nightly_base_price(prop, currency)

        promotion = self.get_active_promotion(prop.id, on_date)
        special, special_value = self.pick_special_price(
            self.special_repo.list_for_property(self.db, prop.id, active_only=True), on_date, currency
        )

        priority = self.get_pricing_priority(prop.owner_id)
        result = apply_pricing_policy(
            base_price,
            promotion.discount_percentage if promotion else None,
            special_value,
            priority,
            currency,
        )
        commission = compute_commission(
            result.final_price, self.commissions.get_rates_for_property(prop), currency
        )

        return {
            "propertyId": prop.id,
            "onDate": on_date,
            "currency": currency,
            "priority": priority,
            "originalPrice": float(result.base_price),
            "finalPrice": float(result.final_price),
            "savings": float(result.savings),
            "promotionApplied": result.promotion_applied,
            "promotionId": promotion.id if promotion and result.promotion_applied else None,
            "promotionDiscount": result.promotion_discount if result.promotion_applied else None,
            "specialPriceApplied": result.special_price_applied,
            "specialPriceId": special.id if special and result.special_price_applied else None,
            "specialPriceValue": (
                float(result.special_price_value) if result.special_price_applied else None
            ),
            "hostCommission": float(commission.host_commission),
            "clientCommission": float(commission.client_commission),
            "hostReceives": float(commission.host_receives),
            "clientPays": float(commission.client_pays),
        }


class SpecialPriceService:
    """Service layer for weekday price overrides"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SpecialPriceRepository()
        self.promotions = PromotionRepository()

    def _get_managed_property(self, property_id: int, user: User) -> Property:
        prop = self.promotions.get_property(self.db, property_id)
        if not prop:
            raise NotFoundError("Property not found")
        ensure_can_manage_property(user, prop)
        return prop

    def get_special_price(self, special_price_id: int, user: User) -> SpecialPrice:
        special_price = self.repo.get_by_id(self.db, special_price_id)
        if not special_price:
            raise NotFoundError("Special price not found")
        ensure_can_manage_property(user, special_price.property)
        return special_price

    def list_special_prices(self, property_id: int, user: User) -> list[SpecialPrice]:
        self._get_managed_property(property_id, user)
        return self.repo.list_for_property(self.db, property_id)

    def create_special_price(self, property_id: int, data: SpecialPriceCreate, user: User) -> SpecialPrice:
        prop = self._get_managed_property(property_id, user)
        special_price = self.repo.create(
            self.db,
            property_id=prop.id,
            price_eur=data.priceEUR,
            price_mga=data.priceMGA,
            days=data.days,
            start_date=data.startDate,
            end_date=data.endDate,
            is_active=data.isActive,
        )
        self.db.commit()
        self.db.refresh(special_price)
        logger.info(f"📆 Special price #{special_price.id} on property {prop.id} for {', '.join(data.days)}")
        return special_price

    def update_special_price(self, special_price_id: int, data: SpecialPriceUpdate, user: User) -> SpecialPrice:
        special_price = self.get_special_price(special_price_id, user)

        start_date = data.startDate or special_price.start_date
        end_date = data.endDate or special_price.end_date
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date must not be before start date")

        fields = {
            "priceEUR": "price_eur",
            "priceMGA": "price_mga",
            "days": "days",
            "startDate": "start_date",
            "endDate": "end_date",
            "isActive": "is_active",
        }
        updates = {
            column: getattr(data, name)
            for name, column in fields.items()
            if getattr(data, name) is not None
        }
        self.repo.update(self.db, special_price, **updates)
        self.db.commit()
        self.db.refresh(special_price)
        return special_price

    def delete_special_price(self, special_price_id: int, user: User) -> dict:
        special_price = self.get_special_price(special_price_id, user)
        self.repo.delete(self.db, special_price)
        self.db.commit()
        return {"success": True}
