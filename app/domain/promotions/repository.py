"""Promotion repository - Database operations for promotions, special prices and pricing settings"""

from datetime import date
from typing import Iterable, Optional

from sqlalchemy.orm import Session, joinedload

from ...models import HostPricingSettings, Promotion, Property, SpecialPrice


class PromotionRepository:
    """Repository for promotion database operations"""

    @staticmethod
    def get_property(db: Session, property_id: int) -> Optional[Property]:
        return db.query(Property).filter(Property.id == property_id).first()

    @staticmethod
    def get_by_id(db: Session, promotion_id: int) -> Optional[Promotion]:
        return (
            db.query(Promotion)
            .options(joinedload(Promotion.property))
            .filter(Promotion.id == promotion_id)
            .first()
        )

    @staticmethod
    def get_by_ids(db: Session, promotion_ids: list[int]) -> list[Promotion]:
        if not promotion_ids:
            return []
        return db.query(Promotion).filter(Promotion.id.in_(promotion_ids)).all()

    @staticmethod
    def find_overlapping(
        db: Session,
        property_id: int,
        start_date: date,
        end_date: date,
        exclude_ids: Iterable[int] = (),
    ) -> list[Promotion]:
        """Active promotions of the property sharing at least one day with [start, end]"""
        query = db.query(Promotion).filter(
            Promotion.property_id == property_id,
            Promotion.is_active.is_(True),
            Promotion.start_date <= end_date,
            Promotion.end_date >= start_date,
        )
        exclude_ids = list(exclude_ids)
        if exclude_ids:
            query = query.filter(Promotion.id.notin_(exclude_ids))
        return query.order_by(Promotion.start_date.asc()).all()

    @staticmethod
    def get_active_for_date(db: Session, property_id: int, on_date: date) -> Optional[Promotion]:
        return (
            db.query(Promotion)
            .filter(
                Promotion.property_id == property_id,
                Promotion.is_active.is_(True),
                Promotion.start_date <= on_date,
                Promotion.end_date >= on_date,
            )
            .order_by(Promotion.created_at.desc(), Promotion.id.desc())
            .first()
        )

    @staticmethod
    def list_promotions(
        db: Session, owner_id: Optional[int] = None, property_id: Optional[int] = None
    ) -> list[Promotion]:
        """All promotions, or those on the properties of `owner_id`, newest first"""
        query = db.query(Promotion).join(Promotion.property).options(joinedload(Promotion.property))
        if owner_id is not None:
            query = query.filter(Property.owner_id == owner_id)
        if property_id is not None:
            query = query.filter(Promotion.property_id == property_id)
        return query.order_by(Promotion.created_at.desc(), Promotion.id.desc()).all()

    @staticmethod
    def list_running_on(
        db: Session,
        on_date: date,
        property_type_id: Optional[int] = None,
        min_discount: Optional[float] = None,
        sort_by: str = "discount",
        limit: int = 50,
        offset: int = 0,
    ) -> list[Promotion]:
        query = (
            db.query(Promotion)
            .join(Promotion.property)
            .options(joinedload(Promotion.property))
            .filter(
                Promotion.is_active.is_(True),
                Promotion.start_date <= on_date,
                Promotion.end_date >= on_date,
            )
        )
        if property_type_id is not None:
            query = query.filter(Property.type_id == property_type_id)
        if min_discount is not None:
            query = query.filter(Promotion.discount_percentage >= min_discount)

        if sort_by == "endDate":
            query = query.order_by(Promotion.end_date.asc())
        elif sort_by == "price":
            query = query.order_by(Property.base_price.asc())
        else:
            query = query.order_by(Promotion.discount_percentage.desc())

        return query.order_by(Promotion.id.asc()).offset(offset).limit(limit).all()

    @staticmethod
    def create(db: Session, **data) -> Promotion:
        promotion = Promotion(**data)
        db.add(promotion)
        db.flush()
        return promotion

    @staticmethod
    def update(db: Session, promotion: Promotion, **data) -> Promotion:
        for key, value in data.items():
            setattr(promotion, key, value)
        db.flush()
        return promotion

    @staticmethod
    def deactivate(db: Session, promotions: list[Promotion], replaced_by_id: Optional[int] = None) -> None:
        for promotion in promotions:
            promotion.is_active = False
            if replaced_by_id is not None:
                promotion.replaced_by_id = replaced_by_id
        db.flush()


class PricingSettingsRepository:
    """Repository for per-host pricing priority"""

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> Optional[HostPricingSettings]:
        return db.query(HostPricingSettings).filter(HostPricingSettings.user_id == user_id).first()

    @staticmethod
    def upsert(db: Session, user_id: int, promotion_priority: str) -> HostPricingSettings:
        settings = PricingSettingsRepository.get_for_user(db, user_id)
        if settings is None:
            settings = HostPricingSettings(user_id=user_id)
            db.add(settings)
        settings.promotion_priority = promotion_priority
        db.flush()
        return settings


class SpecialPriceRepository:
    """Repository for special price database operations"""

    @staticmethod
    def get_by_id(db: Session, special_price_id: int) -> Optional[SpecialPrice]:
        return (
            db.query(SpecialPrice)
            .options(joinedload(SpecialPrice.property))
            .filter(SpecialPrice.id == special_price_id)
            .first()
        )

    @staticmethod
    def list_for_property(db: Session, property_id: int, active_only: bool = False) -> list[SpecialPrice]:
        query = db.query(SpecialPrice).filter(SpecialPrice.property_id == property_id)
        if active_only:
            query = query.filter(SpecialPrice.is_active.is_(True))
        return query.order_by(SpecialPrice.id.asc()).all()

    @staticmethod
    def create(db: Session, **data) -> SpecialPrice:
        special_price = SpecialPrice(**data)
        db.add(special_price)
        db.flush()
        return special_price

    @staticmethod
    def update(db: Session, special_price: SpecialPrice, **data) -> SpecialPrice:
        for key, value in data.items():
            setattr(special_price, key, value)
        db.flush()
        return special_price

    @staticmethod
    def delete(db: Session, special_price: SpecialPrice) -> None:
        db.delete(special_price)
        db.flush()
