"""Commission repository - Database operations for commission rules"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import CommissionRule, PropertyType


class CommissionRepository:
    """Repository for commission rule database operations"""

    @staticmethod
    def get_by_id(db: Session, rule_id: int) -> Optional[CommissionRule]:
        return (
            db.query(CommissionRule)
            .options(joinedload(CommissionRule.property_type))
            .filter(CommissionRule.id == rule_id)
            .first()
        )

    @staticmethod
    def get_by_type(db: Session, property_type_id: Optional[int]) -> Optional[CommissionRule]:
        """The rule scoped to a property type, or the global rule when the type is None"""
        query = db.query(CommissionRule)
        if property_type_id is None:
            query = query.filter(CommissionRule.property_type_id.is_(None))
        else:
            query = query.filter(CommissionRule.property_type_id == property_type_id)
        return query.first()

    @staticmethod
    def get_active_by_type(db: Session, property_type_id: Optional[int]) -> Optional[CommissionRule]:
        rule = CommissionRepository.get_by_type(db, property_type_id)
        if rule and rule.is_active:
            return rule
        return None

    @staticmethod
    def list_all(db: Session) -> list[CommissionRule]:
        return (
            db.query(CommissionRule)
            .options(joinedload(CommissionRule.property_type))
            .order_by(CommissionRule.created_at.desc(), CommissionRule.id.desc())
            .all()
        )

    @staticmethod
    def get_property_type(db: Session, property_type_id: int) -> Optional[PropertyType]:
        return db.query(PropertyType).filter(PropertyType.id == property_type_id).first()

    @staticmethod
    def create(db: Session, **data) -> CommissionRule:
        rule = CommissionRule(**data)
        db.add(rule)
        db.flush()
        return rule

    @staticmethod
    def update(db: Session, rule: CommissionRule, **data) -> CommissionRule:
        for key, value in data.items():
            setattr(rule, key, value)
        db.flush()
        return rule

    @staticmethod
    def delete(db: Session, rule: CommissionRule) -> None:
        db.delete(rule)
        db.flush()
