"""Extras service - Host and platform-wide priced add-ons"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import ensure_can_manage_property, is_admin
from ...exceptions import ForbiddenError, NotFoundError
from ...models import Extra, Property, User
from .repository import ExtraRepository
from .schemas import ExtraCreate, ExtraUpdate

logger = logging.getLogger(__name__)


class ExtraService:
    """Service layer for extras"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ExtraRepository()

    def _resolve_properties(self, property_ids: list[int], user: User) -> list[Property]:
        unique_ids = list(dict.fromkeys(property_ids))
        properties = self.repo.get_properties(self.db, unique_ids)
        if len(properties) != len(unique_ids):
            raise NotFoundError("Property not found")
        for prop in properties:
            ensure_can_manage_property(user, prop)
        return properties

    def _ensure_can_edit(self, extra: Extra, user: User) -> None:
        if is_admin(user):
            return
        if extra.owner_id is None or extra.owner_id != user.id:
            raise ForbiddenError("You can only modify your own extras")

    def get_extra(self, extra_id: int) -> Extra:
        extra = self.repo.get_by_id(self.db, extra_id)
        if not extra:
            raise NotFoundError("Extra not found")
        return extra

    def list_extras(self, user: User, property_id: Optional[int] = None) -> list[Extra]:
        if property_id is not None:
            return self.repo.list_for_property(self.db, property_id)
        return self.repo.list_visible_to(self.db, None if is_admin(user) else user.id)

    def create_extra(self, data: ExtraCreate, user: User) -> Extra:
        if data.isGlobal and not is_admin(user):
            raise ForbiddenError("Only administrators can create global extras")

        properties = self._resolve_properties(data.propertyIds, user)
        extra = self.repo.create(
            self.db,
            properties,
            name=data.name,
            description=data.description,
            price_eur=data.priceEUR,
            price_mga=data.priceMGA,
            price_type=data.type.value,
            owner_id=None if data.isGlobal else user.id,
        )
        self.db.commit()
        self.db.refresh(extra)
        scope = "global" if extra.owner_id is None else f"host {extra.owner_id}"
        logger.info(f"➕ Extra #{extra.id} '{extra.name}' created ({scope}, {extra.price_type})")
        return extra

    def update_extra(self, extra_id: int, data: ExtraUpdate, user: User) -> Extra:
        extra = self.get_extra(extra_id)
        self._ensure_can_edit(extra, user)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.description is not None:
            updates["description"] = data.description
        if data.priceEUR is not None:
            updates["price_eur"] = data.priceEUR
        if data.priceMGA is not None:
            updates["price_mga"] = data.priceMGA
        if data.type is not None:
            updates["price_type"] = data.type.value

        properties = None
        if data.propertyIds is not None:
            properties = self._resolve_properties(data.propertyIds, user)

        self.repo.update(self.db, extra, properties, **updates)
        self.db.commit()
        self.db.refresh(extra)
        return extra

    def delete_extra(self, extra_id: int, user: User) -> dict:
        extra = self.get_extra(extra_id)
        self._ensure_can_edit(extra, user)
        self.repo.delete(self.db, extra)
        self.db.commit()
        logger.info(f"🗑️ Extra #{extra_id} deleted by user {user.id}")
        return {"success": True}
