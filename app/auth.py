import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .database import get_db
from .exceptions import ForbiddenError
from .models import Property, User

logger = logging.getLogger(__name__)

ADMIN_ROLES = ("ADMIN",)
MANAGER_ROLES = ("ADMIN", "HOST_MANAGER")
HOST_ROLES = ("ADMIN", "HOST_MANAGER", "HOST", "HOST_VERIFIED")


async def get_current_user(
    x_user_id: Optional[int] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the acting user from the X-User-Id header.
    Session/token verification happens upstream at the gateway.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.query(User).filter(User.id == x_user_id).first()
    if not user:
        logger.warning(f"Authentication failed: unknown user id {x_user_id}")
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def is_admin(user: User) -> bool:
    return user.role in ADMIN_ROLES


def is_manager(user: User) -> bool:
    return user.role in MANAGER_ROLES


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


async def require_host(user: User = Depends(get_current_user)) -> User:
    if user.role not in HOST_ROLES:
        raise HTTPException(
            status_code=403, detail="Only hosts and administrators can manage properties"
        )
    return user


def ensure_can_manage_property(user: User, prop: Property) -> None:
    """Owners manage their own properties; admins and host managers manage all"""
    if is_manager(user) or prop.owner_id == user.id:
        return
    raise ForbiddenError("You can only manage your own properties")
