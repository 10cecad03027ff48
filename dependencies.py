"""
FastAPI dependencies: repositories bound to the request's database handle,
and the per-request identity gate.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Depends, Request
from pymongo.errors import PyMongoError

from database import get_db
from errors import AuthenticationRequired, InventoryError, PermissionDenied
from repositories import ProductRepository, SupplierRepository, UserRepository
from schemas import Role
from security import extract_token, verify_token

logger = structlog.get_logger()


def get_products(db=Depends(get_db)) -> ProductRepository:
    return ProductRepository(db)


def get_suppliers(db=Depends(get_db)) -> SupplierRepository:
    return SupplierRepository(db)


def get_users(db=Depends(get_db)) -> UserRepository:
    return UserRepository(db)


async def get_current_user(request: Request, users: UserRepository = Depends(get_users)) -> Optional[Dict[str, Any]]:
    """The caller's user record, or None. Never raises: bad credentials mean anonymous."""
    payload = verify_token(extract_token(request))
    if payload is None:
        return None
    try:
        user = await users.find_by_id(payload["id"])
    except (InventoryError, PyMongoError) as e:
        logger.debug("identity_lookup_failed", reason=type(e).__name__)
        return None
    if user is None:
        logger.debug("token_user_missing", user_id=payload["id"])
    return user


def require_authenticated(user: Optional[Dict[str, Any]] = Depends(get_current_user)) -> Dict[str, Any]:
    if user is None:
        raise AuthenticationRequired()
    return user


def has_role(user: Dict[str, Any], allowed) -> bool:
    granted = set()
    for r in user.get("roles") or []:
        try:
            granted.add(Role(r))
        except ValueError:
            # unknown role strings grant nothing
            continue
    return bool(granted & {Role(r) for r in allowed})


def require_role(*roles: Role):
    """Dependency factory: the caller must hold at least one of ``roles``."""
    def dependency(user: Dict[str, Any] = Depends(require_authenticated)) -> Dict[str, Any]:
        if not has_role(user, roles):
            raise PermissionDenied()
        return user

    return dependency


def get_oauth(request: Request):
    return request.app.state.oauth
