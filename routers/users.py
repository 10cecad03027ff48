"""User administration. Admins only."""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from dependencies import get_users, require_role
from errors import NotFound, ValidationFailed
from repositories import UserRepository
from schemas import Role, User
from validators import validate_user

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(require_role(Role.ADMIN))],
)


@router.get("", response_model=List[User], response_model_exclude_unset=True)
async def list_users(users: UserRepository = Depends(get_users)):
    return await users.find_all()


@router.get("/{user_id}", response_model=User, response_model_exclude_unset=True)
async def get_user(user_id: str, users: UserRepository = Depends(get_users)):
    user = await users.find_by_id(user_id)
    if user is None:
        raise NotFound("user")
    return user


@router.patch("/{user_id}", response_model=User, response_model_exclude_unset=True)
async def update_user(user_id: str, payload: Dict[str, Any] = Body(...), users: UserRepository = Depends(get_users)):
    errors = validate_user(payload, partial=True)
    if errors:
        raise ValidationFailed(errors)
    return await users.update(user_id, payload)


@router.delete("/{user_id}")
async def delete_user(user_id: str, users: UserRepository = Depends(get_users)):
    await users.delete(user_id)
    return {"message": "User deleted successfully"}
