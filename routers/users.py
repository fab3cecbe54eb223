# routers/users.py

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from dependencies.auth import get_current_user, CurrentUser
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.supabase_helpers import safe_get, safe_select, safe_update
from models.enums import UserRole
from models.profile import ProfileRead, RoleUpdate

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


@router.get("/me", response_model=CurrentUser)
def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user


@router.get(
    "",
    response_model=List[ProfileRead],
    dependencies=[Depends(requires_permission("users:read"))],
)
def list_users(role: Optional[UserRole] = Query(None)):
    filters = {"role": role.value} if role else None
    return safe_select("profiles", filters, order="full_name")


@router.patch(
    "/{user_id}/role",
    response_model=ProfileRead,
    dependencies=[Depends(requires_permission("users:write"))],
)
def update_user_role(
    user_id: str,
    payload: RoleUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    if user_id == current_user.id:
        raise HTTPException(400, "You cannot change your own role")

    safe_get("profiles", user_id, "User")
    profile = safe_update("profiles", {"id": user_id}, {"role": payload.role})
    logger.info(f"{current_user.id} set role of {user_id} to {payload.role}")
    return profile
