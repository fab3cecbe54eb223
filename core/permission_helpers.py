from fastapi import Depends, HTTPException
from typing import Optional, Union

from dependencies.auth import get_current_user, CurrentUser
from core.errors import ForbiddenError
from core.permissions import ROLE_PERMISSIONS
from models.enums import Action, RequestStatus, UserRole


# -----------------------------------------------------
# Which role acts on which waiting status
# -----------------------------------------------------
STAGE_ROLES = {
    RequestStatus.pending: UserRole.admin,
    RequestStatus.admin_approved: UserRole.supervisor,
}

MANAGER_ROLES = {UserRole.admin, UserRole.supervisor}


# -----------------------------------------------------
# Workflow policy (pure)
# -----------------------------------------------------
def can_act(
    role: Union[UserRole, str],
    status: Optional[Union[RequestStatus, str]],
    action: Union[Action, str],
) -> bool:
    """
    Decide whether `role` may perform `action` on a request in `status`.

    - submit: teachers only, status ignored
    - approve / reject: admin on pending, supervisor on admin_approved
    - return: admin or supervisor on approved
    - manage: admin or supervisor, status ignored
    """
    try:
        role = UserRole(role)
        action = Action(action)
        status = RequestStatus(status) if status is not None else None
    except ValueError:
        return False

    if action == Action.submit:
        return role == UserRole.teacher

    if action == Action.manage:
        return role in MANAGER_ROLES

    if action in (Action.approve, Action.reject):
        return status is not None and STAGE_ROLES.get(status) == role

    if action == Action.return_:
        return role in MANAGER_ROLES and status == RequestStatus.approved

    return False


def require_can_act(role, status, action) -> None:
    """Raise ForbiddenError instead of silently ignoring a disallowed action."""
    if not can_act(role, status, action):
        action_name = getattr(action, "value", action)
        where = f" on a '{status}' request" if status is not None else ""
        raise ForbiddenError(f"Role '{role}' is not allowed to {action_name}{where}")


# -----------------------------------------------------
# Route-level permissions (role map + per-user overrides)
# -----------------------------------------------------
def get_effective_permissions(user: CurrentUser) -> set:
    role_perms = set(ROLE_PERMISSIONS.get(user.role, []))

    raw = getattr(user, "permissions", None)
    if isinstance(raw, list):
        role_perms |= set(raw)

    return role_perms


def has_permission(user: CurrentUser, permission: str) -> bool:
    effective = get_effective_permissions(user)
    return "*" in effective or permission in effective


def requires_permission(permission: str):
    """
    Usage:
        @router.post("", dependencies=[Depends(requires_permission("rooms:write"))])
    """

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not has_permission(current_user, permission):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{permission}' required"
            )
        return current_user

    return dependency


def is_manager_role(role) -> bool:
    """Admins and supervisors see every request and manage resources."""
    return role in MANAGER_ROLES


def is_manager(user: CurrentUser) -> bool:
    return is_manager_role(user.role)
