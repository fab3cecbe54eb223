"""
Request approval state machine.

    PENDING ──admin──▶ ADMIN_APPROVED ──supervisor──▶ APPROVED ──▶ RETURNED
       │                     │                                (equipment only)
       └──admin──▶ REJECTED ◀┘──supervisor

Transitions are a pure lookup: (status, role, action) → (next status, record).
The record names the approval field the transition writes exactly once.
"""

from typing import Dict, NamedTuple, Optional, Tuple, Union

from core.errors import UnauthorizedTransitionError
from models.enums import Action, RequestStatus, RequestType, UserRole


class Transition(NamedTuple):
    next_status: RequestStatus
    record_field: str


ADMIN_RECORD = "admin_approval"
SUPERVISOR_RECORD = "supervisor_approval"
RETURN_RECORD = "return_info"


TRANSITIONS: Dict[Tuple[RequestStatus, UserRole, Action], Transition] = {
    # Stage 1
    (RequestStatus.pending, UserRole.admin, Action.approve): Transition(RequestStatus.admin_approved, ADMIN_RECORD),
    (RequestStatus.pending, UserRole.admin, Action.reject): Transition(RequestStatus.rejected, ADMIN_RECORD),

    # Stage 2
    (RequestStatus.admin_approved, UserRole.supervisor, Action.approve): Transition(RequestStatus.approved, SUPERVISOR_RECORD),
    (RequestStatus.admin_approved, UserRole.supervisor, Action.reject): Transition(RequestStatus.rejected, SUPERVISOR_RECORD),

    # Equipment handed back
    (RequestStatus.approved, UserRole.admin, Action.return_): Transition(RequestStatus.returned, RETURN_RECORD),
    (RequestStatus.approved, UserRole.supervisor, Action.return_): Transition(RequestStatus.returned, RETURN_RECORD),
}

TERMINAL_STATUSES = {RequestStatus.rejected, RequestStatus.returned}

# Forward order; rejected/returned sit after every state they can be reached from
STATUS_ORDER = {
    RequestStatus.pending: 0,
    RequestStatus.admin_approved: 1,
    RequestStatus.approved: 2,
    RequestStatus.rejected: 3,
    RequestStatus.returned: 3,
}


def find_transition(
    status: Union[RequestStatus, str],
    role: Union[UserRole, str],
    action: Union[Action, str],
    request_type: Optional[Union[RequestType, str]] = None,
) -> Optional[Transition]:
    """Return the transition for this combination, or None if it is not allowed."""
    try:
        key = (RequestStatus(status), UserRole(role), Action(action))
    except ValueError:
        return None

    if key[0] in TERMINAL_STATUSES:
        return None

    transition = TRANSITIONS.get(key)
    if transition is None:
        return None

    if key[2] == Action.return_ and request_type is not None and RequestType(request_type) != RequestType.equipment:
        return None

    return transition


def next_status(
    request_id: str,
    status: Union[RequestStatus, str],
    role: Union[UserRole, str],
    action: Union[Action, str],
    request_type: Optional[Union[RequestType, str]] = None,
) -> Transition:
    """Like find_transition, but raises UnauthorizedTransitionError on a mismatch."""
    transition = find_transition(status, role, action, request_type)
    if transition is None:
        raise UnauthorizedTransitionError(
            request_id,
            str(status),
            str(role),
            getattr(action, "value", action),
        )
    return transition


def is_forward(current: RequestStatus, target: RequestStatus) -> bool:
    return STATUS_ORDER[target] > STATUS_ORDER[current]
