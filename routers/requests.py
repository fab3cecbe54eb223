# routers/requests.py

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from dependencies.auth import get_current_user, CurrentUser
from dependencies.services import get_approval_service
from core.permission_helpers import requires_permission, is_manager
from models.enums import RequestStatus, RequestType, StatsPeriod
from models.request import DecisionPayload, Request, Submission
from services.approvals import ApprovalService
from services.stats import summarize_requests

router = APIRouter(
    prefix="/requests",
    tags=["Requests"],
)


def _notes(payload: Optional[DecisionPayload]) -> Optional[str]:
    return payload.notes if payload else None


# ============================================================
# SUBMIT
# ============================================================
@router.post(
    "",
    response_model=Request,
    status_code=201,
    summary="Submit a room, equipment or printing request",
    dependencies=[Depends(requires_permission("requests:create"))],
)
def submit_request(
    payload: Submission,
    current_user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """
    Create a request in `pending` status.

    **Validation:** every missing or invalid field is reported at once
    (HTTP 422, `errors` maps field → message). Nothing is stored on failure.
    """
    return service.submit(payload, current_user.as_actor())


# ============================================================
# LIST
# ============================================================
@router.get(
    "",
    response_model=List[Request],
    summary="List requests",
    dependencies=[Depends(requires_permission("requests:read"))],
)
def list_requests(
    status: Optional[RequestStatus] = Query(None, description="Filter by status"),
    request_type: Optional[RequestType] = Query(None, alias="type", description="Filter by request type"),
    current_user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """
    - Teachers: only their own requests
    - Admins / supervisors: every request (the admin queue is `status=pending`,
      the supervisor queue is `status=admin_approved`)
    """
    if is_manager(current_user):
        requests = service.list_by_status(status) if status else service.list_all()
    else:
        requests = service.list_by_user(current_user.id)
        if status:
            requests = [r for r in requests if r.status == status]

    if request_type:
        requests = [r for r in requests if r.type == request_type]
    return requests


@router.get(
    "/mine",
    response_model=List[Request],
    summary="List my requests",
    dependencies=[Depends(requires_permission("requests:read"))],
)
def list_my_requests(
    current_user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    return service.list_by_user(current_user.id)


# ============================================================
# STATS (admin / supervisor dashboards)
# ============================================================
@router.get(
    "/stats",
    summary="Request statistics",
    dependencies=[Depends(requires_permission("requests:stats"))],
)
def request_stats(
    period: StatsPeriod = Query(StatsPeriod.month),
    request_type: Optional[RequestType] = Query(None, alias="type"),
    service: ApprovalService = Depends(get_approval_service),
):
    return summarize_requests(service.list_all(), period, request_type)


# ============================================================
# DETAIL
# ============================================================
@router.get(
    "/{request_id}",
    response_model=Request,
    dependencies=[Depends(requires_permission("requests:read"))],
)
def get_request(
    request_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """Requester or admin / supervisor only."""
    return service.get_visible_request(request_id, current_user.as_actor())


# ============================================================
# DECISIONS
# ============================================================
@router.post(
    "/{request_id}/approve",
    response_model=Request,
    summary="Approve at the current stage",
    dependencies=[Depends(requires_permission("requests:approve"))],
)
def approve_request(
    request_id: str,
    payload: Optional[DecisionPayload] = None,
    current_user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """
    Admins approve `pending` requests, supervisors approve `admin_approved` ones.
    Final approval of an equipment request takes the quantity out of stock
    (HTTP 409 with `available` if stock ran short since submission).
    """
    return service.approve(request_id, current_user.as_actor(), _notes(payload))


@router.post(
    "/{request_id}/reject",
    response_model=Request,
    summary="Reject at the current stage",
    dependencies=[Depends(requires_permission("requests:approve"))],
)
def reject_request(
    request_id: str,
    payload: Optional[DecisionPayload] = None,
    current_user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """`notes` is mandatory and is shown to the requester."""
    return service.reject(request_id, current_user.as_actor(), _notes(payload))


@router.post(
    "/{request_id}/return",
    response_model=Request,
    summary="Mark borrowed equipment as returned",
    dependencies=[Depends(requires_permission("requests:approve"))],
)
def return_request(
    request_id: str,
    payload: Optional[DecisionPayload] = None,
    current_user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    return service.mark_returned(request_id, current_user.as_actor(), _notes(payload))
