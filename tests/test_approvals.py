# tests/test_approvals.py

"""
Tests for the request lifecycle: submit → admin → supervisor → (return).
"""

import logging
import pytest
from datetime import timedelta
from fastapi import HTTPException

from core.errors import (
    ConcurrentTransitionError,
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
    UnauthorizedTransitionError,
    ValidationError,
)
from models.enums import RequestStatus, RequestType
from models.request import EquipmentSubmission, PrintingSubmission, RoomSubmission
from services.state_machine import Transition, SUPERVISOR_RECORD


def _equipment(payload) -> EquipmentSubmission:
    return EquipmentSubmission(**payload)


# ============================================================
# Submit
# ============================================================
def test_submit_equipment_creates_pending(service, teacher, equipment_payload, equipment_repository):
    request = service.submit(_equipment(equipment_payload), teacher)

    assert request.status == RequestStatus.pending
    assert request.type == RequestType.equipment
    assert request.user_id == teacher.user_id
    assert request.class_name == "Cohort A"
    assert request.details.equipment_name == "Projector"
    assert request.details.quantity == 5
    assert request.admin_approval is None
    assert service.get_request(request.id) == request
    # stock untouched until final approval
    assert equipment_repository.items["eq-projector"].available_quantity == 10


def test_submit_room_request(service, teacher, room_payload, today):
    request = service.submit(RoomSubmission(**room_payload), teacher)

    assert request.type == RequestType.room
    assert request.details.room_name == "Lab 101"
    assert request.date == today


def test_submit_printing_request(service, teacher, today):
    submission = PrintingSubmission(
        type="printing",
        class_id="class-a",
        date=today,
        signature="data:image/png;base64,AAAA",
        document_name="  Midterm.pdf ",
        page_count=4,
        copies=30,
        double_sided=True,
    )
    request = service.submit(submission, teacher)

    assert request.type == RequestType.printing
    assert request.details.document_name == "Midterm.pdf"
    assert request.details.copies == 30


def test_submit_past_date_is_rejected(service, teacher, equipment_payload, request_store, today):
    equipment_payload["date"] = (today - timedelta(days=1)).isoformat()

    with pytest.raises(ValidationError) as exc_info:
        service.submit(_equipment(equipment_payload), teacher)

    assert "date" in exc_info.value.errors
    assert request_store.rows == {}


def test_submit_reports_every_missing_field(service, teacher):
    with pytest.raises(ValidationError) as exc_info:
        service.submit(RoomSubmission(type="room"), teacher)

    assert set(exc_info.value.errors) == {
        "class_id", "date", "signature", "room_id", "start_time", "end_time",
    }


def test_submit_quantity_above_stock(service, teacher, equipment_payload):
    equipment_payload["equipment_id"] = "eq-laptop"
    equipment_payload["quantity"] = 2

    with pytest.raises(ValidationError) as exc_info:
        service.submit(_equipment(equipment_payload), teacher)

    assert exc_info.value.errors["quantity"] == "Maximum available quantity: 1"


def test_submit_unknown_references(service, teacher, equipment_payload):
    equipment_payload["equipment_id"] = "eq-missing"
    equipment_payload["class_id"] = "class-missing"

    with pytest.raises(ValidationError) as exc_info:
        service.submit(_equipment(equipment_payload), teacher)

    assert {"equipment_id", "class_id"} <= set(exc_info.value.errors)


def test_submit_room_end_before_start(service, teacher, room_payload):
    room_payload["end_time"] = "09:00:00"

    with pytest.raises(ValidationError) as exc_info:
        service.submit(RoomSubmission(**room_payload), teacher)

    assert list(exc_info.value.errors) == ["end_time"]


def test_submit_room_closed_for_booking(service, teacher, room_payload):
    room_payload["room_id"] = "room-closed"

    with pytest.raises(ValidationError) as exc_info:
        service.submit(RoomSubmission(**room_payload), teacher)

    assert "room_id" in exc_info.value.errors


def test_only_teachers_submit(service, admin, equipment_payload):
    with pytest.raises(ForbiddenError):
        service.submit(_equipment(equipment_payload), admin)


# ============================================================
# Approve
# ============================================================
def test_full_equipment_flow(service, teacher, admin, supervisor, equipment_payload, equipment_repository):
    request = service.submit(_equipment(equipment_payload), teacher)

    stage_one = service.approve(request.id, admin, "ok")
    assert stage_one.status == RequestStatus.admin_approved
    assert stage_one.admin_approval.user_id == admin.user_id
    assert stage_one.admin_approval.notes == "ok"
    assert equipment_repository.items["eq-projector"].available_quantity == 10

    final = service.approve(request.id, supervisor)
    assert final.status == RequestStatus.approved
    assert final.supervisor_approval.user_name == supervisor.user_name
    assert final.admin_approval == stage_one.admin_approval
    assert equipment_repository.items["eq-projector"].available_quantity == 5


def test_supervisor_cannot_approve_pending(service, teacher, supervisor, equipment_payload):
    request = service.submit(_equipment(equipment_payload), teacher)

    with pytest.raises(UnauthorizedTransitionError):
        service.approve(request.id, supervisor)

    assert service.get_request(request.id).status == RequestStatus.pending


def test_admin_cannot_give_final_approval(service, teacher, admin, equipment_payload):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.approve(request.id, admin)

    with pytest.raises(UnauthorizedTransitionError):
        service.approve(request.id, admin)


def test_teacher_cannot_approve(service, teacher, equipment_payload):
    request = service.submit(_equipment(equipment_payload), teacher)

    with pytest.raises(ForbiddenError):
        service.approve(request.id, teacher)


def test_approve_missing_request(service, admin):
    with pytest.raises(NotFoundError):
        service.approve("nope", admin)


def test_final_approval_with_short_stock(service, teacher, admin, supervisor, equipment_payload, equipment_repository):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.approve(request.id, admin)

    # someone else's loan drained the stock in between
    equipment_repository.items["eq-projector"] = equipment_repository.items["eq-projector"].model_copy(
        update={"available_quantity": 3}
    )

    with pytest.raises(InsufficientStockError) as exc_info:
        service.approve(request.id, supervisor)

    assert exc_info.value.available == 3
    assert exc_info.value.requested == 5
    assert service.get_request(request.id).status == RequestStatus.admin_approved
    assert equipment_repository.items["eq-projector"].available_quantity == 3


def test_lost_status_race_gives_stock_back(service, teacher, admin, supervisor, equipment_payload, equipment_repository, request_store):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.approve(request.id, admin)

    original_persist = request_store.persist_request

    def reject_concurrently(updated, expected_status=None):
        # another supervisor rejected the request first
        current = request_store.rows[updated.id]
        request_store.rows[updated.id] = current.model_copy(update={"status": RequestStatus.rejected})
        return original_persist(updated, expected_status)

    request_store.persist_request = reject_concurrently

    with pytest.raises(ConcurrentTransitionError):
        service.approve(request.id, supervisor)

    assert request_store.rows[request.id].status == RequestStatus.rejected
    assert equipment_repository.items["eq-projector"].available_quantity == 10


def test_store_failure_on_final_approval_gives_stock_back(service, teacher, admin, supervisor, equipment_payload, equipment_repository, request_store):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.approve(request.id, admin)

    def database_down(updated, expected_status=None):
        raise HTTPException(status_code=500, detail="Failed to save request failed")

    request_store.persist_request = database_down

    with pytest.raises(HTTPException):
        service.approve(request.id, supervisor)

    assert request_store.rows[request.id].status == RequestStatus.admin_approved
    assert equipment_repository.items["eq-projector"].available_quantity == 10


def test_backward_transition_is_never_written(service, teacher, admin, supervisor, equipment_payload, request_store):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.approve(request.id, admin)
    approved = service.approve(request.id, supervisor)

    with pytest.raises(UnauthorizedTransitionError):
        service._apply(approved, Transition(RequestStatus.admin_approved, SUPERVISOR_RECORD), supervisor, None)

    assert request_store.rows[request.id].status == RequestStatus.approved


def test_room_approval_leaves_inventory_alone(service, teacher, admin, supervisor, room_payload, equipment_repository):
    request = service.submit(RoomSubmission(**room_payload), teacher)
    service.approve(request.id, admin)
    final = service.approve(request.id, supervisor)

    assert final.status == RequestStatus.approved
    assert equipment_repository.writes == 0


# ============================================================
# Reject
# ============================================================
def test_admin_rejects_with_reason(service, teacher, admin, equipment_payload):
    request = service.submit(_equipment(equipment_payload), teacher)

    rejected = service.reject(request.id, admin, "unavailable")

    assert rejected.status == RequestStatus.rejected
    assert rejected.admin_approval.notes == "unavailable"
    assert rejected.supervisor_approval is None


def test_supervisor_rejects_at_stage_two(service, teacher, admin, supervisor, equipment_payload):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.approve(request.id, admin)

    rejected = service.reject(request.id, supervisor, "Not this week")

    assert rejected.status == RequestStatus.rejected
    assert rejected.supervisor_approval.notes == "Not this week"
    assert rejected.admin_approval is not None


@pytest.mark.parametrize("notes", [None, "", "   "])
def test_reject_requires_reason(service, teacher, admin, equipment_payload, notes):
    request = service.submit(_equipment(equipment_payload), teacher)

    with pytest.raises(ValidationError) as exc_info:
        service.reject(request.id, admin, notes)

    assert "notes" in exc_info.value.errors
    assert service.get_request(request.id).status == RequestStatus.pending


def test_rejected_request_cannot_be_approved(service, teacher, admin, equipment_payload):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.reject(request.id, admin, "no")

    with pytest.raises(UnauthorizedTransitionError):
        service.approve(request.id, admin)


# ============================================================
# Return
# ============================================================
def test_mark_returned_restores_stock(service, teacher, admin, supervisor, equipment_payload, equipment_repository):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.approve(request.id, admin)
    service.approve(request.id, supervisor)
    assert equipment_repository.items["eq-projector"].available_quantity == 5

    returned = service.mark_returned(request.id, admin, "All units back")

    assert returned.status == RequestStatus.returned
    assert returned.return_info.notes == "All units back"
    assert equipment_repository.items["eq-projector"].available_quantity == 10

    with pytest.raises(UnauthorizedTransitionError):
        service.mark_returned(request.id, admin)
    assert equipment_repository.items["eq-projector"].available_quantity == 10


def test_return_closes_request_even_when_restock_fails(service, teacher, admin, supervisor, equipment_payload, equipment_repository, caplog):
    request = service.submit(_equipment(equipment_payload), teacher)
    service.approve(request.id, admin)
    service.approve(request.id, supervisor)
    equipment_repository.lost_writes = 99

    with caplog.at_level(logging.ERROR, logger="reservations"):
        returned = service.mark_returned(request.id, admin)

    assert returned.status == RequestStatus.returned
    assert equipment_repository.items["eq-projector"].available_quantity == 5
    assert request.id in caplog.text
    assert "eq-projector" in caplog.text


def test_room_cannot_be_returned(service, teacher, admin, supervisor, room_payload):
    request = service.submit(RoomSubmission(**room_payload), teacher)
    service.approve(request.id, admin)
    service.approve(request.id, supervisor)

    with pytest.raises(UnauthorizedTransitionError):
        service.mark_returned(request.id, admin)


# ============================================================
# Visibility / listing
# ============================================================
def test_teacher_only_sees_own_request(service, teacher, other_teacher, admin, equipment_payload):
    request = service.submit(_equipment(equipment_payload), teacher)

    assert service.get_visible_request(request.id, teacher).id == request.id
    assert service.get_visible_request(request.id, admin).id == request.id
    with pytest.raises(ForbiddenError):
        service.get_visible_request(request.id, other_teacher)


def test_listing_queues(service, teacher, other_teacher, admin, equipment_payload, room_payload):
    first = service.submit(_equipment(equipment_payload), teacher)
    second = service.submit(RoomSubmission(**room_payload), other_teacher)
    service.approve(first.id, admin)

    assert [r.id for r in service.list_by_status(RequestStatus.pending)] == [second.id]
    assert [r.id for r in service.list_by_status(RequestStatus.admin_approved)] == [first.id]
    assert [r.id for r in service.list_by_user(teacher.user_id)] == [first.id]
    assert len(service.list_all()) == 2
