# services/approvals.py

"""
Request lifecycle: submission, the two approval stages, and equipment return.

Every call takes the acting user explicitly (models.profile.Actor); nothing
here reads process-wide session state.
"""

from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from core.config import settings
from core.errors import (
    ConcurrentTransitionError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedTransitionError,
    ValidationError,
)
from core.logging_config import logger
from core.permission_helpers import MANAGER_ROLES, is_manager_role, require_can_act
from models.enums import Action, RequestStatus, RequestType
from models.profile import Actor
from models.request import (
    ApprovalRecord,
    EquipmentDetails,
    EquipmentSubmission,
    PrintingDetails,
    PrintingSubmission,
    Request,
    RoomDetails,
    RoomSubmission,
)
from services.inventory import InventoryAdjuster
from services.state_machine import Transition, is_forward, next_status


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApprovalService:

    def __init__(
        self,
        store,
        inventory: InventoryAdjuster,
        catalog,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.inventory = inventory
        self.catalog = catalog
        self.clock = clock

    # =========================================================
    # Reads
    # =========================================================
    def get_request(self, request_id: str) -> Request:
        request = self.store.fetch_request(request_id)
        if request is None:
            raise NotFoundError("Request", request_id)
        return request

    def get_visible_request(self, request_id: str, actor: Actor) -> Request:
        """Teachers only see their own requests; admins and supervisors see all."""
        request = self.get_request(request_id)
        if not is_manager_role(actor.role) and request.user_id != actor.user_id:
            raise ForbiddenError("You do not have access to this request")
        return request

    def list_by_status(self, status: RequestStatus) -> List[Request]:
        return self.store.list_by_status(status)

    def list_by_user(self, user_id: str) -> List[Request]:
        return self.store.list_by_user(user_id)

    def list_all(self) -> List[Request]:
        return self.store.list_all()

    # =========================================================
    # Submission
    # =========================================================
    def _today(self) -> date:
        return self.clock().astimezone(ZoneInfo(settings.TIMEZONE)).date()

    def submit(self, submission, actor: Actor) -> Request:
        """
        Validate a room / equipment / printing submission and store it as pending.
        All field problems are reported together in one ValidationError.
        """
        require_can_act(actor.role, None, Action.submit)

        errors: Dict[str, str] = {}

        school_class = None
        if not submission.class_id:
            errors["class_id"] = "Select a class"
        else:
            school_class = self.catalog.fetch_class(submission.class_id)
            if school_class is None:
                errors["class_id"] = f"Unknown class {submission.class_id}"

        if submission.date is None:
            errors["date"] = "Select a date"
        elif submission.date < self._today():
            errors["date"] = "Date cannot be in the past"

        if not (submission.signature or "").strip():
            errors["signature"] = "The request must be signed"

        if isinstance(submission, RoomSubmission):
            details = self._room_details(submission, errors)
        elif isinstance(submission, EquipmentSubmission):
            details = self._equipment_details(submission, errors)
        elif isinstance(submission, PrintingSubmission):
            details = self._printing_details(submission, errors)
        else:
            raise ValidationError({"type": f"Unsupported request type {getattr(submission, 'type', None)}"})

        if errors:
            logger.info(f"Rejected {submission.type} submission from {actor.user_id}: {sorted(errors)}")
            raise ValidationError(errors)

        now = self.clock()
        request = Request(
            id=str(uuid4()),
            status=RequestStatus.pending,
            user_id=actor.user_id,
            user_name=actor.user_name,
            class_id=school_class.id,
            class_name=school_class.name,
            date=submission.date,
            notes=submission.notes,
            signature=submission.signature,
            details=details,
            created_at=now,
            updated_at=now,
        )

        self.store.persist_request(request)
        logger.info(f"User {actor.user_id} submitted {request.type} request {request.id}")
        return request

    def _room_details(self, submission: RoomSubmission, errors: Dict[str, str]) -> Optional[RoomDetails]:
        room = None
        if not submission.room_id:
            errors["room_id"] = "Select a room"
        else:
            room = self.catalog.fetch_room(submission.room_id)
            if room is None:
                errors["room_id"] = f"Unknown room {submission.room_id}"
            elif not room.is_available:
                errors["room_id"] = f"Room {room.name} is not available for booking"

        if submission.start_time is None:
            errors["start_time"] = "Select a start time"
        if submission.end_time is None:
            errors["end_time"] = "Select an end time"
        elif submission.start_time is not None and submission.end_time <= submission.start_time:
            errors["end_time"] = "End time must be after start time"

        if errors:
            return None
        return RoomDetails(
            room_id=room.id,
            room_name=room.name,
            start_time=submission.start_time,
            end_time=submission.end_time,
        )

    def _equipment_details(self, submission: EquipmentSubmission, errors: Dict[str, str]) -> Optional[EquipmentDetails]:
        equipment = None
        if not submission.equipment_id:
            errors["equipment_id"] = "Select equipment"
        else:
            equipment = self.inventory.lookup(submission.equipment_id)
            if equipment is None:
                errors["equipment_id"] = f"Unknown equipment {submission.equipment_id}"

        if submission.quantity is None or submission.quantity < 1:
            errors["quantity"] = "Quantity must be at least 1"
        elif equipment is not None and submission.quantity > equipment.available_quantity:
            errors["quantity"] = f"Maximum available quantity: {equipment.available_quantity}"

        if errors:
            return None
        return EquipmentDetails(
            equipment_id=equipment.id,
            equipment_name=equipment.name,
            quantity=submission.quantity,
        )

    def _printing_details(self, submission: PrintingSubmission, errors: Dict[str, str]) -> Optional[PrintingDetails]:
        document_name = (submission.document_name or "").strip()
        if not document_name:
            errors["document_name"] = "Enter the document name"
        if submission.page_count is None or submission.page_count < 1:
            errors["page_count"] = "Page count must be at least 1"
        if submission.copies is None or submission.copies < 1:
            errors["copies"] = "Copies must be at least 1"

        if errors:
            return None
        return PrintingDetails(
            document_name=document_name,
            page_count=submission.page_count,
            copies=submission.copies,
            color_print=submission.color_print,
            double_sided=submission.double_sided,
            pdf_file_name=submission.pdf_file_name,
        )

    # =========================================================
    # Transitions
    # =========================================================
    def _require_manager(self, actor: Actor, action: Action) -> None:
        if actor.role not in MANAGER_ROLES:
            raise ForbiddenError(f"Role '{actor.role}' cannot {action.value} requests")

    def _apply(self, request: Request, transition: Transition, actor: Actor, notes: Optional[str]) -> Request:
        """Write the new status and its record, only if nobody moved the request meanwhile."""
        if not is_forward(request.status, transition.next_status):
            raise UnauthorizedTransitionError(request.id, str(request.status), str(actor.role), f"move to {transition.next_status}")

        now = self.clock()
        record = ApprovalRecord(
            user_id=actor.user_id,
            user_name=actor.user_name,
            timestamp=now,
            notes=notes,
        )
        updated = request.model_copy(update={
            "status": transition.next_status,
            transition.record_field: record,
            "updated_at": now,
        })

        if not self.store.persist_request(updated, expected_status=request.status):
            raise ConcurrentTransitionError(f"Request {request.id} was updated by someone else, reload it")

        logger.info(
            f"{actor.role} {actor.user_id} moved request {request.id}: "
            f"{request.status} → {transition.next_status}"
        )
        return updated

    def approve(self, request_id: str, actor: Actor, notes: Optional[str] = None) -> Request:
        """
        Advance one stage. Equipment stock is taken when the supervisor gives
        final approval, and given back if the status write does not go through.
        """
        self._require_manager(actor, Action.approve)
        request = self.get_request(request_id)
        transition = next_status(request.id, request.status, actor.role, Action.approve, request.type)

        reserved = None
        if transition.next_status == RequestStatus.approved and request.type == RequestType.equipment:
            self.inventory.reserve(request.details.equipment_id, request.details.quantity)
            reserved = request.details

        try:
            return self._apply(request, transition, actor, notes)
        except Exception:
            # status not written (lost race or store failure): give the units back
            if reserved is not None:
                self.inventory.release(reserved.equipment_id, reserved.quantity)
            raise

    def reject(self, request_id: str, actor: Actor, notes: Optional[str]) -> Request:
        """Reject at the current stage. A reason is mandatory."""
        self._require_manager(actor, Action.reject)
        request = self.get_request(request_id)
        transition = next_status(request.id, request.status, actor.role, Action.reject, request.type)

        reason = (notes or "").strip()
        if not reason:
            raise ValidationError({"notes": "A reason is required to reject a request"})

        return self._apply(request, transition, actor, reason)

    def mark_returned(self, request_id: str, actor: Actor, notes: Optional[str] = None) -> Request:
        """Close an approved equipment loan and put the units back in stock."""
        self._require_manager(actor, Action.return_)
        request = self.get_request(request_id)
        transition = next_status(request.id, request.status, actor.role, Action.return_, request.type)

        # Status write first: the compare-and-swap makes the release happen at most once
        updated = self._apply(request, transition, actor, notes)
        try:
            self.inventory.release(request.details.equipment_id, request.details.quantity)
        except Exception as e:
            # `returned` is terminal, so the stock has to be corrected by hand
            logger.error(
                f"Request {request.id} marked returned but {request.details.quantity} x "
                f"equipment {request.details.equipment_id} were not restocked: {e}"
            )
        return updated
