# services/request_store.py

from typing import List, Optional

from supabase import Client

from core.errors import handle_supabase_error
from core.logging_config import logger
from models.enums import RequestStatus, RequestType
from models.request import Request


# -----------------------------------------------------
# Flat `requests` columns per payload variant
# (details field → column)
# -----------------------------------------------------
DETAIL_COLUMNS = {
    RequestType.room: {
        "room_id": "room_id",
        "room_name": "room_name",
        "start_time": "start_time",
        "end_time": "end_time",
    },
    RequestType.equipment: {
        "equipment_id": "equipment_id",
        "equipment_name": "equipment_name",
        "quantity": "equipment_quantity",
    },
    RequestType.printing: {
        "document_name": "document_name",
        "page_count": "page_count",
        "copies": "copies",
        "color_print": "color_print",
        "double_sided": "double_sided",
        "pdf_file_name": "pdf_file_name",
    },
}

ENVELOPE_COLUMNS = [
    "id", "status", "user_id", "user_name", "class_id", "class_name",
    "date", "notes", "signature", "created_at", "updated_at",
]

RECORD_COLUMNS = ["admin_approval", "supervisor_approval", "return_info"]


def request_to_row(request: Request) -> dict:
    data = request.model_dump(mode="json")
    details = data.pop("details")
    request_type = RequestType(details.pop("type"))

    row = {col: data[col] for col in ENVELOPE_COLUMNS}
    row["type"] = request_type.value
    for col in RECORD_COLUMNS:
        row[col] = data[col]
    for field, col in DETAIL_COLUMNS[request_type].items():
        row[col] = details.get(field)
    return row


def request_from_row(row: dict) -> Request:
    request_type = RequestType(row["type"])
    details = {"type": request_type.value}
    for field, col in DETAIL_COLUMNS[request_type].items():
        if row.get(col) is not None:
            details[field] = row[col]

    data = {col: row.get(col) for col in ENVELOPE_COLUMNS + RECORD_COLUMNS}
    data["details"] = details
    return Request(**data)


# ============================================================
# Supabase store
# ============================================================
class SupabaseRequestStore:
    table = "requests"

    def __init__(self, client: Client):
        self.client = client

    def fetch_request(self, request_id: str) -> Optional[Request]:
        try:
            result = (
                self.client.table(self.table)
                .select("*")
                .eq("id", request_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise handle_supabase_error(e, f"Failed to fetch request {request_id}")

        return request_from_row(result.data[0]) if result.data else None

    def persist_request(self, request: Request, expected_status: Optional[RequestStatus] = None) -> bool:
        """
        Insert when `expected_status` is None, otherwise update only if the
        stored status still equals `expected_status`.
        Returns False when the conditional update matched no row.
        """
        row = request_to_row(request)

        try:
            if expected_status is None:
                result = self.client.table(self.table).insert(row).execute()
            else:
                changes = {k: v for k, v in row.items() if k != "id"}
                result = (
                    self.client.table(self.table)
                    .update(changes)
                    .eq("id", request.id)
                    .eq("status", RequestStatus(expected_status).value)
                    .execute()
                )
        except Exception as e:
            raise handle_supabase_error(e, f"Failed to save request {request.id}")

        if not result.data:
            logger.warning(f"Conditional write on request {request.id} matched no row (expected {expected_status})")
            return False
        return True

    def _list(self, column: Optional[str] = None, value: Optional[str] = None) -> List[Request]:
        try:
            query = self.client.table(self.table).select("*")
            if column:
                query = query.eq(column, value)
            result = query.order("created_at", desc=True).execute()
        except Exception as e:
            raise handle_supabase_error(e, "Failed to list requests")

        return [request_from_row(row) for row in result.data or []]

    def list_all(self) -> List[Request]:
        return self._list()

    def list_by_status(self, status: RequestStatus) -> List[Request]:
        return self._list("status", RequestStatus(status).value)

    def list_by_user(self, user_id: str) -> List[Request]:
        return self._list("user_id", user_id)
