# core/errors.py

from typing import Dict, Optional

from fastapi import HTTPException


# ============================================================
# Domain errors (rendered by the handler in main.py)
# ============================================================

class ReservationError(Exception):
    """Base class for per-operation workflow failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_content(self) -> dict:
        return {"detail": self.message}


class ValidationError(ReservationError):
    """
    Malformed or incomplete input.
    `errors` maps each offending field to a readable message.
    """

    status_code = 422

    def __init__(self, errors: Dict[str, str], message: str = "Validation failed"):
        super().__init__(f"{message}: {', '.join(sorted(errors))}")
        self.errors = dict(errors)

    def to_content(self) -> dict:
        return {"detail": self.message, "errors": self.errors}


class ForbiddenError(ReservationError):
    status_code = 403


class UnauthorizedTransitionError(ForbiddenError):
    """Actor role does not match the stage the request is waiting on."""

    def __init__(self, request_id: str, status: str, role: str, action: str):
        super().__init__(
            f"Role '{role}' cannot {action} request {request_id} in status '{status}'"
        )
        self.request_id = request_id
        self.status = status
        self.role = role
        self.action = action


class InsufficientStockError(ReservationError):
    status_code = 409

    def __init__(self, equipment_id: str, requested: int, available: int):
        super().__init__(
            f"Only {available} unit(s) of equipment {equipment_id} available, {requested} requested"
        )
        self.equipment_id = equipment_id
        self.requested = requested
        self.available = available

    def to_content(self) -> dict:
        return {
            "detail": self.message,
            "equipment_id": self.equipment_id,
            "requested": self.requested,
            "available": self.available,
        }


class ConcurrentTransitionError(ReservationError):
    """A conditional write lost against a concurrent writer."""

    status_code = 409


class NotFoundError(ReservationError):
    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        label = f"{entity} {entity_id}" if entity_id else entity
        super().__init__(f"{label} not found")
        self.entity = entity
        self.entity_id = entity_id


# ============================================================
# Supabase errors
# ============================================================

def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # PostgREST APIError and GoTrue errors carry .message
    message = getattr(error, "message", None)
    if message:
        return str(message)

    if error.args:
        return str(error.args[0])

    return str(error) or "Unknown Supabase error"


def handle_supabase_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle Supabase errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to create room")
        status_code: HTTP status code (default 500)
    """
    from core.logging_config import logger

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")
