from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# REQUEST TYPE
# -----------------------------------------------------
class RequestType(BaseStrEnum):
    room = "room"
    equipment = "equipment"
    printing = "printing"


# -----------------------------------------------------
# REQUEST STATUS
# -----------------------------------------------------
class RequestStatus(BaseStrEnum):
    """Workflow state for a request. Only ever moves forward."""

    pending = "pending"
    admin_approved = "admin_approved"
    approved = "approved"
    rejected = "rejected"
    returned = "returned"  # equipment handed back after approval


# -----------------------------------------------------
# USER ROLE
# -----------------------------------------------------
class UserRole(BaseStrEnum):
    teacher = "teacher"
    admin = "admin"
    supervisor = "supervisor"


# -----------------------------------------------------
# WORKFLOW ACTION
# -----------------------------------------------------
class Action(BaseStrEnum):
    submit = "submit"
    approve = "approve"
    reject = "reject"
    return_ = "return"
    manage = "manage"


# -----------------------------------------------------
# ROOM TYPE
# -----------------------------------------------------
class RoomType(BaseStrEnum):
    classroom = "classroom"
    training_room = "training_room"
    weapons_room = "weapons_room"
    tactical_room = "tactical_room"


# -----------------------------------------------------
# STATS PERIOD
# -----------------------------------------------------
class StatsPeriod(BaseStrEnum):
    day = "day"
    week = "week"
    month = "month"
