# -------------------------
# Enums
# -------------------------
from .enums import (
    Action,
    RequestStatus,
    RequestType,
    RoomType,
    StatsPeriod,
    UserRole,
)

# -------------------------
# Request Models
# -------------------------
from .request import (
    ApprovalRecord,
    DecisionPayload,
    EquipmentDetails,
    EquipmentSubmission,
    PrintingDetails,
    PrintingSubmission,
    Request,
    RoomDetails,
    RoomSubmission,
    Submission,
)

# -------------------------
# Catalog Models
# -------------------------
from .room import (
    RoomBase,
    RoomCreate,
    RoomRead,
    RoomUpdate,
)

from .equipment import (
    Equipment,
    EquipmentBase,
    EquipmentCreate,
    EquipmentUpdate,
)

from .department import (
    DepartmentBase,
    DepartmentCreate,
    DepartmentRead,
    DepartmentUpdate,
)

from .school_class import (
    ClassBase,
    ClassCreate,
    ClassRead,
    ClassUpdate,
    TeacherAssignment,
)

# -------------------------
# Profile Models
# -------------------------
from .profile import (
    Actor,
    ProfileRead,
    RoleUpdate,
)
