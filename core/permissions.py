# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================

# Shared by both approving roles
_STAFF_PERMISSIONS = [
    # Request workflow
    "requests:read", "requests:read_all",
    "requests:approve",
    "requests:stats",

    # Inventory & catalog
    "rooms:read", "rooms:write",
    "equipment:read", "equipment:write",
    "departments:read", "departments:write",
    "classes:read", "classes:write",

    # User management
    "users:read", "users:write",
]


ROLE_PERMISSIONS = {

    # =====================================================
    # TEACHER — submits requests for their classes
    # =====================================================
    "teacher": [
        "requests:read",
        "requests:create",
        "rooms:read",
        "equipment:read",
        "departments:read",
        "classes:read",
    ],

    # =====================================================
    # ADMIN — first approval stage
    # =====================================================
    "admin": list(_STAFF_PERMISSIONS),

    # =====================================================
    # SUPERVISOR — final approval stage
    # =====================================================
    "supervisor": list(_STAFF_PERMISSIONS),
}
