# routers/classes.py

from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional

from dependencies.auth import get_current_user, CurrentUser
from core.errors import handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import requires_permission, is_manager
from core.supabase_client import require_supabase_client
from core.supabase_helpers import safe_delete, safe_get, safe_insert, safe_select, safe_update
from models.school_class import ClassCreate, ClassRead, ClassUpdate, TeacherAssignment

router = APIRouter(
    prefix="/classes",
    tags=["Classes"],
)


@router.get(
    "",
    response_model=List[ClassRead],
    dependencies=[Depends(requires_permission("classes:read"))],
)
def list_classes(department_id: Optional[str] = None):
    filters = {"department_id": department_id} if department_id else None
    return safe_select("classes", filters, order="name")


# -----------------------------------------------------
# GET /classes/teacher/{teacher_id}
# Classes a teacher may submit requests for
# -----------------------------------------------------
@router.get(
    "/teacher/{teacher_id}",
    response_model=List[ClassRead],
    dependencies=[Depends(requires_permission("classes:read"))],
)
def list_teacher_classes(
    teacher_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    if teacher_id != current_user.id and not is_manager(current_user):
        raise HTTPException(403, "You can only list your own classes")

    client = require_supabase_client()
    try:
        result = (
            client.table("teacher_classes")
            .select("classes(*)")
            .eq("teacher_id", teacher_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, f"Failed to fetch classes for teacher {teacher_id}")

    return [row["classes"] for row in result.data or [] if row.get("classes")]


@router.get(
    "/{class_id}",
    response_model=ClassRead,
    dependencies=[Depends(requires_permission("classes:read"))],
)
def get_class(class_id: str):
    return safe_get("classes", class_id, "Class")


@router.post(
    "",
    response_model=ClassRead,
    status_code=201,
    dependencies=[Depends(requires_permission("classes:write"))],
)
def create_class(payload: ClassCreate):
    school_class = safe_insert("classes", payload.model_dump())
    if not school_class:
        raise HTTPException(500, "Class insert returned no data")
    logger.info(f"Created class {school_class['id']} ({school_class['name']})")
    return school_class


@router.patch(
    "/{class_id}",
    response_model=ClassRead,
    dependencies=[Depends(requires_permission("classes:write"))],
)
def update_class(class_id: str, payload: ClassUpdate):
    school_class = safe_update("classes", {"id": class_id}, payload.model_dump(exclude_unset=True))
    if not school_class:
        raise HTTPException(404, f"Class {class_id} not found")
    return school_class


@router.delete(
    "/{class_id}",
    dependencies=[Depends(requires_permission("classes:write"))],
)
def delete_class(class_id: str):
    if not safe_delete("classes", {"id": class_id}):
        raise HTTPException(404, f"Class {class_id} not found")
    logger.info(f"Deleted class {class_id}")
    return {"status": "deleted", "class_id": class_id}


# -----------------------------------------------------
# Teacher ↔ class assignments
# -----------------------------------------------------
@router.post(
    "/{class_id}/teachers",
    status_code=201,
    dependencies=[Depends(requires_permission("classes:write"))],
)
def assign_teacher(class_id: str, payload: TeacherAssignment):
    safe_get("classes", class_id, "Class")

    existing = safe_select("teacher_classes", {"teacher_id": payload.teacher_id, "class_id": class_id})
    if existing:
        return existing[0]

    assignment = safe_insert("teacher_classes", {"teacher_id": payload.teacher_id, "class_id": class_id})
    logger.info(f"Assigned teacher {payload.teacher_id} to class {class_id}")
    return assignment


@router.delete(
    "/{class_id}/teachers/{teacher_id}",
    dependencies=[Depends(requires_permission("classes:write"))],
)
def unassign_teacher(class_id: str, teacher_id: str):
    if not safe_delete("teacher_classes", {"teacher_id": teacher_id, "class_id": class_id}):
        raise HTTPException(404, "Assignment not found")
    logger.info(f"Removed teacher {teacher_id} from class {class_id}")
    return {"status": "deleted", "class_id": class_id, "teacher_id": teacher_id}
