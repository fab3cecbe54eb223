# routers/departments.py

from fastapi import APIRouter, Depends, HTTPException
from typing import List

from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.supabase_helpers import safe_delete, safe_insert, safe_select, safe_update
from models.department import DepartmentCreate, DepartmentRead, DepartmentUpdate

router = APIRouter(
    prefix="/departments",
    tags=["Departments"],
)


@router.get(
    "",
    response_model=List[DepartmentRead],
    dependencies=[Depends(requires_permission("departments:read"))],
)
def list_departments():
    return safe_select("departments", order="name")


@router.post(
    "",
    response_model=DepartmentRead,
    status_code=201,
    dependencies=[Depends(requires_permission("departments:write"))],
)
def create_department(payload: DepartmentCreate):
    department = safe_insert("departments", payload.model_dump())
    if not department:
        raise HTTPException(500, "Department insert returned no data")
    logger.info(f"Created department {department['id']} ({department['name']})")
    return department


@router.patch(
    "/{department_id}",
    response_model=DepartmentRead,
    dependencies=[Depends(requires_permission("departments:write"))],
)
def update_department(department_id: str, payload: DepartmentUpdate):
    department = safe_update("departments", {"id": department_id}, payload.model_dump(exclude_unset=True))
    if not department:
        raise HTTPException(404, f"Department {department_id} not found")
    return department


@router.delete(
    "/{department_id}",
    dependencies=[Depends(requires_permission("departments:write"))],
)
def delete_department(department_id: str):
    # classes.department_id is a foreign key: deleting a used department fails with 400
    if not safe_delete("departments", {"id": department_id}):
        raise HTTPException(404, f"Department {department_id} not found")
    logger.info(f"Deleted department {department_id}")
    return {"status": "deleted", "department_id": department_id}
