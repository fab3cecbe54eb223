# routers/equipment.py

from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.supabase_client import require_supabase_client
from core.supabase_helpers import safe_delete, safe_get, safe_insert, safe_select, safe_update
from models.equipment import Equipment, EquipmentCreate, EquipmentUpdate

router = APIRouter(
    prefix="/equipment",
    tags=["Equipment"],
)


@router.get(
    "",
    response_model=List[Equipment],
    dependencies=[Depends(requires_permission("equipment:read"))],
)
def list_equipment(category: Optional[str] = None):
    filters = {"category": category} if category else None
    return safe_select("equipment", filters, order="name")


@router.get(
    "/available",
    response_model=List[Equipment],
    summary="Equipment with stock left",
    dependencies=[Depends(requires_permission("equipment:read"))],
)
def list_available_equipment():
    client = require_supabase_client()
    try:
        result = (
            client.table("equipment")
            .select("*")
            .gt("available_quantity", 0)
            .order("name")
            .execute()
        )
        return result.data or []
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch available equipment")


@router.get(
    "/{equipment_id}",
    response_model=Equipment,
    dependencies=[Depends(requires_permission("equipment:read"))],
)
def get_equipment(equipment_id: str):
    return safe_get("equipment", equipment_id, "Equipment")


@router.post(
    "",
    response_model=Equipment,
    status_code=201,
    dependencies=[Depends(requires_permission("equipment:write"))],
)
def create_equipment(payload: EquipmentCreate):
    item = safe_insert("equipment", payload.model_dump())
    if not item:
        raise HTTPException(500, "Equipment insert returned no data")
    logger.info(f"Created equipment {item['id']} ({item['name']}) x{item['total_quantity']}")
    return item


@router.patch(
    "/{equipment_id}",
    response_model=Equipment,
    dependencies=[Depends(requires_permission("equipment:write"))],
)
def update_equipment(equipment_id: str, payload: EquipmentUpdate):
    """
    Catalog fields only. `available_quantity` moves with approvals and
    returns; changing `total_quantity` shifts it by the same delta
    (floored at 0) so units already lent out stay accounted for.
    """
    current = safe_get("equipment", equipment_id, "Equipment")
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        return current

    filters = {"id": equipment_id}
    if changes.get("total_quantity") is not None:
        delta = changes["total_quantity"] - current["total_quantity"]
        changes["available_quantity"] = max(0, min(current["available_quantity"] + delta, changes["total_quantity"]))
        # same compare-and-swap guard as the inventory adjuster
        filters["available_quantity"] = current["available_quantity"]

    item = safe_update("equipment", filters, changes)
    if not item:
        raise HTTPException(409, f"Equipment {equipment_id} changed while updating, retry")
    logger.info(f"Updated equipment {equipment_id}: {sorted(changes)}")
    return item


@router.delete(
    "/{equipment_id}",
    dependencies=[Depends(requires_permission("equipment:write"))],
)
def delete_equipment(equipment_id: str):
    if not safe_delete("equipment", {"id": equipment_id}):
        raise HTTPException(404, f"Equipment {equipment_id} not found")
    logger.info(f"Deleted equipment {equipment_id}")
    return {"status": "deleted", "equipment_id": equipment_id}
