# routers/rooms.py

from datetime import time
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.supabase_helpers import safe_delete, safe_get, safe_insert, safe_select, safe_update
from models.enums import RoomType
from models.room import RoomCreate, RoomRead, RoomUpdate

router = APIRouter(
    prefix="/rooms",
    tags=["Rooms"],
)


@router.get(
    "",
    response_model=List[RoomRead],
    dependencies=[Depends(requires_permission("rooms:read"))],
)
def list_rooms(room_type: Optional[RoomType] = Query(None, alias="type")):
    filters = {"type": room_type.value} if room_type else None
    return safe_select("rooms", filters, order="name")


# -----------------------------------------------------
# GET /rooms/available
# Rooms open for booking; no overlap detection against
# existing reservations, every bookable room is returned.
# -----------------------------------------------------
@router.get(
    "/available",
    response_model=List[RoomRead],
    summary="Search bookable rooms",
    dependencies=[Depends(requires_permission("rooms:read"))],
)
def list_available_rooms(
    room_type: Optional[RoomType] = Query(None, alias="type"),
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
):
    if start_time and end_time and end_time <= start_time:
        raise HTTPException(400, "end_time must be after start_time")

    filters = {"is_available": True}
    if room_type:
        filters["type"] = room_type.value
    return safe_select("rooms", filters, order="name")


@router.get(
    "/{room_id}",
    response_model=RoomRead,
    dependencies=[Depends(requires_permission("rooms:read"))],
)
def get_room(room_id: str):
    return safe_get("rooms", room_id, "Room")


@router.post(
    "",
    response_model=RoomRead,
    status_code=201,
    dependencies=[Depends(requires_permission("rooms:write"))],
)
def create_room(payload: RoomCreate):
    room = safe_insert("rooms", payload.model_dump())
    if not room:
        raise HTTPException(500, "Room insert returned no data")
    logger.info(f"Created room {room['id']} ({room['name']})")
    return room


@router.patch(
    "/{room_id}",
    response_model=RoomRead,
    dependencies=[Depends(requires_permission("rooms:write"))],
)
def update_room(room_id: str, payload: RoomUpdate):
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        return safe_get("rooms", room_id, "Room")

    room = safe_update("rooms", {"id": room_id}, changes)
    if not room:
        raise HTTPException(404, f"Room {room_id} not found")
    logger.info(f"Updated room {room_id}: {sorted(changes)}")
    return room


@router.delete(
    "/{room_id}",
    dependencies=[Depends(requires_permission("rooms:write"))],
)
def delete_room(room_id: str):
    if not safe_delete("rooms", {"id": room_id}):
        raise HTTPException(404, f"Room {room_id} not found")
    logger.info(f"Deleted room {room_id}")
    return {"status": "deleted", "room_id": room_id}
