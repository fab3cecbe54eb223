# models/room.py

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .enums import RoomType


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class RoomBase(BaseModel):
    name: str
    type: RoomType
    capacity: int = Field(..., ge=0)
    is_available: bool = True
    equipment: Optional[List[str]] = None
    floor: Optional[str] = None
    building: Optional[str] = None

    # Supabase column is nullable
    @field_validator("is_available", mode="before")
    def default_unavailable(cls, v):
        return bool(v)


class RoomCreate(RoomBase):
    """No ID supplied — Supabase generates UUID."""
    pass


class RoomRead(RoomBase):
    id: str


class RoomUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[RoomType] = None
    capacity: Optional[int] = Field(None, ge=0)
    is_available: Optional[bool] = None
    equipment: Optional[List[str]] = None
    floor: Optional[str] = None
    building: Optional[str] = None
