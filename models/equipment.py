# models/equipment.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class EquipmentBase(BaseModel):
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    requires_clearance: bool = False

    @field_validator("requires_clearance", mode="before")
    def null_means_no_clearance(cls, v):
        return bool(v)


class EquipmentCreate(EquipmentBase):
    total_quantity: int = Field(..., ge=0)
    available_quantity: Optional[int] = Field(None, ge=0, description="Defaults to total_quantity")

    @model_validator(mode="after")
    def check_quantities(self):
        if self.available_quantity is None:
            self.available_quantity = self.total_quantity
        if self.available_quantity > self.total_quantity:
            raise ValueError("available_quantity cannot exceed total_quantity")
        return self


class Equipment(EquipmentBase):
    """Stock row. 0 <= available_quantity <= total_quantity."""
    id: str
    total_quantity: int
    available_quantity: int


class EquipmentUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    requires_clearance: Optional[bool] = None
    total_quantity: Optional[int] = Field(None, ge=0)
