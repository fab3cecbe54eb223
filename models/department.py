# models/department.py

from typing import Optional
from pydantic import BaseModel


class DepartmentBase(BaseModel):
    name: str
    description: Optional[str] = None


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentRead(DepartmentBase):
    id: str


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
