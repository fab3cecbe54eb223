# models/school_class.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class ClassBase(BaseModel):
    name: str
    department_id: str
    student_count: int = Field(0, ge=0)
    unit: Optional[str] = None

    @field_validator("student_count", mode="before")
    def null_count(cls, v):
        return v or 0


class ClassCreate(ClassBase):
    pass


class ClassRead(ClassBase):
    id: str


class ClassUpdate(BaseModel):
    name: Optional[str] = None
    department_id: Optional[str] = None
    student_count: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = None


class TeacherAssignment(BaseModel):
    teacher_id: str
