# models/profile.py

from typing import Optional
from pydantic import BaseModel

from .enums import UserRole


class ProfileRead(BaseModel):
    id: str
    full_name: Optional[str] = None
    role: UserRole
    department: Optional[str] = None
    rank: Optional[str] = None


class RoleUpdate(BaseModel):
    role: UserRole


class Actor(BaseModel):
    """Who is acting on a request; passed explicitly into every workflow call."""
    user_id: str
    user_name: str
    role: UserRole
