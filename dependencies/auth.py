from typing import Optional, List
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.config import settings
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.permissions import ROLE_PERMISSIONS
from models.profile import Actor


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # Supabase Auth UID (= profiles.id)
    email: str
    role: str

    full_name: Optional[str] = None
    department: Optional[str] = None

    # per-user permission overrides from user_metadata
    permissions: Optional[List[str]] = []

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    def as_actor(self) -> Actor:
        """Request-scoped identity passed into every workflow call."""
        return Actor(user_id=self.id, user_name=self.display_name, role=self.role)


# ============================================================
# Profile lookup (role lives in public.profiles)
# ============================================================
def _fetch_profile(client: Client, user_id: str) -> dict:
    try:
        result = (
            client.table("profiles")
            .select("role, full_name, department")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.warning(f"Profile lookup failed for {user_id}: {e}")
        return {}
    return result.data[0] if result.data else {}


# ============================================================
# AUTH DECODING (Supabase: validates JWT + fetches profile)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:

    token = credentials.credentials

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
    except Exception:
        raise unauthorized

    if not auth_resp or not auth_resp.user or not auth_resp.user.email:
        raise unauthorized

    auth_user = auth_resp.user
    metadata = auth_user.user_metadata or {}
    profile = _fetch_profile(client, auth_user.id)

    # ---------------------------------------------------------
    # Role: profile row → auth metadata → default
    # ---------------------------------------------------------
    role = profile.get("role") or metadata.get("role") or settings.DEFAULT_ROLE
    if role not in ROLE_PERMISSIONS:
        logger.warning(f"Unknown role '{role}' for user {auth_user.id}, using {settings.DEFAULT_ROLE}")
        role = settings.DEFAULT_ROLE

    extended_permissions = metadata.get("permissions", [])
    if not isinstance(extended_permissions, list):
        extended_permissions = []

    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email,
        role=role,
        full_name=profile.get("full_name") or metadata.get("full_name"),
        department=profile.get("department"),
        permissions=extended_permissions,
    )
