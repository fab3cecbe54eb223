# dependencies/services.py

from fastapi import HTTPException

from core.supabase_client import get_supabase_client
from services.approvals import ApprovalService
from services.catalog import SupabaseCatalog
from services.inventory import InventoryAdjuster, SupabaseEquipmentRepository
from services.request_store import SupabaseRequestStore


# ============================================================
# Service wiring (overridden in tests via app.dependency_overrides)
# ============================================================
def get_approval_service() -> ApprovalService:
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    return ApprovalService(
        store=SupabaseRequestStore(client),
        inventory=InventoryAdjuster(SupabaseEquipmentRepository(client)),
        catalog=SupabaseCatalog(client),
    )
