# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


HEALTH_TABLES = ["requests", "rooms", "equipment", "classes", "departments"]


# ============================================================
# Supabase Client Factory (service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    Row level security is bypassed; access rules are enforced by the API.
    Returns None when credentials are not configured.
    """
    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

    if not supabase_url or not supabase_key:
        logger.error("Missing Supabase credentials")
        logger.error(f"   URL: {supabase_url}")
        logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
        return None

    try:
        return create_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


def require_supabase_client() -> Client:
    """Like get_supabase_client, but fails loudly when unconfigured."""
    client = get_supabase_client()
    if client is None:
        raise RuntimeError("Supabase client not configured")
    return client


# ============================================================
# Ping Supabase for health checks
# ============================================================

def ping_supabase() -> dict:
    """Select one row from each core table and report per-table status."""
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    results = {}
    status = "ok"

    for t in HEALTH_TABLES:
        try:
            res = client.table(t).select("id").limit(1).execute()
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or []),
            }
        except Exception as err:
            status = "degraded"
            results[t] = {"status": "error", "detail": str(err)}

    return {
        "service": "Supabase",
        "status": status,
        "tables": results,
    }
