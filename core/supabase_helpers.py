# core/supabase_helpers.py

from typing import Optional

from core.utils import sanitize
from core.errors import handle_supabase_error, NotFoundError
from core.supabase_client import require_supabase_client


# =================================================================
#  SAFE SELECT / INSERT / UPDATE / DELETE
# =================================================================
# Thin wrappers used by the resource administration routers
# (rooms, equipment, departments, classes, profiles).
# Request rows go through services.request_store instead.
# =================================================================

def safe_select(table: str, filters: dict = None, *, single: bool = False, order: Optional[str] = None):
    """SELECT * with equality filters. `single` returns one row or None."""
    client = require_supabase_client()

    try:
        query = client.table(table).select("*")
        for key, val in (filters or {}).items():
            query = query.eq(key, val)
        if order:
            query = query.order(order)

        if single:
            result = query.limit(1).execute()
            return result.data[0] if result.data else None

        result = query.execute()
        return result.data or []

    except Exception as e:
        raise handle_supabase_error(e, f"Failed to fetch from {table}")


def safe_get(table: str, row_id: str, entity: str) -> dict:
    """Fetch one row by id or raise NotFoundError."""
    row = safe_select(table, {"id": row_id}, single=True)
    if not row:
        raise NotFoundError(entity, row_id)
    return row


def safe_insert(table: str, data: dict) -> Optional[dict]:
    client = require_supabase_client()
    cleaned = sanitize(data)

    try:
        result = client.table(table).insert(cleaned).execute()
        return result.data[0] if result.data else None

    except Exception as e:
        raise handle_supabase_error(e, f"Failed to insert into {table}")


def safe_update(table: str, filters: dict, data: dict) -> Optional[dict]:
    """PATCH semantics: None values are not written."""
    client = require_supabase_client()
    cleaned = sanitize(data, drop_none=True)

    try:
        query = client.table(table).update(cleaned)
        for key, val in filters.items():
            query = query.eq(key, val)

        result = query.execute()
        return result.data[0] if result.data else None

    except Exception as e:
        raise handle_supabase_error(e, f"Failed to update {table}")


def safe_delete(table: str, filters: dict) -> int:
    """Returns the number of deleted rows."""
    client = require_supabase_client()

    try:
        query = client.table(table).delete()
        for key, val in filters.items():
            query = query.eq(key, val)

        result = query.execute()
        return len(result.data or [])

    except Exception as e:
        raise handle_supabase_error(e, f"Failed to delete from {table}")
