# services/catalog.py

from typing import Optional

from supabase import Client

from core.errors import handle_supabase_error
from models.room import RoomRead
from models.school_class import ClassRead


class SupabaseCatalog:
    """Read-only lookups of the rooms and classes a submission refers to."""

    def __init__(self, client: Client):
        self.client = client

    def _first(self, table: str, row_id: str) -> Optional[dict]:
        try:
            result = self.client.table(table).select("*").eq("id", row_id).limit(1).execute()
        except Exception as e:
            raise handle_supabase_error(e, f"Failed to fetch from {table}")
        return result.data[0] if result.data else None

    def fetch_room(self, room_id: str) -> Optional[RoomRead]:
        row = self._first("rooms", room_id)
        return RoomRead(**row) if row else None

    def fetch_class(self, class_id: str) -> Optional[ClassRead]:
        row = self._first("classes", class_id)
        return ClassRead(**row) if row else None
