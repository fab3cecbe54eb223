# services/inventory.py

"""
Equipment stock counters.

Every write is a conditional update on the value that was read
(`UPDATE equipment SET available_quantity = :new
 WHERE id = :id AND available_quantity = :read`), so two approvals of
different requests against the same equipment can never oversell.
"""

from typing import Optional

from supabase import Client

from core.config import settings
from core.errors import (
    ConcurrentTransitionError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
    handle_supabase_error,
)
from core.logging_config import logger
from models.equipment import Equipment


# ============================================================
# Storage
# ============================================================
class SupabaseEquipmentRepository:
    table = "equipment"

    def __init__(self, client: Client):
        self.client = client

    def fetch_equipment(self, equipment_id: str) -> Optional[Equipment]:
        try:
            result = (
                self.client.table(self.table)
                .select("*")
                .eq("id", equipment_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise handle_supabase_error(e, f"Failed to fetch equipment {equipment_id}")

        return Equipment(**result.data[0]) if result.data else None

    def persist_equipment(self, equipment: Equipment, expected_available: int) -> bool:
        """
        Write `equipment.available_quantity` only if the stored value is still
        `expected_available`. Returns False when another writer got there first.
        """
        try:
            result = (
                self.client.table(self.table)
                .update({"available_quantity": equipment.available_quantity})
                .eq("id", equipment.id)
                .eq("available_quantity", expected_available)
                .execute()
            )
        except Exception as e:
            raise handle_supabase_error(e, f"Failed to update equipment {equipment.id}")

        return bool(result.data)


# ============================================================
# Adjuster
# ============================================================
class InventoryAdjuster:

    def __init__(self, repository, max_attempts: Optional[int] = None):
        self.repository = repository
        self.max_attempts = max_attempts or settings.INVENTORY_CAS_RETRIES

    def lookup(self, equipment_id: str) -> Optional[Equipment]:
        return self.repository.fetch_equipment(equipment_id)

    def _load(self, equipment_id: str) -> Equipment:
        equipment = self.repository.fetch_equipment(equipment_id)
        if equipment is None:
            raise NotFoundError("Equipment", equipment_id)
        return equipment

    def reserve(self, equipment_id: str, quantity: int) -> Equipment:
        """Decrement available stock by `quantity`, failing if stock is short."""
        if quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1"})

        for _ in range(self.max_attempts):
            equipment = self._load(equipment_id)
            available = equipment.available_quantity

            if available < quantity:
                raise InsufficientStockError(equipment_id, quantity, available)

            updated = equipment.model_copy(update={"available_quantity": available - quantity})
            if self.repository.persist_equipment(updated, expected_available=available):
                logger.info(
                    f"Reserved {quantity} x {equipment.name} ({equipment_id}): "
                    f"{available} → {updated.available_quantity}"
                )
                return updated

            logger.warning(f"Stock for equipment {equipment_id} changed during reserve, retrying")

        raise ConcurrentTransitionError(f"Could not reserve equipment {equipment_id}: stock kept changing")

    def release(self, equipment_id: str, quantity: int) -> Equipment:
        """Increment available stock, never above total_quantity."""
        if quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1"})

        for _ in range(self.max_attempts):
            equipment = self._load(equipment_id)
            available = equipment.available_quantity
            restored = min(available + quantity, equipment.total_quantity)

            if restored <= available:
                logger.warning(f"Release of {quantity} x {equipment_id} ignored: stock already full")
                return equipment

            if restored < available + quantity:
                logger.warning(
                    f"Release of {quantity} x {equipment_id} clamped at total {equipment.total_quantity}"
                )

            updated = equipment.model_copy(update={"available_quantity": restored})
            if self.repository.persist_equipment(updated, expected_available=available):
                logger.info(f"Released {quantity} x {equipment.name} ({equipment_id}): {available} → {restored}")
                return updated

            logger.warning(f"Stock for equipment {equipment_id} changed during release, retrying")

        raise ConcurrentTransitionError(f"Could not release equipment {equipment_id}: stock kept changing")
