"""Services for the inventory kernel (write side and entry points)."""

from inventory_kernel.services.access_guard import FarmOwnershipGuard, StaticAccessGuard
from inventory_kernel.services.inventory_service import InventoryService
from inventory_kernel.services.movement_ledger import MovementLedger
from inventory_kernel.services.movement_validator import MovementValidator, ValidatedMovement
from inventory_kernel.services.stock_in_service import StockInService
from inventory_kernel.services.stock_slot_service import StockSlotService

__all__ = [
    "FarmOwnershipGuard",
    "StaticAccessGuard",
    "InventoryService",
    "MovementLedger",
    "MovementValidator",
    "ValidatedMovement",
    "StockInService",
    "StockSlotService",
]
