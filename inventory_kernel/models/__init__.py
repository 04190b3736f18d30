"""Domain models for the inventory kernel."""

from inventory_kernel.models.catalog import (
    SUPPLY_LOT_IDENTITY_FIELDS,
    LotStatus,
    StockLocation,
    Supplier,
    SupplyItem,
    SupplyLot,
    Warehouse,
)
from inventory_kernel.models.farm import Farm, Season, Task
from inventory_kernel.models.stock_movement import (
    MovementType,
    StockMovement,
    StockSlot,
)

__all__ = [
    "Farm",
    "Season",
    "Task",
    "Warehouse",
    "StockLocation",
    "Supplier",
    "SupplyItem",
    "SupplyLot",
    "LotStatus",
    "SUPPLY_LOT_IDENTITY_FIELDS",
    "MovementType",
    "StockMovement",
    "StockSlot",
]
