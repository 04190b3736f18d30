"""
Domain layer: request/record DTOs, the access guard contract, the clock and
the runtime policy.  No database access happens here.
"""

from inventory_kernel.domain.access import AccessGuard
from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.dtos import (
    ANY_LOCATION_LABEL,
    MovementRequest,
    OnHandRow,
    Page,
    PageRequest,
    StockInRequest,
    StockInResult,
    StockLocationInfo,
    StockMovementInfo,
    SupplierInfo,
    SupplyItemInfo,
    SupplyLotInfo,
    WarehouseInfo,
    location_label,
    paginate,
)
from inventory_kernel.domain.policy import InventoryPolicy

__all__ = [
    "AccessGuard",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ANY_LOCATION_LABEL",
    "MovementRequest",
    "OnHandRow",
    "Page",
    "PageRequest",
    "StockInRequest",
    "StockInResult",
    "StockLocationInfo",
    "StockMovementInfo",
    "SupplierInfo",
    "SupplyItemInfo",
    "SupplyLotInfo",
    "WarehouseInfo",
    "location_label",
    "paginate",
    "InventoryPolicy",
]
