"""Selectors for the inventory kernel (read side)."""

from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.selectors.movement_selector import MovementSelector
from inventory_kernel.selectors.on_hand_selector import OnHandSelector

__all__ = [
    "CatalogSelector",
    "MovementSelector",
    "OnHandSelector",
]
