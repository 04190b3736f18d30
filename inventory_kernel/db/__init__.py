"""Database layer - engine, base classes, types, and immutability."""

from inventory_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from inventory_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from inventory_kernel.db.types import Quantity, normalize_quantity

__all__ = [
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "Quantity",
    "normalize_quantity",
]
