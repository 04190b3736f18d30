"""
ORM-Level Immutability Enforcement (Layer 1 of 2).

===============================================================================
WHY THIS EXISTS
===============================================================================

On-hand quantity is derived from the stock ledger and nothing else.  If a
ledger row could be edited or removed, every balance computed from it would
silently change and no correction would be visible.  Corrections are made by
appending ADJUST movements, never by rewriting history.

  Layer 1: THIS FILE (ORM event listeners)
    - Catches modifications through SQLAlchemy code
    - Fires BEFORE the SQL is sent to the database

  Layer 2: db/sql/*.sql (PostgreSQL triggers)
    - Catches raw SQL, bulk UPDATE statements, direct psql access

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity          | When Immutable                 | What
----------------|--------------------------------|------------------------------
StockMovement   | ALWAYS (from creation)         | No UPDATE, no DELETE
SupplyLot       | ALWAYS (from creation)         | Identity fields frozen;
                |                                | status may transition

===============================================================================
USAGE
===============================================================================

Called once at application startup, after models are imported:

    from inventory_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
    ...
    register_immutability_listeners()

===============================================================================
"""

from sqlalchemy import event, inspect

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(entity_type: str, target, operation: str, reason: str, field: str | None = None):
    extra = {
        "entity_type": entity_type,
        "entity_id": str(target.id),
        "operation": operation,
    }
    if field is not None:
        extra["field"] = field
    logger.error("immutability_violation_blocked", extra=extra)
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_stock_movement_immutability(mapper, connection, target):
    """Prevent any update to a StockMovement row."""
    _block(
        "StockMovement",
        target,
        "UPDATE",
        "Stock movements are append-only; record an ADJUST movement instead",
    )


def _check_stock_movement_delete(mapper, connection, target):
    """Prevent deletion of a StockMovement row."""
    _block(
        "StockMovement",
        target,
        "DELETE",
        "Stock movements cannot be deleted",
    )


def _check_supply_lot_identity(mapper, connection, target):
    """
    Allow status transitions on a SupplyLot; block identity changes.

    Audit metadata (updated_at, updated_by_id) is not identity.
    """
    from inventory_kernel.models.catalog import SUPPLY_LOT_IDENTITY_FIELDS

    insp = inspect(target)
    for field in sorted(SUPPLY_LOT_IDENTITY_FIELDS):
        if insp.attrs[field].history.has_changes():
            _block(
                "SupplyLot",
                target,
                "UPDATE",
                f"Cannot modify field '{field}' on a supply lot",
                field=field,
            )


def _check_supply_lot_delete(mapper, connection, target):
    """Prevent deletion of a SupplyLot that the ledger references."""
    from sqlalchemy import exists, select

    from inventory_kernel.models.stock_movement import StockMovement

    referenced = connection.execute(
        select(exists().where(StockMovement.supply_lot_id == target.id))
    ).scalar()
    if referenced:
        _block(
            "SupplyLot",
            target,
            "DELETE",
            "Supply lots referenced by stock movements cannot be deleted",
        )


_LISTENERS = (
    ("StockMovement", "before_update", _check_stock_movement_immutability),
    ("StockMovement", "before_delete", _check_stock_movement_delete),
    ("SupplyLot", "before_update", _check_supply_lot_identity),
    ("SupplyLot", "before_delete", _check_supply_lot_delete),
)


def _targets() -> dict:
    from inventory_kernel.models.catalog import SupplyLot
    from inventory_kernel.models.stock_movement import StockMovement

    return {"StockMovement": StockMovement, "SupplyLot": SupplyLot}


def register_immutability_listeners() -> None:
    """Register all immutability enforcement event listeners (idempotent)."""
    targets = _targets()
    for name, event_name, listener_fn in _LISTENERS:
        if not event.contains(targets[name], event_name, listener_fn):
            event.listen(targets[name], event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn) -> None:
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners() -> None:
    """Remove immutability enforcement event listeners. TESTS ONLY."""
    targets = _targets()
    for name, event_name, listener_fn in _LISTENERS:
        _safe_remove_listener(targets[name], event_name, listener_fn)
