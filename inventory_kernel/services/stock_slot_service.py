"""
StockSlotService -- row locks that serialize writers per (lot, warehouse).

Responsibility:
    Before the ledger validates and appends a movement it locks the
    StockSlot row for the movement's (lot, warehouse) with
    ``SELECT ... FOR UPDATE``.  Two concurrent OUT requests against the
    same slot therefore run validate+append one after the other, and the
    second sees the first's movement when it recomputes on-hand.

Architecture position:
    Kernel > Services.  Called only by MovementLedger.

Invariants enforced:
    - At most one slot row per (lot, warehouse) (unique constraint).
    - The lock is held until the caller's transaction ends.
    - The slot never stores a quantity; movement_count is bookkeeping.

Failure modes:
    - IntegrityError on concurrent first use of a slot: handled by
      savepoint rollback and re-select with lock.
    - On SQLite, FOR UPDATE is not emitted; SQLite's single-writer lock
      serializes write transactions instead.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.stock_movement import StockSlot

logger = get_logger("services.stock_slot")


class StockSlotService:
    def __init__(self, session: Session):
        self._session = session

    def _select_locked(self, supply_lot_id: UUID, warehouse_id: UUID) -> StockSlot | None:
        return self._session.execute(
            select(StockSlot)
            .where(
                StockSlot.supply_lot_id == supply_lot_id,
                StockSlot.warehouse_id == warehouse_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def lock(self, supply_lot_id: UUID, warehouse_id: UUID) -> StockSlot:
        """
        Lock (creating on first use) the slot for a lot at a warehouse.

        Preconditions:
            - The caller is inside an active transaction.
            - The lot and warehouse exist.

        Returns:
            The locked StockSlot row.
        """
        slot = self._select_locked(supply_lot_id, warehouse_id)
        if slot is not None:
            return slot

        # First movement for this slot.  Another transaction may be creating
        # the same row; a savepoint keeps the caller's work intact if we lose.
        savepoint = self._session.begin_nested()
        try:
            slot = StockSlot(
                supply_lot_id=supply_lot_id,
                warehouse_id=warehouse_id,
                movement_count=0,
            )
            self._session.add(slot)
            self._session.flush()
            savepoint.commit()
            logger.debug(
                "stock_slot_created",
                extra={
                    "supply_lot_id": str(supply_lot_id),
                    "warehouse_id": str(warehouse_id),
                },
            )
            return slot
        except IntegrityError:
            logger.debug(
                "stock_slot_race_retry",
                extra={
                    "supply_lot_id": str(supply_lot_id),
                    "warehouse_id": str(warehouse_id),
                },
            )
            savepoint.rollback()
            slot = self._select_locked(supply_lot_id, warehouse_id)
            if slot is None:
                raise
            return slot

    def record_movement(self, slot: StockSlot, movement_date: datetime) -> None:
        """Bump the slot's bookkeeping after an append."""
        slot.movement_count += 1
        slot.last_movement_at = movement_date
        self._session.flush()
