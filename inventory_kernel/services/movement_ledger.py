"""
MovementLedger -- the sole write path for stock quantity state.

Responsibility:
    Appends one immutable StockMovement row per accepted request.  Every
    append runs the MovementValidator, and OUT sufficiency is evaluated
    while holding the (lot, warehouse) slot lock, so validate+append is
    atomic with respect to other writers on the same slot.

Architecture position:
    Kernel > Services.  Called by InventoryService.record_movement and by
    StockInService.  Nothing else inserts into stock_movements.

Invariants enforced:
    - Append-only: rows are inserted, never updated or deleted.
    - movement_date comes from the injected Clock, not the caller.
    - created_by_id is the access guard's current user.
    - On-hand is never negative right after an accepted OUT.

Failure modes:
    - Any validator error, raised before anything is inserted.
    - Storage errors propagate; the caller's transaction rolls back.

Audit relevance:
    ``movement_appended`` (INFO) and ``movement_rejected`` (WARNING) log
    lines carry lot, warehouse, type, quantity and the error code.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from inventory_kernel.domain.access import AccessGuard
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import MovementRequest, StockMovementInfo
from inventory_kernel.exceptions import InventoryKernelError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.stock_movement import StockMovement
from inventory_kernel.selectors.movement_selector import to_movement_info
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.movement_validator import (
    MovementValidator,
    ValidatedMovement,
)
from inventory_kernel.services.stock_slot_service import StockSlotService

logger = get_logger("services.movement_ledger")


class MovementLedger(BaseService[StockMovement]):
    """
    Append-only stock ledger.

    Contract:
        ``append(request)`` returns the stored movement (with id and
        timestamp) or raises the first failing rule's typed error.

    Non-goals:
        - Does NOT commit.  The caller owns the transaction.
        - Does NOT change lot status.
    """

    def __init__(
        self,
        session: Session,
        access_guard: AccessGuard,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._guard = access_guard
        self._clock = clock or SystemClock()
        self._validator = MovementValidator(session, access_guard)
        self._slots = StockSlotService(session)

    @property
    def validator(self) -> MovementValidator:
        return self._validator

    def append(self, request: MovementRequest) -> StockMovementInfo:
        """
        Validate and append one movement.

        Args:
            request: The movement to record.

        Returns:
            StockMovementInfo for the inserted row.

        Raises:
            InventoryKernelError: The first failing rule.
        """
        actor_id = self._guard.current_user_id()
        with LogContext.bind(actor_id=actor_id, warehouse_id=request.warehouse_id):
            try:
                movement = self._validator.check_preconditions(request)
                slot = self._slots.lock(movement.lot.id, movement.warehouse.id)
                available = self._validator.check_sufficiency(movement)
            except InventoryKernelError as exc:
                logger.warning(
                    "movement_rejected",
                    extra={
                        "supply_lot_id": str(request.supply_lot_id),
                        "movement_type": getattr(request.movement_type, "value", request.movement_type),
                        "quantity": str(request.quantity),
                        "error_code": exc.code,
                        "reason": str(exc),
                    },
                )
                raise

            row = self._insert(movement, actor_id)
            self._slots.record_movement(slot, row.movement_date)

            logger.info(
                "movement_appended",
                extra={
                    "movement_id": str(row.id),
                    "supply_lot_id": str(movement.lot.id),
                    "location_id": str(movement.location.id) if movement.location else None,
                    "movement_type": movement.movement_type.value,
                    "quantity": str(movement.quantity),
                    "available_before": str(available) if available is not None else None,
                    "season_id": str(movement.season_id) if movement.season_id else None,
                },
            )
            return to_movement_info(row)

    def _insert(self, movement: ValidatedMovement, actor_id: UUID) -> StockMovement:
        row = StockMovement(
            supply_lot_id=movement.lot.id,
            warehouse_id=movement.warehouse.id,
            location_id=movement.location.id if movement.location is not None else None,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity,
            movement_date=self._clock.now_utc(),
            season_id=movement.season_id,
            task_id=movement.task_id,
            note=movement.note,
            created_by_id=actor_id,
        )
        self.session.add(row)
        self.session.flush()
        return row
