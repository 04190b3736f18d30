"""
Module: inventory_kernel.selectors.movement_selector
Responsibility: Read access to raw stock ledger rows: the paged, filtered
    movement history of a warehouse.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Date filters are inclusive calendar days in UTC: ``date_from`` starts at
      00:00:00 and ``date_to`` ends at 23:59:59.  A movement in the last
      fraction of a second of ``date_to`` falls outside the range.
    - Newest movements first.
"""

from datetime import date, datetime, time, timezone
from uuid import UUID

from sqlalchemy import func, select

from inventory_kernel.domain.dtos import Page, PageRequest, StockMovementInfo, ensure_utc
from inventory_kernel.db.types import normalize_quantity
from inventory_kernel.models.stock_movement import MovementType, StockMovement
from inventory_kernel.selectors.base import BaseSelector


def to_movement_info(row: StockMovement) -> StockMovementInfo:
    return StockMovementInfo(
        id=row.id,
        supply_lot_id=row.supply_lot_id,
        warehouse_id=row.warehouse_id,
        location_id=row.location_id,
        movement_type=MovementType.from_code(row.movement_type),
        quantity=normalize_quantity(row.quantity),
        movement_date=ensure_utc(row.movement_date),
        season_id=row.season_id,
        task_id=row.task_id,
        note=row.note,
        actor_id=row.created_by_id,
    )


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc)


class MovementSelector(BaseSelector[StockMovement]):
    def list_for_warehouse(
        self,
        warehouse_id: UUID,
        request: PageRequest,
        movement_type: MovementType | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Page[StockMovementInfo]:
        """
        Paged movement history of a warehouse.

        Args:
            warehouse_id: Warehouse whose ledger rows are listed.
            request: Validated page request.
            movement_type: Restrict to one movement type.
            date_from: First calendar day included.
            date_to: Last calendar day included.

        Returns:
            Page of StockMovementInfo, newest first.
        """
        conditions = [StockMovement.warehouse_id == warehouse_id]
        if movement_type is not None:
            conditions.append(StockMovement.movement_type == movement_type.value)
        if date_from is not None:
            conditions.append(StockMovement.movement_date >= start_of_day(date_from))
        if date_to is not None:
            conditions.append(StockMovement.movement_date <= end_of_day(date_to))

        total = self.session.execute(
            select(func.count(StockMovement.id)).where(*conditions)
        ).scalar_one()

        rows = self.session.execute(
            select(StockMovement)
            .where(*conditions)
            .order_by(StockMovement.movement_date.desc(), StockMovement.id)
            .offset(request.offset)
            .limit(request.size)
        ).scalars()

        return Page(
            items=tuple(to_movement_info(row) for row in rows),
            page=request.page,
            size=request.size,
            total_elements=total,
        )
