"""
Module: inventory_kernel.selectors.on_hand_selector
Responsibility: Derive on-hand quantity from the stock ledger.  On-hand for
    a (lot, warehouse, optional location) is the sum of IN and ADJUST
    quantities minus the sum of OUT quantities over exactly the matching
    movements.
Architecture position: Kernel > Selectors.  May import from models/, db/ and
    selectors/base.py.  MUST NOT import from services/.

Invariants enforced:
    - No stored balances.  Every call runs a fresh aggregation over
      stock_movements; nothing is cached between calls.
    - A location filter narrows the aggregation to movements recorded at
      that location.  Without one, movements at every location (and at no
      location) of the warehouse count.

Failure modes:
    - Returns Decimal("0") for a slot with no movements.

Audit relevance:
    This selector is the only place balance arithmetic happens.  The ledger
    service calls it, under the slot lock, before accepting an OUT.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, func, select

from inventory_kernel.db.types import normalize_quantity
from inventory_kernel.models.stock_movement import MovementType, StockMovement
from inventory_kernel.selectors.base import BaseSelector


def signed_quantity_sum():
    """SUM over movements with OUT counted negative."""
    return func.sum(
        case(
            (
                StockMovement.movement_type == MovementType.OUT.value,
                -StockMovement.quantity,
            ),
            else_=StockMovement.quantity,
        )
    )


class OnHandSelector(BaseSelector[StockMovement]):
    """The on-hand reconciler."""

    def on_hand(
        self,
        supply_lot_id: UUID,
        warehouse_id: UUID,
        location_id: UUID | None = None,
    ) -> Decimal:
        """
        Compute current on-hand for one lot at one warehouse.

        Args:
            supply_lot_id: Lot to aggregate.
            warehouse_id: Warehouse to aggregate.
            location_id: If given, only movements at this location count.

        Returns:
            Σ IN + Σ ADJUST − Σ OUT as a normalized Decimal.
        """
        query = select(signed_quantity_sum()).where(
            StockMovement.supply_lot_id == supply_lot_id,
            StockMovement.warehouse_id == warehouse_id,
        )
        if location_id is not None:
            query = query.where(StockMovement.location_id == location_id)

        return normalize_quantity(self.session.execute(query).scalar())

    def balances(
        self,
        warehouse_id: UUID,
        location_id: UUID | None = None,
        supply_lot_id: UUID | None = None,
    ) -> dict[UUID, Decimal]:
        """
        Balance of every lot with activity at the warehouse/location.

        One grouped aggregation; each value equals what ``on_hand`` returns
        for that lot with the same filters.  Zero and negative balances are
        included here; the listing decides what to show.
        """
        query = (
            select(StockMovement.supply_lot_id, signed_quantity_sum())
            .where(StockMovement.warehouse_id == warehouse_id)
            .group_by(StockMovement.supply_lot_id)
        )
        if location_id is not None:
            query = query.where(StockMovement.location_id == location_id)
        if supply_lot_id is not None:
            query = query.where(StockMovement.supply_lot_id == supply_lot_id)

        return {
            lot_id: normalize_quantity(total)
            for lot_id, total in self.session.execute(query)
        }
