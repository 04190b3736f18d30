"""
End-to-end inventory scenarios.

One lot is received, drawn down, corrected and emptied through the public
services, checking the derived balance after every step.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from inventory_kernel.domain.dtos import StockInRequest
from inventory_kernel.exceptions import (
    AdjustNoteRequiredError,
    InsufficientStockError,
    RestrictedConfirmationRequiredError,
)
from inventory_kernel.models.catalog import LotStatus, SupplyLot
from inventory_kernel.models.stock_movement import MovementType, StockMovement


@pytest.fixture
def warehouse_id(catalog):
    return catalog.warehouse.id


@pytest.fixture
def received(stock_in_service, catalog, warehouse_id):
    """Receive 100 units of the regular item."""
    return stock_in_service.stock_in(
        StockInRequest(
            warehouse_id=warehouse_id,
            supplier_id=catalog.supplier.id,
            supply_item_id=catalog.item.id,
            quantity=Decimal("100"),
            batch_code="UREA-100",
        )
    )


def _out(inventory_service, catalog, lot_id, quantity):
    return inventory_service.record_movement(
        supply_lot_id=lot_id,
        warehouse_id=catalog.warehouse.id,
        movement_type=MovementType.OUT,
        quantity=Decimal(quantity),
        season_id=catalog.season.id,
    )


class TestLotLifecycle:
    def test_receive(self, inventory_service, received, warehouse_id):
        assert received.lot.status is LotStatus.IN_STOCK
        assert inventory_service.get_on_hand(received.lot.id, warehouse_id) == Decimal("100")

    def test_draw_down(self, inventory_service, catalog, received, warehouse_id):
        movement = _out(inventory_service, catalog, received.lot.id, "40")

        assert movement.movement_type is MovementType.OUT
        assert movement.quantity == Decimal("40")
        assert inventory_service.get_on_hand(received.lot.id, warehouse_id) == Decimal("60")

    def test_overdraw_rejected(self, inventory_service, catalog, received, warehouse_id):
        _out(inventory_service, catalog, received.lot.id, "40")

        with pytest.raises(InsufficientStockError):
            _out(inventory_service, catalog, received.lot.id, "1000")

        assert inventory_service.get_on_hand(received.lot.id, warehouse_id) == Decimal("60")

    def test_adjust_requires_note(self, inventory_service, catalog, received, warehouse_id):
        _out(inventory_service, catalog, received.lot.id, "40")

        with pytest.raises(AdjustNoteRequiredError):
            inventory_service.record_movement(
                supply_lot_id=received.lot.id,
                warehouse_id=warehouse_id,
                movement_type=MovementType.ADJUST,
                quantity=Decimal("10"),
            )
        assert inventory_service.get_on_hand(received.lot.id, warehouse_id) == Decimal("60")

        inventory_service.record_movement(
            supply_lot_id=received.lot.id,
            warehouse_id=warehouse_id,
            movement_type=MovementType.ADJUST,
            quantity=Decimal("10"),
            note="physical recount",
        )
        assert inventory_service.get_on_hand(received.lot.id, warehouse_id) == Decimal("70")

    def test_listing_drops_empty_lot(
        self, inventory_service, catalog, received, warehouse_id, deterministic_clock
    ):
        _out(inventory_service, catalog, received.lot.id, "40")
        inventory_service.record_movement(
            supply_lot_id=received.lot.id,
            warehouse_id=warehouse_id,
            movement_type=MovementType.ADJUST,
            quantity=Decimal("10"),
            note="physical recount",
        )

        listing = inventory_service.list_on_hand(warehouse_id)
        assert [(r.supply_lot_id, r.on_hand) for r in listing.items] == [
            (received.lot.id, Decimal("70"))
        ]

        deterministic_clock.advance(3600)
        _out(inventory_service, catalog, received.lot.id, "70")

        assert inventory_service.get_on_hand(received.lot.id, warehouse_id) == Decimal("0")
        assert inventory_service.list_on_hand(warehouse_id).items == ()

        history = inventory_service.list_movements(warehouse_id)
        assert [m.movement_type for m in history.items][0] is MovementType.OUT
        assert history.total_elements == 4


class TestRestrictedReceipt:
    def test_confirmation_gate(self, session, stock_in_service, catalog, warehouse_id):
        request = dict(
            warehouse_id=warehouse_id,
            supplier_id=catalog.supplier.id,
            supply_item_id=catalog.restricted_item.id,
            quantity=Decimal("20"),
        )

        with pytest.raises(RestrictedConfirmationRequiredError):
            stock_in_service.stock_in(StockInRequest(**request, confirm_restricted=False))

        assert session.execute(select(func.count(SupplyLot.id))).scalar_one() == 0
        assert session.execute(select(func.count(StockMovement.id))).scalar_one() == 0

        result = stock_in_service.stock_in(StockInRequest(**request, confirm_restricted=True))
        assert result.movement.quantity == Decimal("20")
