"""
InventoryService -- entry points for recording movements and reading stock.

Responsibility:
    - record_movement: build a MovementRequest and append it via the ledger.
    - get_on_hand: one derived balance.
    - list_on_hand: paged listing of positive balances at a warehouse.
    - list_movements: paged raw ledger history of a warehouse.
    - list_my_warehouses / list_locations: what the current user can pick.
    - search_suppliers / search_supply_items / search_supply_lots: catalog
      listings with the same paging rules.

Architecture position:
    Kernel > Services.  Every warehouse-scoped entry point consults the
    access guard before reading the ledger.

Invariants enforced:
    - Balances are recomputed on every call; nothing is cached.
    - list_on_hand omits zero and negative balances and pages in memory
      after the full listing is computed.
    - Page numbers are zero-based; size defaults and limits come from
      InventoryPolicy.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from inventory_kernel.domain.access import AccessGuard
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.dtos import (
    ANY_LOCATION_LABEL,
    MovementRequest,
    OnHandRow,
    Page,
    StockLocationInfo,
    StockMovementInfo,
    SupplierInfo,
    SupplyItemInfo,
    SupplyLotInfo,
    WarehouseInfo,
    paginate,
)
from inventory_kernel.domain.policy import InventoryPolicy
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.catalog import LotStatus, SupplyItem, SupplyLot
from inventory_kernel.models.stock_movement import MovementType, StockMovement
from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.selectors.movement_selector import MovementSelector
from inventory_kernel.selectors.on_hand_selector import OnHandSelector
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.movement_ledger import MovementLedger

logger = get_logger("services.inventory")


class InventoryService(BaseService[StockMovement]):
    def __init__(
        self,
        session: Session,
        access_guard: AccessGuard,
        clock: Clock | None = None,
        policy: InventoryPolicy | None = None,
    ):
        super().__init__(session)
        self._guard = access_guard
        self._policy = policy or InventoryPolicy()
        self._ledger = MovementLedger(session, access_guard, clock)
        self._catalog = CatalogSelector(session)
        self._on_hand = OnHandSelector(session)
        self._movements = MovementSelector(session)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record_movement(
        self,
        supply_lot_id: UUID,
        warehouse_id: UUID,
        movement_type: MovementType | str,
        quantity: Decimal | int | str,
        location_id: UUID | None = None,
        season_id: UUID | None = None,
        task_id: UUID | None = None,
        note: str | None = None,
    ) -> StockMovementInfo:
        """
        Record one IN, OUT or ADJUST movement.

        Args:
            supply_lot_id: Lot moved.
            warehouse_id: Warehouse the movement happens in.
            movement_type: MovementType or its code ("IN", "OUT", "ADJUST").
            quantity: Positive magnitude.
            location_id: Optional location inside the warehouse.
            season_id: Required for OUT.
            task_id: Optional task; its season is adopted when season_id is
                omitted.
            note: Required for ADJUST.

        Returns:
            The stored movement.

        Raises:
            InventoryKernelError: The first failing movement rule.
        """
        return self._ledger.append(
            MovementRequest(
                supply_lot_id=supply_lot_id,
                warehouse_id=warehouse_id,
                movement_type=movement_type,
                quantity=quantity,
                location_id=location_id,
                season_id=season_id,
                task_id=task_id,
                note=note,
            )
        )

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def _authorize_warehouse(
        self,
        warehouse_id: UUID,
        location_id: UUID | None = None,
    ) -> tuple[WarehouseInfo, StockLocationInfo | None]:
        warehouse, location = self._ledger.validator.resolve_warehouse(
            warehouse_id, location_id
        )
        self._guard.assert_can_access_farm(warehouse.farm_id)
        return warehouse, location

    def get_on_hand(
        self,
        supply_lot_id: UUID,
        warehouse_id: UUID,
        location_id: UUID | None = None,
    ) -> Decimal:
        """
        Current on-hand for a lot at a warehouse, optionally at one location.

        Raises:
            WarehouseNotFoundError, SupplyLotNotFoundError,
            StockLocationNotFoundError, LocationWarehouseMismatchError,
            ForbiddenError.
        """
        warehouse = self._catalog.get_warehouse(warehouse_id)
        lot = self._catalog.get_supply_lot(supply_lot_id)
        warehouse, location = self._authorize_warehouse(warehouse.id, location_id)
        return self._on_hand.on_hand(
            lot.id,
            warehouse.id,
            location.id if location is not None else None,
        )

    def list_on_hand(
        self,
        warehouse_id: UUID,
        location_id: UUID | None = None,
        supply_lot_id: UUID | None = None,
        q: str | None = None,
        page: int = 0,
        size: int | None = None,
    ) -> Page[OnHandRow]:
        """
        Positive balances of every lot with activity at a warehouse.

        Args:
            warehouse_id: Warehouse to list.
            location_id: Restrict balances to movements at this location.
            supply_lot_id: Restrict to one lot.
            q: Case-insensitive substring of the batch code or item name.
            page: Zero-based page number.
            size: Page size (policy default when None).

        Returns:
            Page of OnHandRow ordered by item name, then batch code.
        """
        warehouse, location = self._authorize_warehouse(warehouse_id, location_id)
        page_request = self._policy.page_request(page, size)

        balances = self._on_hand.balances(
            warehouse.id,
            location_id=location.id if location is not None else None,
            supply_lot_id=supply_lot_id,
        )
        positive = {lot_id: qty for lot_id, qty in balances.items() if qty > 0}

        rows: list[OnHandRow] = []
        if positive:
            label = location.label if location is not None else ANY_LOCATION_LABEL
            needle = q.strip().lower() if q and q.strip() else None
            lots = self.session.execute(
                select(SupplyLot, SupplyItem)
                .join(SupplyItem, SupplyItem.id == SupplyLot.supply_item_id)
                .where(SupplyLot.id.in_(list(positive)))
            ).all()
            for lot, item in lots:
                if needle is not None and not _matches(needle, lot.batch_code, item.name):
                    continue
                rows.append(
                    OnHandRow(
                        warehouse_id=warehouse.id,
                        warehouse_name=warehouse.name,
                        location_id=location.id if location is not None else None,
                        location_label=label,
                        supply_lot_id=lot.id,
                        batch_code=lot.batch_code,
                        supply_item_id=item.id,
                        item_name=item.name,
                        unit=item.unit,
                        expiry_date=lot.expiry_date,
                        lot_status=LotStatus(lot.status),
                        on_hand=positive[lot.id],
                    )
                )
            rows.sort(key=lambda r: (r.item_name.lower(), r.batch_code or "", str(r.supply_lot_id)))

        logger.debug(
            "on_hand_listed",
            extra={
                "lots_with_activity": len(balances),
                "positive_rows": len(rows),
                "page": page_request.page,
            },
        )
        return paginate(rows, page_request)

    def list_movements(
        self,
        warehouse_id: UUID,
        movement_type: MovementType | str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 0,
        size: int | None = None,
    ) -> Page[StockMovementInfo]:
        """
        Raw ledger rows of a warehouse, newest first.

        ``date_from`` and ``date_to`` are inclusive calendar days (UTC).

        Raises:
            UnknownMovementTypeError: movement_type is not IN/OUT/ADJUST.
        """
        warehouse, _ = self._authorize_warehouse(warehouse_id)
        parsed_type = (
            MovementType.from_code(movement_type)
            if movement_type is not None and str(movement_type).strip()
            else None
        )
        page_request = self._policy.page_request(page, size)
        return self._movements.list_for_warehouse(
            warehouse.id,
            page_request,
            movement_type=parsed_type,
            date_from=date_from,
            date_to=date_to,
        )

    # ------------------------------------------------------------------
    # Pick lists and catalog
    # ------------------------------------------------------------------

    def list_my_warehouses(self) -> list[WarehouseInfo]:
        """Warehouses on every farm the current user may operate on."""
        return self._catalog.warehouses_for_farms(self._guard.accessible_farm_ids())

    def list_locations(self, warehouse_id: UUID) -> list[StockLocationInfo]:
        warehouse, _ = self._authorize_warehouse(warehouse_id)
        return self._catalog.locations_for_warehouse(warehouse.id)

    def search_suppliers(
        self,
        q: str | None = None,
        page: int = 0,
        size: int | None = None,
    ) -> Page[SupplierInfo]:
        return self._catalog.search_suppliers(q, self._policy.page_request(page, size))

    def search_supply_items(
        self,
        q: str | None = None,
        restricted: bool | None = None,
        page: int = 0,
        size: int | None = None,
    ) -> Page[SupplyItemInfo]:
        return self._catalog.search_supply_items(
            q, restricted, self._policy.page_request(page, size)
        )

    def search_supply_lots(
        self,
        supply_item_id: UUID | None = None,
        supplier_id: UUID | None = None,
        status: LotStatus | str | None = None,
        q: str | None = None,
        page: int = 0,
        size: int | None = None,
    ) -> Page[SupplyLotInfo]:
        return self._catalog.search_supply_lots(
            self._policy.page_request(page, size),
            supply_item_id=supply_item_id,
            supplier_id=supplier_id,
            status=status,
            q=q,
        )


def _matches(needle: str, batch_code: str | None, item_name: str | None) -> bool:
    return any(needle in (value or "").lower() for value in (batch_code, item_name))
