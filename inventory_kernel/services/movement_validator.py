"""
MovementValidator -- precondition checks run before a movement is appended.

Responsibility:
    Applies the movement rules in a fixed order; the first failure wins and
    is raised as a typed error.  Nothing is written here.

    1. Warehouse, lot, and (if given) location, season and task exist; the
       location belongs to the warehouse.
    2. The access guard approves the warehouse's farm.
    3. The movement type is known and the quantity is a positive magnitude.
    4. ADJUST carries a non-blank note.
    5. OUT carries a season, and the lot is IN_STOCK.
    6. OUT with a season: the season's farm is the warehouse's farm.
    7. A task is consistent with the season (a task without a season is
       rejected; a differing season is rejected; a missing season is adopted
       from the task).
    8. OUT: on-hand at (lot, warehouse, location) covers the quantity.

Architecture position:
    Kernel > Services.  Reads through CatalogSelector and OnHandSelector.
    MovementLedger runs rules 1-7 via ``check_preconditions`` before taking
    the slot lock and rule 8 via ``check_sufficiency`` while holding it.

Failure modes:
    - NotFoundError subclasses, ForbiddenError, BadRequestError subclasses,
      AdjustNoteRequiredError, OutSeasonRequiredError, LotNotInStockError,
      InsufficientStockError.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from uuid import UUID

from sqlalchemy.orm import Session

from inventory_kernel.db.types import to_quantity
from inventory_kernel.domain.access import AccessGuard
from inventory_kernel.domain.dtos import (
    MovementRequest,
    StockLocationInfo,
    SupplyLotInfo,
    WarehouseInfo,
)
from inventory_kernel.exceptions import (
    AdjustNoteRequiredError,
    InsufficientStockError,
    LocationWarehouseMismatchError,
    LotNotInStockError,
    NonPositiveQuantityError,
    OutSeasonRequiredError,
    SeasonFarmMismatchError,
    TaskSeasonMismatchError,
)
from inventory_kernel.models.catalog import LotStatus
from inventory_kernel.models.stock_movement import MovementType
from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.selectors.on_hand_selector import OnHandSelector


@dataclass(frozen=True)
class ValidatedMovement:
    """A movement that passed rules 1-7, with references resolved."""

    warehouse: WarehouseInfo
    lot: SupplyLotInfo
    location: StockLocationInfo | None
    movement_type: MovementType
    quantity: Decimal
    season_id: UUID | None
    task_id: UUID | None
    note: str | None

    @property
    def slot_key(self) -> tuple[UUID, UUID]:
        return (self.lot.id, self.warehouse.id)


class MovementValidator:
    def __init__(self, session: Session, access_guard: AccessGuard):
        self._catalog = CatalogSelector(session)
        self._on_hand = OnHandSelector(session)
        self._guard = access_guard

    def resolve_warehouse(
        self,
        warehouse_id: UUID,
        location_id: UUID | None = None,
    ) -> tuple[WarehouseInfo, StockLocationInfo | None]:
        """
        Load a warehouse and optional location and check they belong together.

        Shared by every entry point that takes a warehouse (and location).
        Does not consult the access guard.
        """
        warehouse = self._catalog.get_warehouse(warehouse_id)
        location = None
        if location_id is not None:
            location = self._catalog.get_stock_location(location_id)
            if location.warehouse_id != warehouse.id:
                raise LocationWarehouseMismatchError(str(location_id), str(warehouse_id))
        return warehouse, location

    def check_preconditions(self, request: MovementRequest) -> ValidatedMovement:
        """Run rules 1-7 and return the resolved movement."""
        # 1. References exist and hang together
        warehouse = self._catalog.get_warehouse(request.warehouse_id)
        lot = self._catalog.get_supply_lot(request.supply_lot_id)
        _, location = self.resolve_warehouse(warehouse.id, request.location_id)
        season = (
            self._catalog.get_season(request.season_id)
            if request.season_id is not None
            else None
        )
        task = (
            self._catalog.get_task(request.task_id)
            if request.task_id is not None
            else None
        )

        # 2. Access
        self._guard.assert_can_access_farm(warehouse.farm_id)

        # 3. Type and magnitude
        movement_type = MovementType.from_code(request.movement_type)
        quantity = _positive_quantity(request.quantity)

        note = request.note.strip() if request.note else None
        note = note or None

        # 4. ADJUST explains itself
        if movement_type is MovementType.ADJUST and note is None:
            raise AdjustNoteRequiredError()

        # 5. OUT is attributed to a season and drawn from a live lot
        if movement_type is MovementType.OUT:
            if season is None:
                raise OutSeasonRequiredError()
            if lot.status != LotStatus.IN_STOCK:
                raise LotNotInStockError(str(lot.id), lot.status.value)

        # 6. No cross-farm consumption
        if movement_type is MovementType.OUT and season is not None:
            if season.farm_id != warehouse.farm_id:
                raise SeasonFarmMismatchError(
                    str(season.id), str(season.farm_id), str(warehouse.farm_id)
                )

        # 7. Task and season agree
        season_id = season.id if season is not None else None
        if task is not None:
            if task.season_id is None:
                raise TaskSeasonMismatchError(str(task.id), None, _str(season_id))
            if season_id is not None and season_id != task.season_id:
                raise TaskSeasonMismatchError(
                    str(task.id), str(task.season_id), str(season_id)
                )
            season_id = task.season_id

        return ValidatedMovement(
            warehouse=warehouse,
            lot=lot,
            location=location,
            movement_type=movement_type,
            quantity=quantity,
            season_id=season_id,
            task_id=task.id if task is not None else None,
            note=note,
        )

    def check_sufficiency(self, movement: ValidatedMovement) -> Decimal | None:
        """
        Rule 8: an OUT may not exceed on-hand at its (lot, warehouse, location).

        An OUT at a location must also fit the warehouse-wide balance, since
        movements without a location draw on the same stock.

        Returns:
            The on-hand observed for OUT movements (the smaller of the
            location and warehouse balances), None for other types.
        """
        if movement.movement_type is not MovementType.OUT:
            return None

        available = self._on_hand.on_hand(movement.lot.id, movement.warehouse.id)
        if movement.location is not None:
            available = min(
                available,
                self._on_hand.on_hand(
                    movement.lot.id, movement.warehouse.id, movement.location.id
                ),
            )
        if available < movement.quantity:
            raise InsufficientStockError(
                lot_id=str(movement.lot.id),
                warehouse_id=str(movement.warehouse.id),
                available=available,
                requested=movement.quantity,
            )
        return available

    def validate(self, request: MovementRequest) -> ValidatedMovement:
        """Run all eight rules without locking."""
        movement = self.check_preconditions(request)
        self.check_sufficiency(movement)
        return movement


def _positive_quantity(value) -> Decimal:
    try:
        quantity = to_quantity(value)
    except (InvalidOperation, TypeError, ValueError):
        raise NonPositiveQuantityError(value) from None
    if not quantity.is_finite() or quantity <= 0:
        raise NonPositiveQuantityError(quantity)
    return quantity


def _str(value: UUID | None) -> str | None:
    return str(value) if value is not None else None
