"""
StockInService -- receive a new lot and its opening IN movement together.

Responsibility:
    1. Resolve the warehouse (and location) and authorize its farm.
    2. Resolve supplier and supply item.
    3. Restricted items require ``confirm_restricted=True`` on every call.
    4. Create a SupplyLot with status IN_STOCK.
    5. Append an IN movement for the absolute quantity through the ledger.

    Steps 4 and 5 run inside one savepoint: if the IN movement is rejected
    the lot is rolled back with it and no partial receipt remains.

Architecture position:
    Kernel > Services.  Writes supply_lots directly and stock_movements only
    through MovementLedger.

Failure modes:
    - WarehouseNotFoundError, StockLocationNotFoundError,
      LocationWarehouseMismatchError, ForbiddenError.
    - SupplierNotFoundError, SupplyItemNotFoundError.
    - RestrictedConfirmationRequiredError.
    - InvalidExpiryDateError.
    - Any ledger rejection of the IN movement (e.g. NonPositiveQuantityError).
"""

from datetime import date, datetime

from sqlalchemy.orm import Session

from inventory_kernel.db.types import to_quantity
from inventory_kernel.domain.access import AccessGuard
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.dtos import MovementRequest, StockInRequest, StockInResult
from inventory_kernel.domain.policy import InventoryPolicy
from inventory_kernel.exceptions import (
    InvalidExpiryDateError,
    InventoryKernelError,
    RestrictedConfirmationRequiredError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.catalog import LotStatus, SupplyLot
from inventory_kernel.models.stock_movement import MovementType
from inventory_kernel.selectors.catalog_selector import CatalogSelector, supply_lot_to_dto
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.movement_ledger import MovementLedger

logger = get_logger("services.stock_in")


def parse_expiry_date(value: date | str | None) -> date | None:
    """
    Accept a date, a datetime (date part) or an ISO ``YYYY-MM-DD`` string.

    Raises:
        InvalidExpiryDateError: For strings that are not ISO dates.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidExpiryDateError(text) from None


class StockInService(BaseService[SupplyLot]):
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
        self._catalog = CatalogSelector(session)
        self._ledger = MovementLedger(session, access_guard, clock)

    def stock_in(self, request: StockInRequest) -> StockInResult:
        """
        Receive inventory as a new lot.

        Args:
            request: Warehouse, supplier, item, quantity and lot details.

        Returns:
            StockInResult with the created lot and its IN movement.

        Raises:
            InventoryKernelError: See module docstring.  Nothing persists
                when an error is raised.
        """
        with LogContext.bind(
            actor_id=self._guard.current_user_id(),
            warehouse_id=request.warehouse_id,
        ):
            try:
                return self._stock_in(request)
            except InventoryKernelError as exc:
                logger.warning(
                    "stock_in_rejected",
                    extra={
                        "supplier_id": str(request.supplier_id),
                        "supply_item_id": str(request.supply_item_id),
                        "error_code": exc.code,
                        "reason": str(exc),
                    },
                )
                raise

    def _stock_in(self, request: StockInRequest) -> StockInResult:
        # 1. Warehouse, location, access
        warehouse, location = self._ledger.validator.resolve_warehouse(
            request.warehouse_id, request.location_id
        )
        self._guard.assert_can_access_farm(warehouse.farm_id)

        # 2. Supplier and item
        supplier = self._catalog.get_supplier(request.supplier_id)
        item = self._catalog.get_supply_item(request.supply_item_id)

        # 3. Restricted gate, re-checked on every receipt
        if item.restricted_flag and not request.confirm_restricted:
            raise RestrictedConfirmationRequiredError(str(item.id), item.name)

        expiry_date = parse_expiry_date(request.expiry_date)
        batch_code = request.batch_code.strip() if request.batch_code else None
        note = request.note.strip() if request.note else ""

        # 4 + 5. Lot and opening movement, all or nothing
        with self.session.begin_nested():
            lot = SupplyLot(
                supply_item_id=item.id,
                supplier_id=supplier.id,
                batch_code=batch_code or None,
                expiry_date=expiry_date,
                status=LotStatus.IN_STOCK.value,
                created_by_id=self._guard.current_user_id(),
            )
            self.session.add(lot)
            self.session.flush()

            movement = self._ledger.append(
                MovementRequest(
                    supply_lot_id=lot.id,
                    warehouse_id=warehouse.id,
                    movement_type=MovementType.IN,
                    quantity=_absolute(request.quantity),
                    location_id=location.id if location is not None else None,
                    note=note or self._policy.stock_in_default_note,
                )
            )

        lot_info = supply_lot_to_dto(lot)
        logger.info(
            "stock_in_completed",
            extra={
                "supply_lot_id": str(lot_info.id),
                "movement_id": str(movement.id),
                "supply_item_id": str(item.id),
                "restricted": item.restricted_flag,
                "quantity": str(movement.quantity),
            },
        )
        return StockInResult(lot=lot_info, movement=movement)


def _absolute(value):
    """Sign is not accepted from the caller; non-numeric input is left to the ledger."""
    try:
        return abs(to_quantity(value))
    except (ArithmeticError, TypeError, ValueError):
        return value
