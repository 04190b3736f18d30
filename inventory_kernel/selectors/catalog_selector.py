"""
Module: inventory_kernel.selectors.catalog_selector
Responsibility: Read-only lookups of catalog records by id, and paged catalog
    search listings (suppliers, supply items, supply lots).
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every ``get_*`` either returns a DTO or raises the matching
      ``*NotFoundError``.  Callers never see None for a missing reference.

Failure modes:
    - WarehouseNotFoundError, StockLocationNotFoundError, SupplyLotNotFoundError,
      SupplierNotFoundError, SupplyItemNotFoundError, SeasonNotFoundError,
      TaskNotFoundError.
"""

from uuid import UUID

from sqlalchemy import Select, func, or_, select

from inventory_kernel.domain.dtos import (
    Page,
    PageRequest,
    SeasonInfo,
    StockLocationInfo,
    SupplierInfo,
    SupplyItemInfo,
    SupplyLotInfo,
    TaskInfo,
    WarehouseInfo,
    location_label,
)
from inventory_kernel.exceptions import (
    SeasonNotFoundError,
    StockLocationNotFoundError,
    SupplierNotFoundError,
    SupplyItemNotFoundError,
    SupplyLotNotFoundError,
    TaskNotFoundError,
    WarehouseNotFoundError,
)
from inventory_kernel.models.catalog import (
    LotStatus,
    StockLocation,
    Supplier,
    SupplyItem,
    SupplyLot,
    Warehouse,
)
from inventory_kernel.models.farm import Season, Task
from inventory_kernel.selectors.base import BaseSelector


def _contains(column, text: str):
    """Case-insensitive substring match with LIKE wildcards escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


def _normalize_query(q: str | None) -> str | None:
    if q is None or not q.strip():
        return None
    return q.strip()


def warehouse_to_dto(row: Warehouse) -> WarehouseInfo:
    return WarehouseInfo(id=row.id, name=row.name, type=row.type, farm_id=row.farm_id)


def location_to_dto(row: StockLocation) -> StockLocationInfo:
    return StockLocationInfo(
        id=row.id,
        warehouse_id=row.warehouse_id,
        zone=row.zone,
        aisle=row.aisle,
        shelf=row.shelf,
        bin=row.bin,
        label=location_label(row.id, row.zone, row.aisle, row.shelf, row.bin),
    )


def supplier_to_dto(row: Supplier) -> SupplierInfo:
    return SupplierInfo(
        id=row.id,
        name=row.name,
        license_no=row.license_no,
        contact_email=row.contact_email,
        contact_phone=row.contact_phone,
    )


def supply_item_to_dto(row: SupplyItem) -> SupplyItemInfo:
    return SupplyItemInfo(
        id=row.id,
        name=row.name,
        active_ingredient=row.active_ingredient,
        unit=row.unit,
        restricted_flag=bool(row.restricted_flag),
    )


def supply_lot_to_dto(row: SupplyLot) -> SupplyLotInfo:
    return SupplyLotInfo(
        id=row.id,
        supply_item_id=row.supply_item_id,
        supplier_id=row.supplier_id,
        batch_code=row.batch_code,
        expiry_date=row.expiry_date,
        status=LotStatus(row.status),
    )


class CatalogSelector(BaseSelector[Warehouse]):
    """Catalog lookups and search listings."""

    # -- lookups by id -------------------------------------------------------

    def get_warehouse(self, warehouse_id: UUID) -> WarehouseInfo:
        row = self.session.get(Warehouse, warehouse_id)
        if row is None:
            raise WarehouseNotFoundError(str(warehouse_id))
        return warehouse_to_dto(row)

    def get_stock_location(self, location_id: UUID) -> StockLocationInfo:
        row = self.session.get(StockLocation, location_id)
        if row is None:
            raise StockLocationNotFoundError(str(location_id))
        return location_to_dto(row)

    def get_supply_lot(self, lot_id: UUID) -> SupplyLotInfo:
        row = self.session.get(SupplyLot, lot_id)
        if row is None:
            raise SupplyLotNotFoundError(str(lot_id))
        return supply_lot_to_dto(row)

    def get_supplier(self, supplier_id: UUID) -> SupplierInfo:
        row = self.session.get(Supplier, supplier_id)
        if row is None:
            raise SupplierNotFoundError(str(supplier_id))
        return supplier_to_dto(row)

    def get_supply_item(self, item_id: UUID) -> SupplyItemInfo:
        row = self.session.get(SupplyItem, item_id)
        if row is None:
            raise SupplyItemNotFoundError(str(item_id))
        return supply_item_to_dto(row)

    def get_season(self, season_id: UUID) -> SeasonInfo:
        row = self.session.get(Season, season_id)
        if row is None:
            raise SeasonNotFoundError(str(season_id))
        return SeasonInfo(id=row.id, farm_id=row.farm_id, name=row.name)

    def get_task(self, task_id: UUID) -> TaskInfo:
        row = self.session.get(Task, task_id)
        if row is None:
            raise TaskNotFoundError(str(task_id))
        return TaskInfo(id=row.id, season_id=row.season_id, title=row.title)

    # -- listings ------------------------------------------------------------

    def warehouses_for_farms(self, farm_ids: list[UUID]) -> list[WarehouseInfo]:
        if not farm_ids:
            return []
        rows = self.session.execute(
            select(Warehouse)
            .where(Warehouse.farm_id.in_(farm_ids))
            .order_by(Warehouse.name, Warehouse.id)
        ).scalars()
        return [warehouse_to_dto(row) for row in rows]

    def locations_for_warehouse(self, warehouse_id: UUID) -> list[StockLocationInfo]:
        rows = self.session.execute(
            select(StockLocation)
            .where(StockLocation.warehouse_id == warehouse_id)
            .order_by(
                StockLocation.zone,
                StockLocation.aisle,
                StockLocation.shelf,
                StockLocation.bin,
                StockLocation.id,
            )
        ).scalars()
        return [location_to_dto(row) for row in rows]

    def _page(self, stmt: Select, request: PageRequest, to_dto) -> Page:
        total = self.session.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()
        rows = self.session.execute(
            stmt.offset(request.offset).limit(request.size)
        ).scalars()
        return Page(
            items=tuple(to_dto(row) for row in rows),
            page=request.page,
            size=request.size,
            total_elements=total,
        )

    def search_suppliers(self, q: str | None, request: PageRequest) -> Page[SupplierInfo]:
        stmt = select(Supplier).order_by(Supplier.name, Supplier.id)
        text = _normalize_query(q)
        if text is not None:
            stmt = stmt.where(_contains(Supplier.name, text))
        return self._page(stmt, request, supplier_to_dto)

    def search_supply_items(
        self,
        q: str | None,
        restricted: bool | None,
        request: PageRequest,
    ) -> Page[SupplyItemInfo]:
        stmt = select(SupplyItem).order_by(SupplyItem.name, SupplyItem.id)
        text = _normalize_query(q)
        if text is not None:
            stmt = stmt.where(
                or_(
                    _contains(SupplyItem.name, text),
                    _contains(SupplyItem.active_ingredient, text),
                )
            )
        if restricted is not None:
            stmt = stmt.where(SupplyItem.restricted_flag.is_(restricted))
        return self._page(stmt, request, supply_item_to_dto)

    def search_supply_lots(
        self,
        request: PageRequest,
        supply_item_id: UUID | None = None,
        supplier_id: UUID | None = None,
        status: LotStatus | str | None = None,
        q: str | None = None,
    ) -> Page[SupplyLotInfo]:
        stmt = (
            select(SupplyLot)
            .join(SupplyItem, SupplyItem.id == SupplyLot.supply_item_id)
            .order_by(SupplyLot.created_at.desc(), SupplyLot.id)
        )
        if supply_item_id is not None:
            stmt = stmt.where(SupplyLot.supply_item_id == supply_item_id)
        if supplier_id is not None:
            stmt = stmt.where(SupplyLot.supplier_id == supplier_id)
        if status is not None:
            code = status.value if isinstance(status, LotStatus) else status.strip().upper()
            if code:
                stmt = stmt.where(SupplyLot.status == code)
        text = _normalize_query(q)
        if text is not None:
            stmt = stmt.where(
                or_(
                    _contains(SupplyLot.batch_code, text),
                    _contains(SupplyItem.name, text),
                )
            )
        return self._page(stmt, request, supply_lot_to_dto)
