"""
Module: inventory_kernel.models.catalog
Responsibility: ORM persistence for the storage and supply catalog:
    warehouses, stock locations, suppliers, supply items and supply lots.
Architecture position: Kernel > Models.  May import from db/ only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - A stock location belongs to exactly one warehouse.
    - A warehouse without a farm is never accessible to anyone.
    - SupplyLot identity (item, supplier, batch code, expiry) is frozen after
      creation; only status transitions (see db/immutability.py).

Failure modes:
    - ImmutabilityViolationError when a lot's identity fields change.

Audit relevance:
    SupplyItem.restricted_flag drives the stock-in confirmation gate for
    controlled substances.  SupplyLot is the unit every ledger movement
    references.
"""

from datetime import date
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase, UUIDString


class LotStatus(str, Enum):
    """Supply lot lifecycle.

    Lots are created IN_STOCK by the stock-in workflow.  Other transitions
    belong to surrounding lifecycle rules.  Only IN_STOCK lots accept OUT
    movements.
    """

    IN_STOCK = "IN_STOCK"
    DEPLETED = "DEPLETED"
    EXPIRED = "EXPIRED"
    QUARANTINED = "QUARANTINED"


# Fields frozen after a lot is created
SUPPLY_LOT_IDENTITY_FIELDS = frozenset(
    {"supply_item_id", "supplier_id", "batch_code", "expiry_date"}
)


class Warehouse(TrackedBase):
    __tablename__ = "warehouses"

    __table_args__ = (Index("idx_warehouse_farm", "farm_id"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Free-form classification, e.g. "CHEMICAL", "SEED", "GENERAL"
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    farm_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("farms.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Warehouse {self.name} farm={self.farm_id}>"


class StockLocation(TrackedBase):
    """Zone/aisle/shelf/bin subdivision of a warehouse."""

    __tablename__ = "stock_locations"

    __table_args__ = (Index("idx_stock_location_warehouse", "warehouse_id"),)

    warehouse_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("warehouses.id"),
        nullable=False,
    )

    zone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    aisle: Mapped[str | None] = mapped_column(String(50), nullable=True)
    shelf: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bin: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        parts = "-".join(p for p in (self.zone, self.aisle, self.shelf, self.bin) if p)
        return f"<StockLocation {parts or self.id} warehouse={self.warehouse_id}>"


class Supplier(TrackedBase):
    __tablename__ = "suppliers"

    __table_args__ = (Index("idx_supplier_name", "name"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    license_no: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Supplier {self.name}>"


class SupplyItem(TrackedBase):
    """Catalog definition of a consumable (fertilizer, pesticide, seed...)."""

    __tablename__ = "supply_items"

    __table_args__ = (
        Index("idx_supply_item_name", "name"),
        Index("idx_supply_item_restricted", "restricted_flag"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    active_ingredient: Mapped[str | None] = mapped_column(String(255), nullable=True)

    unit: Mapped[str] = mapped_column(String(20), nullable=False)

    restricted_flag: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    def __repr__(self) -> str:
        flag = " RESTRICTED" if self.restricted_flag else ""
        return f"<SupplyItem {self.name} ({self.unit}){flag}>"


class SupplyLot(TrackedBase):
    """
    A specific received batch of a supply item.

    Holds no quantity.  On-hand is always derived from stock_movements.
    """

    __tablename__ = "supply_lots"

    __table_args__ = (
        Index("idx_supply_lot_item", "supply_item_id"),
        Index("idx_supply_lot_supplier", "supplier_id"),
        Index("idx_supply_lot_status", "status"),
    )

    supply_item_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("supply_items.id"),
        nullable=False,
    )

    supplier_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("suppliers.id"),
        nullable=False,
    )

    batch_code: Mapped[str | None] = mapped_column(String(100), nullable=True)

    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    status: Mapped[LotStatus] = mapped_column(
        String(20),
        nullable=False,
        default=LotStatus.IN_STOCK,
    )

    @property
    def is_in_stock(self) -> bool:
        return LotStatus(self.status) == LotStatus.IN_STOCK

    def __repr__(self) -> str:
        return f"<SupplyLot {self.batch_code or self.id} status={LotStatus(self.status).value}>"
