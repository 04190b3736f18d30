"""
Module: inventory_kernel.models.stock_movement
Responsibility: ORM persistence for the append-only stock ledger and the
    per-(lot, warehouse) slot rows used to serialize writers.
Architecture position: Kernel > Models.  May import from db/ only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - StockMovement rows are never updated or deleted (ORM listeners in
      db/immutability.py, PostgreSQL triggers in db/sql/01_stock_movement.sql).
    - quantity is a strictly positive magnitude; the effect on balance comes
      from movement_type alone (CHECK constraint).
    - There is no stored balance anywhere.  StockSlot carries a movement
      counter for locking and bookkeeping, never a quantity.

Failure modes:
    - ImmutabilityViolationError on any UPDATE/DELETE of a movement.
    - IntegrityError on a non-positive quantity that bypassed validation.
    - IntegrityError on a duplicate (supply_lot_id, warehouse_id) slot
      (handled by StockSlotService with savepoint retry).

Audit relevance:
    The stock_movements table is the single source of truth for quantity
    state.  created_by_id records the acting user of every movement.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base, TrackedBase, UUIDString
from inventory_kernel.db.types import Quantity
from inventory_kernel.exceptions import UnknownMovementTypeError


class MovementType(str, Enum):
    """Ledger entry kind.

    IN and ADJUST add to on-hand, OUT subtracts.  ADJUST is a manual
    correction and always carries a note.
    """

    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"

    @property
    def sign(self) -> int:
        return -1 if self is MovementType.OUT else 1

    @classmethod
    def from_code(cls, value: "MovementType | str") -> "MovementType":
        """Parse a movement type code, case-insensitively."""
        if isinstance(value, MovementType):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise UnknownMovementTypeError(str(value)) from None


class StockMovement(TrackedBase):
    """
    One immutable ledger entry.

    created_by_id is the acting user.  movement_date is assigned by the
    ledger's clock, never by the caller.
    """

    __tablename__ = "stock_movements"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movement_quantity_positive"),
        Index("idx_stock_movement_slot", "supply_lot_id", "warehouse_id"),
        Index("idx_stock_movement_warehouse_date", "warehouse_id", "movement_date"),
        Index("idx_stock_movement_location", "location_id"),
    )

    supply_lot_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("supply_lots.id"),
        nullable=False,
    )

    warehouse_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("warehouses.id"),
        nullable=False,
    )

    location_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("stock_locations.id"),
        nullable=True,
    )

    movement_type: Mapped[MovementType] = mapped_column(String(10), nullable=False)

    quantity: Mapped[Quantity] = mapped_column(nullable=False)

    movement_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    season_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("seasons.id"),
        nullable=True,
    )

    task_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("tasks.id"),
        nullable=True,
    )

    note: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    @property
    def signed_quantity(self) -> Decimal:
        return self.quantity * MovementType.from_code(self.movement_type).sign

    def __repr__(self) -> str:
        return (
            f"<StockMovement {MovementType.from_code(self.movement_type).value} "
            f"{self.quantity} lot={self.supply_lot_id} warehouse={self.warehouse_id}>"
        )


class StockSlot(Base):
    """
    Lock row for one (lot, warehouse) pair.

    Every append locks this row with SELECT ... FOR UPDATE before validating,
    so competing OUT movements on the same slot are serialized and the second
    one sees the first one's effect on on-hand.
    """

    __tablename__ = "stock_slots"

    __table_args__ = (
        UniqueConstraint("supply_lot_id", "warehouse_id", name="uq_stock_slot"),
    )

    supply_lot_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("supply_lots.id"),
        nullable=False,
    )

    warehouse_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("warehouses.id"),
        nullable=False,
    )

    movement_count: Mapped[int] = mapped_column(nullable=False, default=0)

    last_movement_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<StockSlot lot={self.supply_lot_id} warehouse={self.warehouse_id} "
            f"movements={self.movement_count}>"
        )
