"""
DTOs -- immutable data transfer objects for the inventory core.

Responsibility:
    Defines the request objects accepted by the write paths (MovementRequest,
    StockInRequest), the records returned to callers (StockMovementInfo,
    SupplyLotInfo, OnHandRow, catalog infos) and the Page container used by
    every listing.

Architecture position:
    Kernel > Domain.  Free of database access.  ORM rows are converted to
    these DTOs at the selector/service boundary; callers never receive ORM
    entities.

Invariants enforced:
    - Quantities are Decimal, never float.
    - Timestamps leaving the kernel are timezone-aware UTC.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Generic, Sequence, TypeVar
from uuid import UUID

from inventory_kernel.models.catalog import LotStatus
from inventory_kernel.models.stock_movement import MovementType

T = TypeVar("T")

ANY_LOCATION_LABEL = "Any Location"


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def location_label(
    location_id: UUID,
    zone: str | None = None,
    aisle: str | None = None,
    shelf: str | None = None,
    bin: str | None = None,
) -> str:
    """
    Human-readable label for a stock location.

    Non-blank parts are joined with "-" in zone, aisle, shelf, bin order.
    A location with no parts is labelled "Location <id>".
    """
    parts = [p.strip() for p in (zone, aisle, shelf, bin) if p and p.strip()]
    if not parts:
        return f"Location {location_id}"
    return "-".join(parts)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MovementRequest:
    """
    A caller's request to append one ledger movement.

    quantity is the magnitude; its effect on balance comes from movement_type.
    """

    supply_lot_id: UUID
    warehouse_id: UUID
    movement_type: MovementType
    quantity: Decimal
    location_id: UUID | None = None
    season_id: UUID | None = None
    task_id: UUID | None = None
    note: str | None = None


@dataclass(frozen=True)
class StockInRequest:
    """Receipt of a new lot into a warehouse."""

    warehouse_id: UUID
    supplier_id: UUID
    supply_item_id: UUID
    quantity: Decimal
    location_id: UUID | None = None
    batch_code: str | None = None
    # A date, or an ISO-8601 string parsed by the workflow
    expiry_date: date | str | None = None
    confirm_restricted: bool = False
    note: str | None = None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StockMovementInfo:
    id: UUID
    supply_lot_id: UUID
    warehouse_id: UUID
    location_id: UUID | None
    movement_type: MovementType
    quantity: Decimal
    movement_date: datetime
    season_id: UUID | None
    task_id: UUID | None
    note: str | None
    actor_id: UUID

    @property
    def signed_quantity(self) -> Decimal:
        return self.quantity * self.movement_type.sign


@dataclass(frozen=True)
class SupplyLotInfo:
    id: UUID
    supply_item_id: UUID
    supplier_id: UUID
    batch_code: str | None
    expiry_date: date | None
    status: LotStatus


@dataclass(frozen=True)
class StockInResult:
    """The lot and its opening IN movement, created together."""

    lot: SupplyLotInfo
    movement: StockMovementInfo


@dataclass(frozen=True)
class OnHandRow:
    """One positive balance in the on-hand listing."""

    warehouse_id: UUID
    warehouse_name: str
    location_id: UUID | None
    location_label: str
    supply_lot_id: UUID
    batch_code: str | None
    supply_item_id: UUID
    item_name: str
    unit: str
    expiry_date: date | None
    lot_status: LotStatus
    on_hand: Decimal


@dataclass(frozen=True)
class WarehouseInfo:
    id: UUID
    name: str
    type: str | None
    farm_id: UUID | None


@dataclass(frozen=True)
class StockLocationInfo:
    id: UUID
    warehouse_id: UUID
    zone: str | None
    aisle: str | None
    shelf: str | None
    bin: str | None
    label: str


@dataclass(frozen=True)
class SupplierInfo:
    id: UUID
    name: str
    license_no: str | None
    contact_email: str | None
    contact_phone: str | None


@dataclass(frozen=True)
class SupplyItemInfo:
    id: UUID
    name: str
    active_ingredient: str | None
    unit: str
    restricted_flag: bool


@dataclass(frozen=True)
class SeasonInfo:
    id: UUID
    farm_id: UUID
    name: str


@dataclass(frozen=True)
class TaskInfo:
    id: UUID
    season_id: UUID | None
    title: str


# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page number and page size (already validated)."""

    page: int
    size: int

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class Page(Generic[T]):
    items: tuple[T, ...]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    def __len__(self) -> int:
        return len(self.items)


def paginate(rows: Sequence[T], request: PageRequest) -> Page[T]:
    """Slice a fully computed result list into one page."""
    start = request.offset
    return Page(
        items=tuple(rows[start : start + request.size]),
        page=request.page,
        size=request.size,
        total_elements=len(rows),
    )
