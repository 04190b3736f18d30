#!/usr/bin/env python3
"""
Seed the database with a small farm and a few stock movements.

Drops all tables, recreates them (with immutability triggers on PostgreSQL),
creates one farm with a warehouse, locations, a supplier, two supply items
and a season, then receives stock, draws some of it down, and prints the
resulting on-hand listing.

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --config path/to/inventory.yaml
    INVENTORY_DATABASE_URL=postgresql://... python3 scripts/seed_data.py
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path
from uuid import UUID, uuid4

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from inventory_config import get_active_config  # noqa: E402
from inventory_config.bridges import (  # noqa: E402
    build_inventory_policy,
    configure_logging_from_config,
    init_engine_from_config,
)
from inventory_kernel.db.engine import create_tables, drop_tables, session_scope  # noqa: E402
from inventory_kernel.db.immutability import register_immutability_listeners  # noqa: E402
from inventory_kernel.domain.dtos import StockInRequest  # noqa: E402
from inventory_kernel.domain.policy import InventoryPolicy  # noqa: E402
from inventory_kernel.exceptions import InventoryKernelError  # noqa: E402
from inventory_kernel.models.catalog import (  # noqa: E402
    StockLocation,
    Supplier,
    SupplyItem,
    Warehouse,
)
from inventory_kernel.models.farm import Farm, Season  # noqa: E402
from inventory_kernel.services.access_guard import FarmOwnershipGuard  # noqa: E402
from inventory_kernel.services.inventory_service import InventoryService  # noqa: E402
from inventory_kernel.services.stock_in_service import StockInService  # noqa: E402


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the inventory database.")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: packaged defaults.yaml)",
    )
    parser.add_argument(
        "--owner-id",
        type=UUID,
        default=None,
        help="UUID of the farm owner (default: a fresh uuid4)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show structured kernel logs on stderr",
    )
    return parser.parse_args(argv)


def _create_catalog(owner_id: UUID) -> dict[str, UUID]:
    """Farm, warehouse, two locations, supplier, two items, one season."""
    with session_scope() as session:
        farm = Farm(name="Green Acres", owner_user_id=owner_id, created_by_id=owner_id)
        session.add(farm)
        session.flush()

        warehouse = Warehouse(
            name="Main Shed", type="CHEMICAL", farm_id=farm.id, created_by_id=owner_id
        )
        session.add(warehouse)
        session.flush()

        cold_room = StockLocation(
            warehouse_id=warehouse.id, zone="COLD", aisle="1", created_by_id=owner_id
        )
        dry_store = StockLocation(
            warehouse_id=warehouse.id, zone="DRY", aisle="2", shelf="A", created_by_id=owner_id
        )
        supplier = Supplier(
            name="AgriSupply Co",
            license_no="LIC-2024-001",
            contact_email="orders@agrisupply.example",
            created_by_id=owner_id,
        )
        urea = SupplyItem(
            name="Urea Fertilizer", active_ingredient="Nitrogen", unit="kg",
            restricted_flag=False, created_by_id=owner_id,
        )
        glyphosate = SupplyItem(
            name="Glyphosate 480", active_ingredient="Glyphosate", unit="L",
            restricted_flag=True, created_by_id=owner_id,
        )
        season = Season(farm_id=farm.id, name="Spring 2024", created_by_id=owner_id)
        session.add_all([cold_room, dry_store, supplier, urea, glyphosate, season])
        session.flush()

        return {
            "warehouse": warehouse.id,
            "cold_room": cold_room.id,
            "dry_store": dry_store.id,
            "supplier": supplier.id,
            "urea": urea.id,
            "glyphosate": glyphosate.id,
            "season": season.id,
        }


def _record_movements(ids: dict[str, UUID], owner_id: UUID, policy: InventoryPolicy):
    """Two receipts, one issue and one adjustment in a single transaction."""
    with session_scope() as session:
        guard = FarmOwnershipGuard(session, owner_id)
        stock_in = StockInService(session, guard, policy=policy)
        inventory = InventoryService(session, guard, policy=policy)
        steps = []

        urea_lot = stock_in.stock_in(
            StockInRequest(
                warehouse_id=ids["warehouse"],
                supplier_id=ids["supplier"],
                supply_item_id=ids["urea"],
                quantity=Decimal("500"),
                location_id=ids["dry_store"],
                batch_code="UREA-2024-03",
                expiry_date="2026-03-31",
            )
        ).lot
        steps.append("Received 500 kg urea into DRY-2-A")

        glyph_lot = stock_in.stock_in(
            StockInRequest(
                warehouse_id=ids["warehouse"],
                supplier_id=ids["supplier"],
                supply_item_id=ids["glyphosate"],
                quantity=Decimal("40"),
                location_id=ids["cold_room"],
                batch_code="GLY-7781",
                expiry_date="2025-09-30",
                confirm_restricted=True,
            )
        ).lot
        steps.append("Received 40 L glyphosate into COLD-1 (restricted, confirmed)")

        inventory.record_movement(
            supply_lot_id=urea_lot.id,
            warehouse_id=ids["warehouse"],
            movement_type="OUT",
            quantity=Decimal("120"),
            location_id=ids["dry_store"],
            season_id=ids["season"],
            note="Top dressing, north field",
        )
        steps.append("Issued 120 kg urea to Spring 2024")

        inventory.record_movement(
            supply_lot_id=glyph_lot.id,
            warehouse_id=ids["warehouse"],
            movement_type="ADJUST",
            quantity=Decimal("2.5"),
            location_id=ids["cold_room"],
            note="Physical recount",
        )
        steps.append("Adjusted glyphosate +2.5 L after recount")

        return steps, inventory.list_on_hand(ids["warehouse"])


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if not args.verbose:
        logging.disable(logging.CRITICAL)

    owner_id = args.owner_id or uuid4()

    print()
    print("  [1/4] Loading configuration and connecting...")
    try:
        config = get_active_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    configure_logging_from_config(config)
    init_engine_from_config(config)
    policy = build_inventory_policy(config)

    print("  [2/4] Dropping old tables and recreating schema...")
    drop_tables()
    create_tables(install_triggers=config.database.install_triggers)
    register_immutability_listeners()

    print("  [3/4] Creating farm, warehouse and catalog...")
    ids = _create_catalog(owner_id)

    print("  [4/4] Receiving stock and recording movements...")
    try:
        steps, listing = _record_movements(ids, owner_id, policy)
    except InventoryKernelError as exc:
        print(f"  ERROR: {exc.code}: {exc}", file=sys.stderr)
        return 1

    for i, step in enumerate(steps, 1):
        print(f"         {i}. {step}")

    print()
    print(f"  Done. Farm owner id: {owner_id}")
    print()
    print(f"  {'Item':<20} {'Batch':<14} {'On hand':>10}  Unit")
    for row in listing.items:
        batch = row.batch_code or "-"
        print(f"  {row.item_name:<20} {batch:<14} {row.on_hand:>10}  {row.unit}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
