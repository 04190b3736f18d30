"""
Module: inventory_kernel.db.triggers
Responsibility: Loading, installing, and verifying PostgreSQL immutability
    triggers.  Database-level complement to the ORM listeners in
    db/immutability.py.
Architecture position: Kernel > DB.  MUST NOT import from models/, services/,
    selectors/, domain/, or outer layers.

Invariants enforced (4 PostgreSQL triggers across 2 SQL files):
    - stock_movements: no UPDATE, no DELETE, ever.
    - supply_lots: identity fields (item, supplier, batch, expiry) frozen;
      no DELETE once the lot has ledger movements.

Failure modes:
    - PostgreSQL RAISE EXCEPTION on violation (surfaces as a DBAPIError).
    - FileNotFoundError if SQL files are missing from the sql/ directory.
"""

from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine

from inventory_kernel.logging_config import get_logger

logger = get_logger("db.triggers")

SQL_DIR = Path(__file__).parent / "sql"

TRIGGER_FILES = [
    "01_stock_movement.sql",
    "02_supply_lot.sql",
]

DROP_FILE = "99_drop_all.sql"

ALL_TRIGGER_NAMES = [
    # Stock movement (01)
    "trg_stock_movement_immutability_update",
    "trg_stock_movement_immutability_delete",
    # Supply lot (02)
    "trg_supply_lot_identity_update",
    "trg_supply_lot_delete_protection",
]


def _load_sql_file(filename: str) -> str:
    return (SQL_DIR / filename).read_text(encoding="utf-8")


def _load_all_trigger_sql() -> str:
    """Concatenate all trigger SQL files in numbered order."""
    sql_parts = []
    for filename in TRIGGER_FILES:
        sql_parts.append(f"-- Loading: {filename}")
        sql_parts.append(_load_sql_file(filename))
        sql_parts.append("")
    return "\n".join(sql_parts)


def install_immutability_triggers(engine: Engine) -> None:
    """
    Install database-level immutability triggers.

    Preconditions: tables exist; engine is connected to PostgreSQL.
    Postconditions: every trigger in ALL_TRIGGER_NAMES is installed.
        Functions use CREATE OR REPLACE, so this is idempotent.
    """
    sql_content = _load_all_trigger_sql()

    with engine.connect() as conn:
        conn.execute(text(sql_content))
        conn.commit()

    logger.info(
        "immutability_triggers_installed",
        extra={"trigger_count": len(ALL_TRIGGER_NAMES)},
    )


def uninstall_immutability_triggers(engine: Engine) -> None:
    """
    Remove database-level immutability triggers.

    Only for test teardown and migrations.  Re-install immediately afterwards.
    """
    with engine.connect() as conn:
        conn.execute(text(_load_sql_file(DROP_FILE)))
        conn.commit()

    logger.warning("immutability_triggers_uninstalled")


def get_installed_triggers(engine: Engine) -> list[str]:
    """Return the names of installed immutability triggers."""
    check_sql = text(
        "SELECT tgname FROM pg_trigger WHERE tgname = ANY(:names) ORDER BY tgname"
    )
    with engine.connect() as conn:
        result = conn.execute(check_sql, {"names": ALL_TRIGGER_NAMES})
        return [row[0] for row in result]


def triggers_installed(engine: Engine) -> bool:
    return len(get_installed_triggers(engine)) == len(ALL_TRIGGER_NAMES)


def get_missing_triggers(engine: Engine) -> list[str]:
    installed = set(get_installed_triggers(engine))
    return sorted(set(ALL_TRIGGER_NAMES) - installed)
