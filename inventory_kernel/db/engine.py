"""
Module: inventory_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities.  Single point of database connection
    configuration for the inventory system.
Architecture position: Kernel > DB.  May import from db/base.py and
    db/triggers.py.  MUST NOT import from services/, selectors/, domain/, or
    outer layers (create_tables imports models so metadata is complete).

Invariants enforced:
    - PostgreSQL is the production backend.  Sessions run at READ COMMITTED
      with explicit row-level locking (FOR UPDATE) on stock slots, which is
      what serializes competing OUT movements.
    - SQLite is accepted for local runs and tests.  It gets SAVEPOINT support
      through explicit BEGIN handling, and an in-memory URL shares one
      connection across the process.

Failure modes:
    - RuntimeError if get_engine/get_session/get_session_factory is called
      before init_engine_from_url().
    - OperationalError on deadlock during trigger installation (retried up to 3x).
"""

import atexit
import time
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from inventory_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy own BEGIN on SQLite so nested savepoints work."""

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create an engine for the given URL without installing it globally.

    PostgreSQL engines use a QueuePool at READ COMMITTED.  SQLite engines
    skip pool sizing; in-memory SQLite uses a StaticPool so every session sees
    the same database.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        url,
        echo=echo,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        isolation_level="READ COMMITTED",
    )


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Initialize the module-level engine and session factory.

    Calling it again overwrites the previous engine; call reset_engine()
    first to release the old pool.

    Args:
        database_url: SQLAlchemy URL (postgresql://... or sqlite://...).
        echo: If True, log all SQL statements.
        pool_size: Number of connections to keep in the pool (PostgreSQL).
        max_overflow: Max connections beyond pool_size (PostgreSQL).
        pool_pre_ping: Test connections before use.
        pool_timeout: Seconds to wait for a pooled connection.
        pool_recycle: Seconds after which a connection is recycled.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine, _SessionFactory

    _engine = build_engine(
        database_url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
    )
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "dialect": _engine.dialect.name,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "echo": echo,
        },
    )
    return _engine


def get_engine() -> Engine:
    """
    Get the current engine instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    """
    Get a new session instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory()


def get_session_factory() -> sessionmaker[Session]:
    """
    Get the session factory.  Each thread should create its own session.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Commits on normal exit.  On exception the session is rolled back and the
    exception re-raised.  Services only flush; this is where commit happens.

    Usage:
        with session_scope() as session:
            service = InventoryService(session, guard)
            service.record_movement(...)
    """
    session = get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(install_triggers: bool = True) -> None:
    """
    Create all tables and, on PostgreSQL, install immutability triggers.

    Args:
        install_triggers: If True and the backend is PostgreSQL, install the
            ledger immutability triggers.

    Raises:
        RuntimeError: If engine is not initialized.
        OperationalError: If trigger installation fails after 3 retries.
    """
    from inventory_kernel.db.base import Base
    import inventory_kernel.models  # noqa: F401  (registers tables)

    engine = get_engine()
    Base.metadata.create_all(engine)
    logger.info(
        "tables_created",
        extra={"table_count": len(Base.metadata.tables)},
    )

    if install_triggers and engine.dialect.name == "postgresql":
        from inventory_kernel.db.triggers import install_immutability_triggers

        max_retries = 3
        for attempt in range(max_retries):
            try:
                install_immutability_triggers(engine)
                break
            except OperationalError as exc:
                if "deadlock" in str(exc).lower() and attempt < max_retries - 1:
                    logger.warning(
                        "trigger_install_deadlock_retry",
                        extra={"attempt": attempt + 1, "max_retries": max_retries},
                    )
                    engine.dispose()
                    time.sleep(0.5 * (attempt + 1))
                else:
                    raise


def drop_tables() -> None:
    """Drop all tables. Use with caution - primarily for testing."""
    from inventory_kernel.db.base import Base
    import inventory_kernel.models  # noqa: F401

    engine = get_engine()
    if engine.dialect.name == "postgresql":
        from inventory_kernel.db.triggers import uninstall_immutability_triggers

        uninstall_immutability_triggers(engine)
    Base.metadata.drop_all(engine)


def reset_engine() -> None:
    """Reset the engine and session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _SessionFactory = None


def _atexit_dispose() -> None:
    if _engine is not None:
        _engine.dispose()


atexit.register(_atexit_dispose)


def is_postgres() -> bool:
    """Check if the current engine is PostgreSQL."""
    if _engine is None:
        return False
    return _engine.dialect.name == "postgresql"
