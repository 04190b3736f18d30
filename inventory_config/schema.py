"""
Configuration schema (``inventory_config.schema``).

Frozen dataclasses produced by the loader.  Nothing here reads files or the
environment; ``inventory_config.loader`` does that.
"""

from __future__ import annotations

from dataclasses import dataclass, field

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///:memory:"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    install_triggers: bool = True


@dataclass(frozen=True)
class PaginationConfig:
    default_size: int = 20
    max_size: int = 100


@dataclass(frozen=True)
class StockInConfig:
    default_note: str = "Stock IN via Suppliers & Supplies"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class InventoryConfig:
    """The single runtime configuration artifact."""

    name: str = "default"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    stock_in: StockInConfig = field(default_factory=StockInConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
