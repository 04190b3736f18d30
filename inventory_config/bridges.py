"""
Config -> Kernel Bridges.

Convert an InventoryConfig into kernel inputs.  These live in
inventory_config because the kernel must never import inventory_config.

Usage:
    config = get_active_config()
    engine = init_engine_from_config(config)
    policy = build_inventory_policy(config)
    service = InventoryService(session, guard, policy=policy)
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from inventory_config.schema import InventoryConfig
from inventory_kernel.db.engine import init_engine_from_url
from inventory_kernel.domain.policy import InventoryPolicy
from inventory_kernel.logging_config import configure_logging


def build_inventory_policy(config: InventoryConfig) -> InventoryPolicy:
    return InventoryPolicy(
        default_page_size=config.pagination.default_size,
        max_page_size=config.pagination.max_size,
        stock_in_default_note=config.stock_in.default_note,
    )


def configure_logging_from_config(config: InventoryConfig) -> None:
    configure_logging(level=getattr(logging, config.logging.level))


def init_engine_from_config(config: InventoryConfig) -> Engine:
    """Initialize the kernel's module-level engine from configuration."""
    db = config.database
    return init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )
