"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen dataclasses
of ``inventory_config.schema``.  The single public entry point for runtime
config is ``inventory_config.get_active_config()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Validation failures raise ``ValueError`` listing every problem found.
* ``compute_checksum`` is a deterministic SHA-256 over the parsed data.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong value types or out-of-range sizes  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from inventory_config.schema import (
    VALID_LOG_LEVELS,
    DatabaseConfig,
    InventoryConfig,
    LoggingConfig,
    PaginationConfig,
    StockInConfig,
)

DATABASE_URL_ENV_VARS = ("INVENTORY_DATABASE_URL", "DATABASE_URL")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    return data


def _section(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Configuration section '{key}' must be a mapping")
    return value


def _int(section: Mapping[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer, got {value!r}")
    return value


def parse_database(data: Mapping[str, Any]) -> DatabaseConfig:
    defaults = DatabaseConfig()
    return DatabaseConfig(
        url=str(data.get("url", defaults.url)),
        echo=bool(data.get("echo", defaults.echo)),
        pool_size=_int(data, "pool_size", defaults.pool_size),
        max_overflow=_int(data, "max_overflow", defaults.max_overflow),
        pool_timeout=_int(data, "pool_timeout", defaults.pool_timeout),
        pool_recycle=_int(data, "pool_recycle", defaults.pool_recycle),
        install_triggers=bool(data.get("install_triggers", defaults.install_triggers)),
    )


def parse_config(data: Mapping[str, Any]) -> InventoryConfig:
    """Parse a loaded YAML mapping into an (unvalidated) InventoryConfig."""
    pagination = _section(data, "pagination")
    stock_in = _section(data, "stock_in")
    logging_section = _section(data, "logging")

    config = InventoryConfig(
        name=str(data.get("name", "default")),
        database=parse_database(_section(data, "database")),
        pagination=PaginationConfig(
            default_size=_int(pagination, "default_size", PaginationConfig.default_size),
            max_size=_int(pagination, "max_size", PaginationConfig.max_size),
        ),
        stock_in=StockInConfig(
            default_note=str(stock_in.get("default_note", StockInConfig.default_note)),
        ),
        logging=LoggingConfig(
            level=str(logging_section.get("level", LoggingConfig.level)).upper(),
        ),
    )
    return config


def apply_environment(config: InventoryConfig, environ: Mapping[str, str]) -> InventoryConfig:
    """Override the database URL from the first set environment variable."""
    for name in DATABASE_URL_ENV_VARS:
        url = environ.get(name)
        if url:
            return replace(config, database=replace(config.database, url=url))
    return config


def validate_config(config: InventoryConfig) -> list[str]:
    """Return every validation problem; an empty list means valid."""
    errors: list[str] = []
    if not config.database.url:
        errors.append("database.url must not be empty")
    if config.pagination.default_size < 1:
        errors.append("pagination.default_size must be at least 1")
    if config.pagination.max_size < 1:
        errors.append("pagination.max_size must be at least 1")
    if config.pagination.default_size > config.pagination.max_size:
        errors.append("pagination.default_size cannot exceed pagination.max_size")
    if not config.stock_in.default_note.strip():
        errors.append("stock_in.default_note must not be blank")
    if config.logging.level not in VALID_LOG_LEVELS:
        errors.append(f"logging.level must be one of {sorted(VALID_LOG_LEVELS)}")
    return errors


def compute_checksum(config: InventoryConfig) -> str:
    """SHA-256 of the canonical JSON form, excluding the checksum itself."""
    data = asdict(config)
    data.pop("checksum", None)
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
