"""
inventory_config -- single public entrypoint for inventory configuration.

Responsibility:
    ``get_active_config()`` is the only way to obtain configuration at
    runtime.  No other component reads configuration files or environment
    variables.  Bridges in ``inventory_config.bridges`` turn the result into
    kernel inputs; ``inventory_kernel`` never imports this package.

Failure modes:
    - ``FileNotFoundError`` -- the requested config file does not exist.
    - ``ValueError`` -- validation failures (all problems listed).

Audit relevance:
    Every successful call emits an ``inventory_config_loaded`` log entry
    with the config name, checksum and effective page sizes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Mapping

from inventory_config.loader import (
    apply_environment,
    compute_checksum,
    load_yaml_file,
    parse_config,
    validate_config,
)
from inventory_config.schema import InventoryConfig

_logger = logging.getLogger("inventory_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

__all__ = ["get_active_config", "InventoryConfig", "DEFAULT_CONFIG_PATH"]


def get_active_config(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> InventoryConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load.  Defaults to the packaged
            ``defaults.yaml``.
        environ: Environment mapping for overrides.  Defaults to
            ``os.environ``.

    Returns:
        A validated, frozen InventoryConfig with its checksum set.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ValueError: If validation fails.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(path))
    config = apply_environment(config, os.environ if environ is None else environ)

    errors = validate_config(config)
    if errors:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    config = replace(config, checksum=compute_checksum(config))

    _logger.info(
        "inventory_config_loaded",
        extra={
            "config_name": config.name,
            "config_path": str(path),
            "checksum": config.checksum,
            "dialect": config.database.url.split(":", 1)[0],
            "default_page_size": config.pagination.default_size,
            "max_page_size": config.pagination.max_size,
        },
    )
    return config
