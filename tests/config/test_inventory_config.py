"""Tests for inventory_config: loading, validation, overrides and bridges."""

from pathlib import Path

import pytest
import yaml

from inventory_config import DEFAULT_CONFIG_PATH, get_active_config
from inventory_config.bridges import build_inventory_policy
from inventory_config.loader import compute_checksum, load_yaml_file
from inventory_kernel.domain.policy import DEFAULT_STOCK_IN_NOTE


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "inventory.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestDefaults:
    def test_packaged_defaults(self):
        config = get_active_config(environ={})
        assert config.name == "default"
        assert config.pagination.default_size == 20
        assert config.pagination.max_size == 100
        assert config.stock_in.default_note == DEFAULT_STOCK_IN_NOTE
        assert config.logging.level == "INFO"
        assert config.database.url == "sqlite:///:memory:"

    def test_defaults_file_ships_with_package(self):
        assert DEFAULT_CONFIG_PATH.exists()
        assert load_yaml_file(DEFAULT_CONFIG_PATH)["pagination"]["max_size"] == 100

    def test_checksum_set_and_stable(self):
        first = get_active_config(environ={})
        second = get_active_config(environ={})
        assert len(first.checksum) == 64
        assert first.checksum == second.checksum
        assert compute_checksum(first) == first.checksum

    def test_load_logged(self, captured_logs):
        config = get_active_config(environ={})
        records = [r for r in captured_logs() if r["message"] == "inventory_config_loaded"]
        assert records[0]["checksum"] == config.checksum
        assert records[0]["dialect"] == "sqlite"


class TestOverrides:
    def test_custom_file(self, tmp_path):
        path = _write(
            tmp_path,
            {
                "name": "co-op",
                "pagination": {"default_size": 10, "max_size": 50},
                "stock_in": {"default_note": "Received at gate"},
                "logging": {"level": "debug"},
            },
        )
        config = get_active_config(path, environ={})
        assert config.name == "co-op"
        assert config.pagination.default_size == 10
        assert config.pagination.max_size == 50
        assert config.stock_in.default_note == "Received at gate"
        assert config.logging.level == "DEBUG"

    def test_partial_file_keeps_defaults(self, tmp_path):
        config = get_active_config(_write(tmp_path, {"name": "tiny"}), environ={})
        assert config.pagination.default_size == 20
        assert config.database.pool_size == 20

    def test_environment_database_url(self):
        config = get_active_config(
            environ={"DATABASE_URL": "postgresql://farm@db/inventory"}
        )
        assert config.database.url == "postgresql://farm@db/inventory"

    def test_specific_variable_wins(self):
        config = get_active_config(
            environ={
                "DATABASE_URL": "postgresql://generic@db/x",
                "INVENTORY_DATABASE_URL": "postgresql://inventory@db/y",
            }
        )
        assert config.database.url == "postgresql://inventory@db/y"

    def test_checksum_tracks_content(self, tmp_path):
        base = get_active_config(environ={})
        changed = get_active_config(_write(tmp_path, {"pagination": {"max_size": 99}}), environ={})
        assert base.checksum != changed.checksum


class TestValidation:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml", environ={})

    def test_all_problems_reported(self, tmp_path):
        path = _write(
            tmp_path,
            {
                "pagination": {"default_size": 0, "max_size": 0},
                "stock_in": {"default_note": "  "},
                "logging": {"level": "LOUD"},
            },
        )
        with pytest.raises(ValueError) as exc_info:
            get_active_config(path, environ={})
        message = str(exc_info.value)
        assert "pagination.default_size" in message
        assert "pagination.max_size" in message
        assert "stock_in.default_note" in message
        assert "logging.level" in message

    def test_default_above_max(self, tmp_path):
        path = _write(tmp_path, {"pagination": {"default_size": 60, "max_size": 50}})
        with pytest.raises(ValueError, match="cannot exceed"):
            get_active_config(path, environ={})

    @pytest.mark.parametrize("value", ["twenty", 2.5, True])
    def test_sizes_must_be_integers(self, tmp_path, value):
        path = _write(tmp_path, {"pagination": {"default_size": value}})
        with pytest.raises(ValueError):
            get_active_config(path, environ={})

    def test_section_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError):
            get_active_config(_write(tmp_path, {"pagination": [1, 2]}), environ={})

    def test_root_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError):
            get_active_config(_write(tmp_path, ["not", "a", "mapping"]), environ={})


class TestBridges:
    def test_policy_from_config(self, tmp_path):
        path = _write(
            tmp_path,
            {
                "pagination": {"default_size": 5, "max_size": 25},
                "stock_in": {"default_note": "Gate receipt"},
            },
        )
        policy = build_inventory_policy(get_active_config(path, environ={}))
        assert policy.default_page_size == 5
        assert policy.max_page_size == 25
        assert policy.stock_in_default_note == "Gate receipt"
        assert policy.page_request().size == 5
