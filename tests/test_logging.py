"""Tests for the structured logging system (inventory_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from inventory_kernel.exceptions import InsufficientStockError
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from inventory_kernel.models.stock_movement import MovementType


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "inventory_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("movement_appended", extra={"quantity": "4", "page": 2})

        record = _parse_log(stream)
        assert record["quantity"] == "4"
        assert record["page"] == 2

    def test_domain_values_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        lot_id = uuid4()
        get_logger("test").info(
            "values",
            extra={
                "lot": lot_id,
                "qty": Decimal("2.500"),
                "kind": MovementType.OUT,
                "day": date(2024, 3, 1),
            },
        )

        record = _parse_log(stream)
        assert record["lot"] == str(lot_id)
        assert record["qty"] == "2.500"
        assert record["kind"] == "OUT"
        assert record["day"] == "2024-03-01"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        actor = uuid4()
        LogContext.set(actor_id=actor, warehouse_id="wh-1")
        get_logger("test").info("with_context")

        record = _parse_log(stream)
        assert record["actor_id"] == str(actor)
        assert record["warehouse_id"] == "wh-1"

    def test_kernel_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise InsufficientStockError("lot-1", "wh-1", Decimal("2"), Decimal("5"))
        except InsufficientStockError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "InsufficientStockError"
        assert record["exc_code"] == "INSUFFICIENT_STOCK"
        assert record["exc_available"] == "2"
        assert record["exc_requested"] == "5"
        assert "traceback" in record


class TestLogContext:
    def test_bind_restores_previous_values(self):
        LogContext.set(actor_id="outer")
        with LogContext.bind(actor_id="inner", movement_id="m-1"):
            assert LogContext.get_all()["actor_id"] == "inner"
            assert LogContext.get_all()["movement_id"] == "m-1"
        ctx = LogContext.get_all()
        assert ctx["actor_id"] == "outer"
        assert "movement_id" not in ctx

    def test_unknown_and_none_fields_ignored(self):
        LogContext.set(unknown="x", farm_id=None)
        assert LogContext.get_all() == {}

    def test_clear(self):
        LogContext.set(correlation_id="c-1", trace_id="t-1")
        LogContext.clear()
        assert LogContext.get_all() == {}


class TestConfigureLogging:
    def test_idempotent(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=logging.StreamHandler(StringIO()))

        root = logging.getLogger("inventory_kernel")
        assert root.handlers == [handler]

    def test_level_filters_records(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        messages = [r["message"] for r in _parse_all_logs(stream)]
        assert messages == ["kept"]
