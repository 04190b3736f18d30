"""Tests for the typed exception hierarchy."""

from decimal import Decimal

import pytest

from inventory_kernel import exceptions as exc


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "error, base",
        [
            (exc.WarehouseNotFoundError("w"), exc.NotFoundError),
            (exc.TaskNotFoundError("t"), exc.NotFoundError),
            (exc.LocationWarehouseMismatchError("l", "w"), exc.BadRequestError),
            (exc.InvalidPageRequestError(-1, 10, 100), exc.BadRequestError),
            (exc.AdjustNoteRequiredError(), exc.MovementRuleError),
            (exc.InsufficientStockError("l", "w", Decimal("1"), Decimal("2")), exc.MovementRuleError),
            (exc.RestrictedConfirmationRequiredError("i", "Glyphosate"), exc.StockInError),
            (exc.ImmutabilityViolationError("StockMovement", "m", "no"), exc.ImmutabilityError),
        ],
    )
    def test_subclassing(self, error, base):
        assert isinstance(error, base)
        assert isinstance(error, exc.InventoryKernelError)

    def test_codes_are_unique(self):
        classes = [
            obj
            for obj in vars(exc).values()
            if isinstance(obj, type) and issubclass(obj, exc.InventoryKernelError)
        ]
        codes = [cls.code for cls in classes]
        assert len(codes) == len(set(codes))

    def test_not_found_message_names_entity(self):
        error = exc.SupplyLotNotFoundError("abc")
        assert error.entity_id == "abc"
        assert str(error) == "SupplyLot not found: abc"

    def test_task_without_season_message(self):
        error = exc.TaskSeasonMismatchError("t-1", None, None)
        assert "not linked to any season" in str(error)

    def test_forbidden_carries_context(self):
        error = exc.ForbiddenError(actor_id="u", farm_id="f", reason="user does not own the farm")
        assert error.code == "FORBIDDEN"
        assert error.farm_id == "f"
        assert error.reason == "user does not own the farm"
