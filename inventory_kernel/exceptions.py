"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every rejected stock operation is a normal, reportable outcome scoped to a
single request. Callers (an HTTP layer, a CLI, a batch importer) must be able
to tell "warehouse does not exist" from "not your farm" from "not enough
stock" without parsing message text:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        service.record_movement(...)
    except Exception as e:
        if "insufficient" in str(e):  # FRAGILE - message might change
            show_balance()

Example - RIGHT way (what this module enables):
    try:
        service.record_movement(...)
    except InsufficientStockError as e:
        api_response(code=e.code, available=e.available, requested=e.requested)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from InventoryKernelError:

    InventoryKernelError (base)
    |
    +-- NotFoundError
    |   +-- WarehouseNotFoundError
    |   +-- StockLocationNotFoundError
    |   +-- SupplyLotNotFoundError
    |   +-- SupplierNotFoundError
    |   +-- SupplyItemNotFoundError
    |   +-- SeasonNotFoundError
    |   +-- TaskNotFoundError
    |
    +-- ForbiddenError
    |
    +-- BadRequestError
    |   +-- LocationWarehouseMismatchError
    |   +-- NonPositiveQuantityError
    |   +-- UnknownMovementTypeError
    |   +-- SeasonFarmMismatchError
    |   +-- TaskSeasonMismatchError
    |   +-- InvalidExpiryDateError
    |   +-- InvalidPageRequestError
    |
    +-- MovementRuleError
    |   +-- AdjustNoteRequiredError
    |   +-- OutSeasonRequiredError
    |   +-- LotNotInStockError
    |   +-- InsufficientStockError
    |
    +-- StockInError
    |   +-- RestrictedConfirmationRequiredError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                              | When Raised
----------------|-----------------------------------|----------------------------------
Not found       | WAREHOUSE_NOT_FOUND               | Warehouse ID doesn't exist
                | STOCK_LOCATION_NOT_FOUND          | Location ID doesn't exist
                | SUPPLY_LOT_NOT_FOUND              | Lot ID doesn't exist
                | SUPPLIER_NOT_FOUND                | Supplier ID doesn't exist
                | SUPPLY_ITEM_NOT_FOUND             | Item ID doesn't exist
                | SEASON_NOT_FOUND                  | Season ID doesn't exist
                | TASK_NOT_FOUND                    | Task ID doesn't exist
----------------|-----------------------------------|----------------------------------
Access          | FORBIDDEN                         | Actor does not own the farm
----------------|-----------------------------------|----------------------------------
Bad request     | LOCATION_WAREHOUSE_MISMATCH       | Location is in another warehouse
                | NON_POSITIVE_QUANTITY             | Quantity <= 0
                | UNKNOWN_MOVEMENT_TYPE             | Type code not IN/OUT/ADJUST
                | SEASON_FARM_MISMATCH              | OUT season on another farm
                | TASK_SEASON_MISMATCH              | Task has no / a different season
                | INVALID_EXPIRY_DATE               | Expiry not an ISO date
                | INVALID_PAGE_REQUEST              | Negative page or bad size
----------------|-----------------------------------|----------------------------------
Movement rules  | ADJUST_NOTE_REQUIRED              | ADJUST without a note
                | OUT_SEASON_REQUIRED               | OUT without a season
                | LOT_NOT_IN_STOCK                  | OUT from a non-IN_STOCK lot
                | INSUFFICIENT_STOCK                | OUT exceeds on-hand
----------------|-----------------------------------|----------------------------------
Stock-in        | RESTRICTED_CONFIRM_REQUIRED       | Restricted item not confirmed
----------------|-----------------------------------|----------------------------------
Immutability    | IMMUTABILITY_VIOLATION            | Updating/deleting ledger history

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CATCH BY CATEGORY AT THE BOUNDARY:

    except NotFoundError as e:      -> 404
    except ForbiddenError as e:     -> 403
    except BadRequestError as e:    -> 400
    except MovementRuleError as e:  -> 409 / 422 with e.code

2. USE STRUCTURED DATA:

    except InsufficientStockError as e:
        return {"error": e.code, "available": e.available}

3. IMMUTABILITY ERRORS ARE BUGS, NOT USER ERRORS:

    ImmutabilityViolationError means code tried to rewrite ledger history.
    Log it and investigate; never retry.

===============================================================================
"""

from decimal import Decimal


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Lookup exceptions


class NotFoundError(InventoryKernelError):
    """Base exception for a referenced record that does not exist."""

    code: str = "NOT_FOUND"
    entity_type: str = "Record"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity_type} not found: {entity_id}")


class WarehouseNotFoundError(NotFoundError):
    code: str = "WAREHOUSE_NOT_FOUND"
    entity_type = "Warehouse"


class StockLocationNotFoundError(NotFoundError):
    code: str = "STOCK_LOCATION_NOT_FOUND"
    entity_type = "StockLocation"


class SupplyLotNotFoundError(NotFoundError):
    code: str = "SUPPLY_LOT_NOT_FOUND"
    entity_type = "SupplyLot"


class SupplierNotFoundError(NotFoundError):
    code: str = "SUPPLIER_NOT_FOUND"
    entity_type = "Supplier"


class SupplyItemNotFoundError(NotFoundError):
    code: str = "SUPPLY_ITEM_NOT_FOUND"
    entity_type = "SupplyItem"


class SeasonNotFoundError(NotFoundError):
    code: str = "SEASON_NOT_FOUND"
    entity_type = "Season"


class TaskNotFoundError(NotFoundError):
    code: str = "TASK_NOT_FOUND"
    entity_type = "Task"


# Access exceptions


class ForbiddenError(InventoryKernelError):
    """The acting user may not operate on the farm that owns the warehouse."""

    code: str = "FORBIDDEN"

    def __init__(self, actor_id: str | None, farm_id: str | None, reason: str):
        self.actor_id = actor_id
        self.farm_id = farm_id
        self.reason = reason
        super().__init__(f"Access denied to farm {farm_id}: {reason}")


# Malformed requests


class BadRequestError(InventoryKernelError):
    """Base exception for malformed cross-references and arguments."""

    code: str = "BAD_REQUEST"


class LocationWarehouseMismatchError(BadRequestError):
    """Location belongs to a different warehouse than the request."""

    code: str = "LOCATION_WAREHOUSE_MISMATCH"

    def __init__(self, location_id: str, warehouse_id: str):
        self.location_id = location_id
        self.warehouse_id = warehouse_id
        super().__init__(
            f"Location {location_id} does not belong to warehouse {warehouse_id}"
        )


class NonPositiveQuantityError(BadRequestError):
    """Quantity must be a positive magnitude."""

    code: str = "NON_POSITIVE_QUANTITY"

    def __init__(self, quantity: Decimal):
        self.quantity = quantity
        super().__init__(f"Quantity must be greater than zero, got {quantity}")


class UnknownMovementTypeError(BadRequestError):
    code: str = "UNKNOWN_MOVEMENT_TYPE"

    def __init__(self, movement_type: str):
        self.movement_type = movement_type
        super().__init__(f"Unknown movement type: {movement_type!r}")


class SeasonFarmMismatchError(BadRequestError):
    """OUT movement attributed to a season on another farm."""

    code: str = "SEASON_FARM_MISMATCH"

    def __init__(self, season_id: str, season_farm_id: str, warehouse_farm_id: str):
        self.season_id = season_id
        self.season_farm_id = season_farm_id
        self.warehouse_farm_id = warehouse_farm_id
        super().__init__(
            f"Season {season_id} belongs to farm {season_farm_id}, "
            f"warehouse belongs to farm {warehouse_farm_id}"
        )


class TaskSeasonMismatchError(BadRequestError):
    """Task has no season, or a season other than the movement's."""

    code: str = "TASK_SEASON_MISMATCH"

    def __init__(self, task_id: str, task_season_id: str | None, season_id: str | None):
        self.task_id = task_id
        self.task_season_id = task_season_id
        self.season_id = season_id
        if task_season_id is None:
            message = f"Task {task_id} is not linked to any season"
        else:
            message = (
                f"Task {task_id} belongs to season {task_season_id}, "
                f"movement references season {season_id}"
            )
        super().__init__(message)


class InvalidExpiryDateError(BadRequestError):
    code: str = "INVALID_EXPIRY_DATE"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Expiry date must be an ISO date (YYYY-MM-DD), got {value!r}")


class InvalidPageRequestError(BadRequestError):
    code: str = "INVALID_PAGE_REQUEST"

    def __init__(self, page: int, size: int, max_size: int):
        self.page = page
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"Invalid page request: page={page} size={size} (max size {max_size})"
        )


# Movement rule exceptions


class MovementRuleError(InventoryKernelError):
    """Base exception for movement-type-specific rule violations."""

    code: str = "MOVEMENT_RULE_VIOLATION"


class AdjustNoteRequiredError(MovementRuleError):
    """ADJUST movements must explain themselves."""

    code: str = "ADJUST_NOTE_REQUIRED"

    def __init__(self):
        super().__init__("Note is required for ADJUST movements")


class OutSeasonRequiredError(MovementRuleError):
    code: str = "OUT_SEASON_REQUIRED"

    def __init__(self):
        super().__init__("Season is required for OUT movements")


class LotNotInStockError(MovementRuleError):
    code: str = "LOT_NOT_IN_STOCK"

    def __init__(self, lot_id: str, status: str):
        self.lot_id = lot_id
        self.status = status
        super().__init__(f"Supply lot {lot_id} is not IN_STOCK (status: {status})")


class InsufficientStockError(MovementRuleError):
    """OUT quantity exceeds the derived on-hand balance."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        lot_id: str,
        warehouse_id: str,
        available: Decimal,
        requested: Decimal,
    ):
        self.lot_id = lot_id
        self.warehouse_id = warehouse_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock: {available} available, {requested} requested"
        )


# Stock-in exceptions


class StockInError(InventoryKernelError):
    code: str = "STOCK_IN_ERROR"


class RestrictedConfirmationRequiredError(StockInError):
    """
    Restricted item received without explicit operator confirmation.

    The confirmation is checked on every stock-in call; it is never remembered.
    """

    code: str = "RESTRICTED_CONFIRM_REQUIRED"

    def __init__(self, supply_item_id: str, item_name: str):
        self.supply_item_id = supply_item_id
        self.item_name = item_name
        super().__init__(
            f"Item {item_name!r} is restricted; confirmation is required"
        )


# Immutability exceptions


class ImmutabilityError(InventoryKernelError):
    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    StockMovement rows are never updated or deleted. SupplyLot identity
    fields are frozen after creation.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
