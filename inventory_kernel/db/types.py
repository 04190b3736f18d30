"""
Module: inventory_kernel.db.types
Responsibility: Annotated type aliases and helpers for quantity columns.
    Centralizes precision so every model, selector and service agrees on
    what a stock quantity looks like.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats for quantities.  Every quantity is a Decimal stored as
      Numeric(38, 9).
    - normalize_quantity() is the single place aggregate results are
      converted back to Decimal, so PostgreSQL and SQLite agree on the
      representation returned to callers.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

from sqlalchemy import Numeric, String

# Stock quantity: 38 digits total, 9 decimal places
Quantity = Annotated[Decimal, Numeric(38, 9)]

# Short identifier strings (status codes, movement types)
ShortCode = Annotated[str, String(20)]

# Display names
Name = Annotated[str, String(255)]

# Free text notes
LongText = Annotated[str, String(4000)]

QUANTITY_DECIMAL_PLACES = 9
_QUANTUM = Decimal(1).scaleb(-QUANTITY_DECIMAL_PLACES)
ZERO = Decimal("0")


def to_quantity(value: Any) -> Decimal:
    """
    Convert a caller-supplied quantity to Decimal.

    Strings and ints convert exactly.  Floats go through str() so 0.1 stays
    0.1 instead of its binary expansion.

    Raises:
        decimal.InvalidOperation: If the value is not numeric.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def normalize_quantity(value: Any) -> Decimal:
    """
    Normalize a stored or aggregated quantity.

    None (an empty aggregate) becomes zero.  The result is quantized to the
    column precision and stripped of trailing zeros, so Decimal("100.000000000")
    and Decimal("100") come back identical from every backend.
    """
    if value is None:
        return ZERO
    quantity = to_quantity(value).quantize(_QUANTUM, rounding=ROUND_HALF_UP)
    if quantity == ZERO:
        return ZERO
    normalized = quantity.normalize()
    # normalize() turns 100 into 1E+2; keep integral values in plain notation
    if normalized.as_tuple().exponent > 0:
        normalized = normalized.quantize(Decimal(1))
    return normalized
