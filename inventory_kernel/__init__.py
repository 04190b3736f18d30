"""
Inventory Kernel

Append-only stock ledger for farm supplies with:
- Derived on-hand balances (no stored quantities)
- Ordered, typed movement validation
- Atomic stock-in of a lot and its opening movement
- Row-locked OUT sufficiency checks
"""

__version__ = "0.1.0"
