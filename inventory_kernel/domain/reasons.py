"""
Reasons -- Closed catalog of stock change reason tags.

Responsibility:
    Defines every reason a stock event may carry and the financial bucket
    each kind of movement lands in once it has been classified.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - The reason set is closed: anything outside StockChangeReason is a
      data format error at the normalization boundary, never a silent
      default.
"""

from __future__ import annotations

from enum import Enum


class StockChangeReason(str, Enum):
    """Why a stock level changed."""

    INITIAL_STOCK = "INITIAL_STOCK"
    RECEIVED = "RECEIVED"
    MANUAL_UPDATE = "MANUAL_UPDATE"
    PRICE_CHANGE = "PRICE_CHANGE"
    SOLD = "SOLD"
    SCRAPPED = "SCRAPPED"
    DESTROYED = "DESTROYED"
    DAMAGED = "DAMAGED"
    EXPIRED = "EXPIRED"
    LOST = "LOST"
    RETURNED_TO_SUPPLIER = "RETURNED_TO_SUPPLIER"
    RETURNED_BY_CUSTOMER = "RETURNED_BY_CUSTOMER"


class CostBucket(str, Enum):
    """Financial bucket a classified stock movement is charged to."""

    PURCHASE = "purchase"    # includes returns to supplier, as negatives
    RETURN_IN = "return_in"
    COGS = "cogs"
    WRITE_OFF = "write_off"
    NONE = "none"            # zero-quantity rows (e.g. PRICE_CHANGE)


DEFAULT_SALE_REASONS: frozenset[StockChangeReason] = frozenset({
    StockChangeReason.SOLD,
})

DEFAULT_WRITE_OFF_REASONS: frozenset[StockChangeReason] = frozenset({
    StockChangeReason.DAMAGED,
    StockChangeReason.DESTROYED,
    StockChangeReason.SCRAPPED,
    StockChangeReason.EXPIRED,
    StockChangeReason.LOST,
})

DEFAULT_RETURN_TO_SUPPLIER_REASONS: frozenset[StockChangeReason] = frozenset({
    StockChangeReason.RETURNED_TO_SUPPLIER,
})
