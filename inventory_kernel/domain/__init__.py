"""Domain values for the inventory valuation kernel."""

from inventory_kernel.domain.events import (
    EVENT_ROW_FIELDS,
    ClassifiedEffect,
    EventSource,
    LayerSnapshot,
    StockEvent,
)
from inventory_kernel.domain.policy import DEFAULT_WAC_POLICY, WacPolicy
from inventory_kernel.domain.reasons import CostBucket, StockChangeReason
from inventory_kernel.domain.summary import WAC_METHOD, FinancialSummary
from inventory_kernel.domain.window import UNSCOPED, NormalizedWindow, Scope, is_unscoped

__all__ = [
    "EVENT_ROW_FIELDS",
    "ClassifiedEffect",
    "CostBucket",
    "DEFAULT_WAC_POLICY",
    "EventSource",
    "FinancialSummary",
    "LayerSnapshot",
    "NormalizedWindow",
    "Scope",
    "StockChangeReason",
    "StockEvent",
    "UNSCOPED",
    "WacPolicy",
    "WAC_METHOD",
    "is_unscoped",
]
