"""
Events -- Canonical stock events and the source they are read from.

Responsibility:
    Defines the immutable StockEvent the replay works on, the classified
    monetary effect produced by applying one event to a cost layer, the
    point-in-time layer snapshot, and the EventSource protocol the replay
    engine reads raw rows from.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    The SQL-backed EventSource lives in inventory_kernel.selectors.

Invariants enforced:
    - StockEvent and ClassifiedEffect are frozen; the engine never mutates
      an event after normalization.
    - StockEvent.sequence is the arrival position in the source stream and
      breaks ties between events sharing a timestamp.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from inventory_kernel.domain.reasons import CostBucket, StockChangeReason
from inventory_kernel.domain.window import Scope

# Column order of positional rows returned by an EventSource.
EVENT_ROW_FIELDS: tuple[str, ...] = (
    "item_id",
    "supplier_id",
    "created_at",
    "quantity_change",
    "price_at_change",
    "reason",
)


@dataclass(frozen=True, slots=True)
class StockEvent:
    """One normalized stock change for one inventory entity."""

    entity_id: str
    scope_id: str | None
    timestamp: datetime
    quantity_delta: int
    unit_cost: Decimal | None
    reason: StockChangeReason
    sequence: int

    @property
    def is_inbound(self) -> bool:
        return self.quantity_delta > 0

    @property
    def is_outbound(self) -> bool:
        return self.quantity_delta < 0

    @property
    def sort_key(self) -> tuple[datetime, int]:
        """Chronological ordering key: timestamp, then arrival order."""
        return (self.timestamp, self.sequence)


@dataclass(frozen=True, slots=True)
class ClassifiedEffect:
    """
    Monetary effect of applying one event to a cost layer.

    ``quantity`` and ``value`` are signed contributions to ``bucket``:
    returns to supplier carry negative values into PURCHASE.  ``requested``
    is the absolute quantity the event asked for; ``quantity`` reflects what
    was actually applied after clamping.
    """

    bucket: CostBucket
    quantity: int
    value: Decimal
    requested: int = 0
    clamped: int = 0

    @classmethod
    def none(cls) -> ClassifiedEffect:
        return cls(bucket=CostBucket.NONE, quantity=0, value=Decimal("0"))


@dataclass(frozen=True, slots=True)
class LayerSnapshot:
    """Quantity and running unit cost of one entity at an instant."""

    entity_id: str
    quantity: int
    unit_cost: Decimal

    @property
    def value(self) -> Decimal:
        return self.unit_cost * self.quantity


@runtime_checkable
class EventSource(Protocol):
    """Read-only source of loosely-typed stock event rows.

    Rows carry, in order or by name, the fields in EVENT_ROW_FIELDS. They
    may be mappings, SQLAlchemy rows or plain tuples; numeric and temporal
    columns may arrive in any representation the numeric normalizer accepts.
    """

    def stream_events(
        self,
        scope: Scope,
        upper_bound: datetime,
        item_id: str | None = None,
    ) -> Iterable[Any]:
        """Return rows with timestamp <= upper_bound in non-decreasing timestamp order."""
        ...
