"""
Window -- Normalized query window and the unscoped sentinel.

Responsibility:
    Holds the validated, inclusive valuation window together with its
    scope restriction.  Validation itself lives in
    inventory_engines.window.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - start_date <= end_date (guaranteed by the validator that builds it).
    - A missing or blank scope is the UNSCOPED sentinel, never "" or None,
      so no downstream comparison can match it against a real supplier id.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Union


class _Unscoped(Enum):
    UNSCOPED = "UNSCOPED"

    def __repr__(self) -> str:
        return "UNSCOPED"


UNSCOPED = _Unscoped.UNSCOPED

Scope = Union[str, _Unscoped]


def is_unscoped(scope: Scope) -> bool:
    return scope is UNSCOPED


@dataclass(frozen=True, slots=True)
class NormalizedWindow:
    """Inclusive civil-date window [start_date, end_date] plus filters."""

    start_date: date
    end_date: date
    scope: Scope = UNSCOPED
    item_id: str | None = None

    @property
    def start(self) -> datetime:
        """First instant inside the window."""
        return datetime.combine(self.start_date, time.min)

    @property
    def end(self) -> datetime:
        """Last instant inside the window."""
        return datetime.combine(self.end_date, time.max)

    def is_before(self, ts: datetime) -> bool:
        """True when ``ts`` falls in the opening (pre-window) phase."""
        return ts < self.start

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts <= self.end

    @property
    def scope_label(self) -> str:
        return "*" if self.scope is UNSCOPED else str(self.scope)
