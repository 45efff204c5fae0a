"""
inventory_engines.window -- Validation of the valuation query window.

Responsibility:
    Check and normalize (start, end, scope, item) before any event is
    read: bounds must be present and parseable, start must not be after
    end, and a blank scope becomes the UNSCOPED sentinel.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - MissingWindowBoundError when start or end is None.
    - InvalidWindowDateError when a bound is neither a date nor an ISO date.
    - InvalidRangeError when start > end.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from inventory_kernel.domain.window import UNSCOPED, NormalizedWindow, Scope
from inventory_kernel.exceptions import (
    InvalidRangeError,
    InvalidWindowDateError,
    MissingWindowBoundError,
)
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.window")


class WindowValidator:
    """Pure validator producing a NormalizedWindow."""

    def validate(
        self,
        start: date | str | None,
        end: date | str | None,
        scope: str | None = None,
        item_id: str | None = None,
    ) -> NormalizedWindow:
        start_date = self._to_date(start, "start")
        end_date = self._to_date(end, "end")
        if start_date > end_date:
            logger.info(
                "window_rejected",
                extra={"start": start_date, "end": end_date, "reason": "INVALID_RANGE"},
            )
            raise InvalidRangeError(start_date, end_date)

        return NormalizedWindow(
            start_date=start_date,
            end_date=end_date,
            scope=self.normalize_scope(scope),
            item_id=item_id.strip() if item_id and item_id.strip() else None,
        )

    @staticmethod
    def normalize_scope(scope: Any) -> Scope:
        """Blank or missing scope means no restriction; anything else passes through."""
        if scope is None or scope is UNSCOPED:
            return UNSCOPED
        if isinstance(scope, str) and not scope.strip():
            return UNSCOPED
        return scope

    @staticmethod
    def _to_date(value: Any, bound: str) -> date:
        if value is None:
            raise MissingWindowBoundError(bound)
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                raise InvalidWindowDateError(bound, value) from None
        raise InvalidWindowDateError(bound, value)
