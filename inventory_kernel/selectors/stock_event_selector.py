"""
Module: inventory_kernel.selectors.stock_event_selector
Responsibility: SQL-backed EventSource.  Streams the stock history log up to
    an upper bound, in replay order, for the WAC engine.
Architecture position: Kernel > Selectors.  Reads StockEventModel only.

Invariants enforced:
    - Rows are returned ordered by (created_at, sequence): non-decreasing
      timestamps, ties in arrival order.
    - No lower bound: opening inventory is reconstructed by the engine from
      everything before the window start.
    - Scope matching is case-insensitive on the trimmed supplier id; the
      UNSCOPED sentinel applies no supplier filter at all.

Failure modes:
    - SQLAlchemy errors propagate unchanged; the caller's single read fails
      and the computation for that invocation aborts.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Row, func, select

from inventory_kernel.domain.window import Scope, is_unscoped
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.stock_event import StockEventModel
from inventory_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.stock_event")


class StockEventSelector(BaseSelector[StockEventModel]):
    """Read-only view of the stock history log, shaped for replay."""

    def stream_events(
        self,
        scope: Scope,
        upper_bound: datetime,
        item_id: str | None = None,
    ) -> list[Row]:
        """
        Return raw event rows with created_at <= upper_bound.

        Each row exposes ``item_id, supplier_id, created_at, quantity_change,
        price_at_change, reason`` by position and by name.
        """
        stmt = (
            select(
                StockEventModel.item_id,
                StockEventModel.supplier_id,
                StockEventModel.created_at,
                StockEventModel.quantity_change,
                StockEventModel.price_at_change,
                StockEventModel.reason,
            )
            .where(StockEventModel.created_at <= upper_bound)
        )
        if not is_unscoped(scope):
            stmt = stmt.where(
                func.lower(func.trim(StockEventModel.supplier_id)) == str(scope).strip().lower()
            )
        if item_id is not None:
            stmt = stmt.where(StockEventModel.item_id == item_id)
        stmt = stmt.order_by(StockEventModel.created_at, StockEventModel.sequence)

        rows = self._fetch_rows(stmt)
        logger.debug(
            "stock_events_streamed",
            extra={
                "scope": "*" if is_unscoped(scope) else str(scope),
                "item_id": item_id,
                "upper_bound": upper_bound,
                "row_count": len(rows),
            },
        )
        return rows
