"""
inventory_services.financial_summary_service -- WAC financial summary for a supplier.

Responsibility:
    Caller-facing operation behind dashboards and reports: compute the
    weighted-average-cost FinancialSummary for a civil-date window,
    optionally narrowed to one supplier and one item, over the stock
    history stored in the database.

Architecture position:
    Services -- orchestration over engines + kernel.
    Composes StockEventSelector (the SQL Event Source) with
    EventReplayEngine, configured through inventory_config.

Invariants enforced:
    - Read-only: the session is never flushed or committed here.
    - One fresh engine invocation per call; no summary is cached.

Failure modes:
    - ValidationError subclasses for a bad window, before any query runs.
    - ComputationFailedError when a stored row cannot be normalized.
    - SQLAlchemy errors from the single read propagate unchanged.

Audit relevance:
    Every call is logged with its window, scope and result totals under
    a fresh correlation id, alongside the config checksum in force.

Usage:
    from inventory_services.financial_summary_service import FinancialSummaryService

    with session_scope() as session:
        service = FinancialSummaryService(session)
        summary = service.compute_financial_summary_wac(
            date(2024, 2, 1), date(2024, 2, 29), scope="SUP-1",
        )
"""

from __future__ import annotations

from datetime import date
from uuid import uuid4

from sqlalchemy.orm import Session

from inventory_config import get_active_config
from inventory_config.bridges import build_wac_policy
from inventory_config.schema import InventoryValuationConfig
from inventory_engines.valuation import EventReplayEngine
from inventory_kernel.domain.summary import FinancialSummary
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.selectors.stock_event_selector import StockEventSelector

logger = get_logger("services.financial_summary")


class FinancialSummaryService:
    """
    WAC financial summaries over the stored stock history.

    Contract:
        Receives the Session and (optionally) a validated configuration via
        constructor injection; without one, ``get_active_config()`` is used.
    """

    def __init__(self, session: Session, config: InventoryValuationConfig | None = None):
        self.session = session
        self.config = config if config is not None else get_active_config()
        self._replay_engine = EventReplayEngine(
            StockEventSelector(session),
            policy=build_wac_policy(self.config),
        )

    def compute_financial_summary_wac(
        self,
        start_date: date | str | None,
        end_date: date | str | None,
        scope: str | None = None,
        item_id: str | None = None,
    ) -> FinancialSummary:
        """
        Opening, purchases, COGS, returns-in, write-offs and ending for the
        inclusive window ``[start_date, end_date]``.  ``scope`` is a supplier
        id; None or blank means all suppliers.
        """
        with LogContext.bind(correlation_id=str(uuid4())):
            summary = self._replay_engine.compute_summary(
                scope=scope, start=start_date, end=end_date, item_id=item_id,
            )
            logger.info(
                "financial_summary_computed",
                extra={
                    "from_date": summary.from_date,
                    "to_date": summary.to_date,
                    "scope": scope,
                    "item_id": item_id,
                    "config_checksum": self.config.checksum,
                    "purchases_qty": summary.purchases_qty,
                    "cogs_qty": summary.cogs_qty,
                    "ending_qty": summary.ending_qty,
                    "ending_value": summary.ending_value,
                },
            )
        return summary
