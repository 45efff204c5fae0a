"""
Pytest fixtures for the inventory valuation test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- ``captured_logs`` for asserting on emitted JSON log records
- An in-memory SQLite database with the stock_history table
- ``InMemoryEventSource`` and ``row`` helpers for pure engine tests
"""

import json
import logging
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from io import StringIO
from typing import Any, Generator

import pytest
from sqlalchemy.orm import Session

from inventory_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from inventory_kernel.domain.window import Scope, is_unscoped
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from inventory_kernel.models.stock_event import StockEventModel


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, handler=logging.NullHandler())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture inventory_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            engine.compute_summary(...)
            logs = captured_logs()
            assert any(r["message"] == "wac_replay_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("inventory_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Event source helpers
# =============================================================================


def row(
    item_id: Any,
    created_at: Any,
    quantity_change: Any,
    reason: Any,
    price_at_change: Any = None,
    supplier_id: Any = "SUP-1",
) -> dict[str, Any]:
    """Build one raw event row the way a loosely-typed source returns it."""
    return {
        "item_id": item_id,
        "supplier_id": supplier_id,
        "created_at": created_at,
        "quantity_change": quantity_change,
        "price_at_change": price_at_change,
        "reason": reason,
    }


class InMemoryEventSource:
    """EventSource over a list of raw rows; records every call it receives."""

    def __init__(self, rows: Iterable[Any] = ()):
        self.rows = list(rows)
        self.calls: list[tuple[Scope, datetime, str | None]] = []

    def stream_events(
        self,
        scope: Scope,
        upper_bound: datetime,
        item_id: str | None = None,
    ) -> list[Any]:
        self.calls.append((scope, upper_bound, item_id))
        selected = []
        for r in self.rows:
            if not is_unscoped(scope):
                supplier = r.get("supplier_id") if isinstance(r, dict) else None
                if supplier is None or str(supplier).strip().lower() != scope.strip().lower():
                    continue
            if item_id is not None and isinstance(r, dict) and r.get("item_id") != item_id:
                continue
            selected.append(r)
        return selected


@pytest.fixture
def event_source() -> InMemoryEventSource:
    return InMemoryEventSource()


# =============================================================================
# Database fixtures (in-memory SQLite)
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database with all tables created."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    s = get_session()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def add_stock_event(session):
    """
    Insert a stock_history row; arrival sequence is assigned automatically.

    Usage::

        add_stock_event("ITEM-1", datetime(2024, 2, 1, 9), 10, "INITIAL_STOCK", "5.00")
    """
    counter = {"next": 0}

    def _add(
        item_id: str,
        created_at: datetime,
        quantity_change: int,
        reason: str,
        price_at_change: str | Decimal | None = None,
        supplier_id: str | None = "SUP-1",
    ) -> StockEventModel:
        counter["next"] += 1
        model = StockEventModel(
            item_id=item_id,
            supplier_id=supplier_id,
            created_at=created_at,
            quantity_change=quantity_change,
            reason=reason,
            price_at_change=Decimal(price_at_change) if price_at_change is not None else None,
            created_by="test",
            sequence=counter["next"],
        )
        session.add(model)
        session.flush()
        return model

    return _add


# =============================================================================
# Common dates
# =============================================================================

JAN_31 = date(2024, 1, 31)
FEB_1 = date(2024, 2, 1)
FEB_2 = date(2024, 2, 2)
FEB_29 = date(2024, 2, 29)
