"""
inventory_engines.valuation.replay -- Two-phase WAC replay over the event log.

Responsibility:
    Drive one WAC valuation: validate the window, read the event stream
    for the scope up to the window end, normalize it, and replay it per
    entity through a fresh CostLayerTracker.  Events before the window
    start only build opening state; events inside the window also feed
    the bucket totals.  Returns the assembled FinancialSummary.

Architecture position:
    Engines -- pure calculation layer.  The single read from the injected
    EventSource is the only I/O; everything else is in-memory and owned
    by this invocation.

Invariants enforced:
    - Replay order is (timestamp, arrival sequence); an out-of-order
      stream is re-sorted, never trusted.
    - Trackers are keyed by entity id and created fresh per invocation,
      so concurrent invocations share no mutable state.
    - Opening is the tracker snapshot at the instant before the window
      start; ending is the tracker snapshot after the last event.

Failure modes:
    - ValidationError subclasses from the WindowValidator propagate
      unchanged, before the event source is read.
    - Any DataFormatError raised while normalizing a row is logged with
      the raw value and re-raised as ComputationFailedError carrying the
      row's identifying fields.  Replay is not resumed past a bad row.
    - Running totals that outgrow the decimal context (each value valid on
      its own) are reported the same way, as a VALUE_OUT_OF_RANGE cause
      on the event being applied, or on the last event when the overflow
      surfaces while rounding the summary.
    - Errors from the event source itself propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import DecimalException
from typing import Any

from inventory_engines.normalizer import NumericNormalizer
from inventory_engines.tracer import traced_engine
from inventory_engines.valuation.buckets import BucketAggregator
from inventory_engines.valuation.cost_layer import CostLayerTracker
from inventory_engines.window import WindowValidator
from inventory_kernel.domain.events import EventSource, LayerSnapshot, StockEvent
from inventory_kernel.domain.policy import DEFAULT_WAC_POLICY, WacPolicy
from inventory_kernel.domain.summary import FinancialSummary
from inventory_kernel.domain.window import NormalizedWindow
from inventory_kernel.exceptions import (
    ComputationFailedError,
    DataFormatError,
    ValueOutOfRangeError,
)
from inventory_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.valuation.replay")

ENGINE_NAME = "wac_replay"
ENGINE_VERSION = "1.0"


class EventReplayEngine:
    """
    Weighted-average-cost replay over an EventSource.

    Contract:
        Receives the EventSource and the WacPolicy via constructor
        injection.  ``compute_summary`` performs exactly one read from the
        source and holds no state between calls.
    Guarantees:
        - Identical inputs over an unchanged event log give identical
          summaries.
        - ending_qty == opening_qty + purchases_qty + returns_in_qty
          - cogs_qty - write_off_qty.
    Non-goals:
        - No retries, timeouts or cancellation; a failed read or a bad row
          aborts this invocation only.
    """

    def __init__(
        self,
        event_source: EventSource,
        policy: WacPolicy = DEFAULT_WAC_POLICY,
        normalizer: NumericNormalizer | None = None,
        validator: WindowValidator | None = None,
    ):
        self.event_source = event_source
        self.policy = policy
        self.normalizer = normalizer or NumericNormalizer()
        self.validator = validator or WindowValidator()

    @traced_engine(
        ENGINE_NAME,
        ENGINE_VERSION,
        fingerprint_fields=("scope", "start", "end", "item_id"),
    )
    def compute_summary(
        self,
        *,
        scope: str | None,
        start: date | str | None,
        end: date | str | None,
        item_id: str | None = None,
    ) -> FinancialSummary:
        window = self.validator.validate(start, end, scope, item_id)

        with LogContext.bind(scope_id=window.scope_label):
            logger.info(
                "wac_replay_started",
                extra={
                    "start": window.start_date,
                    "end": window.end_date,
                    "item_id": window.item_id,
                },
            )
            rows = self.event_source.stream_events(window.scope, window.end, window.item_id)
            events = self._normalize(rows, window)
            summary, entity_count = self._replay(events, window)

            logger.info(
                "wac_replay_completed",
                extra={
                    "event_count": len(events),
                    "entity_count": entity_count,
                    "ending_qty": summary.ending_qty,
                    "ending_value": summary.ending_value,
                    "clamped_qty": summary.clamped_qty,
                },
            )
        return summary

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _normalize(self, rows: Iterable[Any], window: NormalizedWindow) -> list[StockEvent]:
        events: list[StockEvent] = []
        beyond_window = 0
        for sequence, row in enumerate(rows):
            try:
                event = self.normalizer.to_stock_event(row, sequence)
            except DataFormatError as exc:
                raise self._computation_failed(exc, row, sequence) from exc
            if event.timestamp > window.end:
                beyond_window += 1
                continue
            events.append(event)

        if beyond_window:
            logger.warning(
                "events_after_window_end_ignored",
                extra={"count": beyond_window, "end": window.end},
            )

        if any(a.sort_key > b.sort_key for a, b in zip(events, events[1:])):
            logger.info("event_stream_resorted", extra={"event_count": len(events)})
            events.sort(key=lambda e: e.sort_key)
        return events

    def _computation_failed(
        self, exc: DataFormatError, row: Any, sequence: int
    ) -> ComputationFailedError:
        try:
            fields = self.normalizer.row_fields(row)
        except DataFormatError:
            fields = {}
        error = ComputationFailedError(
            exc,
            sequence=sequence,
            entity_id=fields.get("item_id"),
            scope_id=fields.get("supplier_id"),
            timestamp=fields.get("created_at"),
            reason=fields.get("reason"),
        )
        logger.error(
            "wac_event_malformed",
            extra={
                "error_code": exc.code,
                "field": exc.field,
                "raw_value": repr(exc.raw_value),
                "sequence": sequence,
                "entity_id": error.entity_id,
            },
        )
        return error

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    def _replay(
        self, events: list[StockEvent], window: NormalizedWindow
    ) -> tuple[FinancialSummary, int]:
        groups: dict[str, list[StockEvent]] = {}
        for event in events:
            groups.setdefault(event.entity_id, []).append(event)

        aggregator = BucketAggregator(self.policy)
        openings: list[LayerSnapshot] = []
        endings: list[LayerSnapshot] = []
        clamped = 0
        current: StockEvent | None = None

        try:
            for entity_id in sorted(groups):
                tracker = CostLayerTracker(entity_id, self.policy)
                opening: LayerSnapshot | None = None
                with LogContext.bind(entity_id=entity_id):
                    for current in groups[entity_id]:
                        if opening is None and not window.is_before(current.timestamp):
                            opening = tracker.snapshot()
                        effect = tracker.apply(current)
                        if opening is not None:
                            aggregator.absorb_effect(entity_id, effect)

                openings.append(opening if opening is not None else tracker.snapshot())
                endings.append(tracker.snapshot())
                clamped += tracker.clamped_quantity

            summary = aggregator.to_summary(openings, endings, window, clamped_qty=clamped)
        except DecimalException as exc:
            if current is None:
                raise
            cause = self._out_of_range(exc, current)
            raise self._arithmetic_failed(cause, current) from cause
        return summary, len(groups)

    def _out_of_range(self, exc: DecimalException, event: StockEvent) -> ValueOutOfRangeError:
        if event.unit_cost is not None:
            field, raw = "price_at_change", event.unit_cost
        else:
            field, raw = "quantity_change", event.quantity_delta
        cause = ValueOutOfRangeError(
            field, raw, limit=f"decimal precision {self.policy.decimal_precision}"
        )
        cause.__cause__ = exc
        return cause

    def _arithmetic_failed(
        self, cause: ValueOutOfRangeError, event: StockEvent
    ) -> ComputationFailedError:
        error = ComputationFailedError(
            cause,
            sequence=event.sequence,
            entity_id=event.entity_id,
            scope_id=event.scope_id,
            timestamp=event.timestamp,
            reason=event.reason.value,
        )
        logger.error(
            "wac_value_out_of_range",
            extra={
                "error_code": cause.code,
                "field": cause.field,
                "raw_value": repr(cause.raw_value),
                "sequence": event.sequence,
                "entity_id": event.entity_id,
            },
        )
        return error
