"""
inventory_engines.valuation.buckets -- Cross-entity bucket accumulation.

Responsibility:
    Sum the classified effects of in-window events into purchase, COGS,
    return-in and write-off totals, and assemble the final
    FinancialSummary together with the opening and ending snapshots.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    One BucketAggregator per replay invocation.

Invariants enforced:
    - No rounding before to_summary(): totals keep the full precision the
      cost layers produced; rounding to output places happens exactly once,
      at the summary boundary.
    - Opening and ending are sums of layer snapshots (quantity x unit cost),
      not sums of effects.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal, localcontext

from inventory_kernel.domain.events import ClassifiedEffect, LayerSnapshot
from inventory_kernel.domain.policy import DEFAULT_WAC_POLICY, WacPolicy
from inventory_kernel.domain.reasons import CostBucket
from inventory_kernel.domain.summary import WAC_METHOD, FinancialSummary
from inventory_kernel.domain.window import NormalizedWindow
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.valuation.buckets")

FLOW_BUCKETS: tuple[CostBucket, ...] = (
    CostBucket.PURCHASE,
    CostBucket.RETURN_IN,
    CostBucket.COGS,
    CostBucket.WRITE_OFF,
)


class BucketAggregator:
    """Accumulates per-bucket (quantity, value) totals across entities."""

    def __init__(self, policy: WacPolicy = DEFAULT_WAC_POLICY):
        self.policy = policy
        self._quantities: dict[CostBucket, int] = {b: 0 for b in FLOW_BUCKETS}
        self._values: dict[CostBucket, Decimal] = {b: Decimal(0) for b in FLOW_BUCKETS}
        self.absorbed = 0

    def absorb(self, entity_id: str, bucket: CostBucket, qty: int, value: Decimal) -> None:
        if bucket is CostBucket.NONE:
            return
        with localcontext(self.policy.decimal_context()):
            self._quantities[bucket] += qty
            self._values[bucket] += value
        self.absorbed += 1
        logger.debug(
            "bucket_absorbed",
            extra={"entity_id": entity_id, "bucket": bucket.value, "qty": qty, "value": value},
        )

    def absorb_effect(self, entity_id: str, effect: ClassifiedEffect) -> None:
        self.absorb(entity_id, effect.bucket, effect.quantity, effect.value)

    def total(self, bucket: CostBucket) -> tuple[int, Decimal]:
        """Unrounded running total for one bucket."""
        return self._quantities[bucket], self._values[bucket]

    def to_summary(
        self,
        opening_snapshots: Iterable[LayerSnapshot],
        ending_snapshots: Iterable[LayerSnapshot],
        window: NormalizedWindow,
        clamped_qty: int = 0,
    ) -> FinancialSummary:
        opening_qty, opening_value = self._sum_snapshots(opening_snapshots)
        ending_qty, ending_value = self._sum_snapshots(ending_snapshots)
        r = self.policy.round_output

        summary = FinancialSummary(
            method=WAC_METHOD,
            from_date=window.start_date.isoformat(),
            to_date=window.end_date.isoformat(),
            opening_qty=opening_qty,
            opening_value=r(opening_value),
            purchases_qty=self._quantities[CostBucket.PURCHASE],
            purchases_cost=r(self._values[CostBucket.PURCHASE]),
            cogs_qty=self._quantities[CostBucket.COGS],
            cogs_cost=r(self._values[CostBucket.COGS]),
            returns_in_qty=self._quantities[CostBucket.RETURN_IN],
            returns_in_cost=r(self._values[CostBucket.RETURN_IN]),
            write_off_qty=self._quantities[CostBucket.WRITE_OFF],
            write_off_cost=r(self._values[CostBucket.WRITE_OFF]),
            ending_qty=ending_qty,
            ending_value=r(ending_value),
            clamped_qty=clamped_qty,
        )
        if not summary.is_balanced:
            logger.error("summary_unbalanced", extra={"summary": summary.to_dict()})
        return summary

    def _sum_snapshots(self, snapshots: Iterable[LayerSnapshot]) -> tuple[int, Decimal]:
        qty = 0
        value = Decimal(0)
        with localcontext(self.policy.decimal_context()):
            for snap in snapshots:
                qty += snap.quantity
                value += snap.value
        return qty, value
