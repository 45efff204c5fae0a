"""
inventory_engines.valuation.cost_layer -- Weighted-average cost layer per entity.

Responsibility:
    Track, for one inventory entity, the running quantity and running
    weighted-average unit cost, apply stock events one at a time, and
    report the classified monetary effect of each.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    One CostLayerTracker per entity per replay; created at zero, discarded
    when the replay returns.  Never shared, pooled or persisted.

Invariants enforced:
    - running_quantity never goes negative: outbound events larger than the
      running quantity are clamped to it and the excess is dropped.
    - running_unit_cost is only changed by cost-establishing inbound events
      and is held at unit_cost_places (>= 6) decimal places.
    - Outbound events are valued at the unit cost *before* the decrement.

Failure modes:
    - ValueError if an event for a different entity is applied.

Audit relevance:
    Every clamped over-issue is logged (over_issue_clamped) with the
    requested, applied and dropped quantities and counted on the tracker,
    so silent truncation still leaves a trail.
"""

from __future__ import annotations

from decimal import Decimal, localcontext

from inventory_kernel.domain.events import ClassifiedEffect, LayerSnapshot, StockEvent
from inventory_kernel.domain.policy import DEFAULT_WAC_POLICY, WacPolicy
from inventory_kernel.domain.reasons import CostBucket
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.valuation.cost_layer")


class CostLayerTracker:
    """
    Running (quantity, weighted-average unit cost) for one entity.

    Classification:
        qty > 0, cost present  -> PURCHASE at the supplied cost; WAC re-blended
        qty > 0, cost absent   -> RETURN_IN at the current WAC; WAC unchanged
        qty < 0, sale          -> COGS at the current WAC
        qty < 0, write-off     -> WRITE_OFF at the current WAC
        qty < 0, to supplier   -> PURCHASE, negative quantity and value
        qty < 0, other reason  -> COGS
        qty == 0               -> NONE
    """

    def __init__(self, entity_id: str, policy: WacPolicy = DEFAULT_WAC_POLICY):
        self.entity_id = entity_id
        self.policy = policy
        self.running_quantity = 0
        self.running_unit_cost = Decimal(0)
        self.clamped_quantity = 0

    def apply(self, event: StockEvent) -> ClassifiedEffect:
        if event.entity_id != self.entity_id:
            raise ValueError(
                f"Event for entity {event.entity_id} applied to tracker for {self.entity_id}"
            )
        with localcontext(self.policy.decimal_context()):
            if event.is_inbound:
                if event.unit_cost is not None:
                    return self._purchase(event.quantity_delta, event.unit_cost)
                return self._return_in(event.quantity_delta)
            if event.is_outbound:
                return self._issue(event)
        return ClassifiedEffect.none()

    def snapshot(self) -> LayerSnapshot:
        return LayerSnapshot(
            entity_id=self.entity_id,
            quantity=self.running_quantity,
            unit_cost=self.running_unit_cost,
        )

    @property
    def running_value(self) -> Decimal:
        return self.running_unit_cost * self.running_quantity

    # ------------------------------------------------------------------

    def _purchase(self, quantity: int, unit_cost: Decimal) -> ClassifiedEffect:
        value_in = unit_cost * quantity
        new_quantity = self.running_quantity + quantity
        if new_quantity == 0:
            self.running_unit_cost = Decimal(0)
        else:
            blended = (self.running_value + value_in) / new_quantity
            self.running_unit_cost = blended.quantize(
                self.policy.unit_cost_quantum, rounding=self.policy.rounding
            )
        self.running_quantity = new_quantity
        return ClassifiedEffect(
            bucket=CostBucket.PURCHASE,
            quantity=quantity,
            value=value_in,
            requested=quantity,
        )

    def _return_in(self, quantity: int) -> ClassifiedEffect:
        value_in = self.running_unit_cost * quantity
        self.running_quantity += quantity
        return ClassifiedEffect(
            bucket=CostBucket.RETURN_IN,
            quantity=quantity,
            value=value_in,
            requested=quantity,
        )

    def _issue(self, event: StockEvent) -> ClassifiedEffect:
        requested = -event.quantity_delta
        applied = min(requested, self.running_quantity)
        dropped = requested - applied
        if dropped:
            self.clamped_quantity += dropped
            logger.warning(
                "over_issue_clamped",
                extra={
                    "entity_id": self.entity_id,
                    "sequence": event.sequence,
                    "timestamp": event.timestamp,
                    "reason": event.reason.value,
                    "requested_qty": requested,
                    "applied_qty": applied,
                    "dropped_qty": dropped,
                },
            )

        value_out = self.running_unit_cost * applied
        self.running_quantity -= applied

        bucket = self.policy.outbound_bucket(event.reason)
        if bucket is CostBucket.PURCHASE:
            # Return to supplier reverses an earlier purchase
            return ClassifiedEffect(
                bucket=bucket,
                quantity=-applied,
                value=-value_out,
                requested=requested,
                clamped=dropped,
            )
        if bucket is CostBucket.COGS and event.reason not in self.policy.sale_reasons:
            logger.debug(
                "outbound_reason_charged_to_cogs",
                extra={"entity_id": self.entity_id, "reason": event.reason.value},
            )
        return ClassifiedEffect(
            bucket=bucket,
            quantity=applied,
            value=value_out,
            requested=requested,
            clamped=dropped,
        )
