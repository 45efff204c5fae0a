"""
Tests for CostLayerTracker - per-entity weighted-average cost layer.

Tests cover:
- Purchase re-blending of the running unit cost
- Customer returns at the current running cost
- COGS, write-off and return-to-supplier classification
- Clamping of over-issues
- Zero-quantity rows
"""

from datetime import datetime
from decimal import Decimal

import pytest

from inventory_engines.valuation.cost_layer import CostLayerTracker
from inventory_kernel.domain.events import StockEvent
from inventory_kernel.domain.policy import WacPolicy
from inventory_kernel.domain.reasons import CostBucket, StockChangeReason as R


def _event(qty, reason, cost=None, seq=0, entity="ITEM-1"):
    return StockEvent(
        entity_id=entity,
        scope_id="SUP-1",
        timestamp=datetime(2024, 2, 1, 9, 0, seq),
        quantity_delta=qty,
        unit_cost=Decimal(cost) if cost is not None else None,
        reason=reason,
        sequence=seq,
    )


@pytest.fixture
def tracker():
    return CostLayerTracker("ITEM-1")


class TestPurchase:
    """Inbound events with a cost establish and re-blend the layer."""

    def test_first_purchase_sets_cost(self, tracker):
        effect = tracker.apply(_event(10, R.INITIAL_STOCK, "5.00"))

        assert effect.bucket is CostBucket.PURCHASE
        assert effect.quantity == 10
        assert effect.value == Decimal("50.00")
        assert tracker.running_quantity == 10
        assert tracker.running_unit_cost == Decimal("5.000000")

    def test_second_purchase_blends(self, tracker):
        tracker.apply(_event(5, R.INITIAL_STOCK, "4.00"))
        tracker.apply(_event(5, R.RECEIVED, "6.00", seq=1))

        assert tracker.running_quantity == 10
        assert tracker.running_unit_cost == Decimal("5.000000")

    def test_blended_cost_keeps_six_places(self, tracker):
        tracker.apply(_event(3, R.INITIAL_STOCK, "1.00"))
        tracker.apply(_event(3, R.RECEIVED, "2.00", seq=1))
        tracker.apply(_event(3, R.RECEIVED, "2.00", seq=2))

        # (3*1 + 6*2) / 9 = 1.666666...
        assert tracker.running_unit_cost == Decimal("1.666667")

    def test_purchase_after_depletion_uses_new_cost(self, tracker):
        tracker.apply(_event(5, R.INITIAL_STOCK, "2.00"))
        tracker.apply(_event(-5, R.SOLD, seq=1))
        tracker.apply(_event(4, R.RECEIVED, "3.00", seq=2))

        assert tracker.running_unit_cost == Decimal("3.000000")
        assert tracker.running_value == Decimal("12.000000")


class TestReturnIn:
    def test_customer_return_valued_at_running_cost(self, tracker):
        tracker.apply(_event(10, R.INITIAL_STOCK, "5.00"))
        effect = tracker.apply(_event(2, R.RETURNED_BY_CUSTOMER, seq=1))

        assert effect.bucket is CostBucket.RETURN_IN
        assert effect.quantity == 2
        assert effect.value == Decimal("10.000000")
        assert tracker.running_quantity == 12
        assert tracker.running_unit_cost == Decimal("5.000000")

    def test_return_with_no_history_is_free(self, tracker):
        effect = tracker.apply(_event(2, R.RETURNED_BY_CUSTOMER))
        assert effect.value == 0
        assert tracker.running_quantity == 2

    def test_unit_cost_retained_after_depletion(self, tracker):
        tracker.apply(_event(4, R.INITIAL_STOCK, "2.50"))
        tracker.apply(_event(-4, R.SOLD, seq=1))
        effect = tracker.apply(_event(1, R.RETURNED_BY_CUSTOMER, seq=2))

        assert effect.value == Decimal("2.500000")


class TestOutbound:
    @pytest.mark.parametrize(
        "reason, bucket",
        [
            (R.SOLD, CostBucket.COGS),
            (R.DAMAGED, CostBucket.WRITE_OFF),
            (R.DESTROYED, CostBucket.WRITE_OFF),
            (R.SCRAPPED, CostBucket.WRITE_OFF),
            (R.EXPIRED, CostBucket.WRITE_OFF),
            (R.LOST, CostBucket.WRITE_OFF),
            (R.MANUAL_UPDATE, CostBucket.COGS),
        ],
    )
    def test_outbound_classification(self, tracker, reason, bucket):
        tracker.apply(_event(10, R.INITIAL_STOCK, "5.00"))
        effect = tracker.apply(_event(-3, reason, seq=1))

        assert effect.bucket is bucket
        assert effect.quantity == 3
        assert effect.value == Decimal("15.000000")
        assert tracker.running_quantity == 7
        assert tracker.running_unit_cost == Decimal("5.000000")

    def test_return_to_supplier_is_negative_purchase(self, tracker):
        tracker.apply(_event(10, R.INITIAL_STOCK, "5.00"))
        effect = tracker.apply(_event(-2, R.RETURNED_TO_SUPPLIER, seq=1))

        assert effect.bucket is CostBucket.PURCHASE
        assert effect.quantity == -2
        assert effect.value == Decimal("-10.000000")
        assert tracker.running_quantity == 8

    def test_custom_write_off_set(self):
        policy = WacPolicy(write_off_reasons=frozenset({R.MANUAL_UPDATE}))
        tracker = CostLayerTracker("ITEM-1", policy)
        tracker.apply(_event(10, R.INITIAL_STOCK, "1.00"))

        assert tracker.apply(_event(-1, R.MANUAL_UPDATE, seq=1)).bucket is CostBucket.WRITE_OFF
        assert tracker.apply(_event(-1, R.DAMAGED, seq=2)).bucket is CostBucket.COGS


class TestClamping:
    def test_over_issue_clamped_to_running_quantity(self, tracker):
        tracker.apply(_event(3, R.INITIAL_STOCK, "2.00"))
        effect = tracker.apply(_event(-4, R.SOLD, seq=1))

        assert tracker.running_quantity == 0
        assert effect.quantity == 3
        assert effect.requested == 4
        assert effect.clamped == 1
        assert effect.value == Decimal("6.000000")
        assert tracker.clamped_quantity == 1

    def test_issue_from_empty_layer(self, tracker):
        effect = tracker.apply(_event(-5, R.SOLD))

        assert effect.quantity == 0
        assert effect.value == 0
        assert tracker.running_quantity == 0
        assert tracker.clamped_quantity == 5

    def test_clamp_is_logged(self, tracker, captured_logs):
        tracker.apply(_event(3, R.INITIAL_STOCK, "2.00"))
        tracker.apply(_event(-4, R.SOLD, seq=1))

        records = [r for r in captured_logs() if r["message"] == "over_issue_clamped"]
        assert len(records) == 1
        assert records[0]["level"] == "WARNING"
        assert records[0]["requested_qty"] == 4
        assert records[0]["applied_qty"] == 3
        assert records[0]["dropped_qty"] == 1

    def test_exact_depletion_not_clamped(self, tracker):
        tracker.apply(_event(5, R.INITIAL_STOCK, "2.00"))
        tracker.apply(_event(-5, R.SOLD, seq=1))

        assert tracker.running_quantity == 0
        assert tracker.clamped_quantity == 0


class TestMisc:
    def test_zero_delta_is_noop(self, tracker):
        tracker.apply(_event(5, R.INITIAL_STOCK, "2.00"))
        effect = tracker.apply(_event(0, R.PRICE_CHANGE, "9.00", seq=1))

        assert effect.bucket is CostBucket.NONE
        assert tracker.running_quantity == 5
        assert tracker.running_unit_cost == Decimal("2.000000")

    def test_wrong_entity_rejected(self, tracker):
        with pytest.raises(ValueError):
            tracker.apply(_event(1, R.INITIAL_STOCK, "1.00", entity="ITEM-2"))

    def test_snapshot(self, tracker):
        tracker.apply(_event(4, R.INITIAL_STOCK, "2.50"))
        snap = tracker.snapshot()

        assert snap.entity_id == "ITEM-1"
        assert snap.quantity == 4
        assert snap.value == Decimal("10.000000")

    def test_inbound_with_zero_cost_is_purchase(self, tracker):
        tracker.apply(_event(4, R.INITIAL_STOCK, "2.00"))
        effect = tracker.apply(_event(4, R.RECEIVED, "0"))

        assert effect.bucket is CostBucket.PURCHASE
        assert tracker.running_unit_cost == Decimal("1.000000")

    @pytest.mark.parametrize(
        "qty, inbound, outbound",
        [(3, True, False), (-3, False, True), (0, False, False)],
    )
    def test_event_direction(self, qty, inbound, outbound):
        event = _event(qty, R.MANUAL_UPDATE)
        assert event.is_inbound is inbound
        assert event.is_outbound is outbound
