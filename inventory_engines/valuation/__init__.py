"""
Valuation - Weighted-average-cost replay.

CostLayerTracker keeps one entity's running (quantity, unit cost);
BucketAggregator sums classified effects across entities;
EventReplayEngine drives both over an EventSource.
"""

from inventory_engines.valuation.buckets import FLOW_BUCKETS, BucketAggregator
from inventory_engines.valuation.cost_layer import CostLayerTracker
from inventory_engines.valuation.replay import ENGINE_NAME, ENGINE_VERSION, EventReplayEngine

__all__ = [
    "BucketAggregator",
    "CostLayerTracker",
    "ENGINE_NAME",
    "ENGINE_VERSION",
    "EventReplayEngine",
    "FLOW_BUCKETS",
]
