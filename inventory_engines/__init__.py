"""
Module: inventory_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    valuation engines.  This is the canonical import surface for
    inventory_services.

Architecture position:
    Engines -- pure calculation layer.
    May only import inventory_kernel.  MUST NOT import inventory_services
    or inventory_config.

Invariants enforced:
    - Purity: engines never read the clock, configuration or environment.
      Numeric and classification settings arrive as a WacPolicy.
    - Decimal-only arithmetic: floats never reach valuation arithmetic.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from inventory_engines import EventReplayEngine

    engine = EventReplayEngine(event_source)
    summary = engine.compute_summary(scope="SUP-1", start=start, end=end)
"""

from inventory_engines.normalizer import NumericNormalizer
from inventory_engines.tracer import compute_input_fingerprint, traced_engine
from inventory_engines.valuation import (
    BucketAggregator,
    CostLayerTracker,
    EventReplayEngine,
)
from inventory_engines.window import WindowValidator

__all__ = [
    "BucketAggregator",
    "CostLayerTracker",
    "EventReplayEngine",
    "NumericNormalizer",
    "WindowValidator",
    "compute_input_fingerprint",
    "traced_engine",
]
