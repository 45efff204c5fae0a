"""
Policy -- Numeric and classification parameters for a WAC replay.

Responsibility:
    Carries every tunable the valuation engine reads: decimal precision,
    rounding places and mode, and which outbound reasons count as sales,
    write-offs or returns to supplier.  Engines receive a WacPolicy as a
    parameter and never read configuration themselves.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Built from YAML by inventory_config.bridges.

Invariants enforced:
    - unit_cost_places >= 6 so blended unit costs do not drift across many
      layers.
    - The three outbound reason sets are pairwise disjoint.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import Decimal

from inventory_kernel.domain.reasons import (
    DEFAULT_RETURN_TO_SUPPLIER_REASONS,
    DEFAULT_SALE_REASONS,
    DEFAULT_WRITE_OFF_REASONS,
    CostBucket,
    StockChangeReason,
)

MIN_UNIT_COST_PLACES = 6

ROUNDING_MODES: frozenset[str] = frozenset({
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_UP,
    decimal.ROUND_DOWN,
    decimal.ROUND_CEILING,
    decimal.ROUND_FLOOR,
    decimal.ROUND_05UP,
})


@dataclass(frozen=True, slots=True)
class WacPolicy:
    unit_cost_places: int = MIN_UNIT_COST_PLACES
    output_places: int = 2
    rounding: str = decimal.ROUND_HALF_UP
    decimal_precision: int = 38
    sale_reasons: frozenset[StockChangeReason] = DEFAULT_SALE_REASONS
    write_off_reasons: frozenset[StockChangeReason] = DEFAULT_WRITE_OFF_REASONS
    return_to_supplier_reasons: frozenset[StockChangeReason] = DEFAULT_RETURN_TO_SUPPLIER_REASONS

    def __post_init__(self) -> None:
        if self.unit_cost_places < MIN_UNIT_COST_PLACES:
            raise ValueError(
                f"unit_cost_places must be at least {MIN_UNIT_COST_PLACES}, "
                f"got {self.unit_cost_places}"
            )
        if self.output_places < 0:
            raise ValueError(f"output_places cannot be negative, got {self.output_places}")
        if self.rounding not in ROUNDING_MODES:
            raise ValueError(f"Unknown rounding mode: {self.rounding}")
        if self.decimal_precision < self.unit_cost_places + 10:
            raise ValueError(
                f"decimal_precision {self.decimal_precision} too small for "
                f"{self.unit_cost_places} unit cost places"
            )
        overlap = (
            (self.sale_reasons & self.write_off_reasons)
            | (self.sale_reasons & self.return_to_supplier_reasons)
            | (self.write_off_reasons & self.return_to_supplier_reasons)
        )
        if overlap:
            raise ValueError(
                "Outbound reason sets overlap: "
                + ", ".join(sorted(r.value for r in overlap))
            )

    @property
    def unit_cost_quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.unit_cost_places)

    @property
    def output_quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.output_places)

    def decimal_context(self) -> decimal.Context:
        return decimal.Context(prec=self.decimal_precision, rounding=self.rounding)

    def outbound_bucket(self, reason: StockChangeReason) -> CostBucket:
        """Bucket for an outbound event; unlisted reasons default to COGS."""
        if reason in self.return_to_supplier_reasons:
            return CostBucket.PURCHASE
        if reason in self.write_off_reasons:
            return CostBucket.WRITE_OFF
        return CostBucket.COGS

    def round_output(self, value: Decimal) -> Decimal:
        """Round to the output places; a zero result is always positive zero."""
        rounded = value.quantize(
            self.output_quantum, rounding=self.rounding, context=self.decimal_context()
        )
        if rounded.is_zero():
            return Decimal(0).quantize(self.output_quantum)
        return rounded


DEFAULT_WAC_POLICY = WacPolicy()
