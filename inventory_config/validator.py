"""
Configuration validation.

Checks a parsed InventoryValuationConfig against the rules the engine
relies on, collecting every problem rather than stopping at the first.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass, field

from inventory_config.schema import InventoryValuationConfig
from inventory_kernel.domain.policy import MIN_UNIT_COST_PLACES, ROUNDING_MODES
from inventory_kernel.domain.reasons import StockChangeReason

SUPPORTED_METHODS = frozenset({"WAC"})

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_configuration(config: InventoryValuationConfig) -> ValidationResult:
    result = ValidationResult()
    errors = result.errors

    valuation = config.valuation
    if valuation.method not in SUPPORTED_METHODS:
        errors.append(f"Unsupported valuation method: {valuation.method}")
    if valuation.unit_cost_places < MIN_UNIT_COST_PLACES:
        errors.append(
            f"unit_cost_places must be >= {MIN_UNIT_COST_PLACES}, "
            f"got {valuation.unit_cost_places}"
        )
    if valuation.output_places < 0:
        errors.append(f"output_places must be >= 0, got {valuation.output_places}")
    if getattr(decimal, valuation.rounding, None) not in ROUNDING_MODES:
        errors.append(f"Unknown rounding mode: {valuation.rounding}")
    if valuation.decimal_precision < valuation.unit_cost_places + 10:
        errors.append(
            f"decimal_precision {valuation.decimal_precision} too small for "
            f"{valuation.unit_cost_places} unit cost places"
        )

    known = {r.value for r in StockChangeReason}
    sets = {
        "sale": set(config.reasons.sale),
        "write_off": set(config.reasons.write_off),
        "return_to_supplier": set(config.reasons.return_to_supplier),
    }
    for name, tags in sets.items():
        for tag in sorted(tags - known):
            errors.append(f"Unknown reason '{tag}' in reasons.{name}")
    names = sorted(sets)
    for i, a in enumerate(names):
        for b in names[i + 1:]:
            for tag in sorted(sets[a] & sets[b]):
                errors.append(f"Reason '{tag}' appears in both reasons.{a} and reasons.{b}")

    if config.logging.level not in _LOG_LEVELS:
        errors.append(f"Unknown log level: {config.logging.level}")

    return result
