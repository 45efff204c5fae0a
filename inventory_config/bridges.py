"""
Config -> Kernel Bridges.

Functions that convert a validated InventoryValuationConfig into
kernel-compatible inputs.  These live in inventory_config because the
kernel and the engines must never import inventory_config.

Usage:
    from inventory_config.bridges import build_wac_policy

    config = get_active_config()
    engine = EventReplayEngine(source, policy=build_wac_policy(config))
"""

from __future__ import annotations

import decimal

from inventory_config.schema import InventoryValuationConfig
from inventory_kernel.domain.policy import WacPolicy
from inventory_kernel.domain.reasons import StockChangeReason


def _reasons(tags: tuple[str, ...]) -> frozenset[StockChangeReason]:
    return frozenset(StockChangeReason(tag) for tag in tags)


def build_wac_policy(config: InventoryValuationConfig) -> WacPolicy:
    """Build the WacPolicy the replay engine runs under."""
    valuation = config.valuation
    return WacPolicy(
        unit_cost_places=valuation.unit_cost_places,
        output_places=valuation.output_places,
        rounding=getattr(decimal, valuation.rounding),
        decimal_precision=valuation.decimal_precision,
        sale_reasons=_reasons(config.reasons.sale),
        write_off_reasons=_reasons(config.reasons.write_off),
        return_to_supplier_reasons=_reasons(config.reasons.return_to_supplier),
    )
