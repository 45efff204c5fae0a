"""
Inventory valuation configuration schema.

Frozen dataclasses the loader parses YAML into.  Values are kept in
their declared form (reason tags as strings, rounding as the decimal
module constant name); bridges.py turns them into kernel types.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Valuation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValuationConfig:
    """Numeric settings for the cost-layer replay."""

    method: str = "WAC"
    unit_cost_places: int = 6
    output_places: int = 2
    rounding: str = "ROUND_HALF_UP"
    decimal_precision: int = 38


@dataclass(frozen=True)
class ReasonCatalogConfig:
    """Which outbound reason tags land in which cost bucket."""

    sale: tuple[str, ...] = ("SOLD",)
    write_off: tuple[str, ...] = ("DAMAGED", "DESTROYED", "SCRAPPED", "EXPIRED", "LOST")
    return_to_supplier: tuple[str, ...] = ("RETURNED_TO_SUPPLIER",)


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///:memory:"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InventoryValuationConfig:
    """The complete, validated configuration returned by get_active_config()."""

    config_id: str
    version: int
    valuation: ValuationConfig
    reasons: ReasonCatalogConfig
    database: DatabaseConfig
    logging: LoggingConfig
    checksum: str = ""
