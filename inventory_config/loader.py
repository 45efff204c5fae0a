"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads the valuation YAML file and parses it into typed
``inventory_config.schema`` dataclass instances.  Runtime callers go
through ``inventory_config.get_active_config()`` instead.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Absent sections fall back to the schema defaults; present sections
  must be mappings.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrongly-typed section or value  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    DatabaseConfig,
    InventoryValuationConfig,
    LoggingConfig,
    ReasonCatalogConfig,
    ValuationConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    return data


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Configuration section '{key}' must be a mapping")
    return value


def _int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer, got {value!r}")
    return value


def _tags(data: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list of reason tags, got {value!r}")
    return tuple(str(tag).strip().upper() for tag in value)


def parse_valuation(data: dict[str, Any]) -> ValuationConfig:
    """Parse a ValuationConfig from a dict."""
    defaults = ValuationConfig()
    return ValuationConfig(
        method=str(data.get("method", defaults.method)).strip().upper(),
        unit_cost_places=_int(data, "unit_cost_places", defaults.unit_cost_places),
        output_places=_int(data, "output_places", defaults.output_places),
        rounding=str(data.get("rounding", defaults.rounding)).strip().upper(),
        decimal_precision=_int(data, "decimal_precision", defaults.decimal_precision),
    )


def parse_reasons(data: dict[str, Any]) -> ReasonCatalogConfig:
    """Parse a ReasonCatalogConfig from a dict."""
    defaults = ReasonCatalogConfig()
    return ReasonCatalogConfig(
        sale=_tags(data, "sale", defaults.sale),
        write_off=_tags(data, "write_off", defaults.write_off),
        return_to_supplier=_tags(data, "return_to_supplier", defaults.return_to_supplier),
    )


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    defaults = DatabaseConfig()
    return DatabaseConfig(
        url=str(data.get("url", defaults.url)),
        echo=bool(data.get("echo", defaults.echo)),
        pool_size=_int(data, "pool_size", defaults.pool_size),
        max_overflow=_int(data, "max_overflow", defaults.max_overflow),
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    return LoggingConfig(level=str(data.get("level", LoggingConfig().level)).strip().upper())


def parse_config(data: dict[str, Any]) -> InventoryValuationConfig:
    """Parse the whole document, stamping it with its checksum."""
    return InventoryValuationConfig(
        config_id=str(data.get("config_id", "inventory-valuation")),
        version=_int(data, "version", 1),
        valuation=parse_valuation(_section(data, "valuation")),
        reasons=parse_reasons(_section(data, "reasons")),
        database=parse_database(_section(data, "database")),
        logging=parse_logging(_section(data, "logging")),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums, regardless of
    key order in the source file.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
