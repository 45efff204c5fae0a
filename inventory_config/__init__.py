"""
inventory_config -- single public entrypoint for valuation configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a validated, frozen
    ``InventoryValuationConfig``.

Architecture position:
    Configuration -- YAML-driven settings, validated at load time.
    Sits above ``inventory_kernel`` and below ``inventory_services``.
    The kernel and the engines MUST NEVER import from ``inventory_config``;
    ``bridges`` translates the config into kernel types.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ValueError`` -- schema or validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``VALUATION_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying each computed summary to the configuration that
    governed it.
"""

from __future__ import annotations

from pathlib import Path

from inventory_config.bridges import build_wac_policy
from inventory_config.loader import load_yaml_file, parse_config
from inventory_config.schema import InventoryValuationConfig
from inventory_config.validator import validate_configuration
from inventory_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(config_path: Path | str | None = None) -> InventoryValuationConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load.  Defaults to the packaged
            ``defaults.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If configuration validation fails.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(path))

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )

    _logger.info(
        "VALUATION_CONFIG_TRACE",
        extra={
            "trace_type": "VALUATION_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "method": config.valuation.method,
            "unit_cost_places": config.valuation.unit_cost_places,
            "source": str(path),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "InventoryValuationConfig",
    "build_wac_policy",
    "get_active_config",
]
