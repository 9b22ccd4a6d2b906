"""
billboard_config -- single public entrypoint for pricing configuration.

Responsibility:
    Provides the one way to obtain pricing configuration at runtime through
    ``get_active_config()``.  Returns a validated ``PricingConfiguration``
    from which callers build the engines' collaborators (price list,
    installation prices, currency catalog, payment labels).

Architecture position:
    Configuration -- YAML-driven, validated on load.
    This package sits above ``billboard_kernel`` and ``billboard_engines``;
    neither may import from it.

Invariants enforced:
    - Validation: a configuration with errors is never returned.
    - Deterministic checksum: the same YAML document always produces the
      same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` -- required keys are missing, an amount cannot
      be parsed, or validation reports errors.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PRICING_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying every quote back to the price list that produced it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from billboard_config.loader import load_configuration
from billboard_config.schema import PricingConfiguration
from billboard_config.validator import ConfigValidationResult, validate_configuration
from billboard_kernel.exceptions import ConfigurationError

_logger = logging.getLogger("billboard_pricing.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> PricingConfiguration:
    """The public configuration entrypoint.

    Guarantees:
        - The returned configuration has passed validation.
        - Warnings are logged; a ``PRICING_CONFIG_TRACE`` entry is emitted
          on every successful call.

    Non-goals:
        - No caching across calls; callers hold the returned instance.

    Args:
        path: Configuration file.  Defaults to the bundled
            ``billboard_config/sets/default.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If parsing or validation fails.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    try:
        config = load_configuration(config_path)
    except KeyError as e:
        raise ConfigurationError([f"Missing required key: {e.args[0]}"], str(config_path)) from e
    except (TypeError, ValueError) as e:
        raise ConfigurationError([str(e)], str(config_path)) from e

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ConfigurationError(validation.errors, str(config_path))

    for warning in validation.warnings:
        _logger.warning("config_validation_warning", extra={
            "config_id": config.config_id,
            "warning": warning,
        })

    _logger.info(
        "PRICING_CONFIG_TRACE",
        extra={
            "trace_type": "PRICING_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "base_currency": config.base_currency,
            "currency_count": len(config.currencies),
            "pricing_tier_count": len(config.pricing_tiers),
            "installation_size_count": len(config.installation_prices),
        },
    )
    return config


__all__ = [
    "ConfigValidationResult",
    "DEFAULT_CONFIG_PATH",
    "PricingConfiguration",
    "get_active_config",
    "validate_configuration",
]
