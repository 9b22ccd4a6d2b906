"""
Configuration Loader (``billboard_config.loader``).

Responsibility
--------------
Loads a pricing configuration YAML file and parses it into the typed
``billboard_config.schema`` dataclasses.  The single public entry point for
runtime config is ``billboard_config.get_active_config()``.

Invariants enforced
-------------------
* Every amount is parsed to ``Decimal`` through its string form, never
  through float arithmetic.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  document for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Non-numeric amounts  -> ``ValueError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from billboard_config.schema import (
    CurrencyDef,
    InstallationPriceDef,
    PricingConfiguration,
    PricingTierDef,
)
from billboard_kernel.domain.values import to_decimal


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any) -> Decimal:
    """Parse a YAML scalar (int, float or string) to a finite Decimal."""
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse amount from {value!r}")
    amount = to_decimal(value)
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r} is not a finite number")
    return amount


def parse_currency(data: dict[str, Any]) -> CurrencyDef:
    """Parse a CurrencyDef from a dict."""
    return CurrencyDef(
        code=str(data["code"]).upper(),
        symbol=data.get("symbol", data["code"]),
        written_name=data.get("written_name", data["code"]),
        exchange_rate=parse_decimal(data.get("exchange_rate", 1)),
    )


def parse_pricing_tier(data: dict[str, Any]) -> PricingTierDef:
    """
    Parse a PricingTierDef from a dict.

    ``monthly`` maps month counts to amounts; YAML keys may be ints or
    numeric strings.
    """
    monthly = {
        int(months): parse_decimal(amount)
        for months, amount in (data.get("monthly") or {}).items()
    }
    level = data.get("level")
    return PricingTierDef(
        size=str(data["size"]).strip(),
        level=str(level) if level is not None else None,
        customer_category=str(data["customer_category"]),
        monthly=monthly,
        daily=parse_decimal(data["daily"]) if data.get("daily") is not None else None,
    )


def parse_installation_price(size: Any, price: Any) -> InstallationPriceDef:
    """Parse one ``size: price`` entry of the installation price list."""
    return InstallationPriceDef(size=str(size).strip(), price=parse_decimal(price))


def parse_configuration(data: dict[str, Any]) -> PricingConfiguration:
    """
    Parse the whole configuration document.

    Preconditions:
        ``data`` has at least ``config_id`` and ``base_currency``.
    Postconditions:
        The returned configuration carries the checksum of ``data``.
    Raises:
        KeyError: if required keys are missing.
        ValueError: if an amount cannot be parsed.
    """
    return PricingConfiguration(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        base_currency=str(data["base_currency"]).upper(),
        currencies=tuple(parse_currency(c) for c in data.get("currencies", [])),
        operating_fee_rate=parse_decimal(data.get("operating_fee_rate", "3")),
        level_discounts={
            str(level): parse_decimal(pct)
            for level, pct in (data.get("level_discounts") or {}).items()
        },
        customer_categories=tuple(str(c) for c in data.get("customer_categories", [])),
        payment_labels={
            str(key): str(label)
            for key, label in (data.get("payment_labels") or {}).items()
        },
        pricing_tiers=tuple(parse_pricing_tier(t) for t in data.get("pricing_tiers", [])),
        installation_prices=tuple(
            parse_installation_price(size, price)
            for size, price in (data.get("installation_prices") or {}).items()
        ),
        checksum=compute_checksum(data),
    )


def load_configuration(path: Path) -> PricingConfiguration:
    """Load and parse a configuration file (unvalidated)."""
    return parse_configuration(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
