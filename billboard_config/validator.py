"""
Configuration Validator (``billboard_config.validator``).

Responsibility
--------------
Validates a parsed ``PricingConfiguration`` before it is handed to the
engines, so that a broken price list fails at load time rather than as
silently zero-priced contracts.

Invariants enforced
-------------------
* Currency codes are unique, the base currency is declared, and every
  exchange rate is positive.
* Percentages (operating fee, level discounts) lie in 0-100.
* Price-list rows are unique per (size, level, customer category), use only
  the supported month columns, and carry no negative amounts.
* Payment label keys name real labels.

Failure modes
-------------
* Validation errors (``ConfigValidationResult.errors``)  -> configuration
  MUST NOT be used.
* Validation warnings (``ConfigValidationResult.warnings``)  ->
  configuration is usable but should be reviewed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, fields

from billboard_config.schema import PricingConfiguration
from billboard_engines.installments import PaymentLabels
from billboard_engines.unit_price import TIER_MONTH_COLUMNS
from billboard_kernel.domain.values import HUNDRED, ZERO


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block loading but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: PricingConfiguration) -> ConfigValidationResult:
    """
    Validate a pricing configuration.

    Postconditions:
        - Returns a ``ConfigValidationResult`` with errors and warnings.
        - A configuration with errors MUST NOT be used.
    """
    result = ConfigValidationResult()

    _validate_currencies(config, result)
    _validate_percentages(config, result)
    _validate_pricing_tiers(config, result)
    _validate_installation_prices(config, result)
    _validate_payment_labels(config, result)

    return result


def _validate_currencies(config: PricingConfiguration, result: ConfigValidationResult) -> None:
    counts = Counter(c.code for c in config.currencies)
    for code, count in sorted(counts.items()):
        if count > 1:
            result.add_error(f"Duplicate currency code: {code}")

    if config.currencies and config.base_currency not in counts:
        result.add_error(f"Base currency {config.base_currency} is not declared in currencies")

    for currency in config.currencies:
        if currency.exchange_rate <= ZERO:
            result.add_error(
                f"Currency {currency.code} has non-positive exchange rate {currency.exchange_rate}"
            )


def _validate_percentages(config: PricingConfiguration, result: ConfigValidationResult) -> None:
    if not (ZERO <= config.operating_fee_rate <= HUNDRED):
        result.add_error(f"Operating fee rate must be 0-100, got {config.operating_fee_rate}")

    for level, pct in sorted(config.level_discounts.items()):
        if not (ZERO <= pct <= HUNDRED):
            result.add_error(f"Level discount for {level} must be 0-100, got {pct}")


def _validate_pricing_tiers(config: PricingConfiguration, result: ConfigValidationResult) -> None:
    counts = Counter(tier.key for tier in config.pricing_tiers)
    for key, count in counts.items():
        if count > 1:
            result.add_error(f"Duplicate pricing tier for size/level/category {key}")

    known_categories = set(config.customer_categories)
    for tier in config.pricing_tiers:
        label = f"Pricing tier {tier.key}"
        bad_columns = sorted(m for m in tier.monthly if m not in TIER_MONTH_COLUMNS)
        if bad_columns:
            result.add_error(
                f"{label} has unsupported month columns {bad_columns}; "
                f"allowed: {list(TIER_MONTH_COLUMNS)}"
            )
        if any(amount < ZERO for amount in tier.monthly.values()):
            result.add_error(f"{label} has a negative monthly price")
        if tier.daily is not None and tier.daily < ZERO:
            result.add_error(f"{label} has a negative daily price")
        if tier.daily is None and 1 not in tier.monthly:
            result.add_warning(f"{label} has no daily or one-month price; day pricing resolves to 0")
        if known_categories and tier.customer_category not in known_categories:
            result.add_warning(f"{label} uses undeclared customer category {tier.customer_category}")


def _validate_installation_prices(
    config: PricingConfiguration, result: ConfigValidationResult,
) -> None:
    for entry in config.installation_prices:
        if entry.price < ZERO:
            result.add_error(f"Installation price for size {entry.size} is negative")

    tier_sizes = {tier.size for tier in config.pricing_tiers}
    for entry in config.installation_prices:
        if tier_sizes and entry.size not in tier_sizes:
            result.add_warning(f"Installation price for size {entry.size} has no pricing tier")


def _validate_payment_labels(config: PricingConfiguration, result: ConfigValidationResult) -> None:
    allowed = {f.name for f in fields(PaymentLabels)}
    for key in sorted(config.payment_labels):
        if key not in allowed:
            result.add_error(f"Unknown payment label {key}; allowed: {sorted(allowed)}")
