"""
Typed exception hierarchy for the billboard pricing engine.

The engines prefer graceful degradation: a missing price tier, an unparseable
panel size or a non-positive exchange rate never raise.  Exceptions are kept
for inputs that cannot describe a real contract at all (a 120 % discount, a
13-installment plan, an unknown currency code, a broken configuration file).

Every exception carries a ``code`` class attribute so callers can branch on
type and report a machine-readable identifier without parsing messages.

    BillboardPricingError (base)
    |
    +-- InvalidPricingInputError
    |   +-- InvalidDiscountError
    |
    +-- InstallmentPlanError
    |
    +-- CurrencyNotFoundError
    |
    +-- ConfigurationError

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Input           | INVALID_PRICING_INPUT       | Negative count, face count, price
                | INVALID_DISCOUNT            | Percent outside 0-100, negative amount
----------------|-----------------------------|-----------------------------------------
Installments    | INSTALLMENT_PLAN_INVALID    | Count/interval out of range, first
                |                             | payment larger than the total
----------------|-----------------------------|-----------------------------------------
Currency        | CURRENCY_NOT_FOUND          | Code missing from the catalog
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_INVALID       | YAML fails schema validation
"""

from decimal import Decimal


class BillboardPricingError(Exception):
    """
    Base exception for all billboard pricing errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "BILLBOARD_PRICING_ERROR"


class InvalidPricingInputError(BillboardPricingError):
    """A value object was constructed with an impossible value."""

    code: str = "INVALID_PRICING_INPUT"

    def __init__(self, field_name: str, value: object, reason: str):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field_name}={value!r}: {reason}")


class InvalidDiscountError(InvalidPricingInputError):
    """Discount percentage or amount outside its allowed range."""

    code: str = "INVALID_DISCOUNT"


class InstallmentPlanError(BillboardPricingError):
    """An installment strategy cannot produce a schedule for its parameters."""

    code: str = "INSTALLMENT_PLAN_INVALID"

    def __init__(self, message: str, grand_total: Decimal | None = None):
        self.grand_total = grand_total
        super().__init__(message)


class CurrencyNotFoundError(BillboardPricingError):
    """Currency code is not present in the configured catalog."""

    code: str = "CURRENCY_NOT_FOUND"

    def __init__(self, currency_code: str):
        self.currency_code = currency_code
        super().__init__(f"Currency not configured: {currency_code}")


class ConfigurationError(BillboardPricingError):
    """Pricing configuration failed validation."""

    code: str = "CONFIGURATION_INVALID"

    def __init__(self, errors: list[str], source: str | None = None):
        self.errors = errors
        self.source = source
        super().__init__(
            "Pricing configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )
