"""
Module: billboard_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    pricing engines.  This is the canonical import surface for callers
    that price contracts and build payment schedules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billboard_kernel (and sibling engine modules).
    MUST NOT import billboard_config.

Invariants enforced:
    - Purity: engines never call ``date.today()``; start dates are passed in.
    - Decimal-only arithmetic, quantized to 2 places with ROUND_HALF_UP.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``billboard_engines.tracer``), emitting PRICING_ENGINE_TRACE records.

Usage:
    from billboard_engines import ContractPricingInput, price_contract
    from billboard_engines.installments import EqualSplit, distribute_installments
"""

from billboard_kernel.logging_config import get_logger

logger = get_logger("engines")

from billboard_engines.addons import (
    AddOnConfig,
    InstallationCostResult,
    InstallationPriceTable,
    InstallationQuote,
    PrintCostResult,
    calculate_installation_cost,
    calculate_print_cost,
    calculate_print_cost_for,
    parse_panel_dimensions,
)
from billboard_engines.discount import (
    BillboardDiscountRecord,
    DiscountConfig,
    DiscountResult,
    FixedDiscount,
    PercentageDiscount,
    apportion_discount,
    compute_discount,
)
from billboard_engines.installments import (
    EqualSplit,
    FirstPaymentPlan,
    FixedFirstPayment,
    Installment,
    InstallmentValidation,
    ManualPlan,
    PaymentGroup,
    PaymentLabels,
    PercentFirstPayment,
    append_balancing_installment,
    distribute_installments,
    draft_manual_installments,
    group_repeating_payments,
    installments_total,
    validate_installments,
)
from billboard_engines.pipeline import (
    ContractPricingInput,
    ContractQuote,
    price_contract,
    quote_with_installments,
)
from billboard_engines.totals import ContractTotals, calculate_operating_fee, compute_totals
from billboard_engines.tracer import compute_input_fingerprint, traced_engine
from billboard_engines.unit_price import (
    BillboardUnitPrice,
    PricingTierRow,
    PricingTierTable,
    resolve_unit_price,
    resolve_unit_prices,
)

__all__ = [
    "AddOnConfig",
    "BillboardDiscountRecord",
    "BillboardUnitPrice",
    "ContractPricingInput",
    "ContractQuote",
    "ContractTotals",
    "DiscountConfig",
    "DiscountResult",
    "EqualSplit",
    "FirstPaymentPlan",
    "FixedDiscount",
    "FixedFirstPayment",
    "InstallationCostResult",
    "InstallationPriceTable",
    "InstallationQuote",
    "Installment",
    "InstallmentValidation",
    "ManualPlan",
    "PaymentGroup",
    "PaymentLabels",
    "PercentFirstPayment",
    "PercentageDiscount",
    "PricingTierRow",
    "PricingTierTable",
    "PrintCostResult",
    "append_balancing_installment",
    "apportion_discount",
    "calculate_installation_cost",
    "calculate_operating_fee",
    "calculate_print_cost",
    "calculate_print_cost_for",
    "compute_discount",
    "compute_input_fingerprint",
    "compute_totals",
    "distribute_installments",
    "draft_manual_installments",
    "group_repeating_payments",
    "installments_total",
    "parse_panel_dimensions",
    "price_contract",
    "quote_with_installments",
    "resolve_unit_price",
    "resolve_unit_prices",
    "traced_engine",
    "validate_installments",
]
