"""Pure domain layer: value objects, currency conversion, record normalization."""

from billboard_kernel.domain.currency import (
    CurrencyCatalog,
    CurrencyConverter,
    CurrencyInfo,
    convert_amount,
    effective_rate,
)
from billboard_kernel.domain.normalize import normalize_billboard, normalize_billboards
from billboard_kernel.domain.values import (
    BillboardLineItem,
    Days,
    Months,
    PricingMode,
    round_money,
    sum_money,
    to_decimal,
)

__all__ = [
    "BillboardLineItem",
    "CurrencyCatalog",
    "CurrencyConverter",
    "CurrencyInfo",
    "Days",
    "Months",
    "PricingMode",
    "convert_amount",
    "effective_rate",
    "normalize_billboard",
    "normalize_billboards",
    "round_money",
    "sum_money",
    "to_decimal",
]
