"""
Module: billboard_engines.pipeline
Responsibility:
    Run the whole pricing chain for one contract -- unit prices, print and
    installation add-ons, discount, audit apportionment, totals -- and
    optionally distribute the grand total into installments.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes the sibling engines; holds no state between calls.

Invariants enforced:
    - Every base-currency amount crosses the currency boundary through one
      ``CurrencyConverter`` bound to the contract's exchange rate.
    - Determinism: identical inputs produce equal quotes.
    - The apportionment is computed from the discount result and never
      feeds back into the totals.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from billboard_engines.addons import (
    AddOnConfig,
    InstallationCostResult,
    InstallationPriceLookup,
    InstallationPriceTable,
    PrintCostResult,
    calculate_installation_cost,
    calculate_print_cost,
)
from billboard_engines.discount import (
    BillboardDiscountRecord,
    DiscountConfig,
    DiscountResult,
    apportion_discount,
    compute_discount,
)
from billboard_engines.installments import (
    Installment,
    InstallmentStrategy,
    PaymentLabels,
    distribute_installments,
)
from billboard_engines.totals import DEFAULT_OPERATING_FEE_RATE, ContractTotals, compute_totals
from billboard_engines.tracer import traced_engine
from billboard_engines.unit_price import BillboardUnitPrice, PricingTierLookup, resolve_unit_prices
from billboard_kernel.domain.currency import CurrencyConverter
from billboard_kernel.domain.normalize import normalize_billboards
from billboard_kernel.domain.values import BillboardLineItem, PricingMode, to_decimal
from billboard_kernel.logging_config import get_logger

logger = get_logger("engines.pipeline")


@dataclass(frozen=True)
class ContractPricingInput:
    """
    Everything needed to price one contract.

    ``billboards`` may be line items or raw catalog mappings; they are
    normalized on construction.  ``exchange_rate`` converts base-currency
    amounts to the display currency (missing or non-positive means 1).
    """

    billboards: tuple[BillboardLineItem, ...]
    mode: PricingMode
    customer_category: str
    tier_lookup: PricingTierLookup
    installation_lookup: InstallationPriceLookup | None = None
    discount: DiscountConfig = field(default_factory=DiscountConfig)
    addons: AddOnConfig = field(default_factory=AddOnConfig)
    exchange_rate: Decimal | None = None
    operating_fee_rate: Decimal = DEFAULT_OPERATING_FEE_RATE
    level_of: Callable[[BillboardLineItem], str | None] | None = None

    def __post_init__(self) -> None:
        records: Iterable[BillboardLineItem | Mapping[str, Any]] = self.billboards
        object.__setattr__(self, "billboards", normalize_billboards(records))
        object.__setattr__(self, "operating_fee_rate", to_decimal(self.operating_fee_rate))

    def converter(self) -> CurrencyConverter:
        return CurrencyConverter(self.exchange_rate)


@dataclass(frozen=True)
class ContractQuote:
    """Priced contract: per-stage breakdowns, headline totals, schedule."""

    unit_prices: tuple[BillboardUnitPrice, ...]
    print_cost: PrintCostResult
    installation: InstallationCostResult
    discount: DiscountResult
    apportionment: tuple[BillboardDiscountRecord, ...]
    totals: ContractTotals
    installments: tuple[Installment, ...] = ()

    @property
    def grand_total(self) -> Decimal:
        return self.totals.grand_total

    @property
    def missing_tier_ids(self) -> tuple[str, ...]:
        return tuple(p.billboard_id for p in self.unit_prices if not p.tier_found)


@traced_engine("contract_pricing", "1.0")
def price_contract(pricing_input: ContractPricingInput) -> ContractQuote:
    """Price a contract end to end."""
    convert = pricing_input.converter()
    billboards = pricing_input.billboards
    addons = pricing_input.addons

    unit_prices = resolve_unit_prices(
        billboards,
        pricing_input.mode,
        pricing_input.customer_category,
        pricing_input.tier_lookup,
        convert,
    )
    print_cost = calculate_print_cost(billboards, addons, convert)
    installation = calculate_installation_cost(
        billboards,
        pricing_input.installation_lookup or InstallationPriceTable({}),
        addons,
        convert,
    )
    discount = compute_discount(
        billboards,
        [p.amount for p in unit_prices],
        level_of=pricing_input.level_of,
        config=pricing_input.discount,
    )
    apportionment = apportion_discount(billboards, discount)
    totals = compute_totals(
        discount.base_total,
        discount,
        installation.total,
        print_cost.total,
        addons,
        pricing_input.operating_fee_rate,
    )

    logger.info("contract_priced", extra={
        "billboard_count": len(billboards),
        "exchange_rate": str(convert.rate),
        "grand_total": str(totals.grand_total),
    })
    return ContractQuote(
        unit_prices=unit_prices,
        print_cost=print_cost,
        installation=installation,
        discount=discount,
        apportionment=apportionment,
        totals=totals,
    )


def quote_with_installments(
    pricing_input: ContractPricingInput,
    strategy: InstallmentStrategy,
    labels: PaymentLabels | None = None,
) -> ContractQuote:
    """Price a contract and distribute its grand total with ``strategy``."""
    quote = price_contract(pricing_input)
    schedule = distribute_installments(quote.grand_total, strategy, labels)
    return replace(quote, installments=schedule)
