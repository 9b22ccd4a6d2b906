"""
PricingConfiguration schema.

Defines the human-authored, reviewable pricing configuration: currencies and
their rates against the base currency, the operating fee rate, default level
discounts, payment labels, the pricing-tier price list and installation
prices.  YAML is parsed into these types by the loader and checked by the
validator; the engines only ever see the lookups built from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from billboard_engines.addons import InstallationPriceTable
from billboard_engines.discount import AdditionalDiscount, DiscountConfig
from billboard_engines.installments import PaymentLabels
from billboard_engines.unit_price import PricingTierRow, PricingTierTable
from billboard_kernel.domain.currency import CurrencyCatalog, CurrencyInfo

# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CurrencyDef:
    """One configured display currency."""

    code: str
    symbol: str
    written_name: str
    exchange_rate: Decimal = Decimal("1")


# ---------------------------------------------------------------------------
# Price list
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PricingTierDef:
    """
    Price-list row as authored.

    Month columns are kept unchecked here so the validator can report every
    bad column at once instead of failing on the first.
    """

    size: str
    level: str | None
    customer_category: str
    monthly: dict[int, Decimal] = field(default_factory=dict)
    daily: Decimal | None = None

    @property
    def key(self) -> tuple[str, str | None, str]:
        return (self.size, self.level, self.customer_category)


@dataclass(frozen=True)
class InstallationPriceDef:
    """Installation price for one panel size (base currency)."""

    size: str
    price: Decimal


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PricingConfiguration:
    """
    Complete pricing configuration.

    Builds the concrete collaborators the engines consume.  Call
    ``billboard_config.get_active_config()`` to obtain a validated instance.
    """

    config_id: str
    version: int
    base_currency: str
    currencies: tuple[CurrencyDef, ...] = ()
    operating_fee_rate: Decimal = Decimal("3")
    level_discounts: dict[str, Decimal] = field(default_factory=dict)
    customer_categories: tuple[str, ...] = ()
    payment_labels: dict[str, str] = field(default_factory=dict)
    pricing_tiers: tuple[PricingTierDef, ...] = ()
    installation_prices: tuple[InstallationPriceDef, ...] = ()
    checksum: str = ""

    def pricing_table(self) -> PricingTierTable:
        return PricingTierTable(
            PricingTierRow(
                size=tier.size,
                level=tier.level,
                customer_category=tier.customer_category,
                monthly=dict(tier.monthly),
                daily=tier.daily,
            )
            for tier in self.pricing_tiers
        )

    def installation_table(self) -> InstallationPriceTable:
        return InstallationPriceTable((p.size, p.price) for p in self.installation_prices)

    def currency_catalog(self) -> CurrencyCatalog:
        return CurrencyCatalog.from_infos(
            self.base_currency,
            (
                CurrencyInfo(c.code, c.symbol, c.written_name, c.exchange_rate)
                for c in self.currencies
            ),
        )

    def labels(self) -> PaymentLabels:
        return PaymentLabels(**self.payment_labels)

    def discount_config(
        self,
        additional_discount: AdditionalDiscount | None = None,
    ) -> DiscountConfig:
        """Default level discounts combined with a contract's own additional discount."""
        return DiscountConfig(
            level_discounts=dict(self.level_discounts),
            additional_discount=additional_discount,
        )
