"""
Module: billboard_engines.unit_price
Responsibility:
    Resolve the undiscounted rental price of each selected billboard for a
    pricing mode (months or days) and customer category, converted to the
    contract's display currency.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The price tiers themselves come from a collaborator lookup; the
    bundled ``PricingTierTable`` is one implementation over configured rows.

Invariants enforced:
    - A missing tier resolves to 0, never an exception, so a contract can
      still be drafted and the gap spotted in its totals.
    - Every resolved amount passes through the ``convert`` boundary exactly
      once.

Usage:
    from billboard_engines.unit_price import resolve_unit_price

    price = resolve_unit_price(
        billboard, Months(3), "regular", tier_lookup=table, convert=converter,
    )
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

from billboard_engines.tracer import traced_engine
from billboard_kernel.domain.values import (
    ZERO,
    BillboardLineItem,
    Days,
    Months,
    PricingMode,
    round_money,
    to_decimal,
)
from billboard_kernel.exceptions import InvalidPricingInputError
from billboard_kernel.logging_config import get_logger

logger = get_logger("engines.unit_price")

Converter = Callable[[Decimal], Decimal]

# Month counts that carry their own column in a tier row.
TIER_MONTH_COLUMNS: tuple[int, ...] = (1, 2, 3, 6, 12)

_DAYS_PER_MONTH = Decimal("30")


class PricingTierLookup(Protocol):
    """Collaborator contract: base-currency amount for a billboard, or None."""

    def __call__(
        self,
        billboard: BillboardLineItem,
        mode: PricingMode,
        category: str,
    ) -> Decimal | None: ...


@dataclass(frozen=True)
class BillboardUnitPrice:
    """Resolved display-currency price for one billboard."""

    billboard_id: str
    amount: Decimal
    tier_found: bool


@traced_engine("unit_price", "1.0", fingerprint_fields=("mode", "category"))
def resolve_unit_price(
    billboard: BillboardLineItem,
    mode: PricingMode,
    category: str,
    tier_lookup: PricingTierLookup,
    convert: Converter,
) -> Decimal:
    """
    Resolve one billboard's rental price in the display currency.

    Postconditions:
        Returns ``convert(tier amount)``, or ``convert(0)`` when the lookup
        has no tier for this billboard.
    """
    return _resolve(billboard, mode, category, tier_lookup, convert).amount


def resolve_unit_prices(
    billboards: Sequence[BillboardLineItem],
    mode: PricingMode,
    category: str,
    tier_lookup: PricingTierLookup,
    convert: Converter,
) -> tuple[BillboardUnitPrice, ...]:
    """Resolve a whole selection, preserving order."""
    prices = tuple(
        _resolve(b, mode, category, tier_lookup, convert) for b in billboards
    )
    missing = [p.billboard_id for p in prices if not p.tier_found]
    logger.info("unit_prices_resolved", extra={
        "billboard_count": len(prices),
        "missing_tier_count": len(missing),
        "category": category,
        "mode": type(mode).__name__.lower(),
        "count": mode.count,
    })
    return prices


def _resolve(
    billboard: BillboardLineItem,
    mode: PricingMode,
    category: str,
    tier_lookup: PricingTierLookup,
    convert: Converter,
) -> BillboardUnitPrice:
    raw = tier_lookup(billboard, mode, category)
    if raw is None:
        logger.warning("pricing_tier_missing", extra={
            "billboard_id": billboard.billboard_id,
            "size": billboard.size_label,
            "level": billboard.level,
            "category": category,
            "mode": type(mode).__name__.lower(),
            "count": mode.count,
        })
        return BillboardUnitPrice(billboard.billboard_id, convert(ZERO), tier_found=False)
    return BillboardUnitPrice(
        billboard.billboard_id, convert(to_decimal(raw)), tier_found=True,
    )


# ============================================================================
# Tabular tier lookup
# ============================================================================


@dataclass(frozen=True)
class PricingTierRow:
    """
    One price-list row for a (size, level, customer category) combination.

    ``monthly`` maps a month count (see ``TIER_MONTH_COLUMNS``) to the
    total rental amount for that duration.  ``daily`` is the per-day price.
    All amounts are in the base currency.
    """

    size: str
    level: str | None
    customer_category: str
    monthly: Mapping[int, Decimal] = field(default_factory=dict)
    daily: Decimal | None = None

    def __post_init__(self) -> None:
        for months, amount in self.monthly.items():
            if months not in TIER_MONTH_COLUMNS:
                raise InvalidPricingInputError(
                    "monthly", months, f"month column must be one of {TIER_MONTH_COLUMNS}",
                )
            if amount < ZERO:
                raise InvalidPricingInputError("monthly", amount, "must be >= 0")
        if self.daily is not None and self.daily < ZERO:
            raise InvalidPricingInputError("daily", self.daily, "must be >= 0")

    @property
    def key(self) -> tuple[str, str | None, str]:
        return (self.size, self.level, self.customer_category)

    def daily_price(self) -> Decimal | None:
        """Per-day price; derived from the one-month column when not listed."""
        if self.daily is not None:
            return self.daily
        one_month = self.monthly.get(1)
        if one_month is None:
            return None
        return round_money(one_month / _DAYS_PER_MONTH)


class PricingTierTable:
    """
    Price-list backed ``PricingTierLookup``.

    Rows are matched by the billboard's price lookup key (size id when
    present, otherwise the size label), then by level and customer
    category.  A size id that has no row falls back to the size label.
    """

    def __init__(self, rows: Iterable[PricingTierRow]):
        self._rows: dict[tuple[str, str | None, str], PricingTierRow] = {}
        for row in rows:
            self._rows[row.key] = row

    def __len__(self) -> int:
        return len(self._rows)

    def row_for(self, billboard: BillboardLineItem, category: str) -> PricingTierRow | None:
        for size in (str(billboard.price_lookup_key), billboard.size_label):
            row = self._rows.get((size, billboard.level, category))
            if row is not None:
                return row
        return None

    def __call__(
        self,
        billboard: BillboardLineItem,
        mode: PricingMode,
        category: str,
    ) -> Decimal | None:
        if mode.count == 0:
            return ZERO
        row = self.row_for(billboard, category)
        if row is None:
            return None

        match mode:
            case Months(count=count):
                return row.monthly.get(count)
            case Days(count=count):
                daily = row.daily_price()
                if daily is None:
                    return None
                return daily * count
            case _:
                raise InvalidPricingInputError("mode", mode, "expected Months or Days")
