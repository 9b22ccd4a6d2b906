"""
Module: billboard_engines.addons
Responsibility:
    Compute the two optional add-on costs of a contract: printing the
    panels (area x faces x price per square unit) and installing them
    (looked up per panel size).  Each add-on is enabled independently and
    independently marked as included in the displayed price or billed on
    top of it; the inclusion flag is consumed by the totals engine.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The installation price list is a collaborator lookup; the bundled
    ``InstallationPriceTable`` is one implementation over configured sizes.

Invariants enforced:
    - An unparseable panel size yields a print cost of 0 for that
      billboard only; other billboards are unaffected.
    - Installation grouping by size is presentational: the total is the
      flat sum of one looked-up price per billboard.
    - A disabled add-on always costs 0.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from billboard_engines.tracer import traced_engine
from billboard_kernel.domain.values import (
    ZERO,
    BillboardLineItem,
    round_money,
    sum_money,
    to_decimal,
)
from billboard_kernel.exceptions import InvalidPricingInputError
from billboard_kernel.logging_config import get_logger

logger = get_logger("engines.addons")

Converter = Callable[[Decimal], Decimal]

# "12x4", "3,5×2", "4 - 3", "6.5X3"
_DIMENSION_PATTERN = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*[xX×\-]\s*(\d+(?:[.,]\d+)?)"
)


@dataclass(frozen=True)
class AddOnConfig:
    """
    Enable/include toggles for installation and print.

    ``*_included_in_price`` means the cost is absorbed by the displayed
    rental price (free to the customer); otherwise it is billed separately.
    """

    installation_enabled: bool = False
    installation_included_in_price: bool = False
    print_enabled: bool = False
    print_price_per_area_unit: Decimal = ZERO
    print_included_in_price: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "print_price_per_area_unit", to_decimal(self.print_price_per_area_unit),
        )
        if self.print_price_per_area_unit < ZERO:
            raise InvalidPricingInputError(
                "print_price_per_area_unit", self.print_price_per_area_unit, "must be >= 0",
            )


# ============================================================================
# Print
# ============================================================================


@dataclass(frozen=True)
class PrintCostLine:
    """Print cost for one billboard."""

    billboard_id: str
    area: Decimal | None
    face_count: int
    amount: Decimal

    @property
    def size_parsed(self) -> bool:
        return self.area is not None


@dataclass(frozen=True)
class PrintCostResult:
    """Print cost per billboard and in total (display currency)."""

    lines: tuple[PrintCostLine, ...]
    total: Decimal

    @property
    def unparsed_billboard_ids(self) -> tuple[str, ...]:
        return tuple(line.billboard_id for line in self.lines if not line.size_parsed)


def parse_panel_dimensions(size_label: str | None) -> tuple[Decimal, Decimal] | None:
    """
    Extract (width, height) from a size label such as "12x4" or "3,5×2".

    Returns None when the label does not contain a dimension pair.
    """
    if not size_label:
        return None
    match = _DIMENSION_PATTERN.search(size_label)
    if match is None:
        return None
    width = Decimal(match.group(1).replace(",", "."))
    height = Decimal(match.group(2).replace(",", "."))
    return width, height


def calculate_print_cost_for(
    billboard: BillboardLineItem,
    price_per_area_unit: Decimal,
    convert: Converter,
) -> PrintCostLine:
    """Print cost of one billboard: ``convert(width * height * faces * price)``."""
    dimensions = parse_panel_dimensions(billboard.size_label)
    if dimensions is None:
        logger.warning("panel_size_unparseable", extra={
            "billboard_id": billboard.billboard_id,
            "size": billboard.size_label,
        })
        return PrintCostLine(billboard.billboard_id, None, billboard.face_count, ZERO)

    width, height = dimensions
    area = width * height
    base_cost = area * billboard.face_count * to_decimal(price_per_area_unit)
    return PrintCostLine(
        billboard_id=billboard.billboard_id,
        area=area,
        face_count=billboard.face_count,
        amount=convert(base_cost),
    )


@traced_engine("print_cost", "1.0", fingerprint_fields=("config",))
def calculate_print_cost(
    billboards: Sequence[BillboardLineItem],
    config: AddOnConfig,
    convert: Converter,
) -> PrintCostResult:
    """
    Sum print costs across the selection.

    Postconditions:
        ``total`` is 0 (and ``lines`` empty) when print is disabled or the
        price per area unit is 0.
    """
    if not config.print_enabled or config.print_price_per_area_unit <= ZERO:
        return PrintCostResult(lines=(), total=Decimal("0.00"))

    lines = tuple(
        calculate_print_cost_for(b, config.print_price_per_area_unit, convert)
        for b in billboards
    )
    total = sum_money(line.amount for line in lines)

    logger.info("print_cost_calculated", extra={
        "billboard_count": len(lines),
        "unparsed_count": sum(1 for line in lines if not line.size_parsed),
        "price_per_area_unit": str(config.print_price_per_area_unit),
        "total": str(total),
    })
    return PrintCostResult(lines=lines, total=total)


# ============================================================================
# Installation
# ============================================================================


@dataclass(frozen=True)
class InstallationQuote:
    """Collaborator reply: base-currency price per size and the flat total."""

    per_size_price: Mapping[str, Decimal]
    total_installation_cost: Decimal


class InstallationPriceLookup(Protocol):
    """Collaborator contract: price the installation of a list of panel sizes."""

    def __call__(self, sizes: Sequence[str]) -> InstallationQuote: ...


@dataclass(frozen=True)
class InstallationSizeLine:
    """Installation cost for all selected billboards of one size."""

    size_label: str
    billboard_count: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class InstallationCostResult:
    """Installation cost grouped by size, and the flat total (display currency)."""

    by_size: tuple[InstallationSizeLine, ...]
    total: Decimal


@traced_engine("installation_cost", "1.0", fingerprint_fields=("config",))
def calculate_installation_cost(
    billboards: Sequence[BillboardLineItem],
    lookup: InstallationPriceLookup,
    config: AddOnConfig,
    convert: Converter,
) -> InstallationCostResult:
    """
    Installation cost for the selection.

    One converted per-size price is charged per billboard; the size
    grouping only shapes the report.
    """
    if not config.installation_enabled or not billboards:
        return InstallationCostResult(by_size=(), total=Decimal("0.00"))

    sizes = [b.size_label for b in billboards]
    quote = lookup(sizes)
    counts = Counter(sizes)

    by_size: list[InstallationSizeLine] = []
    for size_label, count in counts.items():
        unit_price = convert(to_decimal(quote.per_size_price.get(size_label, ZERO)))
        by_size.append(InstallationSizeLine(
            size_label=size_label,
            billboard_count=count,
            unit_price=unit_price,
            subtotal=round_money(unit_price * count),
        ))

    total = sum_money(line.subtotal for line in by_size)

    logger.info("installation_cost_calculated", extra={
        "billboard_count": len(billboards),
        "size_count": len(by_size),
        "total": str(total),
    })
    return InstallationCostResult(by_size=tuple(by_size), total=total)


class InstallationPriceTable:
    """
    Per-size installation price list implementing ``InstallationPriceLookup``.

    Sizes without a listed price install for 0 and are reported in the log.
    """

    def __init__(self, prices: Mapping[str, Decimal] | Iterable[tuple[str, Decimal]]):
        items = prices.items() if isinstance(prices, Mapping) else prices
        self._prices: dict[str, Decimal] = {
            str(size).strip(): to_decimal(price) for size, price in items
        }

    def price_for(self, size_label: str) -> Decimal | None:
        return self._prices.get(size_label)

    def __call__(self, sizes: Sequence[str]) -> InstallationQuote:
        per_size: dict[str, Decimal] = {}
        unknown: list[str] = []
        for size in dict.fromkeys(sizes):
            price = self._prices.get(size)
            if price is None:
                unknown.append(size)
                price = ZERO
            per_size[size] = price

        if unknown:
            logger.warning("installation_price_missing", extra={
                "sizes": unknown,
            })

        total = sum((per_size[size] for size in sizes), ZERO)
        return InstallationQuote(per_size_price=per_size, total_installation_cost=total)
