"""
Module: billboard_engines.discount
Responsibility:
    Compute the contract discount in two ordered steps: a per-level
    percentage applied to each billboard's unit price, then one additional
    discount (a fixed amount, or a percentage of what remains after the
    level discount).  Also apportions the combined discount back across
    billboards for historical before/after price records.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Level discount is applied before the additional percentage; the two
      do not commute and the order is a business rule.
    - Both discount amounts are >= 0 and rounded to 2 places.
    - Apportioned shares sum exactly to the discount they split; the
      billboard with the largest weight absorbs the rounding residual.
    - Apportionment is for audit only and never feeds back into totals.

Failure modes:
    - InvalidDiscountError on percentages outside 0-100 or negative amounts.
    - InvalidPricingInputError when unit prices and billboards misalign.

Usage:
    from billboard_engines.discount import (
        DiscountConfig, PercentageDiscount, compute_discount,
    )

    result = compute_discount(
        billboards,
        [Decimal("1000")],
        config=DiscountConfig(
            level_discounts={"A": Decimal("10")},
            additional_discount=PercentageDiscount(Decimal("10")),
        ),
    )
    assert result.total_discount == Decimal("190.00")
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TypeAlias

from billboard_engines.tracer import traced_engine
from billboard_kernel.domain.values import (
    HUNDRED,
    ZERO,
    BillboardLineItem,
    round_money,
    sum_money,
    to_decimal,
)
from billboard_kernel.exceptions import InvalidDiscountError, InvalidPricingInputError
from billboard_kernel.logging_config import get_logger

logger = get_logger("engines.discount")


def _check_percent(name: str, value: Decimal) -> None:
    if not (ZERO <= value <= HUNDRED):
        raise InvalidDiscountError(name, value, "percent must be between 0 and 100")


@dataclass(frozen=True)
class FixedDiscount:
    """Additional discount of a fixed display-currency amount."""

    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.amount < ZERO:
            raise InvalidDiscountError("amount", self.amount, "must be >= 0")


@dataclass(frozen=True)
class PercentageDiscount:
    """Additional discount as a percent of the post-level-discount subtotal."""

    percent: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", to_decimal(self.percent))
        _check_percent("percent", self.percent)


AdditionalDiscount: TypeAlias = FixedDiscount | PercentageDiscount


@dataclass(frozen=True)
class DiscountConfig:
    """
    Discount terms of a contract.

    Contract:
        ``level_discounts`` maps a billboard level to a percent (0-100); a
        level absent from the map is not discounted.
        ``additional_discount`` is optional.
    """

    level_discounts: Mapping[str, Decimal] = field(default_factory=dict)
    additional_discount: AdditionalDiscount | None = None

    def __post_init__(self) -> None:
        normalized = {str(level): to_decimal(pct) for level, pct in self.level_discounts.items()}
        for level, pct in normalized.items():
            _check_percent(f"level_discounts[{level}]", pct)
        object.__setattr__(self, "level_discounts", normalized)

    def level_percent(self, level: str | None) -> Decimal:
        if level is None:
            return ZERO
        return self.level_discounts.get(str(level), ZERO)


@dataclass(frozen=True)
class LevelDiscountLine:
    """Level discount applied to one billboard (unrounded working amount)."""

    billboard_id: str
    level: str | None
    percent: Decimal
    unit_price: Decimal
    amount: Decimal


@dataclass(frozen=True)
class DiscountResult:
    """
    Outcome of the discount calculation.

    Guarantees:
        - ``level_discount_amount`` and ``additional_discount_amount`` are
          non-negative and rounded to 2 places.
        - ``additional_discount_amount`` may exceed the remaining balance
          for fixed discounts; the totals engine clamps the balance.
    """

    base_total: Decimal
    level_discount_amount: Decimal
    additional_discount_amount: Decimal
    level_lines: tuple[LevelDiscountLine, ...] = ()

    @property
    def total_discount(self) -> Decimal:
        return self.level_discount_amount + self.additional_discount_amount

    @property
    def subtotal_after_level_discount(self) -> Decimal:
        return self.base_total - self.level_discount_amount


def _default_level_of(billboard: BillboardLineItem) -> str | None:
    return billboard.level


@traced_engine("discount", "1.0", fingerprint_fields=("unit_prices", "config"))
def compute_discount(
    billboards: Sequence[BillboardLineItem],
    unit_prices: Sequence[Decimal],
    level_of: Callable[[BillboardLineItem], str | None] | None = None,
    config: DiscountConfig | None = None,
) -> DiscountResult:
    """
    Compute level and additional discount amounts.

    Preconditions:
        ``unit_prices[i]`` is the display-currency price of ``billboards[i]``.

    Postconditions:
        - level amount = sum(unit_price * level percent / 100), rounded once.
        - additional amount = fixed amount, or percent of
          (base total - level amount).

    Raises:
        InvalidPricingInputError: If the two sequences differ in length.
    """
    if len(billboards) != len(unit_prices):
        raise InvalidPricingInputError(
            "unit_prices", len(unit_prices),
            f"expected one price per billboard ({len(billboards)})",
        )
    config = config or DiscountConfig()
    level_of = level_of or _default_level_of

    prices = [to_decimal(p) for p in unit_prices]
    base_total = sum_money(prices)

    lines: list[LevelDiscountLine] = []
    for billboard, price in zip(billboards, prices):
        level = level_of(billboard)
        percent = config.level_percent(level)
        lines.append(LevelDiscountLine(
            billboard_id=billboard.billboard_id,
            level=level,
            percent=percent,
            unit_price=price,
            amount=price * percent / HUNDRED,
        ))
    level_amount = round_money(sum((line.amount for line in lines), ZERO))

    additional_amount = _additional_amount(
        config.additional_discount, base_total - level_amount,
    )

    logger.info("discount_calculated", extra={
        "billboard_count": len(billboards),
        "base_total": str(base_total),
        "level_discount_amount": str(level_amount),
        "additional_discount_type": (
            type(config.additional_discount).__name__
            if config.additional_discount is not None else None
        ),
        "additional_discount_amount": str(additional_amount),
    })

    return DiscountResult(
        base_total=base_total,
        level_discount_amount=level_amount,
        additional_discount_amount=additional_amount,
        level_lines=tuple(lines),
    )


def _additional_amount(discount: AdditionalDiscount | None, remaining: Decimal) -> Decimal:
    match discount:
        case None:
            return Decimal("0.00")
        case FixedDiscount(amount=amount):
            return round_money(amount)
        case PercentageDiscount(percent=percent):
            return round_money(max(remaining, ZERO) * percent / HUNDRED)
        case _:
            raise InvalidDiscountError(
                "additional_discount", discount, "expected FixedDiscount or PercentageDiscount",
            )


# ============================================================================
# Per-billboard apportionment (audit records)
# ============================================================================


@dataclass(frozen=True)
class BillboardDiscountRecord:
    """Historical price-before/after record for one billboard."""

    billboard_id: str
    price_before_discount: Decimal
    level_discount: Decimal
    additional_discount: Decimal
    price_after_discount: Decimal

    @property
    def total_discount(self) -> Decimal:
        return self.level_discount + self.additional_discount


def allocate_by_weight(total: Decimal, weights: Sequence[Decimal]) -> list[Decimal]:
    """
    Split ``total`` in proportion to ``weights`` with exact cent reconciliation.

    Postconditions:
        - Every share is rounded to 2 places.
        - ``sum(shares) == round(total, 2)`` whenever any weight is positive;
          the largest weight absorbs the rounding residual.
        - All shares are 0 when the weights sum to 0.
    """
    total = round_money(total)
    weight_sum = sum(weights, ZERO)
    if not weights or weight_sum <= ZERO:
        return [Decimal("0.00") for _ in weights]

    rounding_index = max(range(len(weights)), key=lambda i: weights[i])
    shares: list[Decimal] = []
    allocated = ZERO
    for i, weight in enumerate(weights):
        if i == rounding_index:
            shares.append(ZERO)
            continue
        share = round_money(total * weight / weight_sum)
        shares.append(share)
        allocated += share
    shares[rounding_index] = total - allocated
    return shares


@traced_engine("discount_apportionment", "1.0")
def apportion_discount(
    billboards: Sequence[BillboardLineItem],
    discount: DiscountResult,
) -> tuple[BillboardDiscountRecord, ...]:
    """
    Apportion a computed discount across billboards.

    The level discount is split in proportion to each billboard's exact
    level discount; the additional discount in proportion to each
    billboard's post-level-discount price.
    """
    lines = discount.level_lines
    if len(lines) != len(billboards):
        raise InvalidPricingInputError(
            "discount", len(lines), f"expected level lines for {len(billboards)} billboards",
        )

    level_shares = allocate_by_weight(
        discount.level_discount_amount, [line.amount for line in lines],
    )
    post_level = [line.unit_price - share for line, share in zip(lines, level_shares)]
    additional_shares = allocate_by_weight(
        discount.additional_discount_amount, [max(p, ZERO) for p in post_level],
    )

    records = tuple(
        BillboardDiscountRecord(
            billboard_id=line.billboard_id,
            price_before_discount=round_money(line.unit_price),
            level_discount=level_share,
            additional_discount=additional_share,
            price_after_discount=round_money(
                max(line.unit_price - level_share - additional_share, ZERO)
            ),
        )
        for line, level_share, additional_share in zip(lines, level_shares, additional_shares)
    )

    logger.debug("discount_apportioned", extra={
        "billboard_count": len(records),
        "level_discount_amount": str(discount.level_discount_amount),
        "additional_discount_amount": str(discount.additional_discount_amount),
    })
    return records
