"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the foundational value types for contract pricing: the
    billboard line item, the pricing mode variant and the Decimal helpers
    every engine uses for money.  These replace raw dicts and floats
    wherever billboard or money data appears in engine logic.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine module.  No outward dependencies.

Invariants enforced:
    - All monetary amounts are Decimal, never float.
    - Money is quantized to two places with ROUND_HALF_UP, which for
      Decimal is half-away-from-zero.
    - PricingMode is exactly one of Months or Days.

Failure modes:
    - InvalidPricingInputError on negative counts or face counts.
    - ValueError from to_decimal() on non-numeric input.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, TypeAlias

from billboard_kernel.exceptions import InvalidPricingInputError

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric value to Decimal without passing through float repr.

    Raises:
        ValueError: If the value cannot be interpreted as a number.
    """
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def round_money(value: Decimal) -> Decimal:
    """Round to two places, half away from zero."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """Sum Decimal amounts, returning a two-place zero for an empty input."""
    return sum(values, Decimal("0.00"))


@dataclass(frozen=True, slots=True)
class BillboardLineItem:
    """
    One selected billboard, already normalized from the catalog record.

    Contract:
        Immutable input owned by the caller.  The engines reference it by
        ``billboard_id`` and never mutate it.

    Guarantees:
        - ``face_count`` is at least 1.
        - ``size_label`` is a stripped string (may be unparseable; the
          print-cost calculator degrades to zero for such labels).
    """

    billboard_id: str
    size_label: str
    face_count: int = 1
    level: str | None = None
    size_id: int | str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "billboard_id", str(self.billboard_id))
        object.__setattr__(self, "size_label", (self.size_label or "").strip())
        if self.face_count < 1:
            raise InvalidPricingInputError(
                "face_count", self.face_count, "a billboard has at least one face",
            )

    @property
    def price_lookup_key(self) -> int | str:
        """Key used to match price tiers: the size id, else the size label."""
        return self.size_id if self.size_id is not None else self.size_label


@dataclass(frozen=True, slots=True)
class Months:
    """Contract duration expressed in whole months."""

    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise InvalidPricingInputError("months", self.count, "must be >= 0")


@dataclass(frozen=True, slots=True)
class Days:
    """Contract duration expressed in days."""

    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise InvalidPricingInputError("days", self.count, "must be >= 0")


PricingMode: TypeAlias = Months | Days
