"""
Currency -- display-currency catalog and the single conversion boundary.

Every amount entering the engines is in the base currency; every amount
leaving them is in the contract's display currency.  Conversion happens only
through ``convert_amount`` / ``CurrencyConverter`` so there are no
mixed-currency intermediate values.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from billboard_kernel.domain.values import ZERO, round_money, to_decimal
from billboard_kernel.exceptions import CurrencyNotFoundError
from billboard_kernel.logging_config import get_logger

logger = get_logger("domain.currency")

_ONE = Decimal("1")


def effective_rate(rate: Any) -> Decimal:
    """Return the rate to apply; missing, non-finite, zero or negative rates fall back to 1."""
    if rate is None:
        return _ONE
    value = to_decimal(rate)
    if not value.is_finite() or value <= ZERO:
        logger.warning("exchange_rate_defaulted", extra={
            "requested_rate": str(value),
            "applied_rate": "1",
        })
        return _ONE
    return value


def convert_amount(amount: Decimal, rate: Any) -> Decimal:
    """
    Convert a base-currency amount to the display currency.

    Postconditions:
        Returns ``round(amount * rate, 2)`` with half-away-from-zero rounding.
        A non-finite or non-positive rate is treated as 1.  Never raises for a bad rate.
    """
    return round_money(to_decimal(amount) * effective_rate(rate))


@dataclass(frozen=True)
class CurrencyConverter:
    """
    Callable conversion bound to one exchange rate.

    Passed to the engines as their ``convert`` collaborator so that each
    stage introducing a base-currency amount converts it the same way.
    """

    rate: Decimal = _ONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", effective_rate(self.rate))

    def __call__(self, amount: Decimal) -> Decimal:
        return convert_amount(amount, self.rate)


@dataclass(frozen=True)
class CurrencyInfo:
    """Display data for one currency plus its rate against the base currency."""

    code: str
    symbol: str
    written_name: str
    exchange_rate: Decimal = _ONE

    def converter(self) -> CurrencyConverter:
        return CurrencyConverter(self.exchange_rate)


@dataclass(frozen=True)
class CurrencyCatalog:
    """Configured currencies, keyed by upper-cased code."""

    base_code: str
    currencies: dict[str, CurrencyInfo] = field(default_factory=dict)

    @classmethod
    def from_infos(cls, base_code: str, infos: Iterable[CurrencyInfo]) -> CurrencyCatalog:
        return cls(
            base_code=base_code.upper(),
            currencies={info.code.upper(): info for info in infos},
        )

    def get(self, code: str) -> CurrencyInfo:
        try:
            return self.currencies[code.upper()]
        except KeyError:
            raise CurrencyNotFoundError(code) from None

    def converter_for(self, code: str) -> CurrencyConverter:
        """Converter from the base currency to ``code``."""
        if code.upper() == self.base_code:
            return CurrencyConverter()
        return self.get(code).converter()

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(sorted(self.currencies))
