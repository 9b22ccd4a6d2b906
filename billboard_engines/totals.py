"""
Module: billboard_engines.totals
Responsibility:
    Combine unit prices, add-on costs and the discount into the headline
    contract figures: base total, total after discount, net rental basis,
    grand (customer-facing) total and the operating fee.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    1. total_after_discount = max(0, base_total - total_discount)
    2. total_discount = level_discount_amount + additional_discount_amount
    3. grand_total = total_after_discount + every add-on billed separately
    4. net_rental_basis = total_after_discount - every add-on included in
       the price (floored at 0)
    5. operating_fee = round(net_rental_basis * operating_fee_rate / 100, 2)

    An add-on included in the price lowers the net rental basis and leaves
    the grand total unchanged; an add-on billed separately raises the grand
    total and leaves the net rental basis unchanged.

Failure modes:
    - None.  Negative balances are clamped, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from billboard_engines.addons import AddOnConfig
from billboard_engines.discount import DiscountResult
from billboard_engines.tracer import traced_engine
from billboard_kernel.domain.values import HUNDRED, ZERO, round_money, to_decimal
from billboard_kernel.logging_config import get_logger

logger = get_logger("engines.totals")

DEFAULT_OPERATING_FEE_RATE = Decimal("3")


@dataclass(frozen=True)
class ContractTotals:
    """
    Headline figures of a priced contract, in the display currency.

    Derived on every recomputation and never persisted mid-computation.
    Every field is a non-negative Decimal rounded to 2 places.
    """

    base_total: Decimal
    level_discount_amount: Decimal
    additional_discount_amount: Decimal
    total_discount: Decimal
    total_after_discount: Decimal
    installation_cost: Decimal
    print_cost: Decimal
    net_rental_basis: Decimal
    operating_fee: Decimal
    grand_total: Decimal

    def as_dict(self) -> dict[str, str]:
        """String-valued mapping for persistence and document layers."""
        return {name: str(getattr(self, name)) for name in self.__dataclass_fields__}


def calculate_operating_fee(net_rental_basis: Decimal, operating_fee_rate: Decimal) -> Decimal:
    """Operating fee: ``round(net_rental_basis * rate / 100, 2)``."""
    return round_money(to_decimal(net_rental_basis) * to_decimal(operating_fee_rate) / HUNDRED)


@traced_engine(
    "totals",
    "1.0",
    fingerprint_fields=("base_total", "installation_cost", "print_cost", "addons", "operating_fee_rate"),
)
def compute_totals(
    base_total: Decimal,
    discount: DiscountResult,
    installation_cost: Decimal,
    print_cost: Decimal,
    addons: AddOnConfig,
    operating_fee_rate: Decimal = DEFAULT_OPERATING_FEE_RATE,
) -> ContractTotals:
    """
    Apply the totals invariants.

    ``installation_cost`` and ``print_cost`` are the calculated add-on
    costs; each only takes part when its add-on is enabled, and its
    inclusion flag decides whether it is carved out of the rental
    (included) or added on top (billed).

    Never raises.
    """
    base_total = round_money(to_decimal(base_total))
    level_amount = round_money(discount.level_discount_amount)
    additional_amount = round_money(discount.additional_discount_amount)
    total_discount = level_amount + additional_amount

    total_after_discount = max(ZERO, base_total - total_discount)
    if base_total - total_discount < ZERO:
        logger.warning("discount_exceeds_base_total", extra={
            "base_total": str(base_total),
            "total_discount": str(total_discount),
        })

    installation = round_money(to_decimal(installation_cost)) if addons.installation_enabled else ZERO
    printing = round_money(to_decimal(print_cost)) if addons.print_enabled else ZERO

    included = ZERO
    billed = ZERO
    if addons.installation_included_in_price:
        included += installation
    else:
        billed += installation
    if addons.print_included_in_price:
        included += printing
    else:
        billed += printing

    grand_total = total_after_discount + billed
    net_rental_basis = total_after_discount - included
    if net_rental_basis < ZERO:
        logger.warning("included_addons_exceed_rental", extra={
            "total_after_discount": str(total_after_discount),
            "included_addons": str(included),
        })
        net_rental_basis = ZERO

    operating_fee = calculate_operating_fee(net_rental_basis, operating_fee_rate)

    totals = ContractTotals(
        base_total=base_total,
        level_discount_amount=level_amount,
        additional_discount_amount=additional_amount,
        total_discount=round_money(total_discount),
        total_after_discount=round_money(total_after_discount),
        installation_cost=round_money(installation),
        print_cost=round_money(printing),
        net_rental_basis=round_money(net_rental_basis),
        operating_fee=operating_fee,
        grand_total=round_money(grand_total),
    )

    logger.info("totals_computed", extra={
        "base_total": str(totals.base_total),
        "total_discount": str(totals.total_discount),
        "total_after_discount": str(totals.total_after_discount),
        "net_rental_basis": str(totals.net_rental_basis),
        "operating_fee": str(totals.operating_fee),
        "grand_total": str(totals.grand_total),
    })
    return totals
