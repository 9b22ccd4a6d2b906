"""
Module: billboard_engines.installments
Responsibility:
    Split a contract's grand total into dated, labeled installments using
    one of three strategies -- equal split, first payment followed by
    fixed-interval recurring payments, or a caller-supplied manual list --
    and validate that a schedule reconciles with the total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The engine holds no schedule state: every strategy run returns a fresh
    tuple that replaces the previous schedule wholesale.

Invariants enforced:
    - For the equal-split and first-payment strategies,
      ``sum(amounts) == grand_total`` to the cent.  Every installment but
      the last is ``round(balance / n, 2)``; the last absorbs the residual.
    - No generated installment is negative.
    - Manual schedules are returned unaltered; reconciliation is reported
      by ``validate_installments`` rather than corrected.

Failure modes:
    - InstallmentPlanError for counts outside 1-12, intervals outside 1-4
      months, or a first payment that is negative or exceeds the total.

Usage:
    from datetime import date
    from billboard_engines.installments import EqualSplit, distribute_installments

    schedule = distribute_installments(
        Decimal("1000.00"), EqualSplit(count=3, start_date=date(2024, 1, 1)),
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import TypeAlias

from dateutil.relativedelta import relativedelta

from billboard_engines.tracer import traced_engine
from billboard_kernel.domain.values import (
    HUNDRED,
    TWO_PLACES,
    ZERO,
    round_money,
    sum_money,
    to_decimal,
)
from billboard_kernel.exceptions import InstallmentPlanError
from billboard_kernel.logging_config import get_logger

logger = get_logger("engines.installments")

MAX_INSTALLMENTS = 12
INSTALLATION_DELAY_DAYS = 7
ALLOWED_INTERVAL_MONTHS: tuple[int, ...] = (1, 2, 3, 4)
DEFAULT_RECURRING_HORIZON_MONTHS = 6

_DAYS_PER_MONTH = 30
_ONE_MONTH = Decimal("1")


@dataclass(frozen=True)
class PaymentLabels:
    """
    Free-text payment-type labels and description templates.

    ``installment`` is formatted with the 1-based installment ``number``.
    """

    on_signing: str = "On signing"
    on_installation: str = "On installation"
    monthly: str = "Monthly"
    every_two_months: str = "Every 2 months"
    every_three_months: str = "Every 3 months"
    every_four_months: str = "Every 4 months"
    first_payment: str = "First payment"
    installment: str = "Installment {number}"

    def for_interval(self, interval_months: int) -> str:
        return {
            1: self.monthly,
            2: self.every_two_months,
            3: self.every_three_months,
            4: self.every_four_months,
        }[interval_months]

    def describe(self, number: int) -> str:
        if number == 1:
            return self.first_payment
        return self.installment.format(number=number)


DEFAULT_LABELS = PaymentLabels()


@dataclass(frozen=True)
class Installment:
    """One scheduled partial payment toward the grand total."""

    amount: Decimal
    payment_type: str
    description: str
    due_date: date | None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))


# ============================================================================
# Strategies
# ============================================================================


@dataclass(frozen=True)
class EqualSplit:
    """Split the total into ``count`` near-equal installments."""

    count: int
    start_date: date


@dataclass(frozen=True)
class FixedFirstPayment:
    """First payment as a display-currency amount."""

    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.amount < ZERO:
            raise InstallmentPlanError(f"First payment cannot be negative: {self.amount}")


@dataclass(frozen=True)
class PercentFirstPayment:
    """First payment as a percent (0-100) of the grand total."""

    percent: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", to_decimal(self.percent))
        if not (ZERO <= self.percent <= HUNDRED):
            raise InstallmentPlanError(
                f"First payment percent must be between 0 and 100: {self.percent}"
            )


FirstPayment: TypeAlias = FixedFirstPayment | PercentFirstPayment


@dataclass(frozen=True)
class FirstPaymentPlan:
    """
    First payment, then the balance spread over recurring payments.

    The recurring count is ``recurring_count`` when given; otherwise it is
    derived from ``last_payment_date`` (whole 30-day months divided by the
    interval), or defaults to six months' worth of payments.
    """

    first_payment: FirstPayment
    interval_months: int
    start_date: date
    recurring_count: int | None = None
    last_payment_date: date | None = None
    first_payment_date: date | None = None

    def __post_init__(self) -> None:
        if self.interval_months not in ALLOWED_INTERVAL_MONTHS:
            raise InstallmentPlanError(
                f"Interval must be one of {ALLOWED_INTERVAL_MONTHS} months, "
                f"got {self.interval_months}"
            )
        if self.recurring_count is not None:
            _check_count(self.recurring_count, "recurring payment count")


@dataclass(frozen=True)
class ManualPlan:
    """Caller-authored schedule; amounts are kept exactly as given."""

    entries: tuple[Installment, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))


InstallmentStrategy: TypeAlias = EqualSplit | FirstPaymentPlan | ManualPlan


def _check_count(count: int, what: str) -> None:
    if not (1 <= count <= MAX_INSTALLMENTS):
        raise InstallmentPlanError(
            f"{what.capitalize()} must be between 1 and {MAX_INSTALLMENTS}, got {count}"
        )


def _add_months(start: date, months: int) -> date:
    return start + relativedelta(months=months)


def split_evenly(total: Decimal, count: int) -> list[Decimal]:
    """
    Split ``total`` into ``count`` amounts that sum to it exactly.

    All but the last are ``round(total / count, 2)``; the last absorbs the
    residual.  When half-up rounding would drive the last amount below
    zero (tiny totals over many installments), the regular amount is
    rounded down instead.
    """
    total = round_money(total)
    regular = round_money(total / count)
    last = total - regular * (count - 1)
    if last < ZERO:
        regular = (total / count).quantize(TWO_PLACES, rounding=ROUND_DOWN)
        last = total - regular * (count - 1)
    return [regular] * (count - 1) + [last]


# ============================================================================
# Distribution
# ============================================================================


@traced_engine("installments", "1.0", fingerprint_fields=("grand_total", "strategy"))
def distribute_installments(
    grand_total: Decimal,
    strategy: InstallmentStrategy,
    labels: PaymentLabels | None = None,
) -> tuple[Installment, ...]:
    """
    Build a complete schedule for ``grand_total`` with the given strategy.

    Re-running replaces the whole schedule; nothing is patched in place.
    """
    grand_total = round_money(to_decimal(grand_total))
    labels = labels or DEFAULT_LABELS

    match strategy:
        case EqualSplit(count=count, start_date=start_date):
            schedule = distribute_evenly(grand_total, count, start_date, labels)
        case FirstPaymentPlan():
            schedule = distribute_with_first_payment(grand_total, strategy, labels)
        case ManualPlan(entries=entries):
            schedule = entries
            if installments_total(entries) != grand_total:
                logger.warning("manual_schedule_unreconciled", extra={
                    "grand_total": str(grand_total),
                    "installments_total": str(installments_total(entries)),
                })
        case _:
            raise InstallmentPlanError(f"Unknown installment strategy: {strategy!r}")

    logger.info("installments_distributed", extra={
        "strategy": type(strategy).__name__,
        "grand_total": str(grand_total),
        "installment_count": len(schedule),
        "installments_total": str(installments_total(schedule)),
    })
    return schedule


def distribute_evenly(
    grand_total: Decimal,
    count: int,
    start_date: date,
    labels: PaymentLabels | None = None,
) -> tuple[Installment, ...]:
    """
    Equal split.

    - 1 installment: the full amount on signing, due at ``start_date``.
    - 2 installments: half on signing, the remainder on installation, due
      ``INSTALLATION_DELAY_DAYS`` after ``start_date``.
    - n > 2: installment ``i`` (0-based) due ``i`` calendar months after
      ``start_date``; the first is on signing, the rest monthly.
    """
    _check_count(count, "installment count")
    grand_total = round_money(to_decimal(grand_total))
    labels = labels or DEFAULT_LABELS

    if count == 1:
        return (Installment(grand_total, labels.on_signing, labels.describe(1), start_date),)

    if count == 2:
        first = round_money(grand_total / 2)
        return (
            Installment(first, labels.on_signing, labels.describe(1), start_date),
            Installment(
                grand_total - first,
                labels.on_installation,
                labels.describe(2),
                start_date + timedelta(days=INSTALLATION_DELAY_DAYS),
            ),
        )

    amounts = split_evenly(grand_total, count)
    return tuple(
        Installment(
            amount=amount,
            payment_type=labels.on_signing if i == 0 else labels.monthly,
            description=labels.describe(i + 1),
            due_date=_add_months(start_date, i),
        )
        for i, amount in enumerate(amounts)
    )


def _first_payment_amount(grand_total: Decimal, first_payment: FirstPayment) -> Decimal:
    match first_payment:
        case FixedFirstPayment(amount=amount):
            return round_money(amount)
        case PercentFirstPayment(percent=percent):
            return round_money(grand_total * percent / HUNDRED)
        case _:
            raise InstallmentPlanError(f"Unknown first payment: {first_payment!r}")


def _recurring_count(plan: FirstPaymentPlan, first_date: date) -> int:
    if plan.recurring_count is not None:
        return plan.recurring_count
    if plan.last_payment_date is not None:
        # Derived counts are not capped; only an explicit count is limited.
        days = Decimal((plan.last_payment_date - first_date).days)
        months = max(1, int((days / _DAYS_PER_MONTH).quantize(_ONE_MONTH, rounding=ROUND_HALF_UP)))
        return max(1, months // plan.interval_months)
    return max(1, DEFAULT_RECURRING_HORIZON_MONTHS // plan.interval_months)


def distribute_with_first_payment(
    grand_total: Decimal,
    plan: FirstPaymentPlan,
    labels: PaymentLabels | None = None,
) -> tuple[Installment, ...]:
    """
    First payment plus fixed-interval recurring payments.

    A zero first payment is omitted and the recurring payments start at the
    first payment date; with a single recurrence this is the one-installment
    schedule.  A first payment covering the whole total yields just that
    payment.
    """
    grand_total = round_money(to_decimal(grand_total))
    labels = labels or DEFAULT_LABELS

    first = _first_payment_amount(grand_total, plan.first_payment)
    if first > grand_total:
        raise InstallmentPlanError(
            f"First payment {first} exceeds the contract total {grand_total}",
            grand_total=grand_total,
        )

    first_date = plan.first_payment_date or plan.start_date
    count = _recurring_count(plan, first_date)
    remaining = grand_total - first

    if first == ZERO and (count == 1 or remaining == ZERO):
        return distribute_evenly(grand_total, 1, first_date, labels)

    schedule: list[Installment] = []
    has_first = first > ZERO
    if has_first:
        schedule.append(Installment(first, labels.on_signing, labels.describe(1), first_date))

    if remaining <= ZERO:
        return tuple(schedule)

    offset = 1 if has_first else 0
    payment_type = labels.for_interval(plan.interval_months)
    for i, amount in enumerate(split_evenly(remaining, count)):
        schedule.append(Installment(
            amount=amount,
            payment_type=payment_type,
            description=labels.describe(i + 1 + offset),
            due_date=_add_months(first_date, (i + offset) * plan.interval_months),
        ))
    return tuple(schedule)


# ============================================================================
# Validation and schedule helpers
# ============================================================================


@dataclass(frozen=True)
class InstallmentValidation:
    """Caller-facing reconciliation result for a schedule."""

    is_valid: bool
    message: str
    difference: Decimal = ZERO


def installments_total(installments: Sequence[Installment]) -> Decimal:
    return sum_money(round_money(inst.amount) for inst in installments)


def validate_installments(
    installments: Sequence[Installment],
    grand_total: Decimal,
) -> InstallmentValidation:
    """
    Check that a schedule reconciles with the contract total to the cent.

    This is the engine's one explicit signal: money paid must reconcile
    before a contract is finalized.  A schedule left over from an earlier
    total fails here as well.
    """
    if not installments:
        return InstallmentValidation(False, "No installments have been added to the contract")

    grand_total = round_money(to_decimal(grand_total))
    total = installments_total(installments)
    difference = grand_total - total
    if difference != ZERO:
        return InstallmentValidation(
            False,
            f"Installments total {total} does not equal the contract total {grand_total}",
            difference,
        )
    if any(inst.amount < ZERO for inst in installments):
        return InstallmentValidation(False, "Installment amounts cannot be negative")
    return InstallmentValidation(True, "")


def draft_manual_installments(
    count: int,
    start_date: date,
    labels: PaymentLabels | None = None,
) -> tuple[Installment, ...]:
    """Zero-amount rows for an operator to fill in as a manual schedule."""
    _check_count(count, "installment count")
    labels = labels or DEFAULT_LABELS
    return tuple(
        Installment(
            amount=Decimal("0.00"),
            payment_type=labels.on_signing if i == 0 else labels.monthly,
            description=labels.describe(i + 1),
            due_date=_add_months(start_date, i),
        )
        for i in range(count)
    )


def append_balancing_installment(
    installments: Sequence[Installment],
    grand_total: Decimal,
    start_date: date,
    labels: PaymentLabels | None = None,
) -> tuple[Installment, ...]:
    """
    Return a new schedule with the outstanding balance appended.

    The new row is due one month after the latest due date (or on signing
    at ``start_date`` for an empty schedule).  An over-paid schedule gets a
    zero row.
    """
    labels = labels or DEFAULT_LABELS
    balance = max(round_money(to_decimal(grand_total)) - installments_total(installments), ZERO)
    number = len(installments) + 1

    if not installments:
        row = Installment(balance, labels.on_signing, labels.describe(1), start_date)
    else:
        due_dates = [inst.due_date for inst in installments if inst.due_date is not None]
        last_due = max(due_dates) if due_dates else start_date
        row = Installment(
            balance, labels.monthly, labels.describe(number), _add_months(last_due, 1),
        )
    return (*installments, row)


@dataclass(frozen=True)
class PaymentGroup:
    """A run of consecutive installments with the same amount."""

    amount: Decimal
    count: int
    payment_type: str
    start_date: date | None
    end_date: date | None
    installments: tuple[Installment, ...]

    @property
    def is_grouped(self) -> bool:
        return self.count >= 2

    @property
    def total(self) -> Decimal:
        return round_money(self.amount * self.count)


def group_repeating_payments(installments: Sequence[Installment]) -> tuple[PaymentGroup, ...]:
    """Collapse consecutive equal-amount installments for compact schedules."""
    groups: list[PaymentGroup] = []
    i = 0
    while i < len(installments):
        current = installments[i]
        run = 1
        while (
            i + run < len(installments)
            and round_money(installments[i + run].amount) == round_money(current.amount)
        ):
            run += 1
        members = tuple(installments[i:i + run])
        groups.append(PaymentGroup(
            amount=round_money(current.amount),
            count=run,
            payment_type=current.payment_type,
            start_date=members[0].due_date,
            end_date=members[-1].due_date,
            installments=members,
        ))
        i += run
    return tuple(groups)
