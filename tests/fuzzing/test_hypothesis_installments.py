"""
Hypothesis-based property tests for the pricing engines.

Properties:
- Installment sum invariant: every generated schedule sums to the grand
  total to the cent, with no negative installment, for 1..12 installments.
- First-payment plans reconcile for any first payment within the total.
- Totals invariants hold for any discount and add-on combination.
- Apportioned discounts sum exactly to the discount they split.
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from billboard_engines.addons import AddOnConfig
from billboard_engines.discount import DiscountResult, allocate_by_weight
from billboard_engines.installments import (
    EqualSplit,
    FirstPaymentPlan,
    FixedFirstPayment,
    PercentFirstPayment,
    distribute_installments,
    installments_total,
    validate_installments,
)
from billboard_engines.totals import compute_totals

pytestmark = pytest.mark.slow

money = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("10000000"), places=2,
    allow_nan=False, allow_infinity=False,
)
start_dates = st.dates(min_value=date(2020, 1, 1), max_value=date(2035, 12, 31))


class TestInstallmentSumInvariant:

    @given(total=money, count=st.integers(min_value=1, max_value=12), start=start_dates)
    @settings(max_examples=300, deadline=None)
    def test_equal_split_sums_to_total(self, total, count, start):
        schedule = distribute_installments(total, EqualSplit(count, start))
        assert len(schedule) == count
        assert installments_total(schedule) == total
        assert all(inst.amount >= 0 for inst in schedule)
        assert validate_installments(schedule, total).is_valid

    @given(total=money, count=st.integers(min_value=3, max_value=12), start=start_dates)
    @settings(max_examples=100, deadline=None)
    def test_equal_split_due_dates_ascending(self, total, count, start):
        schedule = distribute_installments(total, EqualSplit(count, start))
        dates = [inst.due_date for inst in schedule]
        assert dates == sorted(dates)
        assert dates[0] == start

    @given(
        total=money,
        percent=st.decimals(min_value=Decimal("0"), max_value=Decimal("100"), places=2),
        interval=st.sampled_from([1, 2, 3, 4]),
        count=st.integers(min_value=1, max_value=12),
        start=start_dates,
    )
    @settings(max_examples=300, deadline=None)
    def test_percent_first_payment_reconciles(self, total, percent, interval, count, start):
        plan = FirstPaymentPlan(PercentFirstPayment(percent), interval, start, recurring_count=count)
        schedule = distribute_installments(total, plan)
        assert installments_total(schedule) == total
        assert all(inst.amount >= 0 for inst in schedule)

    @given(data=st.data(), interval=st.sampled_from([1, 2, 3, 4]), start=start_dates)
    @settings(max_examples=200, deadline=None)
    def test_fixed_first_payment_reconciles(self, data, interval, start):
        total = data.draw(money)
        first = data.draw(st.decimals(min_value=Decimal("0"), max_value=total, places=2))
        days = data.draw(st.integers(min_value=0, max_value=400))
        plan = FirstPaymentPlan(
            FixedFirstPayment(first), interval, start,
            last_payment_date=start + timedelta(days=days),
        )
        schedule = distribute_installments(total, plan)
        assert installments_total(schedule) == total


class TestTotalsInvariants:

    @given(
        base=money,
        level=money,
        additional=money,
        installation=money,
        printing=money,
        flags=st.tuples(st.booleans(), st.booleans(), st.booleans(), st.booleans()),
        fee_rate=st.decimals(min_value=Decimal("0"), max_value=Decimal("100"), places=2),
    )
    @settings(max_examples=300, deadline=None)
    def test_invariants(self, base, level, additional, installation, printing, flags, fee_rate):
        inst_enabled, inst_included, print_enabled, print_included = flags
        addons = AddOnConfig(
            installation_enabled=inst_enabled,
            installation_included_in_price=inst_included,
            print_enabled=print_enabled,
            print_included_in_price=print_included,
        )
        totals = compute_totals(
            base, DiscountResult(base, level, additional), installation, printing, addons,
            operating_fee_rate=fee_rate,
        )

        assert totals.total_discount == totals.level_discount_amount + totals.additional_discount_amount
        assert totals.total_after_discount == max(Decimal("0"), base - totals.total_discount)

        billed = included = Decimal("0")
        if inst_enabled:
            if inst_included:
                included += installation
            else:
                billed += installation
        if print_enabled:
            if print_included:
                included += printing
            else:
                billed += printing
        assert totals.grand_total == totals.total_after_discount + billed

        assert totals.net_rental_basis == max(Decimal("0"), totals.total_after_discount - included)
        assert totals.operating_fee == (totals.net_rental_basis * fee_rate / 100).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP,
        )

        for value in vars(totals).values():
            assert value >= 0


class TestApportionment:

    @given(
        total=money,
        weights=st.lists(
            st.decimals(min_value=Decimal("0.01"), max_value=Decimal("100000"), places=2),
            min_size=1, max_size=20,
        ),
    )
    @settings(max_examples=300, deadline=None)
    def test_shares_sum_exactly(self, total, weights):
        assert sum(allocate_by_weight(total, weights)) == total
