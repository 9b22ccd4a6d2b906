"""Tests for the domain value objects and Decimal helpers."""

from decimal import Decimal

import pytest

from billboard_kernel.domain.values import (
    BillboardLineItem,
    Days,
    Months,
    round_money,
    sum_money,
    to_decimal,
)
from billboard_kernel.exceptions import BillboardPricingError, InvalidPricingInputError


class TestDecimalHelpers:

    def test_to_decimal_avoids_float_repr(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_to_decimal_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")

    def test_to_decimal_rejects_text(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            to_decimal("twelve")

    def test_round_money_half_up(self):
        assert round_money(Decimal("2.675")) == Decimal("2.68")
        assert round_money(Decimal("2.674")) == Decimal("2.67")

    def test_sum_money_empty(self):
        assert sum_money([]) == Decimal("0.00")


class TestBillboardLineItem:
    """Normalized, immutable billboard input."""

    def test_defaults(self):
        item = BillboardLineItem("7", " 12x4 ")
        assert item.face_count == 1
        assert item.size_label == "12x4"
        assert item.level is None

    def test_price_lookup_key_prefers_size_id(self):
        assert BillboardLineItem("1", "12x4", size_id=17).price_lookup_key == 17
        assert BillboardLineItem("1", "12x4").price_lookup_key == "12x4"

    def test_zero_faces_rejected(self):
        with pytest.raises(InvalidPricingInputError) as exc_info:
            BillboardLineItem("1", "12x4", face_count=0)
        assert exc_info.value.field_name == "face_count"
        assert exc_info.value.code == "INVALID_PRICING_INPUT"

    def test_immutable(self):
        item = BillboardLineItem("1", "12x4")
        with pytest.raises(AttributeError):
            item.face_count = 3


class TestPricingMode:

    def test_zero_counts_allowed(self):
        assert Months(0).count == 0
        assert Days(0).count == 0

    @pytest.mark.parametrize("mode", [Months, Days])
    def test_negative_count_rejected(self, mode):
        with pytest.raises(BillboardPricingError):
            mode(-1)

    def test_months_and_days_are_distinct(self):
        assert Months(3) != Days(3)
