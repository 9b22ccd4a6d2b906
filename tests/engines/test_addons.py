"""
Tests for the print and installation add-on calculators.
"""

from decimal import Decimal

import pytest

from billboard_engines.addons import (
    AddOnConfig,
    InstallationPriceTable,
    calculate_installation_cost,
    calculate_print_cost,
    calculate_print_cost_for,
    parse_panel_dimensions,
)
from billboard_kernel.domain.currency import CurrencyConverter
from billboard_kernel.domain.values import BillboardLineItem
from billboard_kernel.exceptions import InvalidPricingInputError

IDENTITY = CurrencyConverter()


class TestParsePanelDimensions:

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("12x4", (Decimal("12"), Decimal("4"))),
            ("12X4", (Decimal("12"), Decimal("4"))),
            ("3,5×2", (Decimal("3.5"), Decimal("2"))),
            ("4 - 3", (Decimal("4"), Decimal("3"))),
            ("Panel 6.5x3 backlit", (Decimal("6.5"), Decimal("3"))),
        ],
    )
    def test_parses_separators(self, label, expected):
        assert parse_panel_dimensions(label) == expected

    @pytest.mark.parametrize("label", ["invalid", "", None, "12"])
    def test_unparseable(self, label):
        assert parse_panel_dimensions(label) is None


class TestPrintCost:
    """area x faces x price per square unit, converted."""

    def test_single_billboard(self):
        billboard = BillboardLineItem("1", "12x4", face_count=2)
        line = calculate_print_cost_for(billboard, Decimal("10"), IDENTITY)
        assert line.area == Decimal("48")
        assert line.amount == Decimal("960.00")

    def test_invalid_size_costs_zero(self):
        billboard = BillboardLineItem("1", "invalid", face_count=2)
        line = calculate_print_cost_for(billboard, Decimal("10"), IDENTITY)
        assert line.amount == Decimal("0")
        assert not line.size_parsed

    def test_invalid_size_does_not_affect_others(self):
        config = AddOnConfig(print_enabled=True, print_price_per_area_unit=Decimal("10"))
        result = calculate_print_cost(
            [BillboardLineItem("1", "12x4", 2), BillboardLineItem("2", "invalid", 2)],
            config,
            IDENTITY,
        )
        assert result.total == Decimal("960.00")
        assert result.unparsed_billboard_ids == ("2",)

    def test_converted(self):
        config = AddOnConfig(print_enabled=True, print_price_per_area_unit=Decimal("10"))
        result = calculate_print_cost(
            [BillboardLineItem("1", "12x4", 2)], config, CurrencyConverter(Decimal("0.5")),
        )
        assert result.total == Decimal("480.00")

    def test_disabled_is_zero(self):
        config = AddOnConfig(print_enabled=False, print_price_per_area_unit=Decimal("10"))
        result = calculate_print_cost([BillboardLineItem("1", "12x4", 2)], config, IDENTITY)
        assert result.total == Decimal("0.00")
        assert result.lines == ()

    def test_zero_price_is_zero(self):
        config = AddOnConfig(print_enabled=True)
        assert calculate_print_cost([BillboardLineItem("1", "12x4")], config, IDENTITY).total == Decimal("0.00")

    def test_negative_price_rejected(self):
        with pytest.raises(InvalidPricingInputError):
            AddOnConfig(print_enabled=True, print_price_per_area_unit=Decimal("-1"))


class TestInstallationCost:
    """One looked-up price per billboard; grouping by size is presentational."""

    def test_grouped_by_size(self, billboard_a, billboard_b, billboard_small, installation_table):
        config = AddOnConfig(installation_enabled=True)
        result = calculate_installation_cost(
            [billboard_a, billboard_b, billboard_small], installation_table, config, IDENTITY,
        )
        by_size = {line.size_label: line for line in result.by_size}
        assert by_size["12x4"].billboard_count == 2
        assert by_size["12x4"].subtotal == Decimal("600.00")
        assert by_size["8x3"].subtotal == Decimal("150.00")
        assert result.total == Decimal("750.00")

    def test_converted_per_size_price(self, billboard_a, billboard_b, installation_table):
        config = AddOnConfig(installation_enabled=True)
        result = calculate_installation_cost(
            [billboard_a, billboard_b], installation_table, config, CurrencyConverter(Decimal("0.21")),
        )
        assert result.by_size[0].unit_price == Decimal("63.00")
        assert result.total == Decimal("126.00")

    def test_unknown_size_costs_zero(self, installation_table, caplog):
        config = AddOnConfig(installation_enabled=True)
        with caplog.at_level("WARNING", logger="billboard_pricing"):
            result = calculate_installation_cost(
                [BillboardLineItem("1", "20x5")], installation_table, config, IDENTITY,
            )
        assert result.total == Decimal("0.00")
        assert any(r.getMessage() == "installation_price_missing" for r in caplog.records)

    def test_disabled_is_zero(self, billboard_a, installation_table):
        result = calculate_installation_cost([billboard_a], installation_table, AddOnConfig(), IDENTITY)
        assert result.total == Decimal("0.00")
        assert result.by_size == ()


class TestInstallationPriceTable:

    def test_quote_total_is_flat_sum(self, installation_table):
        quote = installation_table(["12x4", "12x4", "8x3"])
        assert quote.per_size_price == {"12x4": Decimal("300"), "8x3": Decimal("150")}
        assert quote.total_installation_cost == Decimal("750")

    def test_accepts_pairs(self):
        table = InstallationPriceTable([("6x3", "200")])
        assert table.price_for("6x3") == Decimal("200")
        assert table.price_for("3x4") is None
