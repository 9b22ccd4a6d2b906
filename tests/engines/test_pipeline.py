"""
End-to-end tests for the contract pricing pipeline.
"""

from datetime import date
from decimal import Decimal

import pytest

from billboard_engines.addons import AddOnConfig
from billboard_engines.discount import DiscountConfig, FixedDiscount, PercentageDiscount
from billboard_engines.installments import EqualSplit, validate_installments
from billboard_engines.pipeline import ContractPricingInput, price_contract, quote_with_installments
from billboard_kernel.domain.values import Days, Months


@pytest.fixture
def pricing_input(billboard_a, billboard_small, tier_table, installation_table):
    return ContractPricingInput(
        billboards=(billboard_a, billboard_small),
        mode=Months(1),
        customer_category="regular",
        tier_lookup=tier_table,
        installation_lookup=installation_table,
        discount=DiscountConfig(
            level_discounts={"A": Decimal("10")},
            additional_discount=PercentageDiscount(Decimal("10")),
        ),
        addons=AddOnConfig(
            installation_enabled=True,
            print_enabled=True,
            print_price_per_area_unit=Decimal("10"),
            print_included_in_price=True,
        ),
    )


class TestPriceContract:

    def test_full_chain(self, pricing_input):
        quote = price_contract(pricing_input)
        totals = quote.totals

        # 1000 + 600, A=10% -> 160, then 10% of 1440 -> 144
        assert totals.base_total == Decimal("1600.00")
        assert totals.level_discount_amount == Decimal("160.00")
        assert totals.additional_discount_amount == Decimal("144.00")
        assert totals.total_after_discount == Decimal("1296.00")
        # Installation billed: 300 + 150; print included: 48*2*10 + 24*2*10
        assert totals.installation_cost == Decimal("450.00")
        assert totals.print_cost == Decimal("1440.00")
        assert totals.grand_total == Decimal("1746.00")
        # 1296 - 1440 floors at 0
        assert totals.net_rental_basis == Decimal("0.00")
        assert totals.operating_fee == Decimal("0.00")

    def test_apportionment_matches_discount(self, pricing_input):
        quote = price_contract(pricing_input)
        assert sum(r.total_discount for r in quote.apportionment) == quote.totals.total_discount
        assert quote.grand_total == quote.totals.grand_total

    def test_deterministic(self, pricing_input):
        assert price_contract(pricing_input) == price_contract(pricing_input)

    def test_exchange_rate_applied_everywhere(self, billboard_a, tier_table, installation_table):
        quote = price_contract(ContractPricingInput(
            billboards=(billboard_a,),
            mode=Months(1),
            customer_category="regular",
            tier_lookup=tier_table,
            installation_lookup=installation_table,
            addons=AddOnConfig(installation_enabled=True),
            exchange_rate=Decimal("0.5"),
        ))
        assert quote.totals.base_total == Decimal("500.00")
        assert quote.totals.installation_cost == Decimal("150.00")
        assert quote.totals.grand_total == Decimal("650.00")

    def test_bad_exchange_rate_treated_as_one(self, billboard_a, tier_table):
        quote = price_contract(ContractPricingInput(
            billboards=(billboard_a,),
            mode=Months(1),
            customer_category="regular",
            tier_lookup=tier_table,
            exchange_rate=Decimal("0"),
        ))
        assert quote.totals.base_total == Decimal("1000.00")

    def test_raw_catalog_records_normalized(self, tier_table):
        quote = price_contract(ContractPricingInput(
            billboards=({"ID": 5, "Size": "12x4", "Level": "A", "Faces_Count": "2"},),
            mode=Days(5),
            customer_category="regular",
            tier_lookup=tier_table,
        ))
        assert quote.totals.base_total == Decimal("200.00")

    def test_missing_tier_reported(self, tier_table):
        quote = price_contract(ContractPricingInput(
            billboards=({"ID": 5, "Size": "20x5", "Level": "A"},),
            mode=Months(1),
            customer_category="regular",
            tier_lookup=tier_table,
        ))
        assert quote.missing_tier_ids == ("5",)
        assert quote.totals.grand_total == Decimal("0.00")

    def test_fixed_discount_clamps(self, billboard_a, tier_table):
        quote = price_contract(ContractPricingInput(
            billboards=(billboard_a,),
            mode=Months(1),
            customer_category="regular",
            tier_lookup=tier_table,
            discount=DiscountConfig(additional_discount=FixedDiscount(Decimal("5000"))),
        ))
        assert quote.totals.total_after_discount == Decimal("0.00")

    def test_operating_fee_rate_override(self, billboard_a, tier_table):
        quote = price_contract(ContractPricingInput(
            billboards=(billboard_a,),
            mode=Months(1),
            customer_category="regular",
            tier_lookup=tier_table,
            operating_fee_rate="5",
        ))
        assert quote.totals.operating_fee == Decimal("50.00")


class TestQuoteWithInstallments:

    def test_schedule_reconciles(self, pricing_input):
        quote = quote_with_installments(pricing_input, EqualSplit(3, date(2024, 1, 1)))
        assert len(quote.installments) == 3
        assert validate_installments(quote.installments, quote.grand_total).is_valid

    def test_price_only_quote_has_no_schedule(self, pricing_input):
        assert price_contract(pricing_input).installments == ()
