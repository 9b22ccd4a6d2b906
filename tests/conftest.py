"""
Shared fixtures for the billboard pricing test suite.

The engines are pure, so fixtures are plain value objects: a small price
list, an installation price table and a handful of billboards.
"""

from datetime import date
from decimal import Decimal

import pytest

from billboard_engines.addons import InstallationPriceTable
from billboard_engines.unit_price import PricingTierRow, PricingTierTable
from billboard_kernel.domain.values import BillboardLineItem
from billboard_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(autouse=True)
def _isolated_logging():
    """Keep the logger hierarchy propagating to caplog between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def tier_table() -> PricingTierTable:
    """Price list for three sizes across two levels, regular customers."""
    return PricingTierTable([
        PricingTierRow(
            size="12x4",
            level="A",
            customer_category="regular",
            monthly={1: Decimal("1000"), 3: Decimal("2700"), 6: Decimal("5000")},
            daily=Decimal("40"),
        ),
        PricingTierRow(
            size="12x4",
            level="B",
            customer_category="regular",
            monthly={1: Decimal("800"), 3: Decimal("2100")},
        ),
        PricingTierRow(
            size="8x3",
            level="A",
            customer_category="regular",
            monthly={1: Decimal("600"), 3: Decimal("1650")},
        ),
    ])


@pytest.fixture
def installation_table() -> InstallationPriceTable:
    return InstallationPriceTable({"12x4": Decimal("300"), "8x3": Decimal("150")})


@pytest.fixture
def billboard_a() -> BillboardLineItem:
    return BillboardLineItem(billboard_id="BB-1", size_label="12x4", face_count=2, level="A")


@pytest.fixture
def billboard_b() -> BillboardLineItem:
    return BillboardLineItem(billboard_id="BB-2", size_label="12x4", face_count=1, level="B")


@pytest.fixture
def billboard_small() -> BillboardLineItem:
    return BillboardLineItem(billboard_id="BB-3", size_label="8x3", face_count=2, level="A")


@pytest.fixture
def start_date() -> date:
    return date(2024, 1, 1)
