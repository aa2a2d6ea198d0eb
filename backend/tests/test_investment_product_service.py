"""
Tests for catalog queries and admin maintenance
"""

from decimal import Decimal

import pytest

from investment_tracker.core.exceptions import ProductNotFound
from investment_tracker.models import InvestmentProduct, InvestmentType, RiskLevel
from investment_tracker.services import investment_product_service as products
from investment_tracker.services.populate_products import DEFAULT_PRODUCTS, populate_default_products


@pytest.fixture
def catalog(make_product):
    return {
        "index": make_product(name="Nifty 50 Index Fund", minimum_investment="500.00"),
        "fd": make_product(
            name="SBI Fixed Deposit",
            product_type=InvestmentType.FIXED_DEPOSIT,
            risk_level=RiskLevel.LOW,
            minimum_investment="1000.00",
        ),
        "crypto": make_product(
            name="Bitcoin",
            product_type=InvestmentType.CRYPTOCURRENCY,
            risk_level=RiskLevel.HIGH,
            minimum_investment="5000.00",
        ),
        "retired": make_product(name="Retired Index Fund", is_active=False),
    }


def test_active_products_exclude_inactive(db, catalog):
    names = [p.name for p in products.get_active_products(db)]
    assert "Retired Index Fund" not in names
    assert len(names) == 3
    assert len(products.get_all_products(db)) == 4


def test_get_active_product(db, catalog):
    assert products.get_active_product(db, catalog["fd"].id).name == "SBI Fixed Deposit"
    with pytest.raises(ProductNotFound):
        products.get_active_product(db, catalog["retired"].id)


def test_find_active_by_name_contains_is_case_insensitive(db, catalog):
    matches = products.find_active_by_name_contains(db, "INDEX")
    assert [p.name for p in matches] == ["Nifty 50 Index Fund"]


def test_by_type_and_risk(db, catalog):
    assert [p.name for p in products.get_products_by_type(db, InvestmentType.CRYPTOCURRENCY)] == ["Bitcoin"]
    assert [p.name for p in products.get_products_by_risk_level(db, RiskLevel.LOW)] == ["SBI Fixed Deposit"]


def test_investment_types():
    types = products.get_investment_types()
    assert "MUTUAL_FUND" in types
    assert len(types) == len(InvestmentType)


def test_filter_search_term_takes_precedence(db, catalog):
    result = products.filter_products(db, search_term="bitcoin", risk_level=RiskLevel.LOW)
    assert [p.name for p in result] == ["Bitcoin"]


def test_filter_by_max_amount(db, catalog):
    result = products.filter_products(db, max_amount=Decimal("1000"))
    assert {p.name for p in result} == {"Nifty 50 Index Fund", "SBI Fixed Deposit"}

    result = products.filter_products(db, risk_level=RiskLevel.HIGH, max_amount=Decimal("1000"))
    assert result == []


def test_create_product_is_always_active(db):
    product = products.create_product(db, {
        "name": "Gold ETF",
        "type": InvestmentType.MUTUAL_FUND,
        "risk_level": RiskLevel.MEDIUM,
        "minimum_investment": Decimal("500.00"),
        "expected_annual_return_rate": Decimal("8.00"),
        "current_nav_per_unit": Decimal("55.10"),
        "is_active": False,
    })
    assert product.id is not None
    assert product.is_active is True


def test_update_product_partial(db, catalog):
    updated = products.update_product(db, catalog["fd"].id, {
        "current_nav_per_unit": Decimal("101.50"),
        "description": None,
    })
    assert updated.current_nav_per_unit == Decimal("101.50")
    assert updated.description == "SBI Fixed Deposit description"

    with pytest.raises(ProductNotFound):
        products.update_product(db, 999, {"name": "Nothing"})


def test_soft_delete_is_idempotent(db, catalog):
    products.delete_product(db, catalog["index"].id)
    products.delete_product(db, catalog["index"].id)

    stored = db.query(InvestmentProduct).filter(InvestmentProduct.id == catalog["index"].id).one()
    assert stored.is_active is False

    products.set_product_active(db, stored.id, True)
    assert products.get_active_product(db, stored.id).is_active is True


def test_populate_default_products_only_on_empty_catalog(db):
    result = populate_default_products(db)
    assert result["created_count"] == len(DEFAULT_PRODUCTS)

    again = populate_default_products(db)
    assert again["created_count"] == 0
    assert db.query(InvestmentProduct).count() == len(DEFAULT_PRODUCTS)
