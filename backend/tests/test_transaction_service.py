"""
Tests for transaction history and the filtered, paginated listing
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from investment_tracker.core.exceptions import InvalidFilter
from investment_tracker.models import Transaction, TransactionType
from investment_tracker.services import transaction_service


@pytest.fixture
def ledger(db, user, other_user, make_product):
    """Six transactions for `user` over six days plus one for someone else"""
    fund = make_product(name="Nifty 50 Index Fund", nav="100.00")
    bond = make_product(name="HDFC Corporate Bond", nav="1000.00")
    start = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    rows = [
        (fund, TransactionType.BUY, "10", "100.00"),
        (fund, TransactionType.BUY, "5", "120.00"),
        (bond, TransactionType.BUY, "2", "1000.00"),
        (fund, TransactionType.SELL, "3", "130.00"),
        (bond, TransactionType.SELL, "1", "1010.00"),
        (fund, TransactionType.BUY, "1", "125.00"),
    ]
    for day, (product, txn_type, units, nav) in enumerate(rows):
        db.add(Transaction(
            user_id=user.id,
            product_id=product.id,
            txn_type=txn_type,
            units=Decimal(units),
            nav_at_txn=Decimal(nav),
            txn_date=start + timedelta(days=day),
        ))
    db.add(Transaction(
        user_id=other_user.id,
        product_id=fund.id,
        txn_type=TransactionType.BUY,
        units=Decimal("50"),
        nav_at_txn=Decimal("100.00"),
        txn_date=start,
    ))
    db.commit()
    return start


def test_history_is_newest_first_and_scoped_to_user(db, user, ledger):
    history = transaction_service.get_transaction_history(db, user)["transactions"]

    assert len(history) == 6
    assert history[0]["txn_type"] == "BUY"
    assert history[0]["units"] == Decimal("1")
    assert history[-1]["units"] == Decimal("10")
    assert history[-1]["amount"] == Decimal("1000")


def test_default_filter_paginates(db, user, ledger):
    page = transaction_service.get_filtered_transactions(db, user, size=4)

    assert page["total_elements"] == 6
    assert page["total_pages"] == 2
    assert page["current_page"] == 0
    assert page["has_next"] is True
    assert page["has_previous"] is False
    assert len(page["transactions"]) == 4

    last = transaction_service.get_filtered_transactions(db, user, page=1, size=4)
    assert len(last["transactions"]) == 2
    assert last["has_next"] is False
    assert last["has_previous"] is True


def test_filter_by_type_and_search(db, user, ledger):
    sells = transaction_service.get_filtered_transactions(db, user, txn_type=TransactionType.SELL)
    assert sells["total_elements"] == 2

    bond = transaction_service.get_filtered_transactions(db, user, search_query="corporate")
    assert bond["total_elements"] == 2
    assert {t["investment_product_name"] for t in bond["transactions"]} == {"HDFC Corporate Bond"}

    by_type_text = transaction_service.get_filtered_transactions(db, user, search_query="sell")
    assert by_type_text["total_elements"] == 2


def test_filter_by_date_range(db, user, ledger):
    page = transaction_service.get_filtered_transactions(
        db,
        user,
        start_date=ledger + timedelta(days=1),
        end_date=ledger + timedelta(days=3),
        sort_order="asc",
    )
    assert [t["units"] for t in page["transactions"]] == [Decimal("5"), Decimal("2"), Decimal("3")]


def test_sort_by_amount(db, user, ledger):
    page = transaction_service.get_filtered_transactions(db, user, sort_by="amount", sort_order="desc")
    amounts = [t["amount"] for t in page["transactions"]]
    assert amounts == sorted(amounts, reverse=True)
    assert amounts[0] == Decimal("2000")


def test_empty_result(db, user):
    page = transaction_service.get_filtered_transactions(db, user)
    assert page["transactions"] == []
    assert page["total_pages"] == 0
    assert page["has_next"] is False


@pytest.mark.parametrize("kwargs", [
    {"sort_by": "price"},
    {"sort_order": "sideways"},
    {"page": -1},
    {"size": 0},
    {"size": 101},
])
def test_invalid_filters(db, user, kwargs):
    with pytest.raises(InvalidFilter):
        transaction_service.get_filtered_transactions(db, user, **kwargs)
