"""
Unit tests for Decimal money helpers
"""

from decimal import Decimal

from investment_tracker.utils.money import (
    percentage_return,
    round_money,
    sum_money,
    to_decimal,
    weighted_average_price,
)


def test_round_money_half_up():
    assert round_money(Decimal("2.345")) == Decimal("2.35")
    assert round_money(Decimal("2.344")) == Decimal("2.34")
    assert round_money(Decimal("-2.345")) == Decimal("-2.35")


def test_to_decimal_float_keeps_short_repr():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(None) == Decimal("0")
    assert to_decimal("12.50") == Decimal("12.50")


def test_weighted_average_price():
    # 10 @ 100 then 5 @ 120 -> 1600 / 15
    assert weighted_average_price(Decimal("10"), Decimal("100"), Decimal("5"), Decimal("120")) == Decimal("106.67")


def test_percentage_return_zero_when_nothing_invested():
    assert percentage_return(Decimal("10.00"), Decimal("0")) == Decimal("0.00")


def test_percentage_return():
    assert percentage_return(Decimal("199.95"), Decimal("1600.05")) == Decimal("12.50")


def test_sum_money():
    assert sum_money([Decimal("1.10"), Decimal("2.20")]) == Decimal("3.30")
    assert sum_money([]) == Decimal("0.00")
