"""
Decimal helpers for money and unit arithmetic
All portfolio values use Decimal with HALF_UP rounding at scale 2
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONEY_QUANTUM = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert a stored or request value to Decimal; None becomes zero"""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Go through str so 0.1 stays 0.1 instead of its binary expansion
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, ties away from zero"""
    return to_decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def divide_money(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide and round the quotient to 2 decimal places (HALF_UP)"""
    return round_money(to_decimal(numerator) / to_decimal(denominator))


def weighted_average_price(
    old_units: Decimal,
    old_price: Decimal,
    new_units: Decimal,
    new_price: Decimal
) -> Decimal:
    """
    Average cost per unit after adding new_units at new_price to a lot of
    old_units at old_price.

    Returns:
        round((old_units*old_price + new_units*new_price) / (old_units+new_units), 2)
    """
    total_units = to_decimal(old_units) + to_decimal(new_units)
    total_cost = to_decimal(old_units) * to_decimal(old_price) + to_decimal(new_units) * to_decimal(new_price)
    return divide_money(total_cost, total_units)


def percentage_return(absolute_return: Decimal, invested_value: Decimal) -> Decimal:
    """Return as a percentage of invested value; 0 when nothing is invested"""
    if to_decimal(invested_value) <= ZERO:
        return round_money(ZERO)
    return divide_money(to_decimal(absolute_return) * HUNDRED, invested_value)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """Sum of already rounded money values"""
    return sum((to_decimal(v) for v in values), round_money(ZERO))
