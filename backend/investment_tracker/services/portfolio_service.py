"""
Portfolio Service
Holdings, buy/sell unit accounting and portfolio valuation

Every buy or sell is one read-modify-write of a Holding row plus one
appended Transaction, committed together. Holding rows are versioned
(see models/holding.py); when two requests race on the same holding the
loser gets StaleDataError (or IntegrityError when both try to create the
first holding) and the whole sequence is replayed from a fresh read.
"""

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, TypeVar
import logging

from investment_tracker.core.config import HOLDING_UPDATE_MAX_RETRIES
from investment_tracker.core.exceptions import (
    BelowMinimumInvestment,
    ConcurrentModification,
    HoldingNotFound,
    InsufficientUnits,
    NoSuchHolding,
    PortfolioTrackerError,
    ProductInactive,
    ProductNotFound,
    ServiceError,
)
from investment_tracker.models.holding import Holding, HOLDING_UNIQUE_CONSTRAINT
from investment_tracker.models.investment_product import InvestmentProduct
from investment_tracker.models.transaction import Transaction, TransactionType
from investment_tracker.models.user import User
from investment_tracker.utils.money import (
    ZERO,
    percentage_return,
    round_money,
    sum_money,
    to_decimal,
    weighted_average_price,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_holding_snapshot(holding: Holding) -> Dict[str, Any]:
    """
    Valuation of a single holding at the product's current NAV

    invested_value and current_value are rounded HALF_UP to 2 places;
    percentage_return is 0 when nothing is invested.
    """
    product = holding.product
    units = to_decimal(holding.units_owned)
    avg_price = to_decimal(holding.avg_purchase_price)
    nav = to_decimal(product.current_nav_per_unit)

    invested_value = round_money(units * avg_price)
    current_value = round_money(units * nav)
    absolute_return = current_value - invested_value

    return {
        "id": holding.id,
        "investment_product_id": product.id,
        "investment_product_name": product.name,
        "type": product.type.value,
        "risk_level": product.risk_level.value,
        "units_owned": units,
        "avg_purchase_price": avg_price,
        "current_nav": nav,
        "invested_value": invested_value,
        "current_value": current_value,
        "absolute_return": absolute_return,
        "percentage_return": percentage_return(absolute_return, invested_value),
    }


def get_portfolio(db: Session, user: User) -> Dict[str, Any]:
    """All holdings of a user with per-holding values and portfolio totals"""
    logger.info(f"Fetching portfolio for user: {user.email}")
    try:
        holdings = (
            db.query(Holding)
            .filter(Holding.user_id == user.id)
            .order_by(Holding.id)
            .all()
        )
        items = [build_holding_snapshot(h) for h in holdings]
    except SQLAlchemyError as e:
        logger.error(f"Error fetching portfolio for {user.email}: {e}", exc_info=True)
        raise ServiceError("Failed to fetch portfolio") from e

    total_invested = sum_money(item["invested_value"] for item in items)
    total_current = sum_money(item["current_value"] for item in items)
    logger.debug(f"User: {user.email} | Total Invested: {total_invested}, Total Current: {total_current}")

    return {
        "holdings": items,
        "total_invested_value": total_invested,
        "total_current_value": total_current,
    }


def get_holding(db: Session, user: User, holding_id: int) -> Dict[str, Any]:
    """
    Snapshot of a single holding

    Users only see their own holdings; a holding owned by someone else is
    reported as not found. Administrators can read any holding.
    """
    logger.info(f"Fetching holding {holding_id} for user {user.email}")
    try:
        holding = db.query(Holding).filter(Holding.id == holding_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching holding {holding_id}: {e}", exc_info=True)
        raise ServiceError("Failed to fetch investment") from e

    if holding is None or (holding.user_id != user.id and not user.is_admin):
        raise HoldingNotFound(f"Investment not found with id: {holding_id}")
    return build_holding_snapshot(holding)


def buy_investment(db: Session, user: User, product_id: int, units: Decimal) -> Dict[str, Any]:
    """
    Buy units of a product at its current NAV

    Raises:
        ProductNotFound, ProductInactive, BelowMinimumInvestment,
        ConcurrentModification, ServiceError
    """
    units = to_decimal(units)
    user_id, email = user.id, user.email
    logger.info(f"User {email} is attempting to buy {units} units of product ID: {product_id}")
    return _with_holding_retry(
        db,
        lambda: _buy_once(db, user_id, product_id, units),
        f"buy product {product_id} for {email}",
    )


def sell_investment(db: Session, user: User, product_id: int, units: Decimal) -> Dict[str, Any]:
    """
    Sell units of a held product at its current NAV

    The returned snapshot reflects the holding after the sale; when every
    unit is sold the holding row is gone and the snapshot shows zero units.

    Raises:
        ProductNotFound, NoSuchHolding, InsufficientUnits,
        ConcurrentModification, ServiceError
    """
    units = to_decimal(units)
    user_id, email = user.id, user.email
    logger.info(f"User {email} is attempting to sell {units} units of product ID: {product_id}")
    return _with_holding_retry(
        db,
        lambda: _sell_once(db, user_id, product_id, units),
        f"sell product {product_id} for {email}",
    )


def _with_holding_retry(db: Session, operation: Callable[[], T], description: str) -> T:
    """
    Run a holding read-modify-write, replaying it after a lost race

    Business errors roll back and propagate unchanged; other datastore
    errors roll back and surface as ServiceError.
    """
    for attempt in range(1, HOLDING_UPDATE_MAX_RETRIES + 1):
        try:
            return operation()
        except PortfolioTrackerError:
            db.rollback()
            raise
        except IntegrityError as e:
            db.rollback()
            if not _is_duplicate_holding(e):
                logger.error(f"Integrity violation during {description}: {e}", exc_info=True)
                raise ServiceError("Failed to update portfolio") from e
            logger.warning(
                f"Holding created concurrently during {description} "
                f"(attempt {attempt}/{HOLDING_UPDATE_MAX_RETRIES}): {e}"
            )
        except StaleDataError as e:
            db.rollback()
            logger.warning(
                f"Concurrent update detected during {description} "
                f"(attempt {attempt}/{HOLDING_UPDATE_MAX_RETRIES}): {e}"
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Datastore error during {description}: {e}", exc_info=True)
            raise ServiceError("Failed to update portfolio") from e

    logger.error(f"Giving up on {description} after {HOLDING_UPDATE_MAX_RETRIES} attempts")
    raise ConcurrentModification("Holding was modified concurrently, please retry")


def _is_duplicate_holding(error: IntegrityError) -> bool:
    """True when the violation is the (user, product) unique key of holdings"""
    detail = str(error.orig)
    return (
        HOLDING_UNIQUE_CONSTRAINT in detail
        # SQLite reports the columns instead of the constraint name
        or "holdings.user_id, holdings.product_id" in detail
    )


def _load_product(db: Session, product_id: int) -> InvestmentProduct:
    product = db.query(InvestmentProduct).filter(InvestmentProduct.id == product_id).first()
    if product is None:
        raise ProductNotFound(f"Investment product not found with id: {product_id}")
    return product


def _find_holding(db: Session, user_id: int, product_id: int):
    return (
        db.query(Holding)
        .filter(Holding.user_id == user_id, Holding.product_id == product_id)
        .first()
    )


def _record_transaction(
    db: Session,
    user_id: int,
    product: InvestmentProduct,
    txn_type: TransactionType,
    units: Decimal
) -> Transaction:
    transaction = Transaction(
        user_id=user_id,
        product_id=product.id,
        txn_type=txn_type,
        units=units,
        nav_at_txn=to_decimal(product.current_nav_per_unit),
        txn_date=datetime.now(timezone.utc),
    )
    db.add(transaction)
    return transaction


def _buy_once(db: Session, user_id: int, product_id: int, units: Decimal) -> Dict[str, Any]:
    product = _load_product(db, product_id)
    if not product.is_active:
        logger.warning(f"Product ID {product.id} is inactive")
        raise ProductInactive("Investment product is not active")

    nav = to_decimal(product.current_nav_per_unit)
    investment_amount = units * nav
    minimum = to_decimal(product.minimum_investment)
    if investment_amount < minimum:
        logger.warning(f"Investment below minimum. Required: {minimum}, Provided: {investment_amount}")
        raise BelowMinimumInvestment(f"Minimum investment required: {minimum}")

    holding = _find_holding(db, user_id, product_id)
    if holding is None:
        holding = Holding(user_id=user_id, product_id=product.id, units_owned=ZERO, avg_purchase_price=ZERO)
        holding.product = product
        db.add(holding)

    owned = to_decimal(holding.units_owned)
    if owned > ZERO:
        holding.avg_purchase_price = weighted_average_price(owned, holding.avg_purchase_price, units, nav)
    else:
        holding.avg_purchase_price = nav
    holding.units_owned = owned + units

    _record_transaction(db, user_id, product, TransactionType.BUY, units)

    db.flush()
    snapshot = build_holding_snapshot(holding)
    db.commit()

    logger.info(f"BUY transaction recorded: UserID={user_id}, ProductID={product.id}, Units={units}")
    return snapshot


def _sell_once(db: Session, user_id: int, product_id: int, units: Decimal) -> Dict[str, Any]:
    product = _load_product(db, product_id)

    holding = _find_holding(db, user_id, product_id)
    if holding is None:
        raise NoSuchHolding("You don't have this investment in your portfolio")

    owned = to_decimal(holding.units_owned)
    if owned < units:
        logger.warning(f"Sell failed: UserID={user_id} | Requested={units}, Available={owned}")
        raise InsufficientUnits(f"Not enough units to sell. Available: {owned}")

    holding.units_owned = owned - units
    # Average purchase price is unchanged by a sell
    snapshot = build_holding_snapshot(holding)

    if to_decimal(holding.units_owned) == ZERO:
        logger.info(f"All units sold. Deleting holding with ID: {holding.id}")
        db.delete(holding)

    _record_transaction(db, user_id, product, TransactionType.SELL, units)

    db.flush()
    db.commit()

    logger.info(f"SELL transaction recorded: UserID={user_id}, ProductID={product.id}, Units={units}")
    return snapshot
