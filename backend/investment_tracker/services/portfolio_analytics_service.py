"""
Portfolio Analytics Service
Read-only views derived from holding valuations: overall summary,
allocation by investment type and gain/loss per holding
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List
import logging

from investment_tracker.core.exceptions import ServiceError
from investment_tracker.models.holding import Holding
from investment_tracker.models.user import User
from investment_tracker.services.portfolio_service import build_holding_snapshot
from investment_tracker.utils.money import ZERO, HUNDRED, divide_money, percentage_return, round_money, sum_money

logger = logging.getLogger(__name__)


def _holding_snapshots(db: Session, user: User) -> List[Dict[str, Any]]:
    try:
        holdings = (
            db.query(Holding)
            .filter(Holding.user_id == user.id)
            .order_by(Holding.id)
            .all()
        )
        return [build_holding_snapshot(h) for h in holdings]
    except SQLAlchemyError as e:
        logger.error(f"Error loading holdings for analytics of {user.email}: {e}", exc_info=True)
        raise ServiceError("Failed to compute portfolio analytics") from e


def get_portfolio_summary(db: Session, user: User) -> Dict[str, Decimal]:
    """
    Totals over every holding of the user

    Returns:
        total_invested, current_value, absolute_return and return_percentage
        (0 when nothing is invested)
    """
    snapshots = _holding_snapshots(db, user)
    total_invested = sum_money(s["invested_value"] for s in snapshots)
    current_value = sum_money(s["current_value"] for s in snapshots)
    absolute_return = current_value - total_invested

    logger.info(f"Portfolio summary for {user.email}: invested={total_invested}, current={current_value}")
    return {
        "total_invested": total_invested,
        "current_value": current_value,
        "absolute_return": absolute_return,
        "return_percentage": percentage_return(absolute_return, total_invested),
    }


def get_asset_allocation(db: Session, user: User) -> List[Dict[str, Any]]:
    """Share of current value per investment type, largest first"""
    snapshots = _holding_snapshots(db, user)
    by_type: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for s in snapshots:
        by_type[s["type"]] += s["current_value"]

    total = sum_money(by_type.values())
    allocation = [
        {
            "asset_type": asset_type,
            "current_value": value,
            "percentage": divide_money(value * HUNDRED, total) if total > ZERO else round_money(ZERO),
        }
        for asset_type, value in by_type.items()
    ]
    allocation.sort(key=lambda a: (-a["current_value"], a["asset_type"]))
    return allocation


def get_gain_loss_analysis(db: Session, user: User) -> List[Dict[str, Any]]:
    """Per-holding invested amount, current value and gain (negative for a loss)"""
    return [
        {
            "holding_id": s["id"],
            "investment_product_id": s["investment_product_id"],
            "investment_name": s["investment_product_name"],
            "invested_amount": s["invested_value"],
            "current_value": s["current_value"],
            "gain_or_loss": s["absolute_return"],
            "percentage_return": s["percentage_return"],
        }
        for s in _holding_snapshots(db, user)
    ]
