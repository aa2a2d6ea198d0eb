"""
Transaction Service
Read-only views over the transaction ledger: full history and a
filtered, sorted, paginated listing
"""

from sqlalchemy import or_, func, cast, String
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from typing import Any, Dict, Optional
import logging
import math

from investment_tracker.core.exceptions import InvalidFilter, ServiceError
from investment_tracker.models.investment_product import InvestmentProduct
from investment_tracker.models.transaction import Transaction, TransactionType
from investment_tracker.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

SORT_COLUMNS = {
    "txn_date": Transaction.txn_date,
    "units": Transaction.units,
    "amount": Transaction.units * Transaction.nav_at_txn,
}


def get_transaction_history(db: Session, user: User) -> Dict[str, Any]:
    """Every transaction of the user, newest first"""
    logger.info(f"Fetching full transaction history for user: {user.email}")
    try:
        transactions = (
            db.query(Transaction)
            .filter(Transaction.user_id == user.id)
            .order_by(Transaction.txn_date.desc(), Transaction.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching transactions for {user.email}: {e}", exc_info=True)
        raise ServiceError("Failed to fetch transaction history") from e

    logger.debug(f"Total {len(transactions)} transactions found for user: {user.email}")
    return {"transactions": [t.to_dict() for t in transactions]}


def get_filtered_transactions(
    db: Session,
    user: User,
    search_query: Optional[str] = None,
    txn_type: Optional[TransactionType] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    sort_by: str = "txn_date",
    sort_order: str = "desc",
    page: int = 0,
    size: int = DEFAULT_PAGE_SIZE
) -> Dict[str, Any]:
    """
    Filtered and paginated transactions of a user

    Args:
        search_query: Case-insensitive match on product name or transaction type
        txn_type: Only BUY or only SELL
        start_date / end_date: Inclusive bounds on the transaction date
        sort_by: txn_date, amount or units
        sort_order: asc or desc
        page: Zero-based page index
        size: Page size (1..100)
    """
    if sort_by not in SORT_COLUMNS:
        raise InvalidFilter(f"Unsupported sort field: {sort_by}. Use one of: {', '.join(SORT_COLUMNS)}")
    if sort_order.lower() not in ("asc", "desc"):
        raise InvalidFilter("Sort order must be 'asc' or 'desc'")
    if page < 0:
        raise InvalidFilter("Page index must not be negative")
    if size < 1 or size > MAX_PAGE_SIZE:
        raise InvalidFilter(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
    if start_date and end_date and start_date > end_date:
        raise InvalidFilter("start_date must not be after end_date")

    logger.info(f"Fetching filtered transactions for user: {user.email}")

    query = (
        db.query(Transaction)
        .join(InvestmentProduct, Transaction.product_id == InvestmentProduct.id)
        .filter(Transaction.user_id == user.id)
    )

    if search_query and search_query.strip():
        pattern = f"%{search_query.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(InvestmentProduct.name).like(pattern),
                func.lower(cast(Transaction.txn_type, String)).like(pattern),
            )
        )
    if txn_type is not None:
        query = query.filter(Transaction.txn_type == txn_type)
    if start_date is not None:
        query = query.filter(Transaction.txn_date >= start_date)
    if end_date is not None:
        query = query.filter(Transaction.txn_date <= end_date)

    sort_column = SORT_COLUMNS[sort_by]
    ordering = sort_column.asc() if sort_order.lower() == "asc" else sort_column.desc()

    try:
        total_elements = query.count()
        transactions = (
            query.order_by(ordering, Transaction.id)
            .offset(page * size)
            .limit(size)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error filtering transactions for {user.email}: {e}", exc_info=True)
        raise ServiceError("Failed to fetch transactions") from e

    total_pages = math.ceil(total_elements / size) if total_elements else 0
    logger.debug(f"Found {len(transactions)} of {total_elements} transactions for user: {user.email}")

    return {
        "transactions": [t.to_dict() for t in transactions],
        "current_page": page,
        "total_pages": total_pages,
        "total_elements": total_elements,
        "page_size": size,
        "has_next": page + 1 < total_pages,
        "has_previous": page > 0,
    }
