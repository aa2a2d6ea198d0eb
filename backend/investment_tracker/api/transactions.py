"""
Transaction History API endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from pydantic import BaseModel

from investment_tracker.core.auth import get_current_user
from investment_tracker.db.database import get_db
from investment_tracker.models.transaction import TransactionType
from investment_tracker.models.user import User
from investment_tracker.services import transaction_service

router = APIRouter(prefix="/api/portfolio/transactions", tags=["transactions"])


class TransactionResponse(BaseModel):
    id: int
    investment_product_id: int
    investment_product_name: Optional[str] = None
    txn_type: str
    units: Decimal
    nav_at_txn: Decimal
    amount: Decimal
    txn_date: Optional[str] = None


class TransactionHistoryResponse(BaseModel):
    transactions: List[TransactionResponse]


class PaginatedTransactionResponse(BaseModel):
    transactions: List[TransactionResponse]
    current_page: int
    total_pages: int
    total_elements: int
    page_size: int
    has_next: bool
    has_previous: bool


@router.get("", response_model=TransactionHistoryResponse)
def get_transaction_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Full transaction history of the caller, newest first"""
    return transaction_service.get_transaction_history(db, current_user)


@router.get("/filter", response_model=PaginatedTransactionResponse)
def get_filtered_transactions(
    search_query: Optional[str] = Query(None, description="Match on product name or transaction type"),
    txn_type: Optional[TransactionType] = Query(None, description="BUY or SELL"),
    start_date: Optional[datetime] = Query(None, description="Earliest transaction date (inclusive)"),
    end_date: Optional[datetime] = Query(None, description="Latest transaction date (inclusive)"),
    sort_by: str = Query("txn_date", description="txn_date, amount or units"),
    sort_order: str = Query("desc", description="asc or desc"),
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int = Query(transaction_service.DEFAULT_PAGE_SIZE, ge=1, le=transaction_service.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Filtered, sorted and paginated transactions of the caller"""
    return transaction_service.get_filtered_transactions(
        db,
        current_user,
        search_query=search_query,
        txn_type=txn_type,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        size=size,
    )
