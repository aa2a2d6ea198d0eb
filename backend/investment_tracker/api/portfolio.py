"""
Portfolio API Endpoints
Handles buying and selling investment units and portfolio valuation

This module provides REST API endpoints for:
- Viewing the caller's holdings with invested/current value and returns
- Buying units of an investment product at its current NAV
- Selling units of a held product
- Portfolio analytics: summary, allocation by type and gain/loss per holding
- Looking up a single holding
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from decimal import Decimal
from pydantic import BaseModel, Field

from investment_tracker.core.auth import get_current_user
from investment_tracker.db.database import get_db
from investment_tracker.models.user import User
from investment_tracker.services import portfolio_service, portfolio_analytics_service

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


# Pydantic models for request/response
class TradeUnitsRequest(BaseModel):
    """Request model shared by buy and sell"""
    investment_product_id: int = Field(..., gt=0)
    units: Decimal = Field(..., gt=0, max_digits=15, decimal_places=4)


class HoldingResponse(BaseModel):
    """One holding valued at the product's current NAV"""
    id: int
    investment_product_id: int
    investment_product_name: str
    type: str
    risk_level: str
    units_owned: Decimal
    avg_purchase_price: Decimal
    current_nav: Decimal
    invested_value: Decimal
    current_value: Decimal
    absolute_return: Decimal
    percentage_return: Decimal


class PortfolioResponse(BaseModel):
    holdings: List[HoldingResponse]
    total_invested_value: Decimal
    total_current_value: Decimal


class PortfolioSummaryResponse(BaseModel):
    total_invested: Decimal
    current_value: Decimal
    absolute_return: Decimal
    return_percentage: Decimal


class AssetAllocationResponse(BaseModel):
    asset_type: str
    current_value: Decimal
    percentage: Decimal


class GainLossResponse(BaseModel):
    holding_id: int
    investment_product_id: int
    investment_name: str
    invested_amount: Decimal
    current_value: Decimal
    gain_or_loss: Decimal
    percentage_return: Decimal


@router.get("", response_model=PortfolioResponse)
def get_portfolio(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the caller's portfolio"""
    return portfolio_service.get_portfolio(db, current_user)


@router.post("/buy", response_model=HoldingResponse)
def buy_investment(
    request: TradeUnitsRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Buy units of an investment product

    The product must be active and units x NAV must reach the product's
    minimum investment.
    """
    return portfolio_service.buy_investment(db, current_user, request.investment_product_id, request.units)


@router.post("/sell", response_model=HoldingResponse)
def sell_investment(
    request: TradeUnitsRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Sell units of a held product; selling every unit removes the holding"""
    return portfolio_service.sell_investment(db, current_user, request.investment_product_id, request.units)


@router.get("/summary", response_model=PortfolioSummaryResponse)
def get_portfolio_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Total invested, current value and overall return"""
    return portfolio_analytics_service.get_portfolio_summary(db, current_user)


@router.get("/allocation", response_model=List[AssetAllocationResponse])
def get_asset_allocation(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Share of current value per investment type"""
    return portfolio_analytics_service.get_asset_allocation(db, current_user)


@router.get("/gains", response_model=List[GainLossResponse])
def get_gain_loss_analysis(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return portfolio_analytics_service.get_gain_loss_analysis(db, current_user)


# Declared last so the fixed paths above are not taken as holding ids
@router.get("/{holding_id}", response_model=HoldingResponse)
def get_holding(
    holding_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single holding by id"""
    return portfolio_service.get_holding(db, current_user, holding_id)
