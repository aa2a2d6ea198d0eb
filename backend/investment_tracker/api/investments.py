"""
Investment Product API Endpoints
Public catalog browsing and admin catalog maintenance

This module provides REST API endpoints for:
- Listing and filtering active investment products
- Creating, updating, activating and soft-deleting products (admin only)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from decimal import Decimal
from pydantic import BaseModel, Field

from investment_tracker.core.auth import require_admin
from investment_tracker.db.database import get_db
from investment_tracker.models.investment_product import InvestmentType, RiskLevel
from investment_tracker.models.user import User
from investment_tracker.services import investment_product_service

router = APIRouter(prefix="/api", tags=["investments"])


# Pydantic models for request/response
class InvestmentProductResponse(BaseModel):
    id: int
    name: str
    type: InvestmentType
    risk_level: RiskLevel
    minimum_investment: Decimal
    expected_annual_return_rate: Decimal
    current_nav_per_unit: Decimal
    description: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class InvestmentProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: InvestmentType
    risk_level: RiskLevel
    minimum_investment: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    expected_annual_return_rate: Decimal = Field(..., ge=0, max_digits=5, decimal_places=2)
    current_nav_per_unit: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)


class InvestmentProductUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[InvestmentType] = None
    risk_level: Optional[RiskLevel] = None
    minimum_investment: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    expected_annual_return_rate: Optional[Decimal] = Field(None, ge=0, max_digits=5, decimal_places=2)
    current_nav_per_unit: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


class InvestmentFilterRequest(BaseModel):
    search_term: Optional[str] = None
    type: Optional[InvestmentType] = None
    risk_level: Optional[RiskLevel] = None
    max_amount: Optional[Decimal] = Field(None, gt=0)


# Public catalog

@router.get("/investments", response_model=List[InvestmentProductResponse])
def get_active_investments(db: Session = Depends(get_db)):
    """All active investment products"""
    return investment_product_service.get_active_products(db)


@router.get("/investments/{product_id}", response_model=InvestmentProductResponse)
def get_investment(product_id: int, db: Session = Depends(get_db)):
    return investment_product_service.get_active_product(db, product_id)


@router.get("/investment-types", response_model=List[str])
def get_investment_types():
    return investment_product_service.get_investment_types()


@router.get("/investments/type/{product_type}", response_model=List[InvestmentProductResponse])
def get_investments_by_type(product_type: InvestmentType, db: Session = Depends(get_db)):
    return investment_product_service.get_products_by_type(db, product_type)


@router.get("/investments/risk/{risk_level}", response_model=List[InvestmentProductResponse])
def get_investments_by_risk(risk_level: RiskLevel, db: Session = Depends(get_db)):
    return investment_product_service.get_products_by_risk_level(db, risk_level)


@router.post("/investments/filter", response_model=List[InvestmentProductResponse])
def filter_investments(request: InvestmentFilterRequest, db: Session = Depends(get_db)):
    """
    Filter active products

    A search term matches on product name and takes precedence over the
    other criteria.
    """
    return investment_product_service.filter_products(
        db,
        search_term=request.search_term,
        product_type=request.type,
        risk_level=request.risk_level,
        max_amount=request.max_amount,
    )


# Admin catalog maintenance

@router.get("/admin/investments", response_model=List[InvestmentProductResponse])
def get_all_investments(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Every product including inactive ones"""
    return investment_product_service.get_all_products(db)


@router.post("/admin/investments", response_model=InvestmentProductResponse, status_code=status.HTTP_201_CREATED)
def create_investment(
    request: InvestmentProductCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return investment_product_service.create_product(db, request.model_dump())


@router.put("/admin/investments/{product_id}", response_model=InvestmentProductResponse)
def update_investment(
    product_id: int,
    request: InvestmentProductUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return investment_product_service.update_product(db, product_id, request.model_dump(exclude_unset=True))


@router.put("/admin/investments/{product_id}/active", response_model=InvestmentProductResponse)
def set_investment_active(
    product_id: int,
    active: bool = Query(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return investment_product_service.set_product_active(db, product_id, active)


@router.delete("/admin/investments/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_investment(
    product_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Soft delete: the product is marked inactive and kept for history"""
    investment_product_service.delete_product(db, product_id)
