"""
Investment Product Service
Catalog reads for users and catalog maintenance for administrators
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from decimal import Decimal
from typing import Dict, Any, List, Optional
import logging

from investment_tracker.models.investment_product import InvestmentProduct, InvestmentType, RiskLevel
from investment_tracker.core.exceptions import ProductNotFound, ServiceError

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "type",
    "risk_level",
    "minimum_investment",
    "expected_annual_return_rate",
    "current_nav_per_unit",
    "description",
    "is_active",
)


def get_product(db: Session, product_id: int) -> Optional[InvestmentProduct]:
    """Product by id, active or not"""
    return db.query(InvestmentProduct).filter(InvestmentProduct.id == product_id).first()


def get_active_products(db: Session) -> List[InvestmentProduct]:
    return (
        db.query(InvestmentProduct)
        .filter(InvestmentProduct.is_active.is_(True))
        .order_by(InvestmentProduct.id)
        .all()
    )


def get_all_products(db: Session) -> List[InvestmentProduct]:
    """Every product including soft-deleted ones (admin view)"""
    return db.query(InvestmentProduct).order_by(InvestmentProduct.id).all()


def get_active_product(db: Session, product_id: int) -> InvestmentProduct:
    """Active product by id; inactive products are reported as not found"""
    product = (
        db.query(InvestmentProduct)
        .filter(InvestmentProduct.id == product_id, InvestmentProduct.is_active.is_(True))
        .first()
    )
    if not product:
        logger.warning(f"Investment product not found or inactive with id: {product_id}")
        raise ProductNotFound(f"Investment product not found with id: {product_id}")
    return product


def find_active_by_name_contains(db: Session, text: str) -> List[InvestmentProduct]:
    """Case-insensitive partial name match over active products"""
    pattern = f"%{text.strip().lower()}%"
    return (
        db.query(InvestmentProduct)
        .filter(
            InvestmentProduct.name.ilike(pattern),
            InvestmentProduct.is_active.is_(True),
        )
        .order_by(InvestmentProduct.id)
        .all()
    )


def get_products_by_type(db: Session, product_type: InvestmentType) -> List[InvestmentProduct]:
    return (
        db.query(InvestmentProduct)
        .filter(InvestmentProduct.type == product_type, InvestmentProduct.is_active.is_(True))
        .order_by(InvestmentProduct.id)
        .all()
    )


def get_products_by_risk_level(db: Session, risk_level: RiskLevel) -> List[InvestmentProduct]:
    return (
        db.query(InvestmentProduct)
        .filter(InvestmentProduct.risk_level == risk_level, InvestmentProduct.is_active.is_(True))
        .order_by(InvestmentProduct.id)
        .all()
    )


def get_investment_types() -> List[str]:
    return [t.value for t in InvestmentType]


def filter_products(
    db: Session,
    search_term: Optional[str] = None,
    product_type: Optional[InvestmentType] = None,
    risk_level: Optional[RiskLevel] = None,
    max_amount: Optional[Decimal] = None
) -> List[InvestmentProduct]:
    """
    Filter active products

    A non-blank search term takes precedence and matches on name only;
    otherwise type, risk level and max amount (minimum investment must not
    exceed it) are combined.
    """
    logger.info(
        f"Filtering investment products: search='{search_term}', type={product_type}, "
        f"risk={risk_level}, max_amount={max_amount}"
    )
    if search_term and search_term.strip():
        return find_active_by_name_contains(db, search_term)

    query = db.query(InvestmentProduct).filter(InvestmentProduct.is_active.is_(True))
    if product_type is not None:
        query = query.filter(InvestmentProduct.type == product_type)
    if risk_level is not None:
        query = query.filter(InvestmentProduct.risk_level == risk_level)
    if max_amount is not None:
        query = query.filter(InvestmentProduct.minimum_investment <= max_amount)

    products = query.order_by(InvestmentProduct.id).all()
    logger.debug(f"Criteria filtering returned {len(products)} products")
    return products


def create_product(db: Session, data: Dict[str, Any]) -> InvestmentProduct:
    """Create a new product; new products are always active"""
    product = InvestmentProduct(**{k: v for k, v in data.items() if k in UPDATABLE_FIELDS})
    product.is_active = True
    try:
        db.add(product)
        db.commit()
        db.refresh(product)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating investment product {data.get('name')}: {e}", exc_info=True)
        raise ServiceError("Failed to create investment product") from e

    logger.info(f"Investment product created with id: {product.id}")
    return product


def update_product(db: Session, product_id: int, changes: Dict[str, Any]) -> InvestmentProduct:
    """
    Apply a partial update

    Only keys present in `changes` with a non-None value are written.
    """
    product = get_product(db, product_id)
    if not product:
        logger.warning(f"Product not found for update with id: {product_id}")
        raise ProductNotFound(f"Investment product not found with id: {product_id}")

    updated_fields = []
    for field in UPDATABLE_FIELDS:
        value = changes.get(field)
        if value is not None and getattr(product, field) != value:
            setattr(product, field, value)
            updated_fields.append(field)

    if not updated_fields:
        logger.info(f"No changes detected for product id: {product_id}")
        return product

    try:
        db.commit()
        db.refresh(product)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating product {product_id}: {e}", exc_info=True)
        raise ServiceError("Failed to update investment product") from e

    logger.info(f"Updated product {product_id}: {', '.join(updated_fields)}")
    return product


def set_product_active(db: Session, product_id: int, active: bool) -> InvestmentProduct:
    return update_product(db, product_id, {"is_active": active})


def delete_product(db: Session, product_id: int) -> None:
    """Soft delete; already inactive products are left as they are"""
    product = get_product(db, product_id)
    if not product:
        raise ProductNotFound(f"Investment product not found with id: {product_id}")

    if not product.is_active:
        logger.warning(f"Attempted to delete already inactive product with id: {product_id}")
        return

    set_product_active(db, product_id, False)
    logger.info(f"Soft deleted product '{product.name}' with id: {product_id}")
