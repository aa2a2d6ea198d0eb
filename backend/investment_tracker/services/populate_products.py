"""
Service to populate the product catalog with a default set of products
This runs on app startup so a fresh install has something to invest in
"""

import logging
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from investment_tracker.models.investment_product import InvestmentProduct, InvestmentType, RiskLevel

logger = logging.getLogger(__name__)

# name, type, risk, minimum investment, expected annual return %, NAV per unit, description
DEFAULT_PRODUCTS = [
    ("SBI Fixed Deposit 1Y", InvestmentType.FIXED_DEPOSIT, RiskLevel.LOW,
     "1000.00", "6.80", "100.00", "One year bank fixed deposit"),
    ("GOI 7.26% 2033 Bond", InvestmentType.GOVERNMENT_BOND, RiskLevel.LOW,
     "10000.00", "7.26", "1000.00", "Government of India dated security maturing 2033"),
    ("Public Provident Fund", InvestmentType.PUBLIC_PROVIDENT_FUND, RiskLevel.LOW,
     "500.00", "7.10", "1.00", "15 year tax-free savings scheme"),
    ("Nifty 50 Index Fund", InvestmentType.MUTUAL_FUND, RiskLevel.MEDIUM,
     "500.00", "12.00", "215.40", "Passive fund tracking the Nifty 50 index"),
    ("Flexi Cap Growth Fund", InvestmentType.MUTUAL_FUND, RiskLevel.HIGH,
     "1000.00", "14.50", "87.25", "Actively managed equity fund across market caps"),
    ("HDFC Corporate Bond", InvestmentType.CORPORATE_BOND, RiskLevel.MEDIUM,
     "5000.00", "8.20", "1000.00", "AAA rated corporate debenture"),
    ("Embassy Office Parks REIT", InvestmentType.REAL_ESTATE_INVESTMENT_TRUST, RiskLevel.MEDIUM,
     "1000.00", "9.00", "372.10", "Listed office real estate investment trust"),
    ("Reliance Industries", InvestmentType.STOCK, RiskLevel.HIGH,
     "500.00", "15.00", "2890.00", "Listed equity share"),
    ("Bitcoin", InvestmentType.CRYPTOCURRENCY, RiskLevel.HIGH,
     "1000.00", "25.00", "5400000.00", "Spot cryptocurrency holding"),
    ("Nifty Call Option", InvestmentType.OPTIONS, RiskLevel.HIGH,
     "2000.00", "30.00", "150.00", "Index call option contract"),
]


def populate_default_products(db: Session, force_refresh: bool = False) -> dict:
    """
    Insert the default products that are not in the catalog yet

    Args:
        db: Database session
        force_refresh: Insert missing defaults even when the catalog already has products

    Returns:
        Dictionary with created/skipped counts
    """
    existing_count = db.query(InvestmentProduct).count()
    if existing_count > 0 and not force_refresh:
        logger.info(f"Product catalog already populated ({existing_count} products)")
        return {"created_count": 0, "skipped_count": len(DEFAULT_PRODUCTS)}

    existing_names = {name for (name,) in db.query(InvestmentProduct.name).all()}
    created_count = 0
    skipped_count = 0

    for name, product_type, risk, minimum, expected_return, nav, description in DEFAULT_PRODUCTS:
        if name in existing_names:
            skipped_count += 1
            continue
        db.add(InvestmentProduct(
            name=name,
            type=product_type,
            risk_level=risk,
            minimum_investment=Decimal(minimum),
            expected_annual_return_rate=Decimal(expected_return),
            current_nav_per_unit=Decimal(nav),
            description=description,
            is_active=True,
        ))
        created_count += 1

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(f"Populated {created_count} products ({skipped_count} already present)")
    return {"created_count": created_count, "skipped_count": skipped_count}
