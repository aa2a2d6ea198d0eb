"""
Investment Product Model - Catalog of products users can invest in
Products are never physically deleted; is_active=False hides them
"""

from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Index
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.sql import func
from investment_tracker.db.database import Base
import enum


class InvestmentType(str, enum.Enum):
    """Kind of investment product"""
    FIXED_DEPOSIT = "FIXED_DEPOSIT"
    GOVERNMENT_BOND = "GOVERNMENT_BOND"
    PUBLIC_PROVIDENT_FUND = "PUBLIC_PROVIDENT_FUND"
    MUTUAL_FUND = "MUTUAL_FUND"
    CORPORATE_BOND = "CORPORATE_BOND"
    REAL_ESTATE_INVESTMENT_TRUST = "REAL_ESTATE_INVESTMENT_TRUST"
    STOCK = "STOCK"
    CRYPTOCURRENCY = "CRYPTOCURRENCY"
    OPTIONS = "OPTIONS"


class RiskLevel(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class InvestmentProduct(Base):
    """Investment product - priced by its current NAV per unit"""

    __tablename__ = "investment_products"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(100), nullable=False, index=True)
    type = Column(SQLEnum(InvestmentType), nullable=False, index=True)
    risk_level = Column(SQLEnum(RiskLevel), nullable=False, index=True)

    # Money fields
    minimum_investment = Column(Numeric(12, 2), nullable=False)
    expected_annual_return_rate = Column(Numeric(5, 2), nullable=False)
    current_nav_per_unit = Column(Numeric(12, 2), nullable=False)

    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # Active catalog filtered by type / risk level
        Index('idx_product_active_type', 'is_active', 'type'),
        Index('idx_product_active_risk', 'is_active', 'risk_level'),
    )

    def __repr__(self):
        return (
            f"InvestmentProduct(id={self.id}, name={self.name!r}, type={self.type}, "
            f"risk_level={self.risk_level}, is_active={self.is_active})"
        )

    def to_dict(self):
        """Convert product to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value if self.type else None,
            "risk_level": self.risk_level.value if self.risk_level else None,
            "minimum_investment": self.minimum_investment,
            "expected_annual_return_rate": self.expected_annual_return_rate,
            "current_nav_per_unit": self.current_nav_per_unit,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
