"""
Transaction Model - Append-only ledger of buys and sells
nav_at_txn snapshots the product NAV at execution time
"""

from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, Index
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship
from investment_tracker.db.database import Base
import enum


class TransactionType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


class Transaction(Base):
    """A single executed buy or sell; never updated or deleted"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("investment_products.id"), nullable=False, index=True)

    txn_type = Column(SQLEnum(TransactionType), nullable=False)
    units = Column(Numeric(15, 4), nullable=False)
    nav_at_txn = Column(Numeric(12, 2), nullable=False)
    txn_date = Column(DateTime(timezone=True), nullable=False, index=True)

    product = relationship("InvestmentProduct", lazy="joined")

    __table_args__ = (
        # History for a user ordered by date (most common query)
        Index('idx_txn_user_date', 'user_id', 'txn_date'),
    )

    @property
    def amount(self):
        """Cash value of the trade at execution NAV"""
        return self.units * self.nav_at_txn

    def to_dict(self):
        """Convert transaction to dictionary"""
        return {
            "id": self.id,
            "investment_product_id": self.product_id,
            "investment_product_name": self.product.name if self.product else None,
            "txn_type": self.txn_type.value,
            "units": self.units,
            "nav_at_txn": self.nav_at_txn,
            "amount": self.amount,
            "txn_date": self.txn_date.isoformat() if self.txn_date else None,
        }
