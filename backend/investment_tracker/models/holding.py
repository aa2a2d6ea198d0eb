"""
Holding Model - A user's current position in one investment product

At most one row per (user, product). The row is deleted when a sell
brings units_owned to zero. `version` is an optimistic-lock counter:
SQLAlchemy adds it to the WHERE clause of every UPDATE/DELETE and raises
StaleDataError when another request changed the row first.
"""

from sqlalchemy import Column, Integer, Numeric, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from investment_tracker.db.database import Base

HOLDING_UNIQUE_CONSTRAINT = "uq_holding_user_product"


class Holding(Base):
    """Holding (portfolio row) - units owned and average cost per unit"""

    __tablename__ = "holdings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("investment_products.id"), nullable=False, index=True)

    units_owned = Column(Numeric(15, 4), nullable=False, default=0)
    avg_purchase_price = Column(Numeric(12, 2), nullable=False, default=0)

    version = Column(Integer, nullable=False)

    user = relationship("User")
    product = relationship("InvestmentProduct", lazy="joined")

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name=HOLDING_UNIQUE_CONSTRAINT),
        CheckConstraint('units_owned >= 0', name='ck_holding_units_non_negative'),
    )

    __mapper_args__ = {
        "version_id_col": version,
    }

    def to_dict(self):
        """Convert holding to dictionary (raw stored values only)"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "product_id": self.product_id,
            "units_owned": self.units_owned,
            "avg_purchase_price": self.avg_purchase_price,
            "version": self.version,
        }
