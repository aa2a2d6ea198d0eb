"""
User Model - Stores authenticated users and their role
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.sql import func
from investment_tracker.db.database import Base
import enum


class UserRole(str, enum.Enum):
    """Role resolved from the caller's identity"""
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """User model - represents an authenticated user"""

    __tablename__ = "users"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self):
        """Convert user to dictionary"""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value if self.role else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }
