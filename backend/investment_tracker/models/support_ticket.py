"""
Support Ticket Model - User-raised support requests

Lifecycle: OPEN -> RESPONDED -> CLOSED (or OPEN -> CLOSED). CLOSED is terminal.
Tickets are never deleted.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship
from investment_tracker.db.database import Base
import enum
import uuid


class TicketStatus(str, enum.Enum):
    """Ticket status enumeration"""
    OPEN = "OPEN"
    RESPONDED = "RESPONDED"
    CLOSED = "CLOSED"


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SupportTicket(Base):
    """Support ticket with an ordered message thread"""

    __tablename__ = "support_tickets"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("investment_products.id"), nullable=True)

    subject = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)

    status = Column(SQLEnum(TicketStatus), default=TicketStatus.OPEN, nullable=False, index=True)
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", lazy="joined")
    product = relationship("InvestmentProduct", lazy="joined")
    messages = relationship(
        "TicketMessage",
        back_populates="ticket",
        order_by="TicketMessage.timestamp",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index('idx_ticket_user_created', 'user_id', 'created_at'),
        Index('idx_ticket_priority_status', 'priority', 'status'),
    )

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED

    def to_dict(self, include_messages: bool = True):
        """Convert ticket to its response view"""
        return {
            "ticket_id": self.id,
            "user_id": self.user_id,
            "user_name": self.user.name if self.user else None,
            "investment_product_id": self.product_id,
            "investment_product_name": self.product.name if self.product else None,
            "subject": self.subject,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "messages": [m.to_dict() for m in self.messages] if include_messages else [],
        }
