"""
Ticket Message Model - One entry in a support ticket conversation
Append-only; sender_type records the sender's role at send time
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship
from investment_tracker.db.database import Base
from investment_tracker.models.user import UserRole
import uuid


class TicketMessage(Base):
    __tablename__ = "ticket_messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    ticket_id = Column(String(36), ForeignKey("support_tickets.id"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    message = Column(Text, nullable=False)
    sender_type = Column(SQLEnum(UserRole), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    ticket = relationship("SupportTicket", back_populates="messages")
    sender = relationship("User", lazy="joined")

    __table_args__ = (
        Index('idx_message_ticket_timestamp', 'ticket_id', 'timestamp'),
    )

    def to_dict(self):
        return {
            "sender_name": self.sender.name if self.sender else None,
            "message": self.message,
            "sender_type": self.sender_type.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
