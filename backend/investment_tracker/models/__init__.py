# Database Models Package
from investment_tracker.models.user import User, UserRole
from investment_tracker.models.investment_product import InvestmentProduct, InvestmentType, RiskLevel
from investment_tracker.models.holding import Holding
from investment_tracker.models.transaction import Transaction, TransactionType
from investment_tracker.models.support_ticket import SupportTicket, TicketStatus, Priority
from investment_tracker.models.ticket_message import TicketMessage

__all__ = [
    "User", "UserRole",
    "InvestmentProduct", "InvestmentType", "RiskLevel",
    "Holding",
    "Transaction", "TransactionType",
    "SupportTicket", "TicketStatus", "Priority",
    "TicketMessage",
]
