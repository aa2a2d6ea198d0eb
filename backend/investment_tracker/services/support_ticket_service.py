"""
Support Ticket Service
Ticket lifecycle, threaded messages and ticket listings

Status moves OPEN -> RESPONDED -> CLOSED, but a reply may set any status
as long as the ticket is not already CLOSED.
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import asyncio
import logging

from investment_tracker.core.config import TICKET_LOOKUP_WORKERS
from investment_tracker.core.exceptions import (
    InvalidTicketStatus,
    ServiceError,
    TicketClosed,
    TicketNotFound,
    UserNotFound,
)
from investment_tracker.db.database import SessionLocal
from investment_tracker.models.support_ticket import SupportTicket, TicketStatus, Priority
from investment_tracker.models.ticket_message import TicketMessage
from investment_tracker.models.user import User
from investment_tracker.services.investment_product_service import find_active_by_name_contains

logger = logging.getLogger(__name__)

# Bounded pool for the independent lookups done while creating a ticket
_lookup_executor = ThreadPoolExecutor(max_workers=TICKET_LOOKUP_WORKERS, thread_name_prefix="ticket-lookup")


def parse_ticket_status(value: Optional[str]) -> Optional[TicketStatus]:
    """
    Parse a requested status; blank means "leave status unchanged"

    Raises:
        InvalidTicketStatus: If the value is not a known status
    """
    if value is None or not value.strip():
        return None
    try:
        return TicketStatus(value.strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in TicketStatus)
        raise InvalidTicketStatus(f"Unknown ticket status: {value}. Use one of: {allowed}")


def _fetch_user_id(session_factory: Callable[[], Session], email: str) -> int:
    db = session_factory()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            raise UserNotFound(f"User not found with email: {email}")
        return user.id
    finally:
        db.close()


def _fetch_product_id(session_factory: Callable[[], Session], product_hint: Optional[str]) -> Optional[int]:
    """First active product whose name contains the hint; None when nothing matches"""
    if not product_hint or not product_hint.strip():
        return None
    db = session_factory()
    try:
        matches = find_active_by_name_contains(db, product_hint)
        if not matches:
            logger.warning(f"No active product matches '{product_hint}', creating ticket without a product")
            return None
        return matches[0].id
    finally:
        db.close()


async def create_ticket(
    db: Session,
    email: str,
    subject: str,
    description: str,
    priority: Optional[Priority] = None,
    product_hint: Optional[str] = None,
    session_factory: Optional[Callable[[], Session]] = None
) -> Dict[str, Any]:
    """
    Create an OPEN ticket for the user identified by email

    The user lookup and the product-hint lookup run concurrently on the
    lookup pool, each with its own session; if either fails, no ticket is
    created and the first error propagates.
    """
    factory = session_factory or SessionLocal
    loop = asyncio.get_running_loop()
    # Wait for both lookups even when one fails so neither error goes unobserved
    results = await asyncio.gather(
        loop.run_in_executor(_lookup_executor, _fetch_user_id, factory, email),
        loop.run_in_executor(_lookup_executor, _fetch_product_id, factory, product_hint),
        return_exceptions=True,
    )
    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        for extra in failures[1:]:
            logger.warning(f"Additional lookup failure while creating ticket for {email}: {extra!r}")
        first = failures[0]
        if isinstance(first, SQLAlchemyError):
            logger.error(f"Lookup failed while creating ticket for {email}: {first}", exc_info=first)
            raise ServiceError("Failed to create ticket") from first
        raise first
    user_id, product_id = results

    now = datetime.now(timezone.utc)
    ticket = SupportTicket(
        user_id=user_id,
        product_id=product_id,
        subject=subject,
        description=description,
        status=TicketStatus.OPEN,
        priority=priority or Priority.MEDIUM,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(ticket)
        db.commit()
        db.refresh(ticket)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving ticket for {email}: {e}", exc_info=True)
        raise ServiceError("Failed to create ticket") from e

    logger.info(f"Support ticket created with ID: {ticket.id}")
    return ticket.to_dict()


def _visible_to(ticket: Optional[SupportTicket], user: User) -> bool:
    return ticket is not None and (user.is_admin or ticket.user_id == user.id)


def get_ticket(db: Session, ticket_id: str, user: User) -> Dict[str, Any]:
    """Ticket with its messages (oldest first); users only see their own tickets"""
    ticket = db.query(SupportTicket).filter(SupportTicket.id == ticket_id).first()
    if not _visible_to(ticket, user):
        raise TicketNotFound(f"Ticket with id {ticket_id} is not found")
    return ticket.to_dict()


def respond_to_ticket(
    db: Session,
    ticket_id: str,
    user: User,
    message: str,
    status: Optional[str] = None
) -> Dict[str, Any]:
    """
    Append a message to a ticket and optionally change its status

    The message and the status/updated_at change are committed together.

    Raises:
        InvalidTicketStatus: Unknown status string (checked before anything else)
        TicketNotFound: No such ticket, or not visible to the user
        TicketClosed: Ticket is already CLOSED
    """
    new_status = parse_ticket_status(status)
    logger.info(f"Responding to ticket {ticket_id} by {user.email} with status={new_status}")

    ticket = (
        db.query(SupportTicket)
        .filter(SupportTicket.id == ticket_id)
        .with_for_update(of=SupportTicket)
        .first()
    )
    if not _visible_to(ticket, user):
        db.rollback()
        raise TicketNotFound(f"Support ticket not found with ID: {ticket_id}")
    if ticket.is_closed:
        db.rollback()
        logger.warning(f"Rejected reply to closed ticket {ticket_id}")
        raise TicketClosed("Ticket is already closed. Please raise another one")

    now = datetime.now(timezone.utc)
    try:
        db.add(TicketMessage(
            ticket_id=ticket.id,
            sender_id=user.id,
            message=message,
            sender_type=user.role,
            timestamp=now,
        ))
        if new_status is not None:
            ticket.status = new_status
        ticket.updated_at = now
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error responding to ticket {ticket_id}: {e}", exc_info=True)
        raise ServiceError("Failed to respond to ticket") from e

    messages = (
        db.query(TicketMessage)
        .filter(TicketMessage.ticket_id == ticket_id)
        .order_by(TicketMessage.timestamp.asc())
        .all()
    )
    view = ticket.to_dict(include_messages=False)
    view["messages"] = [m.to_dict() for m in messages]
    return view


def _query_tickets(
    db: Session,
    user_id: Optional[int] = None,
    priority: Optional[Priority] = None,
    status: Optional[TicketStatus] = None
) -> List[SupportTicket]:
    query = db.query(SupportTicket)
    if user_id is not None:
        query = query.filter(SupportTicket.user_id == user_id)
    if priority is not None:
        query = query.filter(SupportTicket.priority == priority)
    if status is not None:
        query = query.filter(SupportTicket.status == status)
    return query.order_by(SupportTicket.created_at.desc()).all()


def list_tickets_for_user(db: Session, user: User) -> List[Dict[str, Any]]:
    logger.info(f"Fetching support tickets for user {user.email}")
    tickets = _query_tickets(db, user_id=user.id)
    logger.info(f"Found {len(tickets)} tickets for user {user.email}")
    return [t.to_dict() for t in tickets]


def list_all_tickets(db: Session) -> List[Dict[str, Any]]:
    logger.info("Fetching all support tickets")
    return [t.to_dict() for t in _query_tickets(db)]


def filter_tickets(
    db: Session,
    priority: Optional[Priority] = None,
    status: Optional[TicketStatus] = None
) -> List[Dict[str, Any]]:
    """All tickets, optionally narrowed by priority and/or status"""
    logger.info(f"Filtering tickets with priority={priority} and status={status}")
    tickets = _query_tickets(db, priority=priority, status=status)
    logger.info(f"Found {len(tickets)} filtered tickets")
    return [t.to_dict() for t in tickets]


def filter_tickets_for_user(
    db: Session,
    user: User,
    priority: Optional[Priority] = None,
    status: Optional[TicketStatus] = None
) -> List[Dict[str, Any]]:
    logger.info(f"Filtering tickets for user={user.email} with priority={priority} and status={status}")
    tickets = _query_tickets(db, user_id=user.id, priority=priority, status=status)
    return [t.to_dict() for t in tickets]
