"""
Support Ticket API Endpoints
Users raise tickets and reply to them; administrators see and filter all tickets
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from investment_tracker.core.auth import get_current_user, require_admin
from investment_tracker.db.database import get_db
from investment_tracker.models.support_ticket import Priority
from investment_tracker.models.user import User
from investment_tracker.services import support_ticket_service

router = APIRouter(prefix="/api/support", tags=["support"])


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


# Request/Response Models
class CreateTicketRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    priority: Optional[Priority] = None
    investment_product_name: Optional[str] = Field(None, max_length=100)

    check_text_fields = field_validator("subject", "description")(_not_blank)


class RespondTicketRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)
    status: Optional[str] = None

    check_message = field_validator("message")(_not_blank)


class TicketMessageResponse(BaseModel):
    sender_name: Optional[str] = None
    message: str
    sender_type: str
    timestamp: Optional[str] = None


class TicketResponse(BaseModel):
    ticket_id: str
    user_id: int
    user_name: Optional[str] = None
    investment_product_id: Optional[int] = None
    investment_product_name: Optional[str] = None
    subject: str
    description: str
    status: str
    priority: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    messages: List[TicketMessageResponse] = []


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    request: CreateTicketRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Raise a new support ticket

    When investment_product_name is given, the ticket is linked to the
    first active product whose name contains it.
    """
    return await support_ticket_service.create_ticket(
        db,
        email=current_user.email,
        subject=request.subject,
        description=request.description,
        priority=request.priority,
        product_hint=request.investment_product_name,
    )


@router.get("/tickets/user", response_model=List[TicketResponse])
def get_my_tickets(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Tickets raised by the caller, newest first"""
    return support_ticket_service.list_tickets_for_user(db, current_user)


@router.get("/tickets/user/filter", response_model=List[TicketResponse])
def filter_my_tickets(
    priority: Optional[Priority] = Query(None),
    ticket_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_ticket_service.filter_tickets_for_user(
        db,
        current_user,
        priority=priority,
        status=support_ticket_service.parse_ticket_status(ticket_status),
    )


@router.get("/tickets/{ticket_id}", response_model=TicketResponse)
def get_ticket(
    ticket_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ticket with its message thread, oldest message first"""
    return support_ticket_service.get_ticket(db, ticket_id, current_user)


@router.put("/tickets/{ticket_id}/reply", response_model=TicketResponse)
def reply_to_ticket(
    ticket_id: str,
    request: RespondTicketRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add a message to the ticket thread

    An optional status (OPEN, RESPONDED or CLOSED) is applied together with
    the message. Closed tickets cannot be replied to.
    """
    return support_ticket_service.respond_to_ticket(
        db, ticket_id, current_user, request.message, request.status
    )


# Admin endpoints

@router.get("/admin/tickets", response_model=List[TicketResponse])
def get_all_tickets(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return support_ticket_service.list_all_tickets(db)


@router.get("/admin/tickets/filter", response_model=List[TicketResponse])
def filter_all_tickets(
    priority: Optional[Priority] = Query(None),
    ticket_status: Optional[str] = Query(None, alias="status"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """All tickets narrowed by priority and/or status"""
    return support_ticket_service.filter_tickets(
        db,
        priority=priority,
        status=support_ticket_service.parse_ticket_status(ticket_status),
    )
