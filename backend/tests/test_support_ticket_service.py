"""
Tests for the support ticket lifecycle
"""

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from investment_tracker.core.exceptions import (
    InvalidTicketStatus,
    ServiceError,
    TicketClosed,
    TicketNotFound,
    UserNotFound,
)
from investment_tracker.models import Priority, SupportTicket, TicketMessage, TicketStatus
from investment_tracker.services import support_ticket_service


def _create(db, email, **kwargs):
    kwargs.setdefault("subject", "Cannot see my units")
    kwargs.setdefault("description", "Bought yesterday but the holding is missing")
    return asyncio.run(support_ticket_service.create_ticket(db, email, **kwargs))


def test_create_ticket_defaults(db, user):
    ticket = _create(db, user.email)

    assert ticket["status"] == "OPEN"
    assert ticket["priority"] == "MEDIUM"
    assert ticket["user_id"] == user.id
    assert ticket["investment_product_id"] is None
    assert ticket["messages"] == []
    assert ticket["created_at"] == ticket["updated_at"]


def test_create_ticket_links_product_by_partial_name(db, user, product):
    ticket = _create(db, user.email, priority=Priority.HIGH, product_hint="nifty")

    assert ticket["priority"] == "HIGH"
    assert ticket["investment_product_id"] == product.id
    assert ticket["investment_product_name"] == product.name


def test_create_ticket_ignores_unmatched_product_hint(db, user, product):
    ticket = _create(db, user.email, product_hint="no such fund")
    assert ticket["investment_product_id"] is None


def test_create_ticket_ignores_inactive_products(db, user, make_product):
    make_product(name="Closed Ended Fund", is_active=False)
    ticket = _create(db, user.email, product_hint="closed ended")
    assert ticket["investment_product_id"] is None


def test_create_ticket_unknown_user(db):
    with pytest.raises(UserNotFound):
        _create(db, "ghost@example.com")
    assert db.query(SupportTicket).count() == 0


def test_parse_ticket_status():
    assert support_ticket_service.parse_ticket_status(None) is None
    assert support_ticket_service.parse_ticket_status("  ") is None
    assert support_ticket_service.parse_ticket_status("closed") == TicketStatus.CLOSED
    with pytest.raises(InvalidTicketStatus):
        support_ticket_service.parse_ticket_status("RESOLVED")


def test_conversation_until_closed(db, user, admin):
    ticket = _create(db, user.email)
    ticket_id = ticket["ticket_id"]

    replied = support_ticket_service.respond_to_ticket(
        db, ticket_id, admin, "We are looking into it", status="RESPONDED"
    )
    assert replied["status"] == "RESPONDED"
    assert replied["messages"][0]["sender_type"] == "ADMIN"
    assert replied["updated_at"] >= replied["created_at"]

    replied = support_ticket_service.respond_to_ticket(db, ticket_id, user, "Thanks, still waiting")
    assert replied["status"] == "RESPONDED"
    assert [m["message"] for m in replied["messages"]] == ["We are looking into it", "Thanks, still waiting"]
    assert replied["messages"][1]["sender_type"] == "USER"

    closed = support_ticket_service.respond_to_ticket(db, ticket_id, admin, "Fixed", status="CLOSED")
    assert closed["status"] == "CLOSED"

    with pytest.raises(TicketClosed):
        support_ticket_service.respond_to_ticket(db, ticket_id, user, "One more thing")
    assert db.query(TicketMessage).count() == 3


def test_invalid_status_leaves_ticket_untouched(db, user, admin):
    ticket = _create(db, user.email)

    with pytest.raises(InvalidTicketStatus):
        support_ticket_service.respond_to_ticket(db, ticket["ticket_id"], admin, "Done", status="RESOLVED")

    assert db.query(TicketMessage).count() == 0
    assert support_ticket_service.get_ticket(db, ticket["ticket_id"], user)["status"] == "OPEN"


def test_ticket_visibility(db, user, other_user, admin):
    ticket = _create(db, user.email)

    assert support_ticket_service.get_ticket(db, ticket["ticket_id"], admin)["ticket_id"] == ticket["ticket_id"]
    with pytest.raises(TicketNotFound):
        support_ticket_service.get_ticket(db, ticket["ticket_id"], other_user)
    with pytest.raises(TicketNotFound):
        support_ticket_service.respond_to_ticket(db, ticket["ticket_id"], other_user, "Hello")
    with pytest.raises(TicketNotFound):
        support_ticket_service.get_ticket(db, "missing-id", user)


def test_listing_and_filtering(db, user, other_user, admin):
    low = _create(db, user.email, priority=Priority.LOW)
    high = _create(db, user.email, priority=Priority.HIGH)
    _create(db, other_user.email, priority=Priority.HIGH)
    support_ticket_service.respond_to_ticket(db, low["ticket_id"], admin, "Closing", status="CLOSED")

    mine = support_ticket_service.list_tickets_for_user(db, user)
    assert [t["ticket_id"] for t in mine] == [high["ticket_id"], low["ticket_id"]]

    assert len(support_ticket_service.list_all_tickets(db)) == 3
    assert len(support_ticket_service.filter_tickets(db, priority=Priority.HIGH)) == 2
    assert len(support_ticket_service.filter_tickets(db, status=TicketStatus.CLOSED)) == 1
    assert support_ticket_service.filter_tickets(db, priority=Priority.HIGH, status=TicketStatus.CLOSED) == []

    my_open = support_ticket_service.filter_tickets_for_user(db, user, status=TicketStatus.OPEN)
    assert [t["ticket_id"] for t in my_open] == [high["ticket_id"]]


def test_failed_reply_commit_changes_nothing(db, user, admin, monkeypatch):
    ticket = _create(db, user.email)

    def failing_commit():
        db.flush()
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(ServiceError):
        support_ticket_service.respond_to_ticket(db, ticket["ticket_id"], admin, "Fixed", status="CLOSED")
    monkeypatch.undo()

    db.expire_all()
    stored = support_ticket_service.get_ticket(db, ticket["ticket_id"], user)
    assert stored["status"] == "OPEN"
    assert stored["updated_at"] == ticket["updated_at"]
    assert stored["messages"] == []
    assert db.query(TicketMessage).count() == 0


def test_create_ticket_waits_for_both_lookups(db, user, monkeypatch):
    lookups = []

    def missing_user(session_factory, email):
        lookups.append("user")
        raise UserNotFound(f"User not found with email: {email}")

    def broken_product_lookup(session_factory, product_hint):
        lookups.append("product")
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    monkeypatch.setattr(support_ticket_service, "_fetch_user_id", missing_user)
    monkeypatch.setattr(support_ticket_service, "_fetch_product_id", broken_product_lookup)

    with pytest.raises(UserNotFound):
        _create(db, user.email, product_hint="nifty")

    assert sorted(lookups) == ["product", "user"]
    assert db.query(SupportTicket).count() == 0


def test_create_ticket_product_lookup_failure(db, user, monkeypatch):
    def broken_product_lookup(session_factory, product_hint):
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    monkeypatch.setattr(support_ticket_service, "_fetch_product_id", broken_product_lookup)

    with pytest.raises(ServiceError):
        _create(db, user.email, product_hint="nifty")
    assert db.query(SupportTicket).count() == 0
