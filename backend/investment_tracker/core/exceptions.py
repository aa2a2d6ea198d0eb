"""
Typed errors raised by the services and the FastAPI handlers that render them

Every failure reaches the client as {"status", "message", "timestamp"};
request validation failures add an "errors" map of field -> message.
"""

from datetime import datetime, timezone
from typing import Dict, Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PortfolioTrackerError(Exception):
    """Base class for errors that are safe to show to the caller"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# Not found (404)

class NotFoundError(PortfolioTrackerError):
    status_code = status.HTTP_404_NOT_FOUND


class ProductNotFound(NotFoundError):
    pass


class HoldingNotFound(NotFoundError):
    pass


class NoSuchHolding(NotFoundError):
    """Sell requested for a product the user does not hold"""


class TicketNotFound(NotFoundError):
    pass


class UserNotFound(NotFoundError):
    pass


# Validation / state violations (400)

class ProductInactive(PortfolioTrackerError):
    pass


class BelowMinimumInvestment(PortfolioTrackerError):
    pass


class InsufficientUnits(PortfolioTrackerError):
    pass


class TicketClosed(PortfolioTrackerError):
    pass


class InvalidTicketStatus(PortfolioTrackerError):
    pass


class InvalidFilter(PortfolioTrackerError):
    pass


# Conflict (409)

class ConcurrentModification(PortfolioTrackerError):
    """A holding kept changing underneath a buy/sell until retries ran out"""

    status_code = status.HTTP_409_CONFLICT


# Infrastructure (500)

class ServiceError(PortfolioTrackerError):
    """
    Wraps datastore and other unexpected failures.
    The underlying exception is chained as __cause__ for logging only.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_payload(status_code: int, message: str, errors: Optional[Dict[str, str]] = None) -> dict:
    """Build the error body shared by every handler"""
    payload = {
        "status": status_code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if errors is not None:
        payload["errors"] = errors
    return payload


async def portfolio_error_handler(request: Request, exc: PortfolioTrackerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc.__cause__ or exc)
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc.status_code, exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: Dict[str, str] = {}
    for error in exc.errors():
        # Drop the "body"/"query" prefix so the key is the field name
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "request"
        errors.setdefault(field, error.get("msg", "Invalid value"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload(status.HTTP_400_BAD_REQUEST, "Validation failed", errors),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to an application"""
    app.add_exception_handler(PortfolioTrackerError, portfolio_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
