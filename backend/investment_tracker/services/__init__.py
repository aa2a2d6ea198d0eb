# Services package
from investment_tracker.services import (
    investment_product_service,
    portfolio_service,
    portfolio_analytics_service,
    transaction_service,
    support_ticket_service,
    populate_products,
)

__all__ = [
    "investment_product_service",
    "portfolio_service",
    "portfolio_analytics_service",
    "transaction_service",
    "support_ticket_service",
    "populate_products",
]
