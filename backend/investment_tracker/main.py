"""
Investment Tracker - FastAPI Backend
Main application entry point
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import sys

from investment_tracker.core.config import ENVIRONMENT, IS_PRODUCTION, ALLOW_ORIGINS, SEED_PRODUCTS
from investment_tracker.core.exceptions import register_exception_handlers

# Configure logging to show INFO and above in console
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)  # This ensures logs go to stdout/terminal
    ]
)

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Investment Tracker API",
    description="Backend API for multi-user investment portfolios and support tickets",
    version="1.0.0"
)

# CORS Configuration
if IS_PRODUCTION:
    # Production mode - specific origins only
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=["*"],
    )
else:
    # Development mode - allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,  # Cannot use credentials with wildcard origin
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

register_exception_handlers(app)

# Import and register API routes
# transactions before portfolio so /api/portfolio/transactions is not taken as a holding id
from investment_tracker.api import auth, transactions, portfolio, support, investments
app.include_router(auth.router)
app.include_router(transactions.router)
app.include_router(portfolio.router)
app.include_router(support.router)
app.include_router(investments.router)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    from investment_tracker.db.database import init_db, SessionLocal
    from investment_tracker.services import populate_products

    init_db()

    if not SEED_PRODUCTS:
        logger.info("Product seeding disabled")
        return

    db = SessionLocal()
    try:
        result = populate_products.populate_default_products(db, force_refresh=False)
        if result["created_count"]:
            logger.info(f"Seeded {result['created_count']} investment products")
    except Exception as e:
        logger.error(f"Error populating investment products: {e}", exc_info=True)
    finally:
        db.close()


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "Investment Tracker API is running",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    from sqlalchemy import text
    from investment_tracker.db.database import SessionLocal

    database = "connected"
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        database = "unavailable"
    finally:
        db.close()

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "database": database,
        "environment": ENVIRONMENT
    }
