"""
Application configuration
Values are read from environment variables (optionally loaded from backend/.env)
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Runtime environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = os.getenv("PRODUCTION", "false").lower() == "true"
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
ALLOW_ORIGINS = os.getenv("ALLOW_ORIGINS", FRONTEND_URL).split(",")

# Database (None means the SQLite default in db/database.py)
DATABASE_URL = os.getenv("DATABASE_URL")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# JWT Configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(24 * 60)))

# Ledger: how many times a buy/sell is replayed after losing an optimistic-lock race
HOLDING_UPDATE_MAX_RETRIES = int(os.getenv("HOLDING_UPDATE_MAX_RETRIES", "5"))

# Support tickets: size of the pool running user/product lookups on ticket creation
TICKET_LOOKUP_WORKERS = int(os.getenv("TICKET_LOOKUP_WORKERS", "10"))

# Seed the default product catalog on startup when it is empty
SEED_PRODUCTS = os.getenv("SEED_PRODUCTS", "true").lower() == "true"
