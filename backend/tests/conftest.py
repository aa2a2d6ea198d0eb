"""
Shared fixtures: a throwaway SQLite database, users, products and an API client
"""

import os
import sys
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

# Point the app at a temporary database BEFORE importing it
_db_dir = tempfile.mkdtemp(prefix="investment-tracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_db_dir) / 'test.db'}"
os.environ["SEED_PRODUCTS"] = "false"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fastapi.testclient import TestClient  # noqa: E402

from investment_tracker.core.auth import create_user_token  # noqa: E402
from investment_tracker.db.database import Base, SessionLocal, engine  # noqa: E402
from investment_tracker.main import app  # noqa: E402
from investment_tracker.models import (  # noqa: E402
    InvestmentProduct,
    InvestmentType,
    RiskLevel,
    User,
    UserRole,
)


@pytest.fixture(autouse=True)
def clean_database():
    """Fresh schema for every test"""
    import investment_tracker.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _create_user(db, email, name, role):
    user = User(email=email, name=name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return _create_user(db, "investor@example.com", "Asha Investor", UserRole.USER)


@pytest.fixture
def other_user(db):
    return _create_user(db, "someone@example.com", "Ravi Other", UserRole.USER)


@pytest.fixture
def admin(db):
    return _create_user(db, "admin@example.com", "Support Admin", UserRole.ADMIN)


@pytest.fixture
def make_product(db):
    def _make(
        name="Nifty 50 Index Fund",
        product_type=InvestmentType.MUTUAL_FUND,
        risk_level=RiskLevel.MEDIUM,
        minimum_investment="1000.00",
        nav="100.00",
        expected_return="12.00",
        is_active=True,
    ):
        product = InvestmentProduct(
            name=name,
            type=product_type,
            risk_level=risk_level,
            minimum_investment=Decimal(minimum_investment),
            expected_annual_return_rate=Decimal(expected_return),
            current_nav_per_unit=Decimal(nav),
            description=f"{name} description",
            is_active=is_active,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_user_token(user)}"}

    return _headers
