"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from zenith_gateway.api.main import create_app
from zenith_gateway.api.dependencies import get_clock
from zenith_gateway.domain.clock import FixedClock
from zenith_gateway.domain.models import Transaction, TransactionStatus, TransactionType
from zenith_gateway.infrastructure.database.models import Base
from zenith_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER_ID = "owner_1"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FixedClock:
    """Business clock frozen at 2025-06-15"""
    return FixedClock(date(2025, 6, 15))


@pytest.fixture
def ledger_mock():
    """Ledger webhook stub so settlements never hit the network"""
    with patch("zenith_gateway.infrastructure.clients.ledger.LedgerClient.send_settlement_event") as mock:
        mock.return_value = None
        yield mock


@pytest.fixture
def client(db: Session, clock: FixedClock, ledger_mock) -> TestClient:
    """Create FastAPI test client with test database and fixed clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    return TestClient(app)


@pytest.fixture
def headers() -> dict:
    """Tenant header for API calls"""
    return {"X-Owner-ID": OWNER_ID}


@pytest.fixture
def receivable() -> Transaction:
    """Open receivable of R$ 800.00"""
    return Transaction(
        transaction_type=TransactionType.RECEIVABLE,
        total_amount=Decimal("800.00"),
        amount_settled=Decimal("0.00"),
        status=TransactionStatus.PENDENTE,
        due_date=date(2025, 6, 30),
    )
