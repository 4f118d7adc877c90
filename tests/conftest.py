"""Pytest fixtures for testing"""

import itertools
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from spendwise.api.main import create_app
from spendwise.api.dependencies import get_now
from spendwise.infrastructure.database.models import Base
from spendwise.infrastructure.database.session import get_db
from spendwise.domain.gatherer import InsightSnapshot
from spendwise.domain.models import Category, DateWindow, Transaction, UserEngagement


# Thursday; June 2024 has 30 days
NOW = datetime(2024, 6, 20, 12, 0, tzinfo=timezone.utc)
DEFAULT_WINDOW = DateWindow(start=date(2024, 5, 21), end=date(2024, 6, 20))

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a pinned clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: NOW
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    """Pinned current instant shared by unit and API tests"""
    return NOW


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Factory for domain transactions"""
    counter = itertools.count(1)

    def _make(
        amount: str,
        occurred_on: date,
        category_id: str = "food",
        category_name: str = "Food",
    ) -> Transaction:
        return Transaction(
            transaction_id=f"txn_{next(counter)}",
            amount=Decimal(amount),
            occurred_on=occurred_on,
            category_id=category_id,
            category_name=category_name,
            category_color="#FF6B6B",
            payment_method="upi",
        )

    return _make


@pytest.fixture
def make_snapshot() -> Callable[..., InsightSnapshot]:
    """Factory for engine snapshots with neutral defaults"""

    def _make(
        transactions: Optional[List[Transaction]] = None,
        categories: Optional[List[Category]] = None,
        engagement: Optional[UserEngagement] = None,
        previous_period_total: str = "0",
        month_spend: Optional[Dict[str, Decimal]] = None,
        window: DateWindow = DEFAULT_WINDOW,
        now: datetime = NOW,
    ) -> InsightSnapshot:
        return InsightSnapshot(
            window=window,
            now=now,
            transactions=transactions or [],
            categories=categories or [],
            engagement=engagement or UserEngagement(current=0, longest=0),
            previous_period_total=Decimal(previous_period_total),
            month_spend=month_spend or {},
        )

    return _make
