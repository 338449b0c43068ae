"""
Shared pytest fixtures for the Trade Journal test suite.

Provides a throwaway SQLite database, test client, user/token and trade
fixtures. The environment is configured before any application import so the
settings objects pick it up.
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta

import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

_TEST_DB_DIR = tempfile.mkdtemp(prefix="tradejournal-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TEST_DB_DIR, "test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-key-not-for-production")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_FILE"] = ""

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from api.main import app  # noqa: E402
from api.utils.auth import create_access_token  # noqa: E402
from tradejournal.db.models import Base, User  # noqa: E402
from tradejournal.db.repositories import StrategyRepository, TradeRepository  # noqa: E402
from tradejournal.db.session import SessionLocal, engine, init_db  # noqa: E402

# Not a real bcrypt hash; fixture users authenticate with tokens, not passwords
TEST_PASSWORD_HASH = "$2b$12$notarealhashnotarealhashnotarealhashnotarealhas"


@pytest.fixture(autouse=True)
def clean_database():
    """Fresh tables for every test."""
    init_db()
    yield
    SessionLocal.remove()
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db_session():
    """Session for arranging test data. Commit before calling the API."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_client():
    """FastAPI test client; runs the application lifespan."""
    with TestClient(app) as client:
        yield client


def _make_user(db: Session, email: str) -> dict:
    user = User(email=email, password_hash=TEST_PASSWORD_HASH)
    db.add(user)
    db.commit()
    db.refresh(user)

    token = create_access_token(
        data={"sub": user.email, "user_id": user.id},
        expires_delta=timedelta(hours=1)
    )
    return {
        "user_id": user.id,
        "email": user.email,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture
def trader(db_session: Session):
    """
    A journal user with a valid token.

    Returns dict with user_id, email, token and ready-made auth headers.
    """
    return _make_user(db_session, "trader@example.com")


@pytest.fixture
def other_trader(db_session: Session):
    """A second user, for isolation checks."""
    return _make_user(db_session, "other@example.com")


@pytest.fixture
def make_trade(db_session: Session):
    """Factory inserting a committed trade for a user."""

    def _make(user_id: int, **overrides):
        fields = {
            "symbol": "AAPL",
            "side": "Buy",
            "quantity": 10,
            "entry_price": 100.0,
            "exit_price": 110.0,
            "pnl": 100.0,
            "trade_date": datetime(2024, 1, 2, 15, 30),
            "market": "stock",
        }
        fields.update(overrides)
        trade = TradeRepository(db_session).create(user_id, **fields)
        db_session.commit()
        return trade

    return _make


@pytest.fixture
def make_strategy(db_session: Session):
    """Factory inserting a committed strategy for a user."""

    def _make(user_id: int, name: str = "Breakout", rules=("Wait for volume", "Stop below range")):
        strategy = StrategyRepository(db_session).create(user_id, name=name, rules=rules)
        db_session.commit()
        return strategy

    return _make
