"""
SQLAlchemy database models for Trade Journal.

Trades and strategies are owned by a user. A trade references its strategy
weakly through ``strategy_id``: removing a strategy never removes trades.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class User(Base):
    """Journal user with bcrypt password hash."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    trades = relationship("Trade", back_populates="user", cascade="all, delete-orphan")
    strategies = relationship("Strategy", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User(id={self.id})>"


class Strategy(Base):
    """Named rule-set belonging to a user."""

    __tablename__ = "strategies"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="strategies")
    rules = relationship(
        "StrategyRule",
        back_populates="strategy",
        cascade="all, delete-orphan",
        order_by="StrategyRule.position",
    )

    def __repr__(self) -> str:
        return f"<Strategy(id={self.id}, name={self.name})>"


class StrategyRule(Base):
    """One free-text rule of a strategy; ``position`` keeps the user's ordering."""

    __tablename__ = "strategy_rules"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    strategy_id = Column(Integer, ForeignKey("strategies.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    rule_text = Column(Text, nullable=False)

    strategy = relationship("Strategy", back_populates="rules")


class Trade(Base):
    """
    One logged trade.

    ``pnl`` is stored as entered and is not derived from the prices. ``market``
    is free text and may be inconsistently cased across rows.
    """

    __tablename__ = "trades"
    __table_args__ = (
        CheckConstraint("side IN ('Buy', 'Sell')", name="ck_trades_side"),
        Index("ix_trades_user_date", "user_id", "trade_date"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    symbol = Column(String, nullable=False, index=True)
    side = Column(String, nullable=False)  # Buy or Sell
    quantity = Column(Float, nullable=False, default=0.0)
    entry_price = Column(Float, nullable=False, default=0.0)
    exit_price = Column(Float, nullable=True)
    pnl = Column(Float, nullable=True)
    trade_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    entry_time = Column(DateTime, nullable=True)
    exit_time = Column(DateTime, nullable=True)
    market = Column(String, nullable=True)  # stock, crypto, forex, futures (free text)
    strategy_id = Column(Integer, ForeignKey("strategies.id", ondelete="SET NULL"), nullable=True, index=True)
    emotional_state = Column(JSON, nullable=True)  # list of tags, e.g. ["FOMO", "DISCIPLINE"]
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="trades")
    strategy = relationship("Strategy")

    def __repr__(self) -> str:
        return f"<Trade(id={self.id}, symbol={self.symbol}, side={self.side}, pnl={self.pnl})>"
