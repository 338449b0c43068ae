"""
Repository pattern for data access.

Provides clean interfaces for database operations, abstracting SQLAlchemy details.
Every trade and strategy query is scoped by the owning user.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session
from loguru import logger

from tradejournal.db.models import Strategy, StrategyRule, Trade, User
from tradejournal.domain.markets import market_clause
from tradejournal.domain.trades import normalize_emotional_states
from tradejournal.utils.errors import DuplicateRecordError, RecordNotFoundError

SORTABLE_TRADE_FIELDS = (
    "trade_date",
    "symbol",
    "pnl",
    "created_at",
    "entry_price",
    "exit_price",
    "quantity",
    "market",
    "side",
)
DEFAULT_SORT_FIELD = "trade_date"


@dataclass
class TradeFilters:
    """Optional trade filters; unset fields do not constrain the query."""

    market: Optional[str] = None
    symbol: Optional[str] = None
    side: Optional[str] = None
    strategy_id: Optional[int] = None
    emotional_states: List[str] = field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def __post_init__(self):
        # Unknown emotion names are dropped; none left means no emotion filter
        self.emotional_states = normalize_emotional_states(self.emotional_states)


class UserRepository:
    """Repository for User operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def create(self, email: str, password_hash: str) -> User:
        """Create a new user."""
        if self.get_by_email(email):
            raise DuplicateRecordError("Email already registered")

        user = User(email=email.lower(), password_hash=password_hash)
        self.db.add(user)
        self.db.flush()
        return user

    def touch_login(self, user: User) -> None:
        user.last_login = datetime.utcnow()
        self.db.flush()


class TradeRepository:
    """Repository for Trade operations."""

    def __init__(self, db: Session):
        self.db = db

    def _scoped(self, user_id: int):
        return self.db.query(Trade).filter(Trade.user_id == user_id)

    def _apply_filters(self, query, filters: Optional[TradeFilters]):
        if filters is None:
            return query

        if filters.market:
            query = query.filter(market_clause(Trade.market, filters.market))
        if filters.symbol:
            query = query.filter(func.upper(Trade.symbol) == filters.symbol.upper())
        if filters.side:
            query = query.filter(Trade.side == filters.side)
        if filters.strategy_id is not None:
            query = query.filter(Trade.strategy_id == filters.strategy_id)
        if filters.start_date:
            query = query.filter(Trade.trade_date >= filters.start_date)
        if filters.end_date:
            query = query.filter(Trade.trade_date <= filters.end_date)
        return query

    @staticmethod
    def _has_any_emotion(trade: Trade, states: Sequence[str]) -> bool:
        tagged = normalize_emotional_states(trade.emotional_state)
        return any(state in tagged for state in states)

    def get_for_user(self, trade_id: int, user_id: int) -> Optional[Trade]:
        """Get a trade by ID if it belongs to the user."""
        return self._scoped(user_id).filter(Trade.id == trade_id).first()

    def list_for_user(
        self,
        user_id: int,
        filters: Optional[TradeFilters] = None,
    ) -> List[Trade]:
        """All matching trades in chronological order."""
        query = self._apply_filters(self._scoped(user_id), filters)
        trades = query.order_by(asc(Trade.trade_date), asc(Trade.id)).all()
        if filters and filters.emotional_states:
            trades = [t for t in trades if self._has_any_emotion(t, filters.emotional_states)]
        return trades

    def search(
        self,
        user_id: int,
        filters: Optional[TradeFilters] = None,
        page: int = 1,
        limit: int = 50,
        sort_by: str = DEFAULT_SORT_FIELD,
        sort_order: str = "desc",
    ) -> Tuple[List[Trade], int]:
        """
        Paginated, sorted search.

        Returns (trades on the requested page, total matching count). A page
        past the end yields an empty list, not an error.
        """
        page = max(1, page)
        limit = max(1, limit)
        if sort_by not in SORTABLE_TRADE_FIELDS:
            sort_by = DEFAULT_SORT_FIELD
        direction = asc if sort_order == "asc" else desc

        query = self._apply_filters(self._scoped(user_id), filters)
        query = query.order_by(direction(getattr(Trade, sort_by)), direction(Trade.id))
        offset = (page - 1) * limit

        if filters and filters.emotional_states:
            # JSON containment is dialect specific; filter tags in Python
            matching = [t for t in query.all() if self._has_any_emotion(t, filters.emotional_states)]
            return matching[offset:offset + limit], len(matching)

        total = query.count()
        return query.offset(offset).limit(limit).all(), total

    def create(self, user_id: int, **fields: Any) -> Trade:
        """Create a new trade for the user."""
        fields["emotional_state"] = normalize_emotional_states(fields.get("emotional_state"))
        trade = Trade(user_id=user_id, **fields)
        self.db.add(trade)
        self.db.flush()
        logger.debug(f"Trade {trade.id} created for user {user_id}")
        return trade

    def update(self, trade_id: int, user_id: int, **fields: Any) -> Trade:
        """Update a trade the user owns."""
        trade = self.get_for_user(trade_id, user_id)
        if not trade:
            raise RecordNotFoundError(f"Trade {trade_id} not found")

        if "emotional_state" in fields:
            fields["emotional_state"] = normalize_emotional_states(fields["emotional_state"])

        for key, value in fields.items():
            if hasattr(trade, key):
                setattr(trade, key, value)

        trade.updated_at = datetime.utcnow()
        self.db.flush()
        return trade

    def delete(self, trade_id: int, user_id: int) -> None:
        """Delete a trade the user owns."""
        trade = self.get_for_user(trade_id, user_id)
        if not trade:
            raise RecordNotFoundError(f"Trade {trade_id} not found")
        self.db.delete(trade)
        self.db.flush()


class StrategyRepository:
    """Repository for Strategy operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_for_user(self, strategy_id: int, user_id: int) -> Optional[Strategy]:
        return (
            self.db.query(Strategy)
            .filter(Strategy.id == strategy_id, Strategy.user_id == user_id)
            .first()
        )

    def list_for_user(self, user_id: int, active_only: bool = False) -> List[Strategy]:
        query = self.db.query(Strategy).filter(Strategy.user_id == user_id)
        if active_only:
            query = query.filter(Strategy.is_active == True)  # noqa: E712
        return query.order_by(desc(Strategy.created_at), desc(Strategy.id)).all()

    @staticmethod
    def _build_rules(rules: Sequence[str]) -> List[StrategyRule]:
        return [
            StrategyRule(position=position, rule_text=text.strip())
            for position, text in enumerate(r for r in rules if r and r.strip())
        ]

    def create(self, user_id: int, name: str, rules: Sequence[str] = (), **fields: Any) -> Strategy:
        """Create a strategy with its ordered rules."""
        strategy = Strategy(user_id=user_id, name=name, **fields)
        strategy.rules = self._build_rules(rules)
        self.db.add(strategy)
        self.db.flush()
        return strategy

    def update(
        self,
        strategy_id: int,
        user_id: int,
        rules: Optional[Sequence[str]] = None,
        **fields: Any,
    ) -> Strategy:
        """Update a strategy; a given ``rules`` list replaces the existing rules."""
        strategy = self.get_for_user(strategy_id, user_id)
        if not strategy:
            raise RecordNotFoundError(f"Strategy {strategy_id} not found")

        for key, value in fields.items():
            if hasattr(strategy, key):
                setattr(strategy, key, value)

        if rules is not None:
            strategy.rules = self._build_rules(rules)

        strategy.updated_at = datetime.utcnow()
        self.db.flush()
        return strategy

    def delete(self, strategy_id: int, user_id: int) -> int:
        """
        Delete a strategy and its rules.

        Trades that referenced it are kept and detached. Returns the number
        of detached trades.
        """
        strategy = self.get_for_user(strategy_id, user_id)
        if not strategy:
            raise RecordNotFoundError(f"Strategy {strategy_id} not found")

        detached = (
            self.db.query(Trade)
            .filter(Trade.strategy_id == strategy_id, Trade.user_id == user_id)
            .update({Trade.strategy_id: None}, synchronize_session="fetch")
        )
        self.db.delete(strategy)
        self.db.flush()
        logger.info(f"Strategy {strategy_id} deleted, {detached} trades detached")
        return detached

    def trade_counts(self, user_id: int) -> Dict[int, int]:
        """Number of trades per strategy for the user."""
        rows = (
            self.db.query(Trade.strategy_id, func.count(Trade.id))
            .filter(Trade.user_id == user_id, Trade.strategy_id.isnot(None))
            .group_by(Trade.strategy_id)
            .all()
        )
        return {strategy_id: count for strategy_id, count in rows}
