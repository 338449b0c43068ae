"""FastAPI dependencies"""
from datetime import datetime, time, timezone
from typing import Generator, Optional

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from api.config import settings
from api.utils.exceptions import InvalidInputException
from tradejournal.db.session import get_db as get_db_session, close_db_session
from tradejournal.db.repositories import StrategyRepository, TradeFilters, TradeRepository, UserRepository
from tradejournal.domain.markets import MARKET_CATEGORIES
from tradejournal.domain.trades import TRADE_SIDES


def get_db() -> Generator[Session, None, None]:
    """Get database session"""
    db = get_db_session()
    try:
        yield db
    finally:
        close_db_session(db)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_trade_repository(db: Session = Depends(get_db)) -> TradeRepository:
    return TradeRepository(db)


def get_strategy_repository(db: Session = Depends(get_db)) -> StrategyRepository:
    return StrategyRepository(db)


def _parse_date(value: Optional[str], name: str, end_of_day: bool = False) -> Optional[datetime]:
    """ISO date or datetime; a bare end date covers the whole day."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidInputException(f"Invalid {name}: {value}", details={"field": name})

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


def get_trade_filters(
    market: Optional[str] = Query(
        None, description=f"Market category ({', '.join(MARKET_CATEGORIES)}), matched case-insensitively"
    ),
    symbol: Optional[str] = Query(None),
    side: Optional[str] = Query(None, description="Buy or Sell"),
    strategy_id: Optional[int] = Query(None, alias="strategyId"),
    emotional_states: Optional[str] = Query(None, alias="emotionalStates", description="Comma-separated states"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
) -> TradeFilters:
    """Trade filters from query parameters. Unknown sides and emotions are ignored."""
    if side:
        side = side.capitalize()
        if side not in TRADE_SIDES:
            side = None

    return TradeFilters(
        market=market or None,
        symbol=symbol or None,
        side=side,
        strategy_id=strategy_id,
        emotional_states=emotional_states,
        start_date=_parse_date(start_date, "startDate"),
        end_date=_parse_date(end_date, "endDate", end_of_day=True),
    )


class Pagination:
    """Page/limit query parameters; out-of-range values are clamped, never rejected."""

    def __init__(
        self,
        page: int = Query(1, description="1-based page number"),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, description="Page size"),
    ):
        self.page = max(1, page)
        self.limit = min(max(1, limit), settings.MAX_PAGE_SIZE)
