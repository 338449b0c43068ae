"""Strategies router"""
from fastapi import APIRouter, Depends, Query, Response, status

from api.schemas.strategies import StrategyCreate, StrategyUpdate, StrategyResponse
from api.schemas.errors import ErrorResponse
from api.schemas.stats import StrategyPerformanceResponse
from api.dependencies import get_strategy_repository, get_trade_repository
from api.utils.auth import get_current_user_id
from api.utils.exceptions import ResourceNotFoundException
from tradejournal.db.models import Strategy
from tradejournal.db.repositories import StrategyRepository, TradeFilters, TradeRepository
from tradejournal.domain.trades import TradeRecord
from tradejournal.services.performance import compute_drawdown, count_trading_days
from tradejournal.services.statistics import compute_trade_statistics
from tradejournal.utils.errors import RecordNotFoundError

router = APIRouter(
    prefix="/strategies",
    tags=["strategies"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


def _to_response(strategy: Strategy, trade_count: int = 0) -> StrategyResponse:
    return StrategyResponse(
        id=strategy.id,
        name=strategy.name,
        description=strategy.description,
        is_active=strategy.is_active,
        rules=[rule.rule_text for rule in strategy.rules],
        trade_count=trade_count,
        created_at=strategy.created_at,
        updated_at=strategy.updated_at,
    )


@router.get("", response_model=list[StrategyResponse])
async def list_strategies(
    active_only: bool = Query(False, alias="activeOnly"),
    user_id: int = Depends(get_current_user_id),
    strategies: StrategyRepository = Depends(get_strategy_repository),
):
    """List the user's strategies with their trade counts"""
    counts = strategies.trade_counts(user_id)
    return [
        _to_response(s, counts.get(s.id, 0))
        for s in strategies.list_for_user(user_id, active_only=active_only)
    ]


@router.post("", response_model=StrategyResponse, status_code=status.HTTP_201_CREATED)
async def create_strategy(
    payload: StrategyCreate,
    user_id: int = Depends(get_current_user_id),
    strategies: StrategyRepository = Depends(get_strategy_repository),
):
    """Create a strategy with its ordered rules"""
    strategy = strategies.create(
        user_id,
        name=payload.name,
        rules=payload.rules,
        description=payload.description,
        is_active=payload.is_active,
    )
    strategies.db.commit()
    return _to_response(strategy)


@router.get("/{strategy_id}", response_model=StrategyResponse)
async def get_strategy(
    strategy_id: int,
    user_id: int = Depends(get_current_user_id),
    strategies: StrategyRepository = Depends(get_strategy_repository),
):
    strategy = strategies.get_for_user(strategy_id, user_id)
    if not strategy:
        raise ResourceNotFoundException("Strategy", str(strategy_id))
    return _to_response(strategy, strategies.trade_counts(user_id).get(strategy.id, 0))


@router.put("/{strategy_id}", response_model=StrategyResponse)
async def update_strategy(
    strategy_id: int,
    payload: StrategyUpdate,
    user_id: int = Depends(get_current_user_id),
    strategies: StrategyRepository = Depends(get_strategy_repository),
):
    """Update a strategy; a ``rules`` list replaces the stored rules"""
    fields = payload.model_dump(exclude_unset=True)
    rules = fields.pop("rules", None)
    if fields.get("name") is None:
        fields.pop("name", None)
    if fields.get("is_active") is None:
        fields.pop("is_active", None)

    try:
        strategy = strategies.update(strategy_id, user_id, rules=rules, **fields)
    except RecordNotFoundError:
        raise ResourceNotFoundException("Strategy", str(strategy_id))

    strategies.db.commit()
    return _to_response(strategy, strategies.trade_counts(user_id).get(strategy.id, 0))


@router.delete("/{strategy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_strategy(
    strategy_id: int,
    user_id: int = Depends(get_current_user_id),
    strategies: StrategyRepository = Depends(get_strategy_repository),
):
    """Delete a strategy. Its trades are kept, detached from it."""
    try:
        strategies.delete(strategy_id, user_id)
    except RecordNotFoundError:
        raise ResourceNotFoundException("Strategy", str(strategy_id))

    strategies.db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{strategy_id}/performance", response_model=StrategyPerformanceResponse)
async def strategy_performance(
    strategy_id: int,
    user_id: int = Depends(get_current_user_id),
    strategies: StrategyRepository = Depends(get_strategy_repository),
    trades: TradeRepository = Depends(get_trade_repository),
):
    """Statistics over the trades logged against a strategy"""
    strategy = strategies.get_for_user(strategy_id, user_id)
    if not strategy:
        raise ResourceNotFoundException("Strategy", str(strategy_id))

    rows = trades.list_for_user(user_id, TradeFilters(strategy_id=strategy_id))
    return StrategyPerformanceResponse(
        strategyId=strategy.id,
        strategyName=strategy.name,
        maxDrawdown=compute_drawdown(rows).max_drawdown,
        tradingDays=count_trading_days(rows),
        **compute_trade_statistics(TradeRecord.from_model(t) for t in rows).to_dict(),
    )
