"""Trades router"""
from fastapi import APIRouter, Depends, Query, Response, status

from api.schemas.errors import ErrorResponse
from api.schemas.stats import TradeVRatingResponse
from api.schemas.trades import TradeCreate, TradeUpdate, TradeResponse, TradeListResponse
from api.dependencies import Pagination, get_strategy_repository, get_trade_filters, get_trade_repository
from api.utils.auth import get_current_user_id
from api.utils.exceptions import InvalidInputException, ResourceNotFoundException
from tradejournal.db.repositories import StrategyRepository, TradeFilters, TradeRepository
from tradejournal.domain.trades import TradeRecord
from tradejournal.services.vrating import compute_trade_vrating, vrating_description
from tradejournal.utils.errors import RecordNotFoundError

router = APIRouter(
    prefix="/trades",
    tags=["trades"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)

# Columns that cannot be cleared by an update
REQUIRED_FIELDS = ("symbol", "side", "quantity", "entry_price", "trade_date")


def _check_strategy(strategies: StrategyRepository, strategy_id, user_id: int) -> None:
    if strategy_id is not None and not strategies.get_for_user(strategy_id, user_id):
        raise InvalidInputException(
            f"Strategy {strategy_id} does not exist",
            details={"field": "strategy_id"},
        )


@router.get("", response_model=TradeListResponse)
async def list_trades(
    pagination: Pagination = Depends(),
    sort_by: str = Query("trade_date", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    filters: TradeFilters = Depends(get_trade_filters),
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
):
    """List the user's trades"""
    rows, total = trades.search(
        user_id,
        filters,
        page=pagination.page,
        limit=pagination.limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return TradeListResponse(
        trades=[TradeResponse.model_validate(t) for t in rows],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.post("", response_model=TradeResponse, status_code=status.HTTP_201_CREATED)
async def create_trade(
    payload: TradeCreate,
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
    strategies: StrategyRepository = Depends(get_strategy_repository),
):
    """Log a trade"""
    _check_strategy(strategies, payload.strategy_id, user_id)

    trade = trades.create(user_id, **payload.model_dump(exclude_none=True))
    trades.db.commit()
    return trade


@router.get("/{trade_id}", response_model=TradeResponse)
async def get_trade(
    trade_id: int,
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
):
    """Get one trade"""
    trade = trades.get_for_user(trade_id, user_id)
    if not trade:
        raise ResourceNotFoundException("Trade", str(trade_id))
    return trade


@router.get("/{trade_id}/vrating", response_model=TradeVRatingResponse)
async def get_trade_vrating(
    trade_id: int,
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
):
    """Quick VRating of a single trade"""
    trade = trades.get_for_user(trade_id, user_id)
    if not trade:
        raise ResourceNotFoundException("Trade", str(trade_id))

    rating = compute_trade_vrating(TradeRecord.from_model(trade))
    return TradeVRatingResponse(tradeId=trade.id, vRating=rating, description=vrating_description(rating))


@router.put("/{trade_id}", response_model=TradeResponse)
async def update_trade(
    trade_id: int,
    payload: TradeUpdate,
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
    strategies: StrategyRepository = Depends(get_strategy_repository),
):
    """Update a trade"""
    fields = payload.model_dump(exclude_unset=True)
    for key in REQUIRED_FIELDS:
        if key in fields and fields[key] is None:
            del fields[key]
    _check_strategy(strategies, fields.get("strategy_id"), user_id)

    try:
        trade = trades.update(trade_id, user_id, **fields)
    except RecordNotFoundError:
        raise ResourceNotFoundException("Trade", str(trade_id))

    trades.db.commit()
    return trade


@router.delete("/{trade_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trade(
    trade_id: int,
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
):
    """Delete a trade"""
    try:
        trades.delete(trade_id, user_id)
    except RecordNotFoundError:
        raise ResourceNotFoundException("Trade", str(trade_id))

    trades.db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
