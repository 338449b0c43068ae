"""
Confluence dashboard router.

Paginated trade feed, aggregate statistics and the VRating over the same
filters. Every response carries a ``requestId`` that is also written to the
log, so a dashboard report can be matched to the server-side entry.
"""
import logging
import uuid

from fastapi import APIRouter, Depends, Query

from api.schemas.stats import ConfluenceStatsResponse, VRatingResponse
from api.schemas.trades import ConfluenceTradesResponse, TradeResponse
from api.dependencies import Pagination, get_trade_filters, get_trade_repository
from api.utils.auth import get_current_user_id
from tradejournal.db.repositories import TradeFilters, TradeRepository
from tradejournal.domain.trades import TradeRecord
from tradejournal.services.performance import (
    compute_drawdown,
    compute_edge_ratio,
    compute_recovery_factor,
    compute_streaks,
    count_trading_days,
    emotion_breakdown,
)
from tradejournal.services.statistics import compute_trade_statistics
from tradejournal.services.vrating import compute_vrating

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["confluence"])


def _request_id() -> str:
    return uuid.uuid4().hex[:12]


@router.get("/confluence-trades", response_model=ConfluenceTradesResponse)
async def confluence_trades(
    pagination: Pagination = Depends(),
    sort_by: str = Query("trade_date", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    filters: TradeFilters = Depends(get_trade_filters),
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
):
    """
    One page of the user's trades.

    Unknown sort fields fall back to ``trade_date`` and unknown orders to
    ``desc``. A page past the end is an empty list.
    """
    request_id = _request_id()
    rows, total = trades.search(
        user_id,
        filters,
        page=pagination.page,
        limit=pagination.limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    logger.info(
        f"[{request_id}] confluence-trades user={user_id} page={pagination.page} "
        f"limit={pagination.limit} returned={len(rows)} total={total}"
    )
    return ConfluenceTradesResponse(
        trades=[TradeResponse.model_validate(t) for t in rows],
        totalCount=total,
        requestId=request_id,
    )


@router.get("/confluence-stats", response_model=ConfluenceStatsResponse)
async def confluence_stats(
    filters: TradeFilters = Depends(get_trade_filters),
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
):
    """Statistics over every trade matching the filters"""
    request_id = _request_id()
    rows = trades.list_for_user(user_id, filters)

    records = [TradeRecord.from_model(t) for t in rows]
    stats = compute_trade_statistics(records)
    drawdown = compute_drawdown(rows)
    streaks = compute_streaks(rows)

    logger.info(f"[{request_id}] confluence-stats user={user_id} trades={stats.total_trades}")
    return ConfluenceStatsResponse(
        **stats.to_dict(),
        maxDrawdown=drawdown.max_drawdown,
        currentDrawdown=drawdown.current_drawdown,
        recoveryFactor=compute_recovery_factor(rows),
        edgeRatio=compute_edge_ratio(rows),
        tradingDays=count_trading_days(rows),
        maxWinStreak=streaks.max_win_streak,
        maxLossStreak=streaks.max_loss_streak,
        currentWinStreak=streaks.current_win_streak,
        currentLossStreak=streaks.current_loss_streak,
        emotionalData=emotion_breakdown(rows),
        vRating=compute_vrating(records).overall_rating,
        requestId=request_id,
    )


@router.get("/vrating", response_model=VRatingResponse)
async def vrating(
    filters: TradeFilters = Depends(get_trade_filters),
    user_id: int = Depends(get_current_user_id),
    trades: TradeRepository = Depends(get_trade_repository),
):
    """VRating over every trade matching the filters, with category breakdown"""
    request_id = _request_id()
    result = compute_vrating(TradeRecord.from_model(t) for t in trades.list_for_user(user_id, filters))

    logger.info(
        f"[{request_id}] vrating user={user_id} trades={result.trade_count} rating={result.overall_rating}"
    )
    return VRatingResponse(**result.to_dict(), requestId=request_id)
