"""Trade analytics."""
from tradejournal.services.statistics import (
    INFINITE_PROFIT_FACTOR,
    TradeStatistics,
    compute_trade_statistics,
)
from tradejournal.services.performance import (
    DrawdownSummary,
    StreakSummary,
    compute_drawdown,
    compute_edge_ratio,
    compute_recovery_factor,
    compute_streaks,
    count_trading_days,
    emotion_breakdown,
)
from tradejournal.services.vrating import (
    VRatingResult,
    category_improvements,
    compute_trade_vrating,
    compute_vrating,
    vrating_description,
)

__all__ = [
    "INFINITE_PROFIT_FACTOR",
    "TradeStatistics",
    "compute_trade_statistics",
    "DrawdownSummary",
    "StreakSummary",
    "compute_drawdown",
    "compute_edge_ratio",
    "compute_recovery_factor",
    "compute_streaks",
    "count_trading_days",
    "emotion_breakdown",
    "VRatingResult",
    "category_improvements",
    "compute_trade_vrating",
    "compute_vrating",
    "vrating_description",
]
