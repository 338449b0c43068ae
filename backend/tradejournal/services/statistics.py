"""
Aggregate trade statistics.

Reduces a list of trades into the summary metrics shown on the dashboard:
P&L, win rate, average win/loss, expectancy, profit factor and a simplified
Sharpe ratio (mean P&L over its population standard deviation, no risk-free
rate, no annualisation).

Missing P&L is treated as 0. A trade with P&L of exactly 0 is counted in
``total_trades`` but is neither a win nor a loss.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Union

import numpy as np

from tradejournal.domain.trades import coerce_float

INFINITE_PROFIT_FACTOR = "Infinite"

ProfitFactor = Union[float, str]


@dataclass(frozen=True)
class TradeStatistics:
    """Summary metrics over a set of trades."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    total_pnl: float = 0.0
    win_rate: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    trade_expectancy: float = 0.0
    sharpe_ratio: float = 0.0
    profit_factor: ProfitFactor = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Field names as the API exposes them."""
        return {
            "totalTrades": self.total_trades,
            "winningTrades": self.winning_trades,
            "losingTrades": self.losing_trades,
            "totalPnL": self.total_pnl,
            "winRate": self.win_rate,
            "averageWin": self.average_win,
            "averageLoss": self.average_loss,
            "grossProfit": self.gross_profit,
            "grossLoss": self.gross_loss,
            "tradeExpectancy": self.trade_expectancy,
            "sharpeRatio": self.sharpe_ratio,
            "profitFactor": self.profit_factor,
        }


def pnl_of(trade: Any) -> float:
    """P&L of a trade-like record; missing, None or non-numeric reads as 0."""
    if isinstance(trade, Mapping):
        return coerce_float(trade.get("pnl"))
    return coerce_float(getattr(trade, "pnl", None))


def sharpe_ratio(pnls) -> float:
    """Mean over population standard deviation; 0 for < 2 points or flat returns."""
    values = np.asarray(pnls, dtype=float)
    if values.size < 2:
        return 0.0
    # Equal returns must give exactly 0, not a rounding-noise quotient
    if values.max() == values.min():
        return 0.0
    std = float(values.std())
    if std == 0:
        return 0.0
    return float(values.mean()) / std


def compute_trade_statistics(trades: Iterable[Any]) -> TradeStatistics:
    """
    Compute summary statistics for ``trades`` in one pass.

    Parameters
    ----------
    trades: Iterable
        TradeRecord / ORM Trade instances, mappings with a ``pnl`` key, or any
        object with a ``pnl`` attribute.

    Returns
    -------
    TradeStatistics
        All-zero record for empty input. ``profit_factor`` is the string
        ``"Infinite"`` when there are profits but no losses.
    """
    pnls = []
    winning = 0
    losing = 0
    gross_profit = 0.0
    gross_loss = 0.0

    for trade in trades:
        pnl = pnl_of(trade)
        pnls.append(pnl)
        if pnl > 0:
            winning += 1
            gross_profit += pnl
        elif pnl < 0:
            losing += 1
            gross_loss += pnl

    total = len(pnls)
    if total == 0:
        return TradeStatistics()

    average_win = gross_profit / winning if winning else 0.0
    average_loss = abs(gross_loss) / losing if losing else 0.0
    expectancy = (winning / total * average_win) - (losing / total * average_loss)

    if gross_loss == 0:
        profit_factor: ProfitFactor = INFINITE_PROFIT_FACTOR if gross_profit > 0 else 0.0
    else:
        profit_factor = gross_profit / abs(gross_loss)

    return TradeStatistics(
        total_trades=total,
        winning_trades=winning,
        losing_trades=losing,
        total_pnl=float(sum(pnls)),
        win_rate=winning / total * 100,
        average_win=average_win,
        average_loss=average_loss,
        gross_profit=gross_profit,
        gross_loss=abs(gross_loss),
        trade_expectancy=expectancy,
        sharpe_ratio=sharpe_ratio(pnls),
        profit_factor=profit_factor,
    )
