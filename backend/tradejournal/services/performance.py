"""
Equity-curve and behavioural performance metrics.

Companion to ``statistics``: drawdown, win/loss streaks, recovery factor,
edge ratio, trading days and the emotional-state breakdown used by the
dashboard radar. Trades are expected in chronological order. Curve-based
metrics skip trades whose P&L was never recorded.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from tradejournal.domain.trades import EMOTIONAL_STATES, coerce_float, normalize_emotional_states


def _field(trade: Any, name: str) -> Any:
    if isinstance(trade, Mapping):
        return trade.get(name)
    return getattr(trade, name, None)


def _with_pnl(trades: Iterable[Any]) -> List[Any]:
    return [trade for trade in trades if _field(trade, "pnl") is not None]


def _as_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return None


@dataclass(frozen=True)
class DrawdownSummary:
    max_drawdown: float = 0.0
    current_drawdown: float = 0.0
    peak_value: float = 0.0
    trough_value: float = 0.0
    peak_date: Optional[Any] = None
    trough_date: Optional[Any] = None
    recovery_date: Optional[Any] = None


@dataclass(frozen=True)
class StreakSummary:
    max_win_streak: int = 0
    max_loss_streak: int = 0
    current_win_streak: int = 0
    current_loss_streak: int = 0


def compute_drawdown(trades: Iterable[Any]) -> DrawdownSummary:
    """
    Peak-to-trough decline of cumulative P&L.

    The running peak starts at 0, so an account that only loses still shows
    a drawdown. ``peak_value``/``trough_value`` and their dates describe the
    deepest decline; the peak date is None when that decline started from 0.
    ``recovery_date`` is the first trade after the trough whose
    cumulative P&L regains the peak in force at the trough.
    """
    trades = _with_pnl(trades)
    if not trades:
        return DrawdownSummary()

    cumulative = 0.0
    peak = 0.0
    max_drawdown = 0.0
    drawdown = 0.0
    running_peak_index = None
    peak_index = None
    trough_index = 0
    curve = []

    for index, trade in enumerate(trades):
        cumulative += coerce_float(_field(trade, "pnl"))
        if cumulative > peak:
            peak = cumulative
            running_peak_index = index
        drawdown = peak - cumulative
        if drawdown > max_drawdown:
            max_drawdown = drawdown
            trough_index = index
            peak_index = running_peak_index
        curve.append((cumulative, peak))

    if max_drawdown == 0:
        return DrawdownSummary(peak_value=peak, trough_value=peak)

    peak_at_trough = curve[trough_index][1]
    recovery_date = None
    for index in range(trough_index + 1, len(trades)):
        if curve[index][0] >= peak_at_trough:
            recovery_date = _field(trades[index], "trade_date")
            break

    return DrawdownSummary(
        max_drawdown=max_drawdown,
        current_drawdown=drawdown,
        peak_value=peak_at_trough,
        trough_value=curve[trough_index][0],
        peak_date=_field(trades[peak_index], "trade_date") if peak_index is not None else None,
        trough_date=_field(trades[trough_index], "trade_date"),
        recovery_date=recovery_date,
    )


def compute_streaks(trades: Iterable[Any]) -> StreakSummary:
    """Longest and current consecutive win/loss runs. Break-even trades are ignored."""
    max_win = max_loss = 0
    win_run = loss_run = 0

    for trade in _with_pnl(trades):
        pnl = coerce_float(_field(trade, "pnl"))
        if pnl > 0:
            win_run += 1
            loss_run = 0
            max_win = max(max_win, win_run)
        elif pnl < 0:
            loss_run += 1
            win_run = 0
            max_loss = max(max_loss, loss_run)

    return StreakSummary(
        max_win_streak=max_win,
        max_loss_streak=max_loss,
        current_win_streak=win_run,
        current_loss_streak=loss_run,
    )


def compute_recovery_factor(trades: Iterable[Any]) -> float:
    """Net profit divided by max drawdown; 0 without a drawdown."""
    trades = _with_pnl(trades)
    max_drawdown = compute_drawdown(trades).max_drawdown
    if max_drawdown == 0:
        return 0.0
    net_profit = sum(coerce_float(_field(trade, "pnl")) for trade in trades)
    return net_profit / max_drawdown


def compute_edge_ratio(trades: Iterable[Any]) -> float:
    """(average win x win rate) / (average loss x loss rate); 0 without losses."""
    pnls = [coerce_float(_field(trade, "pnl")) for trade in _with_pnl(trades)]
    if not pnls:
        return 0.0

    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    total = len(pnls)

    average_win = sum(wins) / len(wins) if wins else 0.0
    average_loss = abs(sum(losses)) / len(losses) if losses else 0.0
    denominator = average_loss * (len(losses) / total)
    if denominator == 0:
        return 0.0
    return (average_win * (len(wins) / total)) / denominator


def count_trading_days(trades: Iterable[Any]) -> int:
    """Number of distinct calendar days with at least one trade."""
    days = {_as_date(_field(trade, "trade_date")) for trade in trades}
    days.discard(None)
    return len(days)


def emotion_breakdown(trades: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Count of trades tagged with each known emotional state.

    Returns one entry per state in ``EMOTIONAL_STATES`` order, with the share
    of trades carrying that tag as ``percent`` (0-100).
    """
    counts = {state: 0 for state in EMOTIONAL_STATES}
    total = 0
    for trade in trades:
        total += 1
        for state in normalize_emotional_states(_field(trade, "emotional_state")):
            counts[state] += 1

    return [
        {
            "subject": state,
            "value": counts[state],
            "percent": (counts[state] / total * 100) if total else 0.0,
        }
        for state in EMOTIONAL_STATES
    ]
