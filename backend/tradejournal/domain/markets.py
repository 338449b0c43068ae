"""
Market-category matching.

Stored ``market`` values are free text with mixed casing ("stock", "Stock",
"FOREX"). Matching is a case-insensitive equality and nothing more: no
trimming, no synonyms. A trade without a market never matches a filter.
"""

from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import func

MARKET_CATEGORIES = ("stock", "crypto", "forex", "futures")


def _market_of(trade: Any) -> Optional[str]:
    if isinstance(trade, Mapping):
        return trade.get("market")
    return getattr(trade, "market", None)


def market_matches(market: Optional[str], selected: Optional[str]) -> bool:
    """True when ``market`` equals ``selected`` ignoring case."""
    if not market or not selected:
        return False
    return market.lower() == selected.lower()


def filter_by_market(trades: Iterable[Any], selected: Optional[str]) -> List[Any]:
    """Keep trades in the selected market. An empty selection keeps everything."""
    trades = list(trades)
    if not selected:
        return trades
    return [trade for trade in trades if market_matches(_market_of(trade), selected)]


def market_clause(column, selected: str):
    """SQL predicate equivalent of ``market_matches`` for a market column."""
    return func.lower(column) == selected.lower()
