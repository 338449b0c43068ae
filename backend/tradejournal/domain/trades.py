"""
Typed trade records.

Rows coming out of the database (or mappings coming out of an API payload)
are converted to ``TradeRecord`` at the data-access boundary so numeric
fields are already defaulted for every consumer downstream.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Tuple

TRADE_SIDES = ("Buy", "Sell")

EMOTIONAL_STATES = (
    "FOMO",
    "REVENGE",
    "TILT",
    "OVERRISK",
    "PATIENCE",
    "REGRET",
    "DISCIPLINE",
    "CONFIDENT",
    "ANXIOUS",
    "NEUTRAL",
)


def coerce_float(value: Any, default: float = 0.0) -> float:
    """Return ``value`` as a float, or ``default`` for None/blank/non-numeric/non-finite input."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(result):
        return default
    return result


def normalize_emotional_states(values: Optional[Iterable[str]]) -> List[str]:
    """Upper-case, keep known states only, de-duplicate preserving order."""
    if not values:
        return []
    if isinstance(values, str):
        values = values.split(",")

    seen = []
    for value in values:
        if not isinstance(value, str):
            continue
        state = value.strip().upper()
        if state in EMOTIONAL_STATES and state not in seen:
            seen.append(state)
    return seen


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


@dataclass(frozen=True)
class TradeRecord:
    """A trade as seen by the analytics layer."""

    id: Optional[int]
    symbol: str
    side: str
    quantity: float = 0.0
    entry_price: float = 0.0
    exit_price: float = 0.0
    pnl: float = 0.0
    trade_date: Optional[datetime] = None
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    market: Optional[str] = None
    strategy_id: Optional[int] = None
    emotional_state: Tuple[str, ...] = field(default_factory=tuple)
    notes: Optional[str] = None

    @property
    def duration_hours(self) -> Optional[float]:
        """Hours between entry and exit, when both were recorded."""
        if self.entry_time is None or self.exit_time is None:
            return None
        return (self.exit_time - self.entry_time).total_seconds() / 3600

    @classmethod
    def from_model(cls, trade: Any) -> "TradeRecord":
        """Build from an ORM ``Trade`` (or anything with the same attributes)."""
        return cls(
            id=getattr(trade, "id", None),
            symbol=getattr(trade, "symbol", "") or "",
            side=getattr(trade, "side", "") or "",
            quantity=coerce_float(getattr(trade, "quantity", None)),
            entry_price=coerce_float(getattr(trade, "entry_price", None)),
            exit_price=coerce_float(getattr(trade, "exit_price", None)),
            pnl=coerce_float(getattr(trade, "pnl", None)),
            trade_date=getattr(trade, "trade_date", None),
            entry_time=getattr(trade, "entry_time", None),
            exit_time=getattr(trade, "exit_time", None),
            market=getattr(trade, "market", None),
            strategy_id=getattr(trade, "strategy_id", None),
            emotional_state=tuple(normalize_emotional_states(getattr(trade, "emotional_state", None))),
            notes=getattr(trade, "notes", None),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TradeRecord":
        """Build from a plain mapping such as a JSON row."""
        trade_date, entry_time, exit_time = (
            _parse_timestamp(data.get(key)) for key in ("trade_date", "entry_time", "exit_time")
        )

        return cls(
            id=data.get("id"),
            symbol=data.get("symbol") or "",
            side=data.get("side") or "",
            quantity=coerce_float(data.get("quantity")),
            entry_price=coerce_float(data.get("entry_price")),
            exit_price=coerce_float(data.get("exit_price")),
            pnl=coerce_float(data.get("pnl")),
            trade_date=trade_date,
            entry_time=entry_time,
            exit_time=exit_time,
            market=data.get("market"),
            strategy_id=data.get("strategy_id"),
            emotional_state=tuple(normalize_emotional_states(data.get("emotional_state"))),
            notes=data.get("notes"),
        )
