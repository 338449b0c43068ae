"""Trade schemas"""
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from tradejournal.domain.trades import normalize_emotional_states


def _naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC"""
    if v is not None and v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


class TradeBase(BaseModel):
    symbol: str = Field(min_length=1, max_length=32)
    side: Literal["Buy", "Sell"]
    quantity: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    entry_price: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    exit_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    pnl: Optional[float] = Field(default=None, allow_inf_nan=False)
    trade_date: Optional[datetime] = None
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    market: Optional[str] = None
    strategy_id: Optional[int] = None
    emotional_state: List[str] = []
    notes: Optional[str] = None

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("trade_date", "entry_time", "exit_time")
    @classmethod
    def utc_timestamps(cls, v):
        return _naive_utc(v)

    @field_validator("emotional_state", mode="before")
    @classmethod
    def known_states(cls, v):
        return normalize_emotional_states(v)


class TradeCreate(TradeBase):
    pass


class TradeUpdate(BaseModel):
    """Partial update; only the fields sent are changed"""
    symbol: Optional[str] = Field(default=None, min_length=1, max_length=32)
    side: Optional[Literal["Buy", "Sell"]] = None
    quantity: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    entry_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    exit_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    pnl: Optional[float] = Field(default=None, allow_inf_nan=False)
    trade_date: Optional[datetime] = None
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    market: Optional[str] = None
    strategy_id: Optional[int] = None
    emotional_state: Optional[List[str]] = None
    notes: Optional[str] = None

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

    @field_validator("trade_date", "entry_time", "exit_time")
    @classmethod
    def utc_timestamps(cls, v):
        return _naive_utc(v)


class TradeResponse(BaseModel):
    id: int
    symbol: str
    side: str
    quantity: float
    entry_price: float
    exit_price: Optional[float] = None
    pnl: Optional[float] = None
    trade_date: datetime
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    market: Optional[str] = None
    strategy_id: Optional[int] = None
    emotional_state: List[str] = []
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("emotional_state", mode="before")
    @classmethod
    def default_states(cls, v):
        return v or []

    class Config:
        from_attributes = True


class TradeListResponse(BaseModel):
    trades: List[TradeResponse]
    total: int
    page: int
    limit: int


class ConfluenceTradesResponse(BaseModel):
    """One page of the trade feed, keyed the way the dashboard reads it"""
    trades: List[TradeResponse]
    totalCount: int
    requestId: str
