"""
Statistics API response schemas.

Field names follow the dashboard's camelCase keys.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


class TradeStatisticsBody(BaseModel):
    """Summary metrics over a set of trades"""
    totalTrades: int = 0
    winningTrades: int = 0
    losingTrades: int = 0
    totalPnL: float = 0.0
    winRate: float = Field(0.0, description="Percentage of winning trades (0-100)")
    averageWin: float = 0.0
    averageLoss: float = Field(0.0, description="Average losing trade, as a positive number")
    grossProfit: float = 0.0
    grossLoss: float = Field(0.0, description="Sum of losses, as a positive number")
    tradeExpectancy: float = 0.0
    sharpeRatio: float = Field(0.0, description="Mean P&L over its standard deviation, not annualised")
    profitFactor: Union[float, str] = Field(0.0, description='Gross profit over gross loss, or "Infinite" without losses')


class EmotionDatum(BaseModel):
    subject: str
    value: int
    percent: float


class ConfluenceStatsResponse(TradeStatisticsBody):
    maxDrawdown: float = 0.0
    currentDrawdown: float = 0.0
    recoveryFactor: float = 0.0
    edgeRatio: float = 0.0
    tradingDays: int = 0
    maxWinStreak: int = 0
    maxLossStreak: int = 0
    currentWinStreak: int = 0
    currentLossStreak: int = 0
    emotionalData: List[EmotionDatum] = []
    vRating: float = Field(0.0, description="Overall 0-10 rating, see /api/vrating for the breakdown")
    requestId: str


class StrategyPerformanceResponse(TradeStatisticsBody):
    strategyId: int
    strategyName: str
    maxDrawdown: float = 0.0
    tradingDays: int = 0


class VRatingPeriod(BaseModel):
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None


class VRatingResponse(BaseModel):
    """Overall rating with category scores and the metrics behind them"""
    overallRating: float
    description: str
    categoryScores: Dict[str, float]
    improvements: Dict[str, List[str]] = {}
    metrics: Dict[str, Dict[str, Any]]
    tradeCount: int
    period: VRatingPeriod
    requestId: str


class TradeVRatingResponse(BaseModel):
    tradeId: int
    vRating: float
    description: str
