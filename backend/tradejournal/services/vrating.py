"""
VRating: an overall 0-10 trading score.

The rating is a weighted blend of five category scores, each 0-10:

    profitability          30%
    risk management        25%
    consistency            20%
    emotional discipline   15%
    journaling adherence   10%

Each category turns a few metrics into a score through ordered tiers. Tiers
are checked best first; a tier applies when every metric meets its
threshold, and the score is interpolated inside the tier's range by the
weakest metric. Bonuses and penalties are applied last and the result is
clamped to 0-10.

Average holding time only enters the risk tiers when at least one trade has
both an entry and an exit time recorded.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np

from tradejournal.domain.trades import TradeRecord

CATEGORY_WEIGHTS = {
    "profitability": 0.30,
    "risk_management": 0.25,
    "consistency": 0.20,
    "emotional_discipline": 0.15,
    "journaling_adherence": 0.10,
}

POSITIVE_EMOTIONS = frozenset({"PATIENCE", "DISCIPLINE", "CONFIDENT"})
NEGATIVE_EMOTIONS = frozenset({"FOMO", "REVENGE", "TILT"})
NEUTRAL_EMOTIONS = frozenset({"NEUTRAL"})
# Ordinary trading nerves; credited lightly rather than penalized
NORMAL_EMOTIONS = frozenset({"OVERRISK", "ANXIOUS"})

LARGE_LOSS_THRESHOLD = -50.0
OVERSIZED_MULTIPLE = 2.0


@dataclass(frozen=True)
class ProfitabilityMetrics:
    net_pl_percentage: float = 0.0
    win_rate: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0
    winning_trades: int = 0
    losing_trades: int = 0
    positive_months_percentage: float = 0.0
    monthly_pl: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class RiskManagementMetrics:
    max_drawdown_percentage: float = 0.0
    large_loss_percentage: float = 0.0
    quantity_variability: float = 0.0
    average_trade_duration: Optional[float] = None
    oversized_trades_percentage: float = 0.0


@dataclass(frozen=True)
class ConsistencyMetrics:
    pl_std_dev_percentage: float = 0.0
    longest_loss_streak: int = 0
    positive_months: int = 0
    monthly_consistency_ratio: float = 0.0


@dataclass(frozen=True)
class EmotionalDisciplineMetrics:
    positive_emotion_percentage: float = 0.0
    negative_impact_percentage: float = 0.0
    positive_emotion_win_correlation: float = 0.0
    emotion_logging_completeness: float = 0.0


@dataclass(frozen=True)
class JournalingAdherenceMetrics:
    completeness_percentage: float = 0.0
    strategy_usage: float = 0.0
    notes_usage: float = 0.0
    emotion_usage: float = 0.0


@dataclass(frozen=True)
class CategoryScores:
    profitability: float = 0.0
    risk_management: float = 0.0
    consistency: float = 0.0
    emotional_discipline: float = 0.0
    journaling_adherence: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {_camel(key): value for key, value in asdict(self).items()}


@dataclass(frozen=True)
class VRatingResult:
    """Overall rating, per-category scores and the metrics behind them."""

    overall_rating: float = 0.0
    category_scores: CategoryScores = field(default_factory=CategoryScores)
    profitability: ProfitabilityMetrics = field(default_factory=ProfitabilityMetrics)
    risk_management: RiskManagementMetrics = field(default_factory=RiskManagementMetrics)
    consistency: ConsistencyMetrics = field(default_factory=ConsistencyMetrics)
    emotional_discipline: EmotionalDisciplineMetrics = field(default_factory=EmotionalDisciplineMetrics)
    journaling_adherence: JournalingAdherenceMetrics = field(default_factory=JournalingAdherenceMetrics)
    trade_count: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @property
    def description(self) -> str:
        return vrating_description(self.overall_rating)

    def to_dict(self) -> Dict[str, Any]:
        """Field names as the API exposes them."""
        metrics = {
            _camel(name): {_camel(key): value for key, value in asdict(getattr(self, name)).items()}
            for name in CATEGORY_WEIGHTS
        }
        return {
            "overallRating": self.overall_rating,
            "description": self.description,
            "categoryScores": self.category_scores.to_dict(),
            "improvements": category_improvements(self.category_scores) if self.trade_count else {},
            "metrics": metrics,
            "tradeCount": self.trade_count,
            "period": {"startDate": self.start_date, "endDate": self.end_date},
        }


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _percentage(value: float, total: float) -> float:
    if total == 0:
        return 0.0
    return round(value / total * 100, 2)


def _interpolate(low: float, high: float, *fractions: Optional[float]) -> float:
    """Position inside [low, high] set by the weakest fraction, clamped to 0-1."""
    known = [f for f in fractions if f is not None]
    fraction = min(known) if known else 0.0
    return low + (high - low) * min(1.0, max(0.0, fraction))


def _clamp(score: float) -> float:
    return min(10.0, max(0.0, score))


def _as_record(trade: Any) -> TradeRecord:
    if isinstance(trade, TradeRecord):
        return trade
    if isinstance(trade, Mapping):
        return TradeRecord.from_mapping(trade)
    return TradeRecord.from_model(trade)


def _chronological(records: List[TradeRecord]) -> List[TradeRecord]:
    return sorted(records, key=lambda r: (r.trade_date is None, r.trade_date or datetime.min))


def _monthly_pl(records: List[TradeRecord]) -> Dict[str, float]:
    months: Dict[str, float] = {}
    for record in records:
        if record.trade_date is None:
            continue
        key = record.trade_date.strftime("%Y-%m")
        months[key] = months.get(key, 0.0) + record.pnl
    return months


# ---------- profitability ----------

def profitability_metrics(records: List[TradeRecord]) -> ProfitabilityMetrics:
    if not records:
        return ProfitabilityMetrics()

    wins = [r.pnl for r in records if r.pnl > 0]
    losses = [abs(r.pnl) for r in records if r.pnl < 0]
    total_profit = float(sum(wins))
    total_loss = float(sum(losses))
    months = _monthly_pl(records)
    positive_months = sum(1 for pl in months.values() if pl > 0)

    return ProfitabilityMetrics(
        # Average P&L per trade, expressed in percent units
        net_pl_percentage=(total_profit - total_loss) / len(records) * 100,
        win_rate=_percentage(len(wins), len(records)),
        total_profit=total_profit,
        total_loss=total_loss,
        winning_trades=len(wins),
        losing_trades=len(losses),
        positive_months_percentage=_percentage(positive_months, len(months)),
        monthly_pl=[{"month": month, "pl": pl} for month, pl in months.items()],
    )


def profitability_score(metrics: ProfitabilityMetrics) -> float:
    net = metrics.net_pl_percentage
    win_rate = metrics.win_rate

    if net > 50 and win_rate > 70:
        score = 10.0
    elif net >= 30 and win_rate >= 60:
        score = _interpolate(8.0, 9.9, (net - 30) / 20, (win_rate - 60) / 10)
    elif net >= 10 and win_rate >= 50:
        score = min(6.0 + (net - 10) * 0.1, 7.9)
    elif 0 <= net <= 10 or 40 <= win_rate < 50:
        score = _interpolate(4.0, 5.9, net / 10, (win_rate - 40) / 10)
    elif -10 <= net < 0 or 30 <= win_rate < 40:
        score = _interpolate(2.0, 3.9, (net + 10) / 10, (win_rate - 30) / 10)
    else:
        score = _interpolate(1.0, 1.9, net / -10)

    if metrics.positive_months_percentage > 80:
        score += 0.5
    return _clamp(score)


# ---------- risk management ----------

def risk_management_metrics(records: List[TradeRecord]) -> RiskManagementMetrics:
    if not records:
        return RiskManagementMetrics()

    cumulative = np.cumsum([r.pnl for r in _chronological(records)])
    # Peak starts at the first cumulative value, not at zero
    peaks = np.maximum.accumulate(cumulative)
    max_drawdown = float((peaks - cumulative).max())
    final_peak = float(peaks[-1])

    quantities = np.asarray([r.quantity for r in records if r.quantity > 0], dtype=float)
    average_quantity = float(quantities.mean()) if quantities.size else 0.0
    variability = float(quantities.std()) / average_quantity * 100 if average_quantity > 0 else 0.0
    oversized = int((quantities > average_quantity * OVERSIZED_MULTIPLE).sum()) if average_quantity > 0 else 0

    durations = [d for d in (r.duration_hours for r in records) if d is not None and d > 0]

    return RiskManagementMetrics(
        max_drawdown_percentage=max_drawdown / final_peak * 100 if final_peak > 0 else 0.0,
        large_loss_percentage=_percentage(sum(1 for r in records if r.pnl < LARGE_LOSS_THRESHOLD), len(records)),
        quantity_variability=variability,
        average_trade_duration=sum(durations) / len(durations) if durations else None,
        oversized_trades_percentage=_percentage(oversized, quantities.size),
    )


def risk_management_score(metrics: RiskManagementMetrics) -> float:
    drawdown = metrics.max_drawdown_percentage
    large_losses = metrics.large_loss_percentage
    variability = metrics.quantity_variability
    hours = metrics.average_trade_duration

    def held(minimum: float, span: float) -> Optional[float]:
        return None if hours is None else (hours - minimum) / span

    def held_at_least(minimum: float) -> bool:
        return hours is None or hours >= minimum

    if drawdown < 10 and large_losses < 10 and variability < 30 and (hours is None or hours > 12):
        score = _interpolate(
            9.0, 10.0,
            (10 - drawdown) / 10, (10 - large_losses) / 10, (30 - variability) / 30, held(12, 48),
        )
    elif drawdown <= 20 and large_losses <= 20 and variability <= 50 and held_at_least(6):
        score = _interpolate(
            7.0, 8.9,
            (20 - drawdown) / 10, (20 - large_losses) / 10, (50 - variability) / 20, held(6, 6),
        )
    elif drawdown <= 30 and large_losses <= 30 and variability <= 70 and held_at_least(1):
        score = _interpolate(
            5.0, 6.9,
            (30 - drawdown) / 10, (30 - large_losses) / 10, (70 - variability) / 20, held(0, 6),
        )
    elif drawdown <= 40 and large_losses <= 40 and variability <= 80:
        score = _interpolate(3.0, 4.9, (40 - drawdown) / 10, (40 - large_losses) / 10, (80 - variability) / 10)
    else:
        score = _interpolate(1.0, 2.9, (50 - drawdown) / 50, (60 - large_losses) / 60)

    if metrics.oversized_trades_percentage > 10:
        score -= 1.0
    return _clamp(score)


# ---------- consistency ----------

def consistency_metrics(records: List[TradeRecord]) -> ConsistencyMetrics:
    if not records:
        return ConsistencyMetrics()

    pnls = np.asarray([r.pnl for r in records], dtype=float)
    mean = float(pnls.mean())
    std_pct = float(pnls.std()) / abs(mean) * 100 if mean != 0 else 0.0

    longest = current = 0
    for record in _chronological(records):
        if record.pnl < 0:
            current += 1
            longest = max(longest, current)
        else:
            current = 0

    months = _monthly_pl(records)
    positive_months = sum(1 for pl in months.values() if pl > 0)

    return ConsistencyMetrics(
        pl_std_dev_percentage=std_pct,
        longest_loss_streak=longest,
        positive_months=positive_months,
        monthly_consistency_ratio=positive_months / len(months) if months else 0.0,
    )


def consistency_score(metrics: ConsistencyMetrics) -> float:
    spread = metrics.pl_std_dev_percentage
    streak = metrics.longest_loss_streak
    months = metrics.positive_months

    if spread < 5 and streak <= 3 and months > 5:
        score = 10.0
    elif spread <= 10 and streak <= 5 and months >= 3:
        score = _interpolate(8.0, 9.9, (10 - spread) / 5, 5 - streak, (months - 3) / 2)
    elif spread <= 15 and streak <= 7 and months >= 2:
        score = _interpolate(6.0, 7.9, (15 - spread) / 5, 7 - streak, months - 2)
    elif spread <= 20 and streak <= 10 and months >= 1:
        score = _interpolate(4.0, 5.9, (20 - spread) / 5, (10 - streak) / 2, months - 1)
    else:
        score = _interpolate(
            2.0, 3.9, (25 - spread) / 25, (10 - streak) / 10, metrics.monthly_consistency_ratio
        )
    return _clamp(score)


# ---------- emotional discipline ----------

def emotional_discipline_metrics(records: List[TradeRecord]) -> EmotionalDisciplineMetrics:
    if not records:
        return EmotionalDisciplineMetrics()

    logged = 0
    positive = 0.0
    positive_wins = 0.0
    negative = 0
    negative_losses = 0

    for record in records:
        tags = set(record.emotional_state)
        if not tags:
            continue
        logged += 1
        won = record.pnl > 0

        credit = 0.0
        if tags & POSITIVE_EMOTIONS:
            credit += 1.0
        if tags & NEUTRAL_EMOTIONS:
            credit += 0.5
        if tags & NORMAL_EMOTIONS:
            credit += 0.25
        positive += credit
        if won:
            positive_wins += credit

        if tags & NEGATIVE_EMOTIONS:
            negative += 1
            if record.pnl < 0:
                negative_losses += 1

    return EmotionalDisciplineMetrics(
        positive_emotion_percentage=_percentage(positive, logged),
        negative_impact_percentage=_percentage(negative_losses, negative),
        positive_emotion_win_correlation=_percentage(positive_wins, positive),
        emotion_logging_completeness=_percentage(logged, len(records)),
    )


def emotional_discipline_score(metrics: EmotionalDisciplineMetrics, total_pnl: float = 0.0) -> float:
    positive = metrics.positive_emotion_percentage
    impact = metrics.negative_impact_percentage

    if positive > 80 and impact < 15:
        score = 10.0
    elif positive >= 65 and impact <= 25:
        score = _interpolate(8.5, 9.9, (positive - 65) / 15, (25 - impact) / 10)
    elif positive >= 50 and impact <= 40:
        score = _interpolate(7.0, 8.4, (positive - 50) / 15, (40 - impact) / 15)
    elif positive >= 35 and impact <= 55:
        score = _interpolate(5.5, 6.9, (positive - 35) / 15, (55 - impact) / 15)
    else:
        score = _interpolate(4.0, 5.4, positive / 8, (60 - impact) / 60)

    if metrics.positive_emotion_win_correlation > 70:
        score += 1.0
    elif metrics.positive_emotion_win_correlation > 60:
        score += 0.5

    if metrics.emotion_logging_completeness > 95:
        score += 1.0

    if total_pnl > 0 and score < 8.0:
        score += 0.5
    return _clamp(score)


# ---------- journaling adherence ----------

def journaling_adherence_metrics(records: List[TradeRecord]) -> JournalingAdherenceMetrics:
    if not records:
        return JournalingAdherenceMetrics()

    total = len(records)
    strategy_usage = _percentage(sum(1 for r in records if r.strategy_id is not None), total)
    notes_usage = _percentage(sum(1 for r in records if r.notes and r.notes.strip()), total)
    emotion_usage = _percentage(sum(1 for r in records if r.emotional_state), total)

    return JournalingAdherenceMetrics(
        completeness_percentage=(strategy_usage + notes_usage + emotion_usage) / 3,
        strategy_usage=strategy_usage,
        notes_usage=notes_usage,
        emotion_usage=emotion_usage,
    )


def journaling_adherence_score(metrics: JournalingAdherenceMetrics) -> float:
    completeness = metrics.completeness_percentage

    if completeness > 95:
        score = 10.0
    elif completeness >= 80:
        score = _interpolate(8.0, 9.9, (completeness - 80) / 15)
    elif completeness >= 60:
        score = _interpolate(6.0, 7.9, (completeness - 60) / 20)
    elif completeness >= 40:
        score = _interpolate(4.0, 5.9, (completeness - 40) / 20)
    else:
        score = _interpolate(2.0, 3.9, completeness / 20)

    if metrics.emotion_usage >= 100:
        score += 0.5
    return _clamp(score)


# ---------- rating ----------

def compute_vrating(trades: Iterable[Any]) -> VRatingResult:
    """
    Rate a set of trades.

    Parameters
    ----------
    trades: Iterable
        TradeRecord / ORM Trade instances or mappings. Order does not matter;
        curve metrics sort by ``trade_date``.

    Returns
    -------
    VRatingResult
        All-zero result for empty input. Scores are rounded to 2 decimals.
    """
    records = _chronological([_as_record(t) for t in trades])
    if not records:
        return VRatingResult()

    profitability = profitability_metrics(records)
    risk = risk_management_metrics(records)
    consistency = consistency_metrics(records)
    emotional = emotional_discipline_metrics(records)
    journaling = journaling_adherence_metrics(records)

    raw = {
        "profitability": profitability_score(profitability),
        "risk_management": risk_management_score(risk),
        "consistency": consistency_score(consistency),
        "emotional_discipline": emotional_discipline_score(emotional, sum(r.pnl for r in records)),
        "journaling_adherence": journaling_adherence_score(journaling),
    }
    overall = sum(raw[name] * weight for name, weight in CATEGORY_WEIGHTS.items())

    dated = [r.trade_date for r in records if r.trade_date is not None]
    return VRatingResult(
        overall_rating=round(overall, 2),
        category_scores=CategoryScores(**{name: round(score, 2) for name, score in raw.items()}),
        profitability=profitability,
        risk_management=risk,
        consistency=consistency,
        emotional_discipline=emotional,
        journaling_adherence=journaling,
        trade_count=len(records),
        start_date=dated[0] if dated else None,
        end_date=dated[-1] if dated else None,
    )


def compute_trade_vrating(trade: Any) -> float:
    """Quick 0-10 rating of a single trade from its P&L, first emotion tag and journal fields."""
    record = _as_record(trade)
    score = 5.0

    if record.pnl > 0:
        score += min(2.0, record.pnl / 10)
    elif record.pnl < 0:
        score -= min(3.0, abs(record.pnl) / 5)

    if record.emotional_state:
        primary = record.emotional_state[0]
        if primary in POSITIVE_EMOTIONS:
            score += 0.5
        elif primary in NEGATIVE_EMOTIONS:
            score -= 0.5

    if record.strategy_id is not None:
        score += 0.3
    if record.notes and record.notes.strip():
        score += 0.3
    if record.emotional_state:
        score += 0.4

    return _clamp(round(score, 2))


_DESCRIPTIONS = (
    (9.0, "Exceptional - Elite trading performance"),
    (8.0, "Excellent - Superior trading skills"),
    (7.0, "Very Good - Above average performance"),
    (6.0, "Good - Competent trading"),
    (5.0, "Average - Room for improvement"),
    (4.0, "Below Average - Needs significant work"),
    (3.0, "Poor - Major improvements needed"),
    (2.0, "Very Poor - Fundamental issues"),
)


def vrating_description(rating: float) -> str:
    for floor, text in _DESCRIPTIONS:
        if rating >= floor:
            return text
    return "Critical - Complete review required"


IMPROVEMENT_THRESHOLD = 6.0

_IMPROVEMENTS = {
    "profitability": [
        "Focus on improving win rate through better entry/exit strategies",
        "Consider reducing position size to minimize losses",
        "Review losing trades to identify common patterns",
        "Implement stricter risk-reward ratios",
    ],
    "risk_management": [
        "Implement stop-loss orders consistently",
        "Reduce position size variability",
        "Avoid oversized trades (>2x average)",
        "Consider longer holding periods for better risk management",
    ],
    "consistency": [
        "Focus on reducing P&L volatility",
        "Work on shorter loss streaks",
        "Improve monthly consistency with more positive months",
    ],
    "emotional_discipline": [
        "Focus on reducing negative emotional impact on trades",
        "Take breaks after emotional trades",
        "Develop pre-trade emotional checklist",
        "Work on improving emotional correlation with winning trades",
    ],
    "journaling_adherence": [
        "Use journaling templates for consistency",
        "Focus on complete emotional logging",
        "Review journal entries weekly for insights",
        "Improve strategy usage documentation",
    ],
}


def category_improvements(scores: CategoryScores) -> Dict[str, List[str]]:
    """Suggestions for every category scoring below 6, keyed by camelCase category name."""
    return {
        _camel(name): list(tips)
        for name, tips in _IMPROVEMENTS.items()
        if getattr(scores, name) < IMPROVEMENT_THRESHOLD
    }
