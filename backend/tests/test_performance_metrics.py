"""
Performance Metrics Tests

Drawdown, streaks, recovery factor, edge ratio, trading days and the
emotional-state breakdown.
"""

from datetime import datetime

import pytest

from tradejournal.services.performance import (
    compute_drawdown,
    compute_edge_ratio,
    compute_recovery_factor,
    compute_streaks,
    count_trading_days,
    emotion_breakdown,
)


def _curve(*pnls):
    return [
        {"pnl": pnl, "trade_date": datetime(2024, 3, day + 1, 10, 0)}
        for day, pnl in enumerate(pnls)
    ]


class TestDrawdown:
    def test_peak_to_trough(self):
        # cumulative: 100, 150, 70, 40, 160
        summary = compute_drawdown(_curve(100, 50, -80, -30, 120))

        assert summary.max_drawdown == pytest.approx(110)
        assert summary.peak_value == pytest.approx(150)
        assert summary.trough_value == pytest.approx(40)
        assert summary.peak_date == datetime(2024, 3, 2, 10, 0)
        assert summary.trough_date == datetime(2024, 3, 4, 10, 0)
        assert summary.recovery_date == datetime(2024, 3, 5, 10, 0)
        assert summary.current_drawdown == 0

    def test_losing_from_the_start(self):
        summary = compute_drawdown(_curve(-50, -25))

        assert summary.max_drawdown == pytest.approx(75)
        assert summary.current_drawdown == pytest.approx(75)
        assert summary.trough_value == pytest.approx(-75)
        assert summary.peak_date is None
        assert summary.recovery_date is None

    def test_no_trades(self):
        summary = compute_drawdown([])

        assert summary.max_drawdown == 0
        assert summary.peak_date is None

    def test_unrecorded_pnl_skipped(self):
        trades = _curve(100, None, -40)

        assert compute_drawdown(trades).max_drawdown == pytest.approx(40)


class TestStreaks:
    def test_longest_and_current(self):
        summary = compute_streaks(_curve(10, 20, -5, 30, 40, 50, -1, -2))

        assert summary.max_win_streak == 3
        assert summary.max_loss_streak == 2
        assert summary.current_win_streak == 0
        assert summary.current_loss_streak == 2

    def test_break_even_does_not_break_streak(self):
        summary = compute_streaks(_curve(10, 0, 10))

        assert summary.max_win_streak == 2
        assert summary.current_win_streak == 2


class TestRatios:
    def test_recovery_factor(self):
        # net 160, max drawdown 110
        assert compute_recovery_factor(_curve(100, 50, -80, -30, 120)) == pytest.approx(160 / 110)

    def test_recovery_factor_without_drawdown(self):
        assert compute_recovery_factor(_curve(10, 20)) == 0

    def test_edge_ratio(self):
        # avg win 30 at 50%, avg loss 10 at 50%
        assert compute_edge_ratio(_curve(20, -10, 40, -10)) == pytest.approx(3.0)

    def test_edge_ratio_without_losses(self):
        assert compute_edge_ratio(_curve(20, 40)) == 0


class TestTradingDays:
    def test_distinct_dates(self):
        trades = [
            {"trade_date": datetime(2024, 1, 2, 9, 30)},
            {"trade_date": datetime(2024, 1, 2, 15, 0)},
            {"trade_date": "2024-01-03T10:00:00Z"},
            {"trade_date": None},
        ]

        assert count_trading_days(trades) == 2


class TestEmotionBreakdown:
    def test_counts_and_percent(self):
        trades = [
            {"emotional_state": ["FOMO", "tilt"]},
            {"emotional_state": ["FOMO"]},
            {"emotional_state": []},
            {"emotional_state": None},
        ]
        data = {entry["subject"]: entry for entry in emotion_breakdown(trades)}

        assert data["FOMO"]["value"] == 2
        assert data["FOMO"]["percent"] == pytest.approx(50.0)
        assert data["TILT"]["value"] == 1
        assert data["PATIENCE"]["value"] == 0

    def test_every_state_listed_when_empty(self):
        data = emotion_breakdown([])

        assert len(data) == 10
        assert all(entry["value"] == 0 and entry["percent"] == 0 for entry in data)
