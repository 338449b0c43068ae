"""
Trade Statistics Tests

Covers the summary reduction used by the dashboard and the stats endpoints:
counts, win rate, averages, expectancy, profit factor and the simplified
Sharpe ratio, including the degenerate inputs (empty, single, flat).
"""

import math

import pytest

from tradejournal.domain.trades import TradeRecord
from tradejournal.services.statistics import (
    INFINITE_PROFIT_FACTOR,
    TradeStatistics,
    compute_trade_statistics,
    sharpe_ratio,
)


def _trades(*pnls):
    return [{"pnl": pnl} for pnl in pnls]


class TestCounts:
    """Trade counts and win rate"""

    def test_break_even_trades_still_counted(self):
        """Zero-P&L trades count toward the total but are neither wins nor losses"""
        stats = compute_trade_statistics(_trades(0, 0, 50, -20, 0))

        assert stats.total_trades == 5
        assert stats.winning_trades == 1
        assert stats.losing_trades == 1

    def test_all_winning(self):
        stats = compute_trade_statistics(_trades(10, 20, 30))

        assert stats.win_rate == 100.0
        assert stats.losing_trades == 0
        assert stats.winning_trades == 3

    def test_all_losing(self):
        stats = compute_trade_statistics(_trades(-10, -20, -30))

        assert stats.win_rate == 0.0
        assert stats.winning_trades == 0
        assert stats.losing_trades == 3

    def test_missing_pnl_treated_as_zero(self):
        stats = compute_trade_statistics([{"pnl": None}, {}, {"pnl": "n/a"}, {"pnl": "25"}])

        assert stats.total_trades == 4
        assert stats.total_pnl == 25.0
        assert stats.winning_trades == 1

    def test_non_finite_pnl_treated_as_zero(self):
        stats = compute_trade_statistics([{"pnl": "nan"}, {"pnl": 5}, {"pnl": "inf"}, {"pnl": float("-inf")}])

        assert stats.total_trades == 4
        assert stats.total_pnl == 5.0
        assert stats.winning_trades == 1
        assert stats.losing_trades == 0
        assert stats.average_win == 5.0
        assert math.isfinite(stats.sharpe_ratio)
        assert stats.profit_factor == INFINITE_PROFIT_FACTOR

    def test_non_finite_fields_default_on_records(self):
        record = TradeRecord.from_mapping({"symbol": "AAPL", "side": "Buy", "pnl": "NaN", "entry_price": 1e309})

        assert record.pnl == 0.0
        assert record.entry_price == 0.0


class TestEmptyAndDegenerate:
    """Inputs that must not raise or produce NaN"""

    def test_empty_list_is_all_zero(self):
        stats = compute_trade_statistics([])

        assert stats == TradeStatistics()
        for key, value in stats.to_dict().items():
            assert value == 0, key

    def test_single_trade_sharpe_is_zero(self):
        stats = compute_trade_statistics(_trades(150))

        assert stats.sharpe_ratio == 0

    def test_identical_pnl_sharpe_is_zero(self):
        stats = compute_trade_statistics(_trades(100, 100, 100))

        assert stats.sharpe_ratio == 0
        assert not math.isnan(stats.sharpe_ratio)

    def test_identical_fractional_pnl_sharpe_is_zero(self):
        """Rounding noise in the deviation of equal values must not leak through"""
        assert sharpe_ratio([0.1, 0.1, 0.1]) == 0


class TestDerivedMetrics:
    """Averages, expectancy, profit factor, Sharpe"""

    def test_reference_example(self):
        stats = compute_trade_statistics(_trades(250.50, -120.75, 500, -75.25, 300))

        assert stats.total_trades == 5
        assert stats.winning_trades == 3
        assert stats.losing_trades == 2
        assert stats.total_pnl == pytest.approx(854.50)
        assert stats.win_rate == pytest.approx(60.0)
        assert stats.average_win == pytest.approx(1050.5 / 3)
        assert stats.average_loss == pytest.approx(98.0)
        assert stats.gross_profit == pytest.approx(1050.5)
        assert stats.gross_loss == pytest.approx(196.0)
        assert stats.trade_expectancy == pytest.approx(170.9)
        assert stats.profit_factor == pytest.approx(1050.5 / 196.0)

    def test_expectancy_equals_mean_pnl(self):
        pnls = (40, -10, 25, -5, 0, 60)
        stats = compute_trade_statistics(_trades(*pnls))

        assert stats.trade_expectancy == pytest.approx(sum(pnls) / len(pnls))

    def test_profit_factor_infinite_without_losses(self):
        stats = compute_trade_statistics(_trades(100, 0, 50))

        assert stats.profit_factor == INFINITE_PROFIT_FACTOR
        assert stats.to_dict()["profitFactor"] == "Infinite"

    def test_profit_factor_zero_without_profit_or_loss(self):
        assert compute_trade_statistics(_trades(0, 0)).profit_factor == 0

    def test_sharpe_uses_population_deviation(self):
        stats = compute_trade_statistics(_trades(1, 2, 3))

        # mean 2, population std sqrt(2/3)
        assert stats.sharpe_ratio == pytest.approx(2 / math.sqrt(2 / 3))

    def test_accepts_typed_records_and_objects(self):
        records = [
            TradeRecord(id=1, symbol="AAPL", side="Buy", pnl=30.0),
            TradeRecord.from_mapping({"symbol": "MSFT", "side": "Sell", "pnl": None}),
        ]
        stats = compute_trade_statistics(records)

        assert stats.total_trades == 2
        assert stats.total_pnl == 30.0


class TestSerialization:
    def test_api_field_names(self):
        keys = set(compute_trade_statistics(_trades(10, -5)).to_dict())

        assert keys == {
            "totalTrades", "winningTrades", "losingTrades", "totalPnL", "winRate",
            "averageWin", "averageLoss", "grossProfit", "grossLoss",
            "tradeExpectancy", "sharpeRatio", "profitFactor",
        }
