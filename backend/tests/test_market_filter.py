"""
Market Filter Tests

Stored market names are free text with mixed casing; filtering must be
case-insensitive in Python and in the SQL predicate alike.
"""

import pytest

from tradejournal.db.repositories import TradeFilters, TradeRepository
from tradejournal.domain.markets import filter_by_market, market_matches


class TestMarketMatches:
    @pytest.mark.parametrize("stored", ["stock", "Stock", "STOCK"])
    @pytest.mark.parametrize("selected", ["stock", "Stock", "STOCK"])
    def test_case_insensitive(self, stored, selected):
        assert market_matches(stored, selected)

    def test_missing_market_never_matches(self):
        assert not market_matches(None, "stock")
        assert not market_matches("", "stock")

    def test_no_trimming_or_synonyms(self):
        assert not market_matches(" stock", "stock")
        assert not market_matches("stocks", "stock")
        assert not market_matches("equity", "stock")


class TestFilterByMarket:
    def test_keeps_all_casings(self):
        trades = [
            {"id": 1, "market": "stock"},
            {"id": 2, "market": "Stock"},
            {"id": 3, "market": "STOCK"},
            {"id": 4, "market": "crypto"},
            {"id": 5, "market": None},
        ]

        kept = filter_by_market(trades, "sToCk")

        assert [t["id"] for t in kept] == [1, 2, 3]

    def test_empty_selection_keeps_everything(self):
        trades = [{"market": "forex"}, {"market": None}]

        assert filter_by_market(trades, None) == trades
        assert filter_by_market(trades, "") == trades


class TestMarketQuery:
    """The repository predicate behaves like market_matches"""

    def test_query_is_case_insensitive(self, db_session, trader, make_trade):
        for market in ("stock", "Stock", "STOCK", "crypto", None):
            make_trade(trader["user_id"], market=market)

        rows = TradeRepository(db_session).list_for_user(trader["user_id"], TradeFilters(market="Stock"))

        assert sorted(t.market for t in rows) == ["STOCK", "Stock", "stock"]
