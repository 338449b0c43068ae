"""
Strategies API Tests

Strategy CRUD with ordered rules, trade detachment on delete, and the
per-strategy performance summary.
"""

from datetime import datetime


class TestStrategyCrud:
    def test_create_keeps_rule_order(self, test_client, trader):
        response = test_client.post(
            "/strategies",
            json={"name": "Opening range", "rules": ["Wait 15 minutes", " ", "Enter on break", "Stop at midpoint"]},
            headers=trader["headers"],
        )

        assert response.status_code == 201
        body = response.json()
        assert body["rules"] == ["Wait 15 minutes", "Enter on break", "Stop at midpoint"]
        assert body["is_active"] is True
        assert body["trade_count"] == 0

    def test_update_replaces_rules(self, test_client, trader, make_strategy):
        strategy = make_strategy(trader["user_id"])

        response = test_client.put(
            f"/strategies/{strategy.id}",
            json={"rules": ["Only one rule now"], "is_active": False},
            headers=trader["headers"],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["rules"] == ["Only one rule now"]
        assert body["is_active"] is False
        assert body["name"] == "Breakout"

    def test_update_without_rules_keeps_them(self, test_client, trader, make_strategy):
        strategy = make_strategy(trader["user_id"])

        body = test_client.put(
            f"/strategies/{strategy.id}", json={"description": "Momentum"}, headers=trader["headers"]
        ).json()

        assert body["rules"] == ["Wait for volume", "Stop below range"]
        assert body["description"] == "Momentum"

    def test_list_with_trade_counts(self, test_client, trader, make_strategy, make_trade):
        strategy = make_strategy(trader["user_id"])
        make_trade(trader["user_id"], strategy_id=strategy.id)
        make_trade(trader["user_id"], strategy_id=strategy.id)
        make_trade(trader["user_id"])

        body = test_client.get("/strategies", headers=trader["headers"]).json()

        assert len(body) == 1
        assert body[0]["trade_count"] == 2

    def test_active_only(self, test_client, trader, make_strategy):
        make_strategy(trader["user_id"], name="Live")
        retired = make_strategy(trader["user_id"], name="Retired")
        test_client.put(f"/strategies/{retired.id}", json={"is_active": False}, headers=trader["headers"])

        body = test_client.get("/strategies", params={"activeOnly": "true"}, headers=trader["headers"]).json()

        assert [s["name"] for s in body] == ["Live"]

    def test_other_users_strategy(self, test_client, trader, other_trader, make_strategy):
        strategy = make_strategy(trader["user_id"])

        response = test_client.get(f"/strategies/{strategy.id}", headers=other_trader["headers"])

        assert response.status_code == 404


class TestStrategyDelete:
    def test_delete_detaches_trades(self, test_client, trader, make_strategy, make_trade):
        strategy = make_strategy(trader["user_id"])
        trade = make_trade(trader["user_id"], strategy_id=strategy.id)

        response = test_client.delete(f"/strategies/{strategy.id}", headers=trader["headers"])

        assert response.status_code == 204
        assert test_client.get(f"/strategies/{strategy.id}", headers=trader["headers"]).status_code == 404

        kept = test_client.get(f"/trades/{trade.id}", headers=trader["headers"])
        assert kept.status_code == 200
        assert kept.json()["strategy_id"] is None

    def test_delete_missing(self, test_client, trader):
        assert test_client.delete("/strategies/999", headers=trader["headers"]).status_code == 404


class TestStrategyPerformance:
    def test_stats_over_strategy_trades(self, test_client, trader, make_strategy, make_trade):
        strategy = make_strategy(trader["user_id"])
        for day, pnl in enumerate((120.0, -40.0, 60.0), start=1):
            make_trade(trader["user_id"], strategy_id=strategy.id, pnl=pnl, trade_date=datetime(2024, 4, day, 10))
        make_trade(trader["user_id"], pnl=-500.0)

        response = test_client.get(f"/strategies/{strategy.id}/performance", headers=trader["headers"])

        assert response.status_code == 200
        body = response.json()
        assert body["strategyName"] == "Breakout"
        assert body["totalTrades"] == 3
        assert body["totalPnL"] == 140.0
        assert body["profitFactor"] == 4.5
        assert body["maxDrawdown"] == 40.0
        assert body["tradingDays"] == 3

    def test_no_trades_is_zero(self, test_client, trader, make_strategy):
        strategy = make_strategy(trader["user_id"])

        body = test_client.get(f"/strategies/{strategy.id}/performance", headers=trader["headers"]).json()

        assert body["totalTrades"] == 0
        assert body["profitFactor"] == 0
        assert body["sharpeRatio"] == 0
