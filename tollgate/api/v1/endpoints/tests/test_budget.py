"""API tests for budget configuration, evaluation and alerts."""

import pytest

from tollgate.schemas.budget import AlertType

PRINCIPAL = "user_test"
CONFIG = {"spend_limit_seconds": 100, "warning_threshold_percent": 80, "period_days": 30}


class TestConfig:
    @pytest.mark.asyncio
    async def test_put_then_get(self, client):
        put = await client.put("/v1/budget/config", json=CONFIG)
        get = await client.get("/v1/budget/config")

        assert put.status_code == 200
        assert get.status_code == 200
        assert get.json()["principal_id"] == PRINCIPAL
        assert get.json()["spend_limit_seconds"] == 100
        assert get.json()["enabled"] is True

    @pytest.mark.asyncio
    async def test_get_without_config_returns_404(self, client):
        response = await client.get("/v1/budget/config")

        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [{"spend_limit_seconds": 0}, {"warning_threshold_percent": 101}, {"period_days": 0}],
    )
    async def test_invalid_config_returns_422(self, client, overrides):
        response = await client.put("/v1/budget/config", json={**CONFIG, **overrides})

        assert response.status_code == 422


class TestEvaluate:
    @pytest.mark.asyncio
    async def test_without_config_returns_no_alert(self, client):
        response = await client.post("/v1/budget/evaluate")

        assert response.status_code == 200
        assert response.json() == {"alert": None, "notified": False}

    @pytest.mark.asyncio
    async def test_new_alert_is_notified_once(
        self, client, credit_ledger, ledger_store, fake_alert_notifier
    ):
        ledger_store.seed_balance(PRINCIPAL, 1000)
        await client.put("/v1/budget/config", json=CONFIG)
        await credit_ledger.debit(PRINCIPAL, 85)

        first = await client.post("/v1/budget/evaluate")
        second = await client.post("/v1/budget/evaluate")

        assert first.json()["notified"] is True
        assert first.json()["alert"]["alert_type"] == "warning"
        assert first.json()["alert"]["current_spend"] == 85
        assert second.json()["notified"] is False
        assert fake_alert_notifier.types() == [AlertType.WARNING]

    @pytest.mark.asyncio
    async def test_rejects_non_positive_window(self, client):
        response = await client.post("/v1/budget/evaluate", params={"window_days": 0})

        assert response.status_code == 422


class TestAlerts:
    @pytest.mark.asyncio
    async def test_lists_newest_first_with_limit(self, client, credit_ledger, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 1000)
        await client.put("/v1/budget/config", json=CONFIG)
        await credit_ledger.debit(PRINCIPAL, 85)
        await client.post("/v1/budget/evaluate")
        await credit_ledger.debit(PRINCIPAL, 20)
        await client.post("/v1/budget/evaluate")

        all_alerts = await client.get("/v1/budget/alerts")
        latest = await client.get("/v1/budget/alerts", params={"limit": 1})

        assert [a["alert_type"] for a in all_alerts.json()] == ["exceeded", "warning"]
        assert [a["alert_type"] for a in latest.json()] == ["exceeded"]
