"""API tests for the usage tracking endpoint."""

import pytest

PRINCIPAL = "user_test"


def _track(action: str, seconds: int = 1, session_id: str = "session_1", service="tools"):
    body = {"service_type": service, "action_type": action, "seconds_used": seconds}
    if session_id is not None:
        body["session_id"] = session_id
    return body


class TestTrackUsage:
    @pytest.mark.asyncio
    async def test_session_lifecycle(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 120)

        start = await client.post("/v1/usage/track", json=_track("start"))
        increment = await client.post("/v1/usage/track", json=_track("increment", 30))
        end = await client.post("/v1/usage/track", json=_track("end", 20))

        assert start.status_code == 200
        assert start.json()["status"] == "active"
        assert start.json()["credits_used"] == 0
        assert increment.json()["remaining_credits"] == 90
        body = end.json()
        assert body["status"] == "completed"
        assert body["total_credits_before"] == 90
        assert body["credits_used"] == 20
        assert body["remaining_credits"] == 70

    @pytest.mark.asyncio
    async def test_start_generates_session_id(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 10)

        response = await client.post("/v1/usage/track", json=_track("start", session_id=None))

        assert response.status_code == 200
        assert response.json()["session_id"].startswith("session_")

    @pytest.mark.asyncio
    async def test_empty_balance_returns_402_with_balances(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 0)
        await client.post("/v1/usage/track", json=_track("start"))

        response = await client.post("/v1/usage/track", json=_track("increment", 15))

        assert response.status_code == 402
        body = response.json()
        assert body["code"] == "insufficient_credits"
        assert body["available_seconds"] == 0
        assert body["requested_seconds"] == 15

    @pytest.mark.asyncio
    async def test_end_short_of_credits(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 10)
        await client.post("/v1/usage/track", json=_track("start"))

        response = await client.post("/v1/usage/track", json=_track("end", 25))

        assert response.status_code == 200
        assert response.json()["status"] == "completed_with_insufficient_credits"
        assert response.json()["credits_used"] == 10

    @pytest.mark.asyncio
    async def test_unknown_session_returns_404(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)

        response = await client.post("/v1/usage/track", json=_track("increment", 5, "nope"))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_principal_returns_404(self, client):
        response = await client.post("/v1/usage/track", json=_track("start"))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_usage_after_end_returns_400(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)
        await client.post("/v1/usage/track", json=_track("start"))
        await client.post("/v1/usage/track", json=_track("end", 5))

        response = await client.post("/v1/usage/track", json=_track("increment", 5))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_reused_session_id_returns_409(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)
        await client.post("/v1/usage/track", json=_track("start"))

        response = await client.post("/v1/usage/track", json=_track("start", service="chatbot"))

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_missing_session_id_for_increment_returns_400(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)

        response = await client.post(
            "/v1/usage/track", json=_track("increment", 5, session_id=None)
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"service_type": "video", "action_type": "start"},
            {"service_type": "tools", "action_type": "pause"},
            {"service_type": "tools", "action_type": "increment", "seconds_used": 0},
            {"action_type": "start"},
        ],
    )
    async def test_invalid_body_returns_422(self, client, body):
        response = await client.post("/v1/usage/track", json=body)

        assert response.status_code == 422
        assert "errors" in response.json()

    @pytest.mark.asyncio
    async def test_contended_ledger_returns_503(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)
        ledger_store.inject_conflicts(10)

        response = await client.post("/v1/usage/track", json=_track("start"))

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "1"
