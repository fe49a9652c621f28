"""API tests for credit balance, account and history endpoints."""

from datetime import datetime, timedelta, timezone

import pytest

from tollgate.schemas.ledger import LedgerAction, LedgerEntry

PRINCIPAL = "user_test"


class TestGetCredits:
    @pytest.mark.asyncio
    async def test_returns_breakdown(self, client, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 3723)

        response = await client.get("/v1/credits")

        assert response.status_code == 200
        body = response.json()
        assert body["balance_seconds"] == 3723
        assert body["formatted_hms"] == "01:02:03"
        assert (body["hours"], body["minutes"], body["seconds"]) == (1, 2, 3)

    @pytest.mark.asyncio
    async def test_unknown_principal_returns_404(self, client):
        response = await client.get("/v1/credits")

        assert response.status_code == 404


class TestOpenAccount:
    @pytest.mark.asyncio
    async def test_grants_initial_credit_once(self, client, ledger_store):
        first = await client.post("/v1/credits/account")
        second = await client.post("/v1/credits/account")

        assert first.status_code == 200
        assert first.json()["balance_seconds"] == 2700
        assert first.json()["formatted_hms"] == "00:45:00"
        assert second.json()["balance_seconds"] == 2700
        [grant] = ledger_store.entries
        assert grant.action == LedgerAction.GRANT


class TestHistory:
    @pytest.mark.asyncio
    async def test_lists_entries_oldest_first(self, client, credit_ledger, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)
        await credit_ledger.debit(PRINCIPAL, 10)
        await credit_ledger.debit(PRINCIPAL, 20)

        response = await client.get("/v1/credits/history")

        assert response.status_code == 200
        deltas = [entry["seconds_delta"] for entry in response.json()]
        assert deltas == [-10, -20]

    @pytest.mark.asyncio
    async def test_filters_by_range(self, client, ledger_store):
        now = datetime.now(timezone.utc)
        for days_ago in (10, 5, 1):
            ledger_store.seed_entry(
                LedgerEntry(
                    principal_id=PRINCIPAL,
                    action=LedgerAction.INCREMENT,
                    seconds_delta=-days_ago,
                    requested_seconds=days_ago,
                    balance_before=100,
                    balance_after=100 - days_ago,
                    timestamp=now - timedelta(days=days_ago),
                )
            )

        response = await client.get(
            "/v1/credits/history",
            params={
                "since": (now - timedelta(days=7)).isoformat(),
                "until": (now - timedelta(days=2)).isoformat(),
            },
        )

        assert [entry["seconds_delta"] for entry in response.json()] == [-5]

    @pytest.mark.asyncio
    async def test_bounds_without_offset_are_utc(self, client, credit_ledger, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)
        await credit_ledger.debit(PRINCIPAL, 10)

        response = await client.get(
            "/v1/credits/history",
            params={
                "since": "2020-01-01T00:00:00",
                "until": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
            },
        )

        assert response.status_code == 200
        assert [entry["seconds_delta"] for entry in response.json()] == [-10]

    @pytest.mark.asyncio
    async def test_inverted_range_returns_400(self, client):
        now = datetime.now(timezone.utc)

        response = await client.get(
            "/v1/credits/history",
            params={"since": now.isoformat(), "until": (now - timedelta(days=1)).isoformat()},
        )

        assert response.status_code == 400
