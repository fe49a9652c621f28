"""Tests for the in-memory ledger store's optimistic concurrency."""

from datetime import datetime, timedelta, timezone

import pytest

from tollgate.adapters.ledger_store import InMemoryLedgerStore
from tollgate.core.exceptions import TransactionConflictError
from tollgate.schemas.budget import AlertType, BudgetAlert
from tollgate.schemas.ledger import LedgerAction, LedgerEntry, PrincipalBalance, SettlementRecord

PRINCIPAL = "user_1"
NOW = datetime(2026, 3, 15, tzinfo=timezone.utc)


def _entry(delta: int, at: datetime) -> LedgerEntry:
    return LedgerEntry(
        principal_id=PRINCIPAL,
        action=LedgerAction.INCREMENT,
        seconds_delta=delta,
        requested_seconds=abs(delta),
        balance_before=100,
        balance_after=100 + delta,
        timestamp=at,
    )


def _settlement(event_id: str = "evt_1") -> SettlementRecord:
    return SettlementRecord(
        event_id=event_id,
        principal_id=PRINCIPAL,
        seconds_credited=60,
        amount_paid=100,
        processed_at=NOW,
    )


class TestTransactions:
    @pytest.mark.asyncio
    async def test_commit_bumps_version(self):
        store = InMemoryLedgerStore()
        store.seed_balance(PRINCIPAL, 100)

        async with store.transaction() as tx:
            balance = await tx.get_balance(PRINCIPAL)
            await tx.save_balance(balance.model_copy(update={"balance_seconds": 90}))

        committed = await store.get_balance(PRINCIPAL)
        assert committed.balance_seconds == 90
        assert committed.version == 1
        assert store.commit_count == 1

    @pytest.mark.asyncio
    async def test_uncommitted_writes_are_invisible(self):
        store = InMemoryLedgerStore()
        store.seed_balance(PRINCIPAL, 100)

        with pytest.raises(RuntimeError):
            async with store.transaction() as tx:
                balance = await tx.get_balance(PRINCIPAL)
                await tx.save_balance(balance.model_copy(update={"balance_seconds": 0}))
                await tx.append_entry(_entry(-100, NOW))
                assert (await tx.get_balance(PRINCIPAL)).balance_seconds == 0
                raise RuntimeError("abort")

        assert (await store.get_balance(PRINCIPAL)).balance_seconds == 100
        assert store.entries == []

    @pytest.mark.asyncio
    async def test_stale_write_conflicts(self):
        store = InMemoryLedgerStore()
        store.seed_balance(PRINCIPAL, 100)

        with pytest.raises(TransactionConflictError):
            async with store.transaction() as first:
                stale = await first.get_balance(PRINCIPAL)
                async with store.transaction() as second:
                    fresh = await second.get_balance(PRINCIPAL)
                    await second.save_balance(fresh.model_copy(update={"balance_seconds": 50}))
                await first.save_balance(stale.model_copy(update={"balance_seconds": 80}))
                await first.append_entry(_entry(-20, NOW))

        assert (await store.get_balance(PRINCIPAL)).balance_seconds == 50
        assert store.conflict_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_account_creation_conflicts(self):
        store = InMemoryLedgerStore()
        balance = PrincipalBalance(principal_id=PRINCIPAL, balance_seconds=10, last_updated_at=NOW)

        with pytest.raises(TransactionConflictError):
            async with store.transaction() as first:
                await first.add_balance(balance)
                async with store.transaction() as second:
                    await second.add_balance(balance)

        assert (await store.get_balance(PRINCIPAL)).version == 0

    @pytest.mark.asyncio
    async def test_duplicate_settlement_conflicts(self):
        store = InMemoryLedgerStore()
        async with store.transaction() as tx:
            await tx.add_settlement(_settlement())

        with pytest.raises(TransactionConflictError):
            async with store.transaction() as tx:
                await tx.add_settlement(_settlement())

        assert list(store.settlements) == ["evt_1"]

    @pytest.mark.asyncio
    async def test_injected_conflicts(self):
        store = InMemoryLedgerStore()
        store.inject_conflicts(2)

        for _ in range(2):
            with pytest.raises(TransactionConflictError):
                async with store.transaction():
                    pass
        async with store.transaction():
            pass

        assert store.conflict_count == 2
        assert store.commit_count == 1


class TestQueries:
    @pytest.mark.asyncio
    async def test_list_entries_range_is_inclusive_and_ordered(self):
        store = InMemoryLedgerStore()
        for days in (3, 1, 2):
            store.seed_entry(_entry(-days, NOW - timedelta(days=days)))

        entries = await store.list_entries(
            PRINCIPAL, since=NOW - timedelta(days=2), until=NOW - timedelta(days=1)
        )

        assert [e.seconds_delta for e in entries] == [-2, -1]

    @pytest.mark.asyncio
    async def test_list_alerts_newest_first(self):
        store = InMemoryLedgerStore()
        for hours, alert_type in ((2, AlertType.WARNING), (1, AlertType.EXCEEDED)):
            await store.add_alert(
                BudgetAlert(
                    principal_id=PRINCIPAL,
                    alert_type=alert_type,
                    current_spend=90,
                    threshold=80,
                    window_days=30,
                    timestamp=NOW - timedelta(hours=hours),
                )
            )

        alerts = await store.list_alerts(PRINCIPAL, limit=1)

        assert [a.alert_type for a in alerts] == [AlertType.EXCEEDED]
