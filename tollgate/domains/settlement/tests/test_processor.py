"""Unit tests for SettlementProcessor."""

import asyncio

import pytest

from tollgate.domains.credits.exceptions import PrincipalNotFoundError
from tollgate.domains.settlement.exceptions import InvalidSettlementEventError
from tollgate.domains.settlement.processor import SettlementProcessor
from tollgate.schemas.ledger import LedgerAction

PRINCIPAL = "user_1"


@pytest.fixture
def processor(credit_ledger):
    return SettlementProcessor(credit_ledger)


class TestSettle:
    @pytest.mark.asyncio
    async def test_credits_and_records_settlement(self, processor, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)

        result = await processor.settle(
            "evt_1", PRINCIPAL, 3600, 500, currency="eur", hours_purchased=1
        )

        assert result.applied is True
        assert result.new_balance == 3700
        record = ledger_store.settlements["evt_1"]
        assert record.seconds_credited == 3600
        assert record.amount_paid == 500
        assert record.currency == "eur"
        [entry] = ledger_store.entries
        assert entry.action == LedgerAction.SETTLEMENT
        assert entry.source_event_id == "evt_1"

    @pytest.mark.asyncio
    async def test_redelivery_is_a_no_op(self, processor, ledger_store, fake_event_bus):
        ledger_store.seed_balance(PRINCIPAL, 0)

        first = await processor.settle("evt_1", PRINCIPAL, 60, 100)
        second = await processor.settle("evt_1", PRINCIPAL, 60, 100)

        assert first.applied is True
        assert second.applied is False
        assert second.new_balance == 60
        assert len(ledger_store.entries) == 1
        assert len(fake_event_bus.get_events("credits.settled")) == 1

    @pytest.mark.asyncio
    async def test_concurrent_redeliveries_apply_once(self, credit_ledger, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 0)
        processor = SettlementProcessor(credit_ledger)

        results = await asyncio.gather(
            *(processor.settle("evt_1", PRINCIPAL, 60, 100) for _ in range(3))
        )

        assert sum(r.applied for r in results) == 1
        assert (await ledger_store.get_balance(PRINCIPAL)).balance_seconds == 60

    @pytest.mark.asyncio
    async def test_distinct_events_both_apply(self, processor, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 0)

        await processor.settle("evt_1", PRINCIPAL, 60, 100)
        result = await processor.settle("evt_2", PRINCIPAL, 120, 200)

        assert result.new_balance == 180

    @pytest.mark.asyncio
    async def test_unknown_principal_is_rejected_without_recording(
        self, processor, ledger_store
    ):
        with pytest.raises(PrincipalNotFoundError):
            await processor.settle("evt_1", "ghost", 60, 100)

        assert ledger_store.settlements == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "event_id,principal_id,seconds",
        [
            ("", PRINCIPAL, 60),
            ("evt_1", "", 60),
            ("evt_1", PRINCIPAL, 0),
            ("evt_1", PRINCIPAL, -60),
        ],
    )
    async def test_malformed_events_are_rejected(
        self, processor, ledger_store, event_id, principal_id, seconds
    ):
        ledger_store.seed_balance(PRINCIPAL, 10)

        with pytest.raises(InvalidSettlementEventError):
            await processor.settle(event_id, principal_id, seconds, 100)

        assert (await ledger_store.get_balance(PRINCIPAL)).balance_seconds == 10
