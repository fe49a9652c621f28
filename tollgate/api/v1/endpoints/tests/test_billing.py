"""API tests for the payment webhook endpoint."""

import pytest

from tollgate.adapters.payment.fake import FakePaymentGateway, make_checkout_event
from tollgate.api.deps import get_container
from tollgate.domains.settlement.webhook_processor import SettlementWebhookProcessor

PRINCIPAL = "user_1"
HEADERS = {"Stripe-Signature": "t=1,v1=fake"}


async def _post_webhook(client, headers=HEADERS):
    return await client.post("/v1/billing/webhook", content=b'{"id": "evt"}', headers=headers)


class TestWebhook:
    @pytest.mark.asyncio
    async def test_settles_paid_checkout(self, client, fake_payment_gateway, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 100)
        fake_payment_gateway.queue_event(make_checkout_event("evt_1"))

        response = await _post_webhook(client)

        assert response.status_code == 200
        assert response.json() == {
            "event_id": "evt_1",
            "event_type": "checkout.session.completed",
            "outcome": "settled",
            "new_balance": 3700,
        }

    @pytest.mark.asyncio
    async def test_redelivery_is_acknowledged(self, client, fake_payment_gateway, ledger_store):
        ledger_store.seed_balance(PRINCIPAL, 0)
        fake_payment_gateway.queue_event(make_checkout_event("evt_1"))

        await _post_webhook(client)
        response = await _post_webhook(client)

        assert response.status_code == 200
        assert response.json()["outcome"] == "duplicate"
        assert (await ledger_store.get_balance(PRINCIPAL)).balance_seconds == 3600

    @pytest.mark.asyncio
    async def test_unhandled_event_type_is_acknowledged(self, client, fake_payment_gateway):
        fake_payment_gateway.queue_event(
            {"id": "evt_x", "type": "customer.created", "data": {"object": {}}}
        )

        response = await _post_webhook(client)

        assert response.status_code == 200
        assert response.json()["outcome"] == "ignored"
        assert response.json()["new_balance"] is None

    @pytest.mark.asyncio
    async def test_missing_signature_returns_400(self, client, fake_payment_gateway):
        response = await _post_webhook(client, headers={})

        assert response.status_code == 400
        assert fake_payment_gateway.call_count("verify_webhook_signature") == 0

    @pytest.mark.asyncio
    async def test_invalid_signature_returns_400(self, client, test_container, ledger_store):
        from tollgate.main import app

        gateway = FakePaymentGateway(should_raise=ValueError("Invalid signature"))
        app.dependency_overrides[get_container] = lambda: test_container.replace(
            settlement_webhook=SettlementWebhookProcessor(
                gateway, test_container.settlement_processor
            )
        )

        response = await _post_webhook(client)

        assert response.status_code == 400
        assert ledger_store.settlements == {}

    @pytest.mark.asyncio
    async def test_malformed_metadata_returns_400(self, client, fake_payment_gateway):
        fake_payment_gateway.queue_event(
            make_checkout_event("evt_1", hours=None, hours_in_seconds=None)
        )

        response = await _post_webhook(client)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_principal_returns_422(self, client, fake_payment_gateway):
        fake_payment_gateway.queue_event(make_checkout_event("evt_1", principal_id="ghost"))

        response = await _post_webhook(client)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_contended_ledger_returns_503(
        self, client, fake_payment_gateway, ledger_store
    ):
        ledger_store.seed_balance(PRINCIPAL, 0)
        ledger_store.inject_conflicts(10)
        fake_payment_gateway.queue_event(make_checkout_event("evt_1"))

        response = await _post_webhook(client)

        assert response.status_code == 503
        assert "Retry-After" in response.headers
        assert ledger_store.settlements == {}
