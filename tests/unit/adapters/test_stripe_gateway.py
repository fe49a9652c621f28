"""Tests for StripePaymentGateway webhook signature verification."""

import hashlib
import hmac
import json
import time

import pytest

from tollgate.adapters.payment.fake import make_checkout_event
from tollgate.adapters.payment.null import NullPaymentGateway
from tollgate.adapters.payment.stripe import StripePaymentGateway

WEBHOOK_SECRET = "whsec_test_secret"


def _sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


@pytest.fixture
def gateway():
    return StripePaymentGateway(api_key="sk_test_dummy", webhook_secret=WEBHOOK_SECRET)


class TestVerifyWebhookSignature:
    def test_valid_signature_returns_event(self, gateway):
        payload = json.dumps(make_checkout_event("evt_1")).encode()

        event = gateway.verify_webhook_signature(payload, _sign(payload))

        assert event["id"] == "evt_1"
        assert event["data"]["object"]["metadata"]["hoursInSeconds"] == "3600"

    def test_wrong_secret_is_rejected(self, gateway):
        payload = json.dumps(make_checkout_event("evt_1")).encode()

        with pytest.raises(ValueError):
            gateway.verify_webhook_signature(payload, _sign(payload, secret="whsec_other"))

    def test_tampered_payload_is_rejected(self, gateway):
        payload = json.dumps(make_checkout_event("evt_1")).encode()
        signature = _sign(payload)
        tampered = payload.replace(b'"3600"', b'"360000"')

        with pytest.raises(ValueError):
            gateway.verify_webhook_signature(tampered, signature)

    def test_stale_timestamp_is_rejected(self, gateway):
        payload = json.dumps(make_checkout_event("evt_1")).encode()

        with pytest.raises(ValueError):
            gateway.verify_webhook_signature(
                payload, _sign(payload, timestamp=int(time.time()) - 3600)
            )

    def test_malformed_header_is_rejected(self, gateway):
        payload = json.dumps(make_checkout_event("evt_1")).encode()

        with pytest.raises(ValueError):
            gateway.verify_webhook_signature(payload, "not-a-signature")

    def test_requires_webhook_secret(self):
        with pytest.raises(ValueError):
            StripePaymentGateway(api_key="sk_test_dummy", webhook_secret="")


class TestNullPaymentGateway:
    def test_rejects_every_delivery(self):
        with pytest.raises(ValueError):
            NullPaymentGateway().verify_webhook_signature(b"{}", "t=1,v1=abc")
