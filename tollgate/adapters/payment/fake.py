"""Fake payment gateway for testing."""

from typing import Any, Dict, Optional

from tollgate.core.protocols.payment import PaymentGatewayProtocol


def make_checkout_event(
    event_id: str = "evt_test_1",
    *,
    event_type: str = "checkout.session.completed",
    principal_id: Optional[str] = "user_1",
    hours: Optional[str] = "1",
    hours_in_seconds: Optional[str] = "3600",
    amount_total: int = 500,
    currency: str = "eur",
    payment_status: Optional[str] = "paid",
    session_id: str = "cs_test_1",
    customer: Optional[str] = "cus_test_1",
) -> Dict[str, Any]:
    """Build a Stripe-shaped checkout event dict. ``None`` omits a metadata key."""
    metadata = {
        key: value
        for key, value in (
            ("userId", principal_id),
            ("hours", hours),
            ("hoursInSeconds", hours_in_seconds),
        )
        if value is not None
    }
    session: Dict[str, Any] = {
        "id": session_id,
        "object": "checkout.session",
        "amount_total": amount_total,
        "currency": currency,
        "customer": customer,
        "metadata": metadata,
    }
    if payment_status is not None:
        session["payment_status"] = payment_status
    return {"id": event_id, "type": event_type, "data": {"object": session}}


class FakePaymentGateway(PaymentGatewayProtocol):
    """Test implementation of PaymentGatewayProtocol.

    Usage::

        fake = FakePaymentGateway()
        fake.queue_event(make_checkout_event("evt_1"))
        event = fake.verify_webhook_signature(b"{}", "sig")
        assert fake.call_count("verify_webhook_signature") == 1
    """

    def __init__(self, should_raise: Optional[Exception] = None) -> None:
        """Initialize with an optional exception raised by every call."""
        self._should_raise = should_raise
        self._events: list[Dict[str, Any]] = []
        self._calls: list[tuple[str, tuple, dict]] = []

    def queue_event(self, event: Dict[str, Any]) -> None:
        """Event returned by the next verification (the last one repeats)."""
        self._events.append(event)

    def call_count(self, method: str) -> int:
        """Number of times a method was called."""
        return sum(1 for name, _, _ in self._calls if name == method)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Return the next queued event."""
        self._calls.append(("verify_webhook_signature", (payload, signature), {}))
        if self._should_raise:
            raise self._should_raise
        if not self._events:
            return {"id": "evt_fake", "type": "test.event", "data": {"object": {}}}
        return self._events.pop(0) if len(self._events) > 1 else self._events[0]
