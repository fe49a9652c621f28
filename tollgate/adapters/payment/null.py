"""Null payment gateway for when Stripe is disabled.

Satisfies PaymentGatewayProtocol so the container can always be fully
constructed. Every webhook is rejected with ValueError, matching the
Stripe adapter's contract for invalid signatures.
"""

from typing import Any, Dict

from tollgate.core.protocols.payment import PaymentGatewayProtocol


class NullPaymentGateway(PaymentGatewayProtocol):
    """No-op payment gateway used when Stripe is disabled."""

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Reject: no webhook can be authentic without a configured provider."""
        raise ValueError("Payment webhooks are not enabled for this instance")
