"""Stripe payment gateway adapter."""

import json
from typing import Any, Dict

import stripe

from tollgate.core.protocols.payment import PaymentGatewayProtocol


class StripePaymentGateway(PaymentGatewayProtocol):
    """Verifies Stripe webhook deliveries with the endpoint's signing secret."""

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        """Initialize with the Stripe secret key and webhook signing secret."""
        if not webhook_secret:
            raise ValueError("STRIPE_WEBHOOK_SECRET is required when Stripe is enabled")
        stripe.api_key = api_key
        self._webhook_secret = webhook_secret

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Verify the ``Stripe-Signature`` header and return the event as a plain dict.

        Raises:
            ValueError: If the payload is not valid JSON or the signature
                does not match (including an expired timestamp).
        """
        try:
            stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise ValueError(f"Invalid Stripe signature: {e}") from e
        # construct_event has already parsed and verified the payload.
        return json.loads(payload)
