"""Payment gateway protocol.

Only the inbound half of the payment provider matters here: verifying
that a webhook delivery is authentic. Checkout creation lives elsewhere.
"""

from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class PaymentGatewayProtocol(Protocol):
    """Verifies provider webhook deliveries."""

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Verify ``payload`` against ``signature`` and return the event as a dict.

        Raises:
            ValueError: If the payload cannot be parsed or the signature
                does not match.
        """
        ...
