"""Settlement protocols."""

from typing import Optional, Protocol, runtime_checkable

from tollgate.domains.settlement.types import SettlementEvent, SettlementResult, WebhookResult


@runtime_checkable
class SettlementProcessorProtocol(Protocol):
    """Credits confirmed payments exactly once per upstream event id."""

    async def settle(
        self,
        event_id: str,
        principal_id: str,
        seconds_to_credit: int,
        amount_paid: int,
        *,
        currency: Optional[str] = None,
        hours_purchased: Optional[int] = None,
        reference: Optional[str] = None,
        customer_reference: Optional[str] = None,
    ) -> SettlementResult:
        """Validate the fields as a SettlementEvent and settle it."""
        ...

    async def settle_event(self, event: SettlementEvent) -> SettlementResult:
        """Settle an already validated event."""
        ...


@runtime_checkable
class SettlementWebhookProtocol(Protocol):
    """Processes raw payment provider webhook deliveries."""

    async def process(self, payload: bytes, signature: str) -> WebhookResult:
        """Verify, parse and settle one delivery.

        Raises:
            ValueError: If the signature or payload is invalid (includes
                InvalidSettlementEventError for malformed settlements).
        """
        ...
