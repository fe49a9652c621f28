"""Payment webhook processing.

Verifies a raw Stripe delivery, converts the checkout session it carries
into a SettlementEvent, and settles it. Unhandled event types and
redeliveries are acknowledged without side effects so the provider stops
retrying them.
"""

import logging
from typing import Any, Awaitable, Callable, Mapping

from tollgate.core.protocols.payment import PaymentGatewayProtocol
from tollgate.domains.settlement.exceptions import InvalidSettlementEventError
from tollgate.domains.settlement.protocols import (
    SettlementProcessorProtocol,
    SettlementWebhookProtocol,
)
from tollgate.domains.settlement.types import SettlementEvent, WebhookOutcome, WebhookResult

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_ASYNC_PAYMENT_SUCCEEDED = "checkout.session.async_payment_succeeded"

# A completed checkout may still be waiting on a delayed payment method;
# those settle on checkout.session.async_payment_succeeded instead.
_SETTLEABLE_PAYMENT_STATUSES = frozenset({"paid", "no_payment_required"})

_Handler = Callable[[str, str, Mapping[str, Any]], Awaitable[WebhookResult]]


class SettlementWebhookProcessor(SettlementWebhookProtocol):
    """Routes verified webhook events to settlement handlers."""

    def __init__(
        self,
        payment_gateway: PaymentGatewayProtocol,
        settlement_processor: SettlementProcessorProtocol,
    ) -> None:
        """Initialize with the gateway that verifies signatures and the processor."""
        self._payment_gateway = payment_gateway
        self._settlement_processor = settlement_processor
        self._handlers: dict[str, _Handler] = {
            CHECKOUT_COMPLETED: self._handle_checkout_completed,
            CHECKOUT_ASYNC_PAYMENT_SUCCEEDED: self._handle_async_payment_succeeded,
        }

    async def process(self, payload: bytes, signature: str) -> WebhookResult:
        """Verify and handle one delivery.

        Raises:
            ValueError: Invalid signature or payload.
            InvalidSettlementEventError: Event is authentic but malformed.
            PrincipalNotFoundError: Event names a principal with no account.
            UnavailableError: The ledger could not commit; the provider should retry.
        """
        event = self._payment_gateway.verify_webhook_signature(payload, signature)
        event_id = event.get("id")
        event_type = event.get("type")
        if not event_id or not event_type:
            raise InvalidSettlementEventError(event_id, "event has no id or type")

        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info(f"Ignoring unhandled webhook event type {event_type} ({event_id})")
            return WebhookResult(event_id, event_type, WebhookOutcome.IGNORED)

        data_object = (event.get("data") or {}).get("object") or {}
        return await handler(event_id, event_type, data_object)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _handle_checkout_completed(
        self, event_id: str, event_type: str, session: Mapping[str, Any]
    ) -> WebhookResult:
        payment_status = session.get("payment_status")
        if payment_status is not None and payment_status not in _SETTLEABLE_PAYMENT_STATUSES:
            logger.info(
                f"Checkout {session.get('id')} completed with payment_status={payment_status}; "
                f"settling on async payment confirmation ({event_id})"
            )
            return WebhookResult(event_id, event_type, WebhookOutcome.SKIPPED)
        return await self._settle(event_id, event_type, session)

    async def _handle_async_payment_succeeded(
        self, event_id: str, event_type: str, session: Mapping[str, Any]
    ) -> WebhookResult:
        return await self._settle(event_id, event_type, session)

    async def _settle(
        self, event_id: str, event_type: str, session: Mapping[str, Any]
    ) -> WebhookResult:
        try:
            settlement_event = SettlementEvent.from_checkout_session(event_id, session)
        except InvalidSettlementEventError as e:
            logger.error(
                f"Rejected {event_type} {event_id}: {e.reason} "
                f"(metadata={dict(session.get('metadata') or {})})"
            )
            raise

        result = await self._settlement_processor.settle_event(settlement_event)
        outcome = WebhookOutcome.SETTLED if result.applied else WebhookOutcome.DUPLICATE
        logger.info(
            f"Webhook {event_id} ({event_type}) {outcome.value}: "
            f"principal {result.principal_id} balance {result.new_balance}s"
        )
        return WebhookResult(event_id, event_type, outcome, settlement=result)
