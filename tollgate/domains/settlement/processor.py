"""Settlement processor: validated payment events to ledger credits."""

import logging
from typing import Optional

from tollgate.domains.credits.exceptions import PrincipalNotFoundError
from tollgate.domains.credits.protocols import CreditLedgerProtocol
from tollgate.domains.settlement.exceptions import InvalidSettlementEventError
from tollgate.domains.settlement.protocols import SettlementProcessorProtocol
from tollgate.domains.settlement.types import SettlementEvent, SettlementResult

logger = logging.getLogger(__name__)


class SettlementProcessor(SettlementProcessorProtocol):
    """Delegates to CreditLedger.credit keyed by the upstream event id.

    Safe under at-least-once delivery: for any number of calls with the
    same event id exactly one changes state, the rest return applied=False.
    """

    def __init__(self, ledger: CreditLedgerProtocol) -> None:
        """Initialize with the credit ledger."""
        self._ledger = ledger

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
        try:
            event = SettlementEvent.parse(
                event_id=event_id,
                principal_id=principal_id,
                seconds_to_credit=seconds_to_credit,
                amount_paid=amount_paid,
                currency=currency,
                hours_purchased=hours_purchased,
                reference=reference,
                customer_reference=customer_reference,
            )
        except InvalidSettlementEventError as e:
            logger.error(f"Rejected settlement event {event_id}: {e.reason}")
            raise
        return await self.settle_event(event)

    async def settle_event(self, event: SettlementEvent) -> SettlementResult:
        """Credit the event's seconds unless its id was already applied."""
        try:
            result = await self._ledger.credit(
                event.principal_id,
                event.seconds_to_credit,
                event.event_id,
                amount_paid=event.amount_paid,
                currency=event.currency,
                hours_purchased=event.hours_purchased,
                reference=event.reference,
                customer_reference=event.customer_reference,
            )
        except PrincipalNotFoundError:
            logger.error(
                f"Rejected settlement event {event.event_id}: unknown principal "
                f"{event.principal_id} ({event.seconds_to_credit}s, "
                f"{event.amount_paid} {event.currency or ''}). Replay once the account exists."
            )
            raise

        return SettlementResult(
            event_id=event.event_id,
            principal_id=result.principal_id,
            applied=result.applied,
            new_balance=result.new_balance,
        )
