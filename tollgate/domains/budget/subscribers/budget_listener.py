"""Budget listener: EventBus subscriber that evaluates budgets after debits."""

import logging
from typing import List

from tollgate.core.events.base import DomainEvent
from tollgate.core.events.credits import CreditsDebitedEvent
from tollgate.core.events.enums import CreditEventType
from tollgate.core.protocols.event_bus import EventSubscriber
from tollgate.domains.budget.protocols import BudgetAlertDispatcherProtocol

logger = logging.getLogger(__name__)


class BudgetListener(EventSubscriber):
    """Runs the alert dispatcher for the principal of every non-empty debit."""

    EVENT_PATTERNS: List[str] = [CreditEventType.DEBITED.value]

    def __init__(self, dispatcher: BudgetAlertDispatcherProtocol) -> None:
        """Initialize with the alert dispatcher."""
        self._dispatcher = dispatcher

    async def handle(self, event: DomainEvent) -> None:
        """Evaluate the debited principal's budget; never raises."""
        if not isinstance(event, CreditsDebitedEvent) or event.granted_seconds <= 0:
            return
        try:
            await self._dispatcher.dispatch(event.principal_id)
        except Exception as e:
            logger.error(
                "BudgetListener failed for principal %s: %s",
                event.principal_id,
                e,
                exc_info=True,
            )
