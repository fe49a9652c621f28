"""In-process event bus for ledger and budget events.

Patterns are resolved against the known event types when a handler
subscribes, so ``credits.*`` is bound to ``credits.debited`` and
``credits.settled`` up front and a pattern naming no Tollgate event fails
immediately. Publishing awaits the bound handlers concurrently. A handler
that raises is logged with the event's principal and counted; it is never
propagated, because the ledger write behind the event has committed.
"""

import asyncio
import fnmatch
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Optional

from tollgate.core.events.enums import BudgetEventType, CreditEventType

if TYPE_CHECKING:
    from tollgate.core.protocols.event_bus import DomainEvent, EventHandler
    from tollgate.core.protocols.metrics import LedgerMetrics

logger = logging.getLogger(__name__)

KNOWN_EVENT_TYPES: tuple[str, ...] = tuple(
    event_type.value for event_type in (*CreditEventType, *BudgetEventType)
)


def _type_name(event: "DomainEvent") -> str:
    return getattr(event.event_type, "value", event.event_type)


class InMemoryEventBus:
    """EventBus with subscriptions bound to concrete event types.

    Usage:
        bus = InMemoryEventBus(metrics=ledger_metrics)
        bus.subscribe("credits.debited", budget_listener.handle)
        await bus.publish(CreditsDebitedEvent(...))
    """

    def __init__(self, metrics: Optional["LedgerMetrics"] = None) -> None:
        """Initialize with no subscribers and optional failure metrics."""
        self._handlers: defaultdict[str, list["EventHandler"]] = defaultdict(list)
        self._subscription_count = 0
        self._metrics = metrics

    @property
    def subscriber_count(self) -> int:
        """Number of ``subscribe`` calls accepted."""
        return self._subscription_count

    def handlers_for(self, event_type: str) -> list["EventHandler"]:
        """Handlers bound to ``event_type``, in subscription order."""
        return list(self._handlers.get(event_type, []))

    def subscribe(self, event_pattern: str, handler: "EventHandler") -> None:
        """Bind ``handler`` to every known event type matching ``event_pattern``.

        Raises:
            ValueError: If the pattern matches no known event type.
        """
        matched = fnmatch.filter(KNOWN_EVENT_TYPES, event_pattern)
        if not matched:
            raise ValueError(
                f"Event pattern '{event_pattern}' matches none of {list(KNOWN_EVENT_TYPES)}"
            )
        for event_type in matched:
            self._handlers[event_type].append(handler)
        self._subscription_count += 1
        logger.debug(f"EventBus: '{event_pattern}' bound to {matched}")

    async def publish(self, event: "DomainEvent") -> None:
        """Deliver ``event`` to its bound handlers concurrently."""
        event_type = _type_name(event)
        handlers = self._handlers.get(event_type)
        if not handlers:
            logger.debug(f"EventBus: nothing bound to '{event_type}'")
            return

        results = await asyncio.gather(
            *[handler(event) for handler in handlers],
            return_exceptions=True,
        )
        for result in results:
            if not isinstance(result, Exception):
                continue
            logger.error(
                f"EventBus: subscriber failed on '{event_type}' "
                f"for principal {event.principal_id}: {result}",
                exc_info=result,
            )
            if self._metrics is not None:
                self._metrics.inc_subscriber_failure(event_type)
