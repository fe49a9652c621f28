"""EventBus protocol for domain event fan-out.

Ledger code publishes what happened (credits debited, payment settled)
and subscribers such as the budget listener react, without the ledger
knowing who is listening.

Usage:
    await event_bus.publish(CreditsDebitedEvent(...))

    event_bus.subscribe("credits.debited", budget_listener.handle)
"""

from datetime import datetime
from typing import Awaitable, Callable, List, Protocol, runtime_checkable


@runtime_checkable
class DomainEvent(Protocol):
    """Fields the bus relies on for routing and metadata."""

    @property
    def event_type(self) -> str:
        """Dot-separated identifier, ``{domain}.{action}``."""
        ...

    @property
    def timestamp(self) -> datetime:
        """When the event occurred (UTC)."""
        ...

    @property
    def principal_id(self) -> str:
        """Principal the event belongs to."""
        ...


EventHandler = Callable[[DomainEvent], Awaitable[None]]


@runtime_checkable
class EventBus(Protocol):
    """Publishes domain events to subscribers matched by glob pattern.

    A failing subscriber never affects the publisher or other subscribers.
    """

    async def publish(self, event: DomainEvent) -> None:
        """Publish an event to all matching subscribers."""
        ...

    def subscribe(self, event_pattern: str, handler: EventHandler) -> None:
        """Register a handler for event types matching ``event_pattern``."""
        ...


@runtime_checkable
class EventSubscriber(Protocol):
    """A component that reacts to events matching its EVENT_PATTERNS."""

    EVENT_PATTERNS: List[str]

    async def handle(self, event: DomainEvent) -> None:
        """Handle one event. Must not raise into the publisher."""
        ...
