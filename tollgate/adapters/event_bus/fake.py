"""Fake event bus for testing."""

import fnmatch
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tollgate.core.protocols.event_bus import DomainEvent, EventHandler


class FakeEventBus:
    """Records published events; optionally forwards them to subscribers.

    Usage:
        bus = FakeEventBus()
        await ledger.debit("user_1", 10)
        event = bus.assert_published("credits.debited")
        assert event.granted_seconds == 10
    """

    def __init__(self, call_subscribers: bool = False) -> None:
        """Initialize the fake.

        Args:
            call_subscribers: When True, matching subscribers are awaited
                in registration order.
        """
        self.events: list["DomainEvent"] = []
        self._subscribers: list[tuple[str, "EventHandler"]] = []
        self._call_subscribers = call_subscribers

    def subscribe(self, event_pattern: str, handler: "EventHandler") -> None:
        """Register a handler (only called if call_subscribers=True)."""
        self._subscribers.append((event_pattern, handler))

    async def publish(self, event: "DomainEvent") -> None:
        """Record the event and optionally call subscribers."""
        self.events.append(event)
        if not self._call_subscribers:
            return
        for pattern, handler in self._subscribers:
            if fnmatch.fnmatch(event.event_type, pattern):
                await handler(event)

    # Test helpers

    def get_events(self, event_type: str) -> list["DomainEvent"]:
        """All recorded events of the given type, in publish order."""
        return [e for e in self.events if e.event_type == event_type]

    def assert_published(self, event_type: str) -> "DomainEvent":
        """Return the first event of ``event_type`` or fail."""
        matches = self.get_events(event_type)
        if not matches:
            published = [e.event_type for e in self.events]
            raise AssertionError(
                f"Expected event '{event_type}' was not published. Published events: {published}"
            )
        return matches[0]

    def assert_not_published(self, event_type: str) -> None:
        """Fail if any event of ``event_type`` was recorded."""
        if self.get_events(event_type):
            raise AssertionError(f"Event '{event_type}' was published but should not have been")

    def clear(self) -> None:
        """Forget recorded events."""
        self.events.clear()
