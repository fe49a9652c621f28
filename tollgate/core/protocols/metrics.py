"""Metrics protocols for dependency injection.

- LedgerMetrics: credit ledger and event delivery instrumentation
- MetricsRenderer: metrics serialization for scraping
"""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class LedgerMetrics(Protocol):
    """Protocol for credit ledger instrumentation."""

    def observe_operation(self, operation: str, outcome: str) -> None:
        """Count a finished ledger operation.

        Args:
            operation: ``debit``, ``credit``, ``open_account`` or ``session``.
            outcome: ``ok``, ``insufficient``, ``duplicate``, ``unavailable``
                or ``error``.
        """
        ...

    def inc_conflict(self, operation: str) -> None:
        """Count a commit rejected by the store and retried."""
        ...

    def observe_granted(self, service_type: str, seconds: int) -> None:
        """Add debited seconds to the consumption counter."""
        ...

    def inc_subscriber_failure(self, event_type: str) -> None:
        """Count an event subscriber that raised while handling ``event_type``."""
        ...


@dataclass(frozen=True)
class RenderedMetrics:
    """One scrape response: payload plus its media type and charset."""

    body: bytes
    media_type: str
    charset: str


@runtime_checkable
class MetricsRenderer(Protocol):
    """Serializes collected metrics for a scrape endpoint."""

    def render(self, accept: Optional[str] = None) -> RenderedMetrics:
        """Render all metrics in the format the scraper's Accept header asks for."""
        ...
