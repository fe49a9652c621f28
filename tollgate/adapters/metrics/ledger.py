"""Ledger metrics adapters (Prometheus + Fake).

The Prometheus implementation registers its collectors on the registry it
is given so the scrape endpoint can render exactly this service's metrics.
"""

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter

from tollgate.core.protocols.metrics import LedgerMetrics


class PrometheusLedgerMetrics(LedgerMetrics):
    """Prometheus-backed ledger metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

        self._operations_total = Counter(
            "tollgate_ledger_operations_total",
            "Ledger operations by outcome",
            ["operation", "outcome"],
            registry=self._registry,
        )
        self._conflicts_total = Counter(
            "tollgate_ledger_conflicts_total",
            "Ledger commits rejected by the store and retried",
            ["operation"],
            registry=self._registry,
        )
        self._granted_seconds_total = Counter(
            "tollgate_granted_seconds_total",
            "Seconds debited from balances",
            ["service_type"],
            registry=self._registry,
        )
        self._subscriber_failures_total = Counter(
            "tollgate_event_subscriber_failures_total",
            "Event subscribers that raised, by event type",
            ["event_type"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def observe_operation(self, operation: str, outcome: str) -> None:
        self._operations_total.labels(operation=operation, outcome=outcome).inc()

    def inc_conflict(self, operation: str) -> None:
        self._conflicts_total.labels(operation=operation).inc()

    def observe_granted(self, service_type: str, seconds: int) -> None:
        if seconds > 0:
            self._granted_seconds_total.labels(service_type=service_type).inc(seconds)

    def inc_subscriber_failure(self, event_type: str) -> None:
        self._subscriber_failures_total.labels(event_type=event_type).inc()


# ---------------------------------------------------------------------------
# Fake
# ---------------------------------------------------------------------------


@dataclass
class OperationRecord:
    """Single observed ledger operation."""

    operation: str
    outcome: str


class FakeLedgerMetrics(LedgerMetrics):
    """In-memory spy implementing the LedgerMetrics protocol."""

    def __init__(self) -> None:
        self.operations: list[OperationRecord] = []
        self.conflicts: dict[str, int] = {}
        self.granted: dict[str, int] = {}
        self.subscriber_failures: dict[str, int] = {}

    def observe_operation(self, operation: str, outcome: str) -> None:
        self.operations.append(OperationRecord(operation, outcome))

    def inc_conflict(self, operation: str) -> None:
        self.conflicts[operation] = self.conflicts.get(operation, 0) + 1

    def observe_granted(self, service_type: str, seconds: int) -> None:
        self.granted[service_type] = self.granted.get(service_type, 0) + seconds

    def inc_subscriber_failure(self, event_type: str) -> None:
        self.subscriber_failures[event_type] = self.subscriber_failures.get(event_type, 0) + 1

    # -- test helpers --

    def outcomes(self, operation: str) -> list[str]:
        """Outcomes recorded for ``operation`` in order."""
        return [r.outcome for r in self.operations if r.operation == operation]
