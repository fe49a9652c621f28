"""Dependency container.

The container holds protocol-typed references to every shared dependency.
It does not build anything itself: ``factory.create_container`` decides
which adapter backs each protocol.

Testing: construct ``Container`` directly with fakes, or take a built one
and swap single fields with ``replace``.
"""

from dataclasses import dataclass, replace
from typing import Any

from tollgate.core.protocols import (
    AlertNotifier,
    EventBus,
    LedgerMetrics,
    LedgerStore,
    MetricsRenderer,
    PaymentGatewayProtocol,
)
from tollgate.domains.budget.protocols import (
    BudgetAlertDispatcherProtocol,
    BudgetMonitorProtocol,
)
from tollgate.domains.credits.protocols import CreditLedgerProtocol
from tollgate.domains.sessions.protocols import SessionTrackerProtocol
from tollgate.domains.settlement.protocols import (
    SettlementProcessorProtocol,
    SettlementWebhookProtocol,
)
from tollgate.domains.usage.protocols import UsageServiceProtocol


@dataclass(frozen=True)
class Container:
    """Immutable set of wired dependencies.

    Container serves, factory builds.
    """

    # Infrastructure
    ledger_store: LedgerStore
    event_bus: EventBus
    payment_gateway: PaymentGatewayProtocol
    alert_notifier: AlertNotifier

    # Metrics (shared Prometheus registry)
    ledger_metrics: LedgerMetrics
    metrics_renderer: MetricsRenderer

    # Credits and sessions
    credit_ledger: CreditLedgerProtocol
    session_tracker: SessionTrackerProtocol

    # Settlement
    settlement_processor: SettlementProcessorProtocol
    settlement_webhook: SettlementWebhookProtocol

    # Budget
    budget_monitor: BudgetMonitorProtocol
    budget_dispatcher: BudgetAlertDispatcherProtocol

    # Usage API facade
    usage_service: UsageServiceProtocol

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

            modified = container.replace(alert_notifier=FakeAlertNotifier())
        """
        return replace(self, **changes)
