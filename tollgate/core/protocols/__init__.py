"""Core protocols for dependency injection.

Domain-specific protocols (credit ledger, tracker, settlement, budget) live
in their domains/ directories. This module keeps cross-cutting
infrastructure protocols only.
"""

from tollgate.core.protocols.event_bus import DomainEvent, EventBus, EventHandler, EventSubscriber
from tollgate.core.protocols.ledger_store import LedgerStore, LedgerTransaction
from tollgate.core.protocols.metrics import LedgerMetrics, MetricsRenderer
from tollgate.core.protocols.notifier import AlertNotifier
from tollgate.core.protocols.payment import PaymentGatewayProtocol

__all__ = [
    "AlertNotifier",
    "DomainEvent",
    "EventBus",
    "EventHandler",
    "EventSubscriber",
    "LedgerMetrics",
    "LedgerStore",
    "LedgerTransaction",
    "MetricsRenderer",
    "PaymentGatewayProtocol",
]
