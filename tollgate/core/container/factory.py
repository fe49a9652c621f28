"""Container factory.

All construction logic lives here. The factory reads settings and builds
the container with environment-appropriate implementations:

- Ledger store: PostgreSQL, or in-process memory for tests and local runs
- Payment gateway: Stripe when enabled, otherwise a gateway that rejects
  every webhook
- Budget evaluation on debit: subscribed to the event bus when enabled
"""

from prometheus_client import CollectorRegistry

from tollgate.adapters.event_bus.in_memory import InMemoryEventBus
from tollgate.adapters.metrics import PrometheusLedgerMetrics, PrometheusMetricsRenderer
from tollgate.adapters.notifier.log import LoggingAlertNotifier
from tollgate.core.config import LedgerStoreBackend, Settings
from tollgate.core.container.container import Container
from tollgate.core.logging import logger
from tollgate.core.protocols import EventBus, LedgerStore, PaymentGatewayProtocol
from tollgate.domains.budget.dispatcher import BudgetAlertDispatcher
from tollgate.domains.budget.monitor import BudgetMonitor
from tollgate.domains.budget.subscribers import BudgetListener
from tollgate.domains.credits.ledger import CreditLedger
from tollgate.domains.sessions.tracker import SessionTracker
from tollgate.domains.settlement.processor import SettlementProcessor
from tollgate.domains.settlement.webhook_processor import SettlementWebhookProcessor
from tollgate.domains.usage.service import UsageService


def create_container(settings: Settings) -> Container:
    """Build the container with environment-appropriate implementations.

    Args:
        settings: Application settings (from core/config)

    Returns:
        Fully constructed Container ready for use
    """
    # -----------------------------------------------------------------
    # Metrics (one registry shared by every Prometheus adapter)
    # -----------------------------------------------------------------
    registry = CollectorRegistry()
    ledger_metrics = PrometheusLedgerMetrics(registry=registry)
    metrics_renderer = PrometheusMetricsRenderer(
        registry,
        ledger_backend=settings.LEDGER_STORE_BACKEND.value,
        stripe_enabled=settings.STRIPE_ENABLED,
    )

    # -----------------------------------------------------------------
    # Infrastructure
    # -----------------------------------------------------------------
    ledger_store = _create_ledger_store(settings)
    event_bus = InMemoryEventBus(metrics=ledger_metrics)
    payment_gateway = _create_payment_gateway(settings)
    alert_notifier = LoggingAlertNotifier()

    # -----------------------------------------------------------------
    # Credits, sessions, settlement
    # -----------------------------------------------------------------
    credit_ledger = CreditLedger(
        ledger_store,
        event_bus,
        ledger_metrics,
        max_attempts=settings.LEDGER_MAX_ATTEMPTS,
        backoff_base_seconds=settings.LEDGER_BACKOFF_BASE_SECONDS,
        backoff_max_seconds=settings.LEDGER_BACKOFF_MAX_SECONDS,
        initial_credit_seconds=settings.INITIAL_CREDIT_SECONDS,
    )
    session_tracker = SessionTracker(credit_ledger, ledger_store)
    settlement_processor = SettlementProcessor(credit_ledger)
    settlement_webhook = SettlementWebhookProcessor(
        payment_gateway=payment_gateway,
        settlement_processor=settlement_processor,
    )

    # -----------------------------------------------------------------
    # Budget
    # -----------------------------------------------------------------
    budget_monitor = BudgetMonitor(ledger_store)
    budget_dispatcher = BudgetAlertDispatcher(budget_monitor, alert_notifier, event_bus)
    if settings.BUDGET_EVALUATE_ON_DEBIT:
        _subscribe_budget_listener(event_bus, budget_dispatcher)

    return Container(
        ledger_store=ledger_store,
        event_bus=event_bus,
        payment_gateway=payment_gateway,
        alert_notifier=alert_notifier,
        ledger_metrics=ledger_metrics,
        metrics_renderer=metrics_renderer,
        credit_ledger=credit_ledger,
        session_tracker=session_tracker,
        settlement_processor=settlement_processor,
        settlement_webhook=settlement_webhook,
        budget_monitor=budget_monitor,
        budget_dispatcher=budget_dispatcher,
        usage_service=UsageService(credit_ledger, session_tracker),
    )


# ---------------------------------------------------------------------------
# Private factory functions
# ---------------------------------------------------------------------------


def _create_ledger_store(settings: Settings) -> LedgerStore:
    """Create the ledger store selected by LEDGER_STORE_BACKEND."""
    if settings.LEDGER_STORE_BACKEND == LedgerStoreBackend.MEMORY:
        from tollgate.adapters.ledger_store.in_memory import InMemoryLedgerStore

        logger.info("Using in-memory ledger store; balances are lost on restart")
        return InMemoryLedgerStore()

    # Imported lazily: building the engine reads database settings.
    from tollgate.adapters.ledger_store.sqlalchemy import SqlAlchemyLedgerStore
    from tollgate.db.session import AsyncSessionLocal

    return SqlAlchemyLedgerStore(AsyncSessionLocal)


def _create_payment_gateway(settings: Settings) -> PaymentGatewayProtocol:
    """Create payment gateway: Stripe if enabled, otherwise a null implementation."""
    if settings.STRIPE_ENABLED:
        from tollgate.adapters.payment.stripe import StripePaymentGateway

        return StripePaymentGateway(
            api_key=settings.STRIPE_SECRET_KEY or "",
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET or "",
        )

    from tollgate.adapters.payment.null import NullPaymentGateway

    return NullPaymentGateway()


def _subscribe_budget_listener(event_bus: EventBus, dispatcher: BudgetAlertDispatcher) -> None:
    listener = BudgetListener(dispatcher)
    for pattern in listener.EVENT_PATTERNS:
        event_bus.subscribe(pattern, listener.handle)
