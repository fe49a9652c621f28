"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before both testpaths (tests/ and tollgate/),
making its fixtures available to centralized tests AND colocated domain
and API tests.
"""

import os

import pytest

# ---------------------------------------------------------------------------
# Environment variables: must be set before any tollgate module import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("LEDGER_STORE_BACKEND", "memory")
os.environ.setdefault("AUTH_ENABLED", "false")
os.environ.setdefault("STRIPE_ENABLED", "false")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("RUN_ALEMBIC_MIGRATIONS", "false")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")


# ---------------------------------------------------------------------------
# Shared fake fixtures: individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_event_bus():
    """Fake EventBus that records published events."""
    from tollgate.adapters.event_bus.fake import FakeEventBus

    return FakeEventBus()


@pytest.fixture
def fake_payment_gateway():
    """Fake PaymentGateway returning queued webhook events."""
    from tollgate.adapters.payment.fake import FakePaymentGateway

    return FakePaymentGateway()


@pytest.fixture
def fake_alert_notifier():
    """Fake AlertNotifier that records alerts."""
    from tollgate.adapters.notifier.fake import FakeAlertNotifier

    return FakeAlertNotifier()


@pytest.fixture
def fake_ledger_metrics():
    """Fake LedgerMetrics that records observations."""
    from tollgate.adapters.metrics import FakeLedgerMetrics

    return FakeLedgerMetrics()


@pytest.fixture
def fake_metrics_renderer():
    """Fake MetricsRenderer with a fixed payload."""
    from tollgate.adapters.metrics import FakeMetricsRenderer

    return FakeMetricsRenderer()


@pytest.fixture
def ledger_store():
    """Empty in-memory ledger store."""
    from tollgate.adapters.ledger_store import InMemoryLedgerStore

    return InMemoryLedgerStore()


# ---------------------------------------------------------------------------
# Real domain services over the in-memory store
# ---------------------------------------------------------------------------


@pytest.fixture
def credit_ledger(ledger_store, fake_event_bus, fake_ledger_metrics):
    """CreditLedger with no retry backoff."""
    from tollgate.domains.credits.ledger import CreditLedger

    return CreditLedger(
        ledger_store,
        fake_event_bus,
        fake_ledger_metrics,
        max_attempts=3,
        backoff_base_seconds=0,
        backoff_max_seconds=0,
    )


@pytest.fixture
def session_tracker(credit_ledger, ledger_store):
    """SessionTracker over the shared credit ledger."""
    from tollgate.domains.sessions.tracker import SessionTracker

    return SessionTracker(credit_ledger, ledger_store)


@pytest.fixture
def budget_monitor(ledger_store):
    """BudgetMonitor over the in-memory store."""
    from tollgate.domains.budget.monitor import BudgetMonitor

    return BudgetMonitor(ledger_store)


# ---------------------------------------------------------------------------
# Test container: fakes at the edges, real domain services inside
# ---------------------------------------------------------------------------


@pytest.fixture
def test_container(
    ledger_store,
    fake_event_bus,
    fake_payment_gateway,
    fake_alert_notifier,
    fake_ledger_metrics,
    fake_metrics_renderer,
    credit_ledger,
    session_tracker,
    budget_monitor,
):
    """A Container with every adapter replaced by a fake.

    For partial overrides, use container.replace():
        real_bus_container = test_container.replace(event_bus=InMemoryEventBus())
    """
    from tollgate.core.container import Container
    from tollgate.domains.budget.dispatcher import BudgetAlertDispatcher
    from tollgate.domains.settlement.processor import SettlementProcessor
    from tollgate.domains.settlement.webhook_processor import SettlementWebhookProcessor
    from tollgate.domains.usage.service import UsageService

    settlement_processor = SettlementProcessor(credit_ledger)
    return Container(
        ledger_store=ledger_store,
        event_bus=fake_event_bus,
        payment_gateway=fake_payment_gateway,
        alert_notifier=fake_alert_notifier,
        ledger_metrics=fake_ledger_metrics,
        metrics_renderer=fake_metrics_renderer,
        credit_ledger=credit_ledger,
        session_tracker=session_tracker,
        settlement_processor=settlement_processor,
        settlement_webhook=SettlementWebhookProcessor(fake_payment_gateway, settlement_processor),
        budget_monitor=budget_monitor,
        budget_dispatcher=BudgetAlertDispatcher(
            budget_monitor, fake_alert_notifier, fake_event_bus
        ),
        usage_service=UsageService(credit_ledger, session_tracker),
    )
