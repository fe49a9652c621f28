"""Tests for ledger metrics and the Prometheus renderer."""

import pytest
from prometheus_client import REGISTRY, CollectorRegistry

from tollgate.adapters.metrics import (
    FakeLedgerMetrics,
    PrometheusLedgerMetrics,
    PrometheusMetricsRenderer,
)
from tollgate.adapters.metrics.renderer import _split_charset


class TestSplitCharset:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("text/plain; version=0.0.4; charset=utf-8", ("text/plain; version=0.0.4", "utf-8")),
            ("text/plain; version=0.0.4", ("text/plain; version=0.0.4", "utf-8")),
            ("text/plain;Charset=UTF-8", ("text/plain", "UTF-8")),
            ("application/json", ("application/json", "utf-8")),
        ],
    )
    def test_split(self, raw, expected):
        assert _split_charset(raw) == expected


class TestPrometheusLedgerMetrics:
    def test_uses_its_own_registry(self):
        assert PrometheusLedgerMetrics().registry is not REGISTRY

    def test_counters(self):
        registry = CollectorRegistry()
        metrics = PrometheusLedgerMetrics(registry)

        metrics.observe_operation("debit", "ok")
        metrics.observe_operation("debit", "ok")
        metrics.inc_conflict("credit")
        metrics.observe_granted("tools", 45)
        metrics.observe_granted("tools", 0)

        sample = registry.get_sample_value
        assert sample(
            "tollgate_ledger_operations_total", {"operation": "debit", "outcome": "ok"}
        ) == 2
        assert sample("tollgate_ledger_conflicts_total", {"operation": "credit"}) == 1
        assert sample("tollgate_granted_seconds_total", {"service_type": "tools"}) == 45

    def test_subscriber_failures(self):
        registry = CollectorRegistry()
        PrometheusLedgerMetrics(registry).inc_subscriber_failure("credits.debited")

        assert (
            registry.get_sample_value(
                "tollgate_event_subscriber_failures_total", {"event_type": "credits.debited"}
            )
            == 1
        )


class TestPrometheusMetricsRenderer:
    def test_renders_text_format_by_default(self):
        registry = CollectorRegistry()
        PrometheusLedgerMetrics(registry).observe_operation("credit", "duplicate")
        renderer = PrometheusMetricsRenderer(registry)

        rendered = renderer.render()

        expected = 'tollgate_ledger_operations_total{operation="credit",outcome="duplicate"} 1.0'
        assert expected in rendered.body.decode()
        assert rendered.media_type.startswith("text/plain")
        assert "charset" not in rendered.media_type
        assert rendered.charset == "utf-8"

    def test_negotiates_openmetrics(self):
        renderer = PrometheusMetricsRenderer(CollectorRegistry())

        rendered = renderer.render("application/openmetrics-text; version=1.0.0")

        assert rendered.media_type.startswith("application/openmetrics-text")
        assert rendered.body.decode().rstrip().endswith("# EOF")

    def test_labels_instance_wiring(self):
        registry = CollectorRegistry()
        PrometheusMetricsRenderer(registry, ledger_backend="postgres", stripe_enabled=True)

        labels = {"ledger_backend": "postgres", "stripe_enabled": "true"}
        assert registry.get_sample_value("tollgate_service_info", labels) == 1


class TestFakeLedgerMetrics:
    def test_records_observations(self):
        fake = FakeLedgerMetrics()

        fake.observe_operation("debit", "ok")
        fake.observe_operation("debit", "insufficient")
        fake.inc_conflict("debit")
        fake.observe_granted("chatbot", 10)
        fake.inc_subscriber_failure("credits.debited")

        assert fake.outcomes("debit") == ["ok", "insufficient"]
        assert fake.conflicts == {"debit": 1}
        assert fake.granted == {"chatbot": 10}
        assert fake.subscriber_failures == {"credits.debited": 1}
