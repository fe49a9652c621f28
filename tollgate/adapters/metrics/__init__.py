"""Metrics adapters."""

from tollgate.adapters.metrics.ledger import FakeLedgerMetrics, PrometheusLedgerMetrics
from tollgate.adapters.metrics.renderer import FakeMetricsRenderer, PrometheusMetricsRenderer

__all__ = [
    "FakeLedgerMetrics",
    "FakeMetricsRenderer",
    "PrometheusLedgerMetrics",
    "PrometheusMetricsRenderer",
]
