"""Tests for the internal metrics server."""

import aiohttp
import pytest
from aiohttp.test_utils import make_mocked_request
from prometheus_client import CollectorRegistry

from tollgate.adapters.metrics import (
    FakeMetricsRenderer,
    PrometheusLedgerMetrics,
    PrometheusMetricsRenderer,
)
from tollgate.api.metrics import MetricsServer


def _bound_port(server: MetricsServer) -> int:
    site = next(iter(server._runner.sites))
    return site._server.sockets[0].getsockname()[1]


class TestMetricsServer:
    @pytest.mark.asyncio
    async def test_handler_renders_payload(self):
        renderer = FakeMetricsRenderer(body=b"tollgate_up 1\n")
        server = MetricsServer(renderer, port=0)

        request = make_mocked_request(
            "GET", "/metrics", headers={"Accept": "application/openmetrics-text"}
        )
        response = await server._handle_metrics(request)

        assert response.body == b"tollgate_up 1\n"
        assert response.content_type == "text/plain"
        assert response.charset == "utf-8"
        assert renderer.accept_headers == ["application/openmetrics-text"]

    @pytest.mark.asyncio
    async def test_serves_prometheus_registry(self):
        registry = CollectorRegistry()
        PrometheusLedgerMetrics(registry).observe_operation("debit", "ok")
        renderer = PrometheusMetricsRenderer(registry, ledger_backend="postgres")
        server = MetricsServer(renderer, port=0, host="127.0.0.1")
        await server.start()

        try:
            base = f"http://127.0.0.1:{_bound_port(server)}"
            async with aiohttp.ClientSession() as session:
                async with session.get(f"{base}/metrics") as resp:
                    body = await resp.text()
                    assert resp.status == 200
                    assert resp.headers["Content-Type"].count("charset") == 1
                async with session.get(f"{base}/healthz") as health:
                    assert health.status == 200
                    assert await health.text() == "ok"
            assert "tollgate_ledger_operations_total" in body
            assert 'ledger_backend="postgres"' in body
        finally:
            await server.stop()

    @pytest.mark.asyncio
    async def test_stop_before_start_is_a_no_op(self):
        await MetricsServer(FakeMetricsRenderer(), port=0).stop()
