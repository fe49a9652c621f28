"""Internal HTTP listener for Prometheus scrapes of the ledger metrics.

Runs beside the public API on ``METRICS_PORT``:

- ``GET /metrics`` renders ledger, conflict, consumption and subscriber
  failure counters in the format the scraper accepts
- ``GET /healthz`` answers the scraper's target liveness checks

Scrapes are frequent, so the listener keeps no access log.
"""

from aiohttp import hdrs, web

from tollgate.core.logging import logger
from tollgate.core.protocols.metrics import MetricsRenderer


class MetricsServer:
    """aiohttp listener bound to the metrics host and port."""

    def __init__(self, renderer: MetricsRenderer, port: int, host: str = "0.0.0.0") -> None:
        """Initialize the metrics server on the given host and port."""
        self._renderer = renderer
        self._port = port
        self._host = host
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Bind the listener."""
        app = web.Application()
        app.add_routes(
            [
                web.get("/metrics", self._handle_metrics),
                web.get("/healthz", self._handle_health),
            ]
        )
        self._runner = web.AppRunner(app, access_log=None)
        await self._runner.setup()
        await web.TCPSite(self._runner, self._host, self._port).start()
        logger.info(f"Ledger metrics exposed on http://{self._host}:{self._port}/metrics")

    async def stop(self) -> None:
        """Release the port; a no-op when never started."""
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        logger.info("Ledger metrics listener stopped")

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        rendered = self._renderer.render(request.headers.get(hdrs.ACCEPT))
        return web.Response(
            body=rendered.body,
            content_type=rendered.media_type,
            charset=rendered.charset,
        )

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.Response(text="ok")
