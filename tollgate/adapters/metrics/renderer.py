"""Scrape-time rendering of Tollgate's Prometheus registry.

The exposition format follows the scraper's Accept header: OpenMetrics for
scrapers that ask for it, the classic text format otherwise. Every scrape
also carries ``tollgate_service_info``, whose labels say which ledger store
backs this instance and whether Stripe settlement is switched on.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Info
from prometheus_client.exposition import choose_encoder

from tollgate.core.protocols.metrics import MetricsRenderer, RenderedMetrics


def _split_charset(raw: str) -> tuple[str, str]:
    """Separate the charset parameter from a Content-Type value.

    aiohttp refuses a ``content_type`` that already carries a charset.
    """
    params = [p.strip() for p in raw.split(";") if p.strip()]
    charset = next(
        (p.partition("=")[2] for p in params if p.lower().startswith("charset=")), "utf-8"
    )
    media = "; ".join(p for p in params if not p.lower().startswith("charset="))
    return media, charset


class PrometheusMetricsRenderer(MetricsRenderer):
    """Renders the shared registry and labels it with the instance wiring."""

    def __init__(
        self,
        registry: CollectorRegistry,
        *,
        ledger_backend: str = "memory",
        stripe_enabled: bool = False,
    ) -> None:
        self._registry = registry
        Info(
            "tollgate_service",
            "Ledger backend and settlement wiring of this instance",
            registry=registry,
        ).info(
            {
                "ledger_backend": ledger_backend,
                "stripe_enabled": "true" if stripe_enabled else "false",
            }
        )

    def render(self, accept: Optional[str] = None) -> RenderedMetrics:
        encoder, content_type = choose_encoder(accept or "")
        media_type, charset = _split_charset(content_type)
        return RenderedMetrics(
            body=encoder(self._registry), media_type=media_type, charset=charset
        )


# ---------------------------------------------------------------------------
# Fake
# ---------------------------------------------------------------------------


class FakeMetricsRenderer(MetricsRenderer):
    """Spy renderer returning a fixed payload and recording Accept headers."""

    def __init__(self, body: bytes = b"# tollgate test metrics\n") -> None:
        self.body = body
        self.accept_headers: list[Optional[str]] = []

    def render(self, accept: Optional[str] = None) -> RenderedMetrics:
        self.accept_headers.append(accept)
        return RenderedMetrics(body=self.body, media_type="text/plain", charset="utf-8")
