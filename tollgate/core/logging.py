"""Logging setup and the contextual logger used across the service.

Deployed environments emit one JSON object per line so log pipelines can
index the context dimensions. Local runs get a plain, readable format.

Usage:
    from tollgate.core.logging import logger

    log = logger.with_context(principal_id="user_123", request_id="abc")
    log.info("Debited credits")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple

from tollgate.core.config import settings

_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render a record and its extra dimensions as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record as JSON."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that carries context dimensions and an optional prefix.

    Dimensions are attached to every record as ``extra`` fields. Both
    ``with_context`` and ``with_prefix`` return new adapters; the receiver
    is never mutated.
    """

    def __init__(
        self,
        logger: logging.Logger,
        dimensions: Optional[Dict[str, Any]] = None,
        prefix: str = "",
    ) -> None:
        """Initialize with the wrapped logger, dimensions, and prefix."""
        super().__init__(logger, dict(dimensions or {}))
        self.dimensions: Dict[str, Any] = dict(dimensions or {})
        self.prefix = prefix

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Merge dimensions into ``extra`` and apply the prefix."""
        extra = dict(self.dimensions)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        if self.prefix:
            msg = f"{self.prefix}{msg}"
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a logger with additional dimensions."""
        merged = {**self.dimensions, **dimensions}
        return ContextualLogger(self.logger, merged, self.prefix)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a logger that prepends ``prefix`` to every message."""
        return ContextualLogger(self.logger, self.dimensions, prefix)


def _configure_root_logger() -> None:
    root = logging.getLogger()
    if any(getattr(h, "_tollgate", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    if settings.is_local:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
    else:
        handler.setFormatter(JSONFormatter())
    handler._tollgate = True  # type: ignore[attr-defined]

    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())


_configure_root_logger()

logger = ContextualLogger(logging.getLogger("tollgate"))
