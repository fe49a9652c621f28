"""Budget monitor: spend over a rolling window against a configured limit."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from tollgate.core.protocols.ledger_store import LedgerStore
from tollgate.domains.budget.exceptions import BudgetConfigNotFoundError
from tollgate.domains.budget.protocols import BudgetMonitorProtocol
from tollgate.domains.budget.types import classify_spend, total_spend
from tollgate.domains.credits.exceptions import InvalidArgumentError
from tollgate.schemas.budget import BudgetAlert, BudgetConfig, BudgetConfigUpdate

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BudgetMonitor(BudgetMonitorProtocol):
    """Reads history from the ledger store and persists the alerts it raises."""

    def __init__(
        self,
        store: LedgerStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize with the ledger store and a UTC clock."""
        self._store = store
        self._clock = clock

    async def evaluate(
        self, principal_id: str, window_days: Optional[int] = None
    ) -> Optional[BudgetAlert]:
        """Evaluate spend in ``[now - window_days, now]``.

        Returns None when the principal has no enabled budget or the spend
        crosses no threshold.
        """
        if window_days is not None and window_days <= 0:
            raise InvalidArgumentError(f"window_days must be > 0, got {window_days}")

        config = await self._store.get_budget_config(principal_id)
        if config is None or not config.enabled:
            return None

        window = window_days or config.period_days
        now = self._clock()
        entries = await self._store.list_entries(
            principal_id, since=now - timedelta(days=window), until=now
        )
        spend = total_spend(entries)

        classification = classify_spend(
            spend, config.spend_limit_seconds, config.warning_threshold_percent
        )
        if classification is None:
            return None

        alert = BudgetAlert(
            principal_id=principal_id,
            alert_type=classification.alert_type,
            current_spend=spend,
            threshold=classification.threshold,
            window_days=window,
            timestamp=now,
        )
        await self._store.add_alert(alert)
        logger.info(
            f"Budget {alert.alert_type.value} for {principal_id}: "
            f"{spend}s spent in {window}d (threshold {alert.threshold}s)"
        )
        return alert

    async def set_config(self, principal_id: str, update: BudgetConfigUpdate) -> BudgetConfig:
        config = BudgetConfig(
            principal_id=principal_id,
            updated_at=self._clock(),
            **update.model_dump(),
        )
        await self._store.save_budget_config(config)
        return config

    async def get_config(self, principal_id: str) -> BudgetConfig:
        config = await self._store.get_budget_config(principal_id)
        if config is None:
            raise BudgetConfigNotFoundError(principal_id)
        return config

    async def list_alerts(self, principal_id: str, limit: int = 10) -> list[BudgetAlert]:
        return await self._store.list_alerts(principal_id, limit=limit)
