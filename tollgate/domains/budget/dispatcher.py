"""Budget alert dispatch: evaluate, deduplicate, notify.

The monitor raises an alert on every evaluation that crosses a threshold.
The dispatcher is the caller that decides whether it is news: an alert of
the same type as the latest stored one, inside the same window, is not
sent again.

Dispatches for one principal are serialized within a process, so debits
landing together produce a single notification. Separate processes do not
share that lock and may each notify once.
"""

import asyncio
import logging
from collections import defaultdict
from datetime import timedelta
from typing import Optional

from tollgate.core.events.credits import BudgetAlertRaisedEvent
from tollgate.core.protocols.event_bus import EventBus
from tollgate.core.protocols.notifier import AlertNotifier
from tollgate.domains.budget.protocols import (
    BudgetAlertDispatcherProtocol,
    BudgetMonitorProtocol,
)
from tollgate.schemas.budget import BudgetAlert

logger = logging.getLogger(__name__)


class BudgetAlertDispatcher(BudgetAlertDispatcherProtocol):
    """Evaluates a principal's budget and notifies on new alert types."""

    def __init__(
        self,
        monitor: BudgetMonitorProtocol,
        notifier: AlertNotifier,
        event_bus: EventBus,
    ) -> None:
        """Initialize with the monitor, the notifier, and the event bus."""
        self._monitor = monitor
        self._notifier = notifier
        self._event_bus = event_bus
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def dispatch(
        self, principal_id: str, window_days: Optional[int] = None
    ) -> tuple[Optional[BudgetAlert], bool]:
        async with self._locks[principal_id]:
            return await self._dispatch(principal_id, window_days)

    async def _dispatch(
        self, principal_id: str, window_days: Optional[int]
    ) -> tuple[Optional[BudgetAlert], bool]:
        previous = await self._monitor.list_alerts(principal_id, limit=1)
        alert = await self._monitor.evaluate(principal_id, window_days)
        if alert is None:
            return None, False

        if previous and _is_repeat(previous[0], alert):
            logger.debug(
                f"Budget {alert.alert_type.value} for {principal_id} already sent "
                f"at {previous[0].timestamp.isoformat()}; not notifying again"
            )
            return alert, False

        await self._notifier.notify(alert)
        await self._event_bus.publish(
            BudgetAlertRaisedEvent(
                principal_id=principal_id,
                alert_type=alert.alert_type.value,
                current_spend=alert.current_spend,
                threshold=alert.threshold,
            )
        )
        return alert, True


def _is_repeat(previous: BudgetAlert, alert: BudgetAlert) -> bool:
    window_start = alert.timestamp - timedelta(days=alert.window_days)
    return previous.alert_type == alert.alert_type and previous.timestamp >= window_start
