"""Alert notifier that writes alerts to the service log.

Default notifier: downstream delivery (email, chat) tails the log stream
or replaces this adapter in the container.
"""

from tollgate.core.logging import logger
from tollgate.core.protocols.notifier import AlertNotifier
from tollgate.schemas.budget import BudgetAlert


class LoggingAlertNotifier(AlertNotifier):
    """Logs each alert at WARNING level with its fields as context."""

    def __init__(self) -> None:
        """Initialize with a prefixed contextual logger."""
        self._logger = logger.with_prefix("[budget-alert] ")

    async def notify(self, alert: BudgetAlert) -> None:
        """Log the alert."""
        self._logger.with_context(
            principal_id=alert.principal_id,
            alert_type=alert.alert_type.value,
            current_spend=alert.current_spend,
            threshold=alert.threshold,
            window_days=alert.window_days,
        ).warning(
            f"{alert.alert_type.value}: {alert.current_spend}s spent against "
            f"{alert.threshold}s in the last {alert.window_days} days"
        )
