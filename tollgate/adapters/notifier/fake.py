"""Fake alert notifier for testing."""

from tollgate.core.protocols.notifier import AlertNotifier
from tollgate.schemas.budget import AlertType, BudgetAlert


class FakeAlertNotifier(AlertNotifier):
    """Records notified alerts.

    Usage:
        notifier = FakeAlertNotifier()
        await dispatcher.dispatch("user_1")
        assert notifier.types() == [AlertType.WARNING]
    """

    def __init__(self) -> None:
        """Initialize with no recorded alerts."""
        self.alerts: list[BudgetAlert] = []

    async def notify(self, alert: BudgetAlert) -> None:
        """Record the alert."""
        self.alerts.append(alert)

    def types(self) -> list[AlertType]:
        """Alert types in notification order."""
        return [a.alert_type for a in self.alerts]
