"""Budget protocols."""

from typing import Optional, Protocol, runtime_checkable

from tollgate.schemas.budget import BudgetAlert, BudgetConfig, BudgetConfigUpdate


@runtime_checkable
class BudgetMonitorProtocol(Protocol):
    """Stateless spend evaluation plus budget configuration.

    ``evaluate`` persists every alert it produces and never suppresses
    repeats; deduplication belongs to the caller.
    """

    async def evaluate(
        self, principal_id: str, window_days: Optional[int] = None
    ) -> Optional[BudgetAlert]:
        """Evaluate spend over the last ``window_days`` (default: the configured period)."""
        ...

    async def set_config(self, principal_id: str, update: BudgetConfigUpdate) -> BudgetConfig:
        """Create or replace a principal's budget configuration."""
        ...

    async def get_config(self, principal_id: str) -> BudgetConfig:
        """Read a principal's budget configuration."""
        ...

    async def list_alerts(self, principal_id: str, limit: int = 10) -> list[BudgetAlert]:
        """Most recent alerts, newest first."""
        ...


@runtime_checkable
class BudgetAlertDispatcherProtocol(Protocol):
    """Evaluates a budget and notifies, skipping repeats of the last alert."""

    async def dispatch(
        self, principal_id: str, window_days: Optional[int] = None
    ) -> tuple[Optional[BudgetAlert], bool]:
        """Return the alert (or None) and whether it was handed to the notifier."""
        ...
