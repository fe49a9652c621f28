"""Alert notifier protocol.

Delivery channels (email, chat, pager) are outside this service; the
notifier is the seam where a budget alert leaves it.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tollgate.schemas.budget import BudgetAlert


@runtime_checkable
class AlertNotifier(Protocol):
    """Hands budget alerts to an external delivery channel."""

    async def notify(self, alert: "BudgetAlert") -> None:
        """Deliver ``alert``. Implementations must not raise on delivery failure."""
        ...
