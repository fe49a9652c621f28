"""Settlement exceptions."""

from typing import Optional

from tollgate.core.exceptions import BadRequestError


class InvalidSettlementEventError(BadRequestError, ValueError):
    """Raised when a payment event cannot be turned into a settlement.

    The event is rejected (never silently dropped) and logged with its id
    so it can be replayed once the cause is fixed.
    """

    def __init__(self, event_id: Optional[str], reason: str) -> None:
        """Initialize with the upstream event id and the reason it was rejected."""
        self.event_id = event_id
        self.reason = reason
        super().__init__(f"Invalid settlement event '{event_id or '<missing>'}': {reason}")
