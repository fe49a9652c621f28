"""Credit ledger types and pure functions."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


@dataclass(frozen=True)
class DebitResult:
    """Outcome of a committed debit."""

    principal_id: str
    requested: int
    granted: int
    balance_before: int
    new_balance: int
    entry_id: Optional[UUID] = None

    @property
    def fully_granted(self) -> bool:
        """Whether the whole requested amount was debited."""
        return self.granted == self.requested


@dataclass(frozen=True)
class CreditResult:
    """Outcome of a credit. ``applied`` is False for an already-seen source event."""

    principal_id: str
    applied: bool
    new_balance: int
    balance_before: int


@dataclass(frozen=True)
class BalanceBreakdown:
    """A balance split into hours, minutes and seconds for display."""

    hours: int
    minutes: int
    seconds: int

    @property
    def formatted(self) -> str:
        """``HH:MM:SS``; hours grow past two digits when needed."""
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"


def clamp_debit(balance: int, requested: int) -> int:
    """Seconds granted for ``requested`` against ``balance`` (never more than the balance)."""
    return min(balance, requested)


def split_seconds(total_seconds: int) -> BalanceBreakdown:
    """Break ``total_seconds`` into hours, minutes and seconds."""
    hours, remainder = divmod(max(total_seconds, 0), SECONDS_PER_HOUR)
    minutes, seconds = divmod(remainder, SECONDS_PER_MINUTE)
    return BalanceBreakdown(hours=hours, minutes=minutes, seconds=seconds)
