"""Budget types and pure threshold logic."""

from dataclasses import dataclass
from typing import Iterable, Optional

from tollgate.schemas.budget import AlertType
from tollgate.schemas.ledger import LedgerEntry

# Spend at this share of the limit raises a ``limit`` alert when the
# configured warning threshold sits above it.
LIMIT_APPROACH_PERCENT = 90


@dataclass(frozen=True)
class SpendClassification:
    """Alert type for a spend level and the threshold it crossed."""

    alert_type: AlertType
    threshold: int


def percent_of(amount: int, percent: int) -> int:
    """``amount * percent / 100`` rounded up, so integer spend compares exactly."""
    return -(-amount * percent // 100)


def total_spend(entries: Iterable[LedgerEntry]) -> int:
    """Sum of debited seconds; credits and grants do not offset spend."""
    return sum(-entry.seconds_delta for entry in entries if entry.seconds_delta < 0)


def classify_spend(
    spend: int, spend_limit: int, warning_threshold_percent: int
) -> Optional[SpendClassification]:
    """Classify ``spend`` against a limit, most severe first.

    exceeded: spend >= limit
    warning:  spend >= limit * warning%
    limit:    spend >= limit * 90% (only reachable with a warning above 90%)
    """
    if spend >= spend_limit:
        return SpendClassification(AlertType.EXCEEDED, spend_limit)

    warning_amount = percent_of(spend_limit, warning_threshold_percent)
    if spend >= warning_amount:
        return SpendClassification(AlertType.WARNING, warning_amount)

    if spend >= percent_of(spend_limit, LIMIT_APPROACH_PERCENT):
        return SpendClassification(AlertType.LIMIT, spend_limit)

    return None
