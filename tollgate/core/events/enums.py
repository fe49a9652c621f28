"""Event type enums, the vocabulary of the event bus.

Every domain event uses one of these enums for its event_type field.
"""

from enum import Enum
from typing import Union


class CreditEventType(str, Enum):
    """Credit ledger event types."""

    DEBITED = "credits.debited"
    SETTLED = "credits.settled"


class BudgetEventType(str, Enum):
    """Budget monitor event types."""

    ALERT_RAISED = "budget.alert_raised"


EventType = Union[CreditEventType, BudgetEventType]
