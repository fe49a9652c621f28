"""Domain events emitted by the credit ledger and the budget monitor.

CreditsDebitedEvent is emitted after each committed debit and consumed by
the BudgetListener. CreditsSettledEvent is emitted once per applied
payment settlement; duplicates of the same upstream event never emit.
"""

from typing import Optional

from tollgate.core.events.base import DomainEvent
from tollgate.core.events.enums import BudgetEventType, CreditEventType


class CreditsDebitedEvent(DomainEvent):
    """A debit committed against a principal's balance."""

    event_type: CreditEventType = CreditEventType.DEBITED

    requested_seconds: int
    granted_seconds: int
    balance_after: int
    service_type: Optional[str] = None
    session_id: Optional[str] = None


class CreditsSettledEvent(DomainEvent):
    """A payment settlement credited to a principal's balance."""

    event_type: CreditEventType = CreditEventType.SETTLED

    source_event_id: str
    credited_seconds: int
    balance_after: int


class BudgetAlertRaisedEvent(DomainEvent):
    """A budget alert was handed to the notifier."""

    event_type: BudgetEventType = BudgetEventType.ALERT_RAISED

    alert_type: str
    current_spend: int
    threshold: int
