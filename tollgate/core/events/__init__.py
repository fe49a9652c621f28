"""Domain events for the event bus."""

from tollgate.core.events.base import DomainEvent
from tollgate.core.events.credits import (
    BudgetAlertRaisedEvent,
    CreditsDebitedEvent,
    CreditsSettledEvent,
)
from tollgate.core.events.enums import BudgetEventType, CreditEventType, EventType

__all__ = [
    "BudgetAlertRaisedEvent",
    "BudgetEventType",
    "CreditEventType",
    "CreditsDebitedEvent",
    "CreditsSettledEvent",
    "DomainEvent",
    "EventType",
]
