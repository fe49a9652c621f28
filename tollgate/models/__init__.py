"""Models for the application."""

from ._base import Base
from .budget import BudgetAlert, BudgetConfig
from .ledger_entry import LedgerEntry
from .principal_balance import PrincipalBalance
from .settlement_event import SettlementEvent
from .usage_session import UsageSession

__all__ = [
    "Base",
    "BudgetAlert",
    "BudgetConfig",
    "LedgerEntry",
    "PrincipalBalance",
    "SettlementEvent",
    "UsageSession",
]
