"""Ledger store protocols.

The ledger store is the only shared mutable state of the service. Every
balance mutation goes through ``transaction()``: the unit of work buffers
its writes and validates them at commit time, rejecting the whole unit
with TransactionConflictError when a record it read has since changed.

Usage:
    async with store.transaction() as tx:
        balance = await tx.get_balance("user_1")
        await tx.save_balance(balance.model_copy(update={"balance_seconds": 0}))
        await tx.append_entry(entry)
    # committed here; nothing is applied if the block raises
"""

from datetime import datetime
from typing import AsyncContextManager, Optional, Protocol, runtime_checkable

from tollgate.schemas.budget import BudgetAlert, BudgetConfig
from tollgate.schemas.ledger import LedgerEntry, PrincipalBalance, SettlementRecord
from tollgate.schemas.session import UsageSession


@runtime_checkable
class LedgerTransaction(Protocol):
    """A unit of work against the ledger store.

    Reads observe the unit's own pending writes. ``save_*`` methods are
    conditional on the ``version`` carried by the record passed in, which
    must be the version that was read; the store bumps it on commit.
    ``add_*`` methods insert and conflict if the key already exists.
    """

    async def get_balance(self, principal_id: str) -> Optional[PrincipalBalance]:
        """Read a balance, or None if the principal has no account."""
        ...

    async def add_balance(self, balance: PrincipalBalance) -> None:
        """Insert a new balance record."""
        ...

    async def save_balance(self, balance: PrincipalBalance) -> None:
        """Replace a balance read in this unit."""
        ...

    async def get_session(self, session_id: str) -> Optional[UsageSession]:
        """Read a usage session, or None."""
        ...

    async def add_session(self, session: UsageSession) -> None:
        """Insert a new usage session."""
        ...

    async def save_session(self, session: UsageSession) -> None:
        """Replace a usage session read in this unit."""
        ...

    async def get_settlement(self, event_id: str) -> Optional[SettlementRecord]:
        """Read an applied settlement by upstream event id, or None."""
        ...

    async def add_settlement(self, record: SettlementRecord) -> None:
        """Record an applied settlement."""
        ...

    async def append_entry(self, entry: LedgerEntry) -> None:
        """Append a history entry."""
        ...


@runtime_checkable
class LedgerStore(Protocol):
    """Durable store of balances, sessions, history, settlements and budgets."""

    def transaction(self) -> AsyncContextManager[LedgerTransaction]:
        """Open a unit of work that commits on normal exit."""
        ...

    async def get_balance(self, principal_id: str) -> Optional[PrincipalBalance]:
        """Read the last committed balance."""
        ...

    async def get_session(self, session_id: str) -> Optional[UsageSession]:
        """Read the last committed session."""
        ...

    async def list_entries(
        self,
        principal_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> list[LedgerEntry]:
        """History entries of a principal with ``since <= timestamp <= until``, oldest first."""
        ...

    async def get_budget_config(self, principal_id: str) -> Optional[BudgetConfig]:
        """Read a principal's budget configuration."""
        ...

    async def save_budget_config(self, config: BudgetConfig) -> None:
        """Insert or replace a principal's budget configuration."""
        ...

    async def add_alert(self, alert: BudgetAlert) -> None:
        """Persist a budget alert."""
        ...

    async def list_alerts(self, principal_id: str, limit: int = 10) -> list[BudgetAlert]:
        """Most recent alerts of a principal, newest first."""
        ...
