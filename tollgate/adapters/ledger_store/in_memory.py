"""In-memory ledger store.

Implements the LedgerStore protocol with optimistic concurrency.
Concurrent tasks in one event loop behave like concurrent requests against
PostgreSQL: every read yields to the loop, writes are buffered in the unit
of work, and the commit validates record versions before applying.

Used by tests and by local runs with ``LEDGER_STORE_BACKEND=memory``.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from tollgate.core.exceptions import TransactionConflictError
from tollgate.core.protocols.ledger_store import LedgerStore, LedgerTransaction
from tollgate.schemas.budget import BudgetAlert, BudgetConfig
from tollgate.schemas.ledger import LedgerEntry, PrincipalBalance, SettlementRecord
from tollgate.schemas.session import UsageSession

_MISSING = -1


class _InMemoryTransaction(LedgerTransaction):
    """Buffered unit of work over an InMemoryLedgerStore."""

    def __init__(self, store: "InMemoryLedgerStore") -> None:
        self._store = store
        self.balances: dict[str, PrincipalBalance] = {}
        self.balance_versions: dict[str, int] = {}
        self.sessions: dict[str, UsageSession] = {}
        self.session_versions: dict[str, int] = {}
        self.settlements: dict[str, SettlementRecord] = {}
        self.entries: list[LedgerEntry] = []

    # -- balances --

    async def get_balance(self, principal_id: str) -> Optional[PrincipalBalance]:
        await asyncio.sleep(0)
        if principal_id in self.balances:
            return self.balances[principal_id]
        return self._store._balances.get(principal_id)

    async def add_balance(self, balance: PrincipalBalance) -> None:
        if await self.get_balance(balance.principal_id) is not None:
            raise TransactionConflictError(f"Balance for '{balance.principal_id}' already exists")
        self.balances[balance.principal_id] = balance
        self.balance_versions[balance.principal_id] = _MISSING

    async def save_balance(self, balance: PrincipalBalance) -> None:
        self.balance_versions.setdefault(balance.principal_id, balance.version)
        self.balances[balance.principal_id] = balance

    # -- sessions --

    async def get_session(self, session_id: str) -> Optional[UsageSession]:
        await asyncio.sleep(0)
        if session_id in self.sessions:
            return self.sessions[session_id]
        return self._store._sessions.get(session_id)

    async def add_session(self, session: UsageSession) -> None:
        if await self.get_session(session.session_id) is not None:
            raise TransactionConflictError(f"Session '{session.session_id}' already exists")
        self.sessions[session.session_id] = session
        self.session_versions[session.session_id] = _MISSING

    async def save_session(self, session: UsageSession) -> None:
        self.session_versions.setdefault(session.session_id, session.version)
        self.sessions[session.session_id] = session

    # -- settlements and history --

    async def get_settlement(self, event_id: str) -> Optional[SettlementRecord]:
        await asyncio.sleep(0)
        if event_id in self.settlements:
            return self.settlements[event_id]
        return self._store._settlements.get(event_id)

    async def add_settlement(self, record: SettlementRecord) -> None:
        if await self.get_settlement(record.event_id) is not None:
            raise TransactionConflictError(f"Settlement '{record.event_id}' already recorded")
        self.settlements[record.event_id] = record

    async def append_entry(self, entry: LedgerEntry) -> None:
        self.entries.append(entry)


class InMemoryLedgerStore(LedgerStore):
    """LedgerStore kept in process memory.

    Usage:
        store = InMemoryLedgerStore()
        store.seed_balance("user_1", 100)
        store.inject_conflicts(2)  # next two commits lose a simulated race
    """

    def __init__(self) -> None:
        """Initialize empty tables."""
        self._balances: dict[str, PrincipalBalance] = {}
        self._sessions: dict[str, UsageSession] = {}
        self._settlements: dict[str, SettlementRecord] = {}
        self._entries: list[LedgerEntry] = []
        self._budget_configs: dict[str, BudgetConfig] = {}
        self._alerts: list[BudgetAlert] = []
        self._injected_conflicts = 0
        self.commit_count = 0
        self.conflict_count = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[LedgerTransaction]:
        """Yield a unit of work and commit it when the block exits normally."""
        tx = _InMemoryTransaction(self)
        yield tx
        await asyncio.sleep(0)
        self._commit(tx)

    def _commit(self, tx: _InMemoryTransaction) -> None:
        # No awaits below: validation and apply happen in one loop step.
        if self._injected_conflicts:
            self._injected_conflicts -= 1
            self.conflict_count += 1
            raise TransactionConflictError("Injected commit conflict")

        try:
            _validate_versions(self._balances, tx.balance_versions, "balance")
            _validate_versions(self._sessions, tx.session_versions, "session")
            for event_id in tx.settlements:
                if event_id in self._settlements:
                    raise TransactionConflictError(f"Settlement '{event_id}' already recorded")
        except TransactionConflictError:
            self.conflict_count += 1
            raise

        for principal_id, balance in tx.balances.items():
            self._balances[principal_id] = _next_version(balance, tx.balance_versions[principal_id])
        for session_id, session in tx.sessions.items():
            self._sessions[session_id] = _next_version(session, tx.session_versions[session_id])
        self._settlements.update(tx.settlements)
        self._entries.extend(tx.entries)
        self.commit_count += 1

    # -- non-transactional reads and budget writes --

    async def get_balance(self, principal_id: str) -> Optional[PrincipalBalance]:
        await asyncio.sleep(0)
        return self._balances.get(principal_id)

    async def get_session(self, session_id: str) -> Optional[UsageSession]:
        await asyncio.sleep(0)
        return self._sessions.get(session_id)

    async def list_entries(
        self,
        principal_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> list[LedgerEntry]:
        await asyncio.sleep(0)
        entries = [
            e
            for e in self._entries
            if e.principal_id == principal_id
            and (since is None or e.timestamp >= since)
            and (until is None or e.timestamp <= until)
        ]
        return sorted(entries, key=lambda e: e.timestamp)

    async def get_budget_config(self, principal_id: str) -> Optional[BudgetConfig]:
        await asyncio.sleep(0)
        return self._budget_configs.get(principal_id)

    async def save_budget_config(self, config: BudgetConfig) -> None:
        self._budget_configs[config.principal_id] = config

    async def add_alert(self, alert: BudgetAlert) -> None:
        self._alerts.append(alert)

    async def list_alerts(self, principal_id: str, limit: int = 10) -> list[BudgetAlert]:
        await asyncio.sleep(0)
        alerts = [a for a in self._alerts if a.principal_id == principal_id]
        alerts.sort(key=lambda a: a.timestamp, reverse=True)
        return alerts[:limit]

    # -- test helpers --

    def seed_balance(self, principal_id: str, seconds: int) -> PrincipalBalance:
        """Create or overwrite a committed balance without history."""
        existing = self._balances.get(principal_id)
        balance = PrincipalBalance(
            principal_id=principal_id,
            balance_seconds=seconds,
            last_updated_at=datetime.now(timezone.utc),
            version=existing.version + 1 if existing else 0,
        )
        self._balances[principal_id] = balance
        return balance

    def seed_entry(self, entry: LedgerEntry) -> None:
        """Append a committed history entry directly."""
        self._entries.append(entry)

    def inject_conflicts(self, count: int) -> None:
        """Make the next ``count`` commits fail with TransactionConflictError."""
        self._injected_conflicts = count

    @property
    def entries(self) -> list[LedgerEntry]:
        """All committed history entries in append order."""
        return list(self._entries)

    @property
    def settlements(self) -> dict[str, SettlementRecord]:
        """All committed settlements by event id."""
        return dict(self._settlements)


def _validate_versions(committed: dict, expected_versions: dict[str, int], kind: str) -> None:
    for key, expected in expected_versions.items():
        current = committed.get(key)
        if expected == _MISSING:
            if current is not None:
                raise TransactionConflictError(f"{kind} '{key}' was created concurrently")
        elif current is None or current.version != expected:
            raise TransactionConflictError(f"{kind} '{key}' was modified concurrently")


def _next_version(record, expected: int):
    if expected == _MISSING:
        return record.model_copy(update={"version": 0})
    return record.model_copy(update={"version": expected + 1})
