"""Ledger store adapters.

The SQLAlchemy store is imported from its own module. The in-memory store
needs no database driver.
"""

from tollgate.adapters.ledger_store.in_memory import InMemoryLedgerStore

__all__ = ["InMemoryLedgerStore"]
