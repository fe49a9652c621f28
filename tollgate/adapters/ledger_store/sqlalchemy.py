"""PostgreSQL ledger store on SQLAlchemy 2.0 async.

Balance and session writes are ``UPDATE ... WHERE version = :read_version``
statements; a zero rowcount means another transaction committed first and
the unit fails with TransactionConflictError. Inserts that hit a primary
key (a settlement event id seen concurrently, a session id started twice)
surface the same way, as do serialization failures and deadlocks.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Callable, Optional, Type

from pydantic import BaseModel
from sqlalchemy import insert, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from tollgate import models, schemas
from tollgate.core.exceptions import TransactionConflictError
from tollgate.core.protocols.ledger_store import LedgerStore, LedgerTransaction

_RETRYABLE_SQLSTATES = {
    "23505",  # unique_violation
    "40001",  # serialization_failure
    "40P01",  # deadlock_detected
}

# sqlite3 reports extended result names instead of SQLSTATE codes.
_RETRYABLE_SQLITE_ERRORS = {
    "SQLITE_CONSTRAINT_PRIMARYKEY",
    "SQLITE_CONSTRAINT_UNIQUE",
    "SQLITE_BUSY",
}


def _is_retryable(exc: DBAPIError) -> bool:
    # Async adapters may wrap the driver error; the original is its __cause__.
    for orig in (exc.orig, getattr(exc.orig, "__cause__", None)):
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if sqlstate is not None:
            return sqlstate in _RETRYABLE_SQLSTATES
        if getattr(orig, "sqlite_errorname", None) in _RETRYABLE_SQLITE_ERRORS:
            return True
    return False


def _row_values(record: BaseModel, *, exclude: Optional[set[str]] = None) -> dict[str, Any]:
    values = record.model_dump(exclude=exclude)
    return {k: v.value if isinstance(v, Enum) else v for k, v in values.items()}


class _SqlAlchemyTransaction(LedgerTransaction):
    """Unit of work bound to one AsyncSession transaction."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _get(self, model: Type[models.Base], schema: Type[BaseModel], **key: Any):
        stmt = select(model).filter_by(**key).execution_options(populate_existing=True)
        row = (await self._db.execute(stmt)).scalar_one_or_none()
        return schema.model_validate(row) if row is not None else None

    async def _update_versioned(self, model: Type[models.Base], key: str, record: BaseModel):
        key_column = getattr(model, key)
        stmt = (
            update(model)
            .where(key_column == getattr(record, key), model.version == record.version)
            .values(**_row_values(record, exclude={key, "version"}), version=record.version + 1)
        )
        result = await self._db.execute(stmt)
        if result.rowcount != 1:
            raise TransactionConflictError(
                f"{model.__tablename__} '{getattr(record, key)}' was modified concurrently"
            )

    # -- balances --

    async def get_balance(self, principal_id: str) -> Optional[schemas.PrincipalBalance]:
        return await self._get(
            models.PrincipalBalance, schemas.PrincipalBalance, principal_id=principal_id
        )

    async def add_balance(self, balance: schemas.PrincipalBalance) -> None:
        await self._db.execute(insert(models.PrincipalBalance).values(**_row_values(balance)))

    async def save_balance(self, balance: schemas.PrincipalBalance) -> None:
        await self._update_versioned(models.PrincipalBalance, "principal_id", balance)

    # -- sessions --

    async def get_session(self, session_id: str) -> Optional[schemas.UsageSession]:
        return await self._get(models.UsageSession, schemas.UsageSession, session_id=session_id)

    async def add_session(self, session: schemas.UsageSession) -> None:
        await self._db.execute(insert(models.UsageSession).values(**_row_values(session)))

    async def save_session(self, session: schemas.UsageSession) -> None:
        await self._update_versioned(models.UsageSession, "session_id", session)

    # -- settlements and history --

    async def get_settlement(self, event_id: str) -> Optional[schemas.SettlementRecord]:
        return await self._get(models.SettlementEvent, schemas.SettlementRecord, event_id=event_id)

    async def add_settlement(self, record: schemas.SettlementRecord) -> None:
        await self._db.execute(insert(models.SettlementEvent).values(**_row_values(record)))

    async def append_entry(self, entry: schemas.LedgerEntry) -> None:
        await self._db.execute(insert(models.LedgerEntry).values(**_row_values(entry)))


class SqlAlchemyLedgerStore(LedgerStore):
    """LedgerStore backed by PostgreSQL.

    Args:
        session_factory: Callable returning a new AsyncSession, typically
            ``tollgate.db.session.AsyncSessionLocal``.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        """Initialize with a session factory."""
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[LedgerTransaction]:
        """Yield a unit of work inside one database transaction."""
        async with self._session_factory() as db:
            try:
                async with db.begin():
                    yield _SqlAlchemyTransaction(db)
            except DBAPIError as e:
                if _is_retryable(e):
                    raise TransactionConflictError(str(e.orig)) from e
                raise

    # -- non-transactional reads --

    async def get_balance(self, principal_id: str) -> Optional[schemas.PrincipalBalance]:
        async with self._session_factory() as db:
            row = await db.get(models.PrincipalBalance, principal_id)
            return schemas.PrincipalBalance.model_validate(row) if row else None

    async def get_session(self, session_id: str) -> Optional[schemas.UsageSession]:
        async with self._session_factory() as db:
            row = await db.get(models.UsageSession, session_id)
            return schemas.UsageSession.model_validate(row) if row else None

    async def list_entries(
        self,
        principal_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> list[schemas.LedgerEntry]:
        stmt = select(models.LedgerEntry).where(models.LedgerEntry.principal_id == principal_id)
        if since is not None:
            stmt = stmt.where(models.LedgerEntry.timestamp >= since)
        if until is not None:
            stmt = stmt.where(models.LedgerEntry.timestamp <= until)
        stmt = stmt.order_by(models.LedgerEntry.timestamp)

        async with self._session_factory() as db:
            rows = (await db.execute(stmt)).scalars().all()
            return [schemas.LedgerEntry.model_validate(row) for row in rows]

    # -- budget --

    async def get_budget_config(self, principal_id: str) -> Optional[schemas.BudgetConfig]:
        async with self._session_factory() as db:
            row = await db.get(models.BudgetConfig, principal_id)
            return schemas.BudgetConfig.model_validate(row) if row else None

    async def save_budget_config(self, config: schemas.BudgetConfig) -> None:
        async with self._session_factory() as db:
            async with db.begin():
                await db.merge(models.BudgetConfig(**_row_values(config)))

    async def add_alert(self, alert: schemas.BudgetAlert) -> None:
        async with self._session_factory() as db:
            async with db.begin():
                await db.execute(insert(models.BudgetAlert).values(**_row_values(alert)))

    async def list_alerts(self, principal_id: str, limit: int = 10) -> list[schemas.BudgetAlert]:
        stmt = (
            select(models.BudgetAlert)
            .where(models.BudgetAlert.principal_id == principal_id)
            .order_by(models.BudgetAlert.timestamp.desc())
            .limit(limit)
        )
        async with self._session_factory() as db:
            rows = (await db.execute(stmt)).scalars().all()
            return [schemas.BudgetAlert.model_validate(row) for row in rows]
