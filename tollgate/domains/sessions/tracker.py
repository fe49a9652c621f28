"""Session tracker: the usage session state machine.

    none --start--> active --increment--> active
                    active --end--> completed
                    active --end--> completed_with_insufficient_credits

The session write and the balance debit of an increment or end are
committed in the same ledger transaction, so a session never records
consumption its balance did not pay for.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from tollgate.core.protocols.ledger_store import LedgerStore, LedgerTransaction
from tollgate.domains.credits.exceptions import InvalidArgumentError, PrincipalNotFoundError
from tollgate.domains.credits.protocols import CreditLedgerProtocol
from tollgate.domains.sessions.exceptions import (
    SessionConflictError,
    SessionNotFoundError,
    SessionStateError,
)
from tollgate.domains.sessions.protocols import SessionTrackerProtocol
from tollgate.domains.sessions.types import SessionProgress, generate_session_id
from tollgate.schemas.ledger import LedgerAction, ServiceType
from tollgate.schemas.session import SessionState, UsageSession

logger = logging.getLogger(__name__)


class SessionTracker(SessionTrackerProtocol):
    """Session state machine over the credit ledger.

    Concurrent active sessions of the same service for one principal are
    allowed; each debits the shared balance independently.
    """

    def __init__(self, ledger: CreditLedgerProtocol, store: LedgerStore) -> None:
        """Initialize with the credit ledger and the store it writes to."""
        self._ledger = ledger
        self._store = store

    async def start(
        self,
        principal_id: str,
        service_type: ServiceType,
        session_id: Optional[str] = None,
    ) -> UsageSession:
        """Open an active session. Does not debit and never fails on a zero balance.

        Starting an id that already exists returns the stored session as is.

        Raises:
            PrincipalNotFoundError: If the principal has no credit account.
            SessionConflictError: If the id belongs to another principal or service.
        """
        session_id = session_id or generate_session_id()

        async def _work(tx: LedgerTransaction) -> tuple[UsageSession, bool]:
            existing = await tx.get_session(session_id)
            if existing is not None:
                if existing.principal_id != principal_id or existing.service_type != service_type:
                    raise SessionConflictError(session_id)
                return existing, False

            if await tx.get_balance(principal_id) is None:
                raise PrincipalNotFoundError(principal_id)

            now = datetime.now(timezone.utc)
            session = UsageSession(
                session_id=session_id,
                principal_id=principal_id,
                service_type=service_type,
                started_at=now,
                last_activity_at=now,
            )
            await tx.add_session(session)
            return session, True

        session, created = await self._ledger.atomic(_work, operation="session_start")
        if created:
            logger.info(f"Started {service_type.value} session {session_id} for {principal_id}")
        else:
            logger.debug(f"Session {session_id} already exists; start is a no-op")
        return session

    async def increment(
        self,
        session_id: str,
        seconds_used: int,
        *,
        principal_id: Optional[str] = None,
    ) -> SessionProgress:
        """Debit ``seconds_used`` against an active session.

        On a zero balance InsufficientCreditsError propagates and the
        session stays active; the caller decides when to end it.
        """
        if seconds_used < 1:
            raise InvalidArgumentError(f"seconds_used must be >= 1, got {seconds_used}")
        return await self._consume(session_id, seconds_used, principal_id, closing=False)

    async def end(
        self,
        session_id: str,
        final_seconds_used: int,
        *,
        principal_id: Optional[str] = None,
    ) -> SessionProgress:
        """Debit the final consumption (clamped to the balance) and close the session."""
        if final_seconds_used < 0:
            raise InvalidArgumentError(
                f"final_seconds_used must be >= 0, got {final_seconds_used}"
            )
        progress = await self._consume(session_id, final_seconds_used, principal_id, closing=True)
        logger.info(
            f"Ended session {session_id} as {progress.status.value} "
            f"({progress.session.seconds_consumed}s consumed, {progress.remaining}s left)"
        )
        return progress

    async def get(self, session_id: str, *, principal_id: Optional[str] = None) -> UsageSession:
        """Read a committed session, hiding sessions of other principals."""
        session = await self._store.get_session(session_id)
        if session is None or (principal_id is not None and session.principal_id != principal_id):
            raise SessionNotFoundError(session_id)
        return session

    async def _consume(
        self,
        session_id: str,
        seconds: int,
        principal_id: Optional[str],
        *,
        closing: bool,
    ) -> SessionProgress:
        async def _work(tx: LedgerTransaction) -> SessionProgress:
            session = await tx.get_session(session_id)
            if session is None or (
                principal_id is not None and session.principal_id != principal_id
            ):
                raise SessionNotFoundError(session_id)
            if session.state.is_terminal:
                raise SessionStateError(session_id, session.state)

            debit = await self._ledger.apply_debit(
                tx,
                session.principal_id,
                seconds,
                allow_zero=closing,
                action=LedgerAction.END if closing else LedgerAction.INCREMENT,
                service_type=session.service_type,
                session_id=session_id,
            )

            now = datetime.now(timezone.utc)
            changes = {
                "seconds_consumed": session.seconds_consumed + debit.granted,
                "last_activity_at": now,
            }
            if closing:
                changes["state"] = (
                    SessionState.COMPLETED
                    if debit.fully_granted
                    else SessionState.COMPLETED_WITH_INSUFFICIENT_CREDITS
                )
                changes["ended_at"] = now
            updated = session.model_copy(update=changes)
            await tx.save_session(updated)
            return SessionProgress(session=updated, debit=debit)

        operation = "session_end" if closing else "session_increment"
        progress = await self._ledger.atomic(_work, operation=operation)
        await self._ledger.publish_debit(
            progress.debit,
            service_type=progress.session.service_type,
            session_id=session_id,
        )
        return progress
