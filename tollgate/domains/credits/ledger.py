"""Credit ledger: atomic debit, credit and peek over the ledger store.

Every mutation re-reads the balance inside a store transaction, checks the
invariant against what it read, and writes the new balance together with
its history entry. If another request commits first, the store rejects the
unit at commit time and the whole read-modify-write is replayed from a
fresh read.
"""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from tollgate.core.events.credits import CreditsDebitedEvent, CreditsSettledEvent
from tollgate.core.exceptions import TransactionConflictError, UnavailableError
from tollgate.core.protocols.event_bus import EventBus
from tollgate.core.protocols.ledger_store import LedgerStore, LedgerTransaction
from tollgate.core.protocols.metrics import LedgerMetrics
from tollgate.domains.credits.exceptions import (
    InsufficientCreditsError,
    InvalidArgumentError,
    PrincipalNotFoundError,
)
from tollgate.domains.credits.protocols import CreditLedgerProtocol
from tollgate.domains.credits.types import CreditResult, DebitResult, clamp_debit
from tollgate.schemas.ledger import (
    LedgerAction,
    LedgerEntry,
    PrincipalBalance,
    ServiceType,
    SettlementRecord,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CreditLedger(CreditLedgerProtocol):
    """Credit ledger over an injected LedgerStore.

    Stateless between calls: all coordination between concurrent requests
    (and processes) goes through the store's transaction primitive.
    """

    def __init__(
        self,
        store: LedgerStore,
        event_bus: EventBus,
        metrics: LedgerMetrics,
        *,
        max_attempts: int = 3,
        backoff_base_seconds: float = 0.05,
        backoff_max_seconds: float = 0.5,
        initial_credit_seconds: int = 2700,
    ) -> None:
        """Initialize with store, event bus, metrics and retry policy."""
        self._store = store
        self._event_bus = event_bus
        self._metrics = metrics
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base_seconds
        self._backoff_max = backoff_max_seconds
        self._initial_credit_seconds = initial_credit_seconds

    # ------------------------------------------------------------------
    # Transaction runner
    # ------------------------------------------------------------------

    async def atomic(
        self, work: Callable[[LedgerTransaction], Awaitable[T]], *, operation: str = "ledger"
    ) -> T:
        """Run ``work`` in a store transaction, replaying it on commit conflicts.

        ``work`` must be safe to re-run from scratch: it is handed a fresh
        transaction on every attempt and must not keep state across them.

        Raises:
            UnavailableError: If every attempt lost to a concurrent write.
        """

        def _on_conflict(retry_state: RetryCallState) -> None:
            self._metrics.inc_conflict(operation)
            logger.debug(
                f"Ledger {operation}: commit conflict on attempt "
                f"{retry_state.attempt_number}/{self._max_attempts}, retrying"
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_random_exponential(multiplier=self._backoff_base, max=self._backoff_max),
            retry=retry_if_exception_type(TransactionConflictError),
            before_sleep=_on_conflict,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    async with self._store.transaction() as tx:
                        result = await work(tx)
        except TransactionConflictError as e:
            self._metrics.inc_conflict(operation)
            self._metrics.observe_operation(operation, "unavailable")
            logger.warning(
                f"Ledger {operation}: giving up after {self._max_attempts} conflicting attempts"
            )
            raise UnavailableError(
                f"Ledger is busy, {operation} could not be committed; retry later"
            ) from e
        return result

    # ------------------------------------------------------------------
    # Debit
    # ------------------------------------------------------------------

    async def apply_debit(
        self,
        tx: LedgerTransaction,
        principal_id: str,
        amount_seconds: int,
        *,
        allow_zero: bool = False,
        action: LedgerAction = LedgerAction.INCREMENT,
        service_type: Optional[ServiceType] = None,
        session_id: Optional[str] = None,
    ) -> DebitResult:
        """Debit within ``tx``. Writes the balance and exactly one history entry."""
        if amount_seconds < 0:
            raise InvalidArgumentError(f"Debit amount must be >= 0, got {amount_seconds}")

        balance = await self._require_balance(tx, principal_id)
        before = balance.balance_seconds
        if before == 0 and amount_seconds > 0 and not allow_zero:
            raise InsufficientCreditsError(
                principal_id, requested_seconds=amount_seconds, available_seconds=0
            )

        granted = clamp_debit(before, amount_seconds)
        after = before - granted
        now = _utcnow()

        await tx.save_balance(
            balance.model_copy(
                update={
                    "balance_seconds": after,
                    "last_activity_at": now,
                    "last_updated_at": now,
                }
            )
        )
        entry = LedgerEntry(
            principal_id=principal_id,
            action=action,
            seconds_delta=-granted,
            requested_seconds=amount_seconds,
            balance_before=before,
            balance_after=after,
            timestamp=now,
            service_type=service_type,
            session_id=session_id,
        )
        await tx.append_entry(entry)

        return DebitResult(
            principal_id=principal_id,
            requested=amount_seconds,
            granted=granted,
            balance_before=before,
            new_balance=after,
            entry_id=entry.id,
        )

    async def debit(
        self,
        principal_id: str,
        amount_seconds: int,
        *,
        allow_zero: bool = False,
        action: LedgerAction = LedgerAction.INCREMENT,
        service_type: Optional[ServiceType] = None,
        session_id: Optional[str] = None,
    ) -> DebitResult:
        """Atomically debit up to ``amount_seconds`` from a principal."""

        async def _work(tx: LedgerTransaction) -> DebitResult:
            return await self.apply_debit(
                tx,
                principal_id,
                amount_seconds,
                allow_zero=allow_zero,
                action=action,
                service_type=service_type,
                session_id=session_id,
            )

        try:
            result = await self.atomic(_work, operation="debit")
        except InsufficientCreditsError:
            self._metrics.observe_operation("debit", "insufficient")
            raise

        await self.publish_debit(result, service_type=service_type, session_id=session_id)
        return result

    async def publish_debit(
        self,
        result: DebitResult,
        *,
        service_type: Optional[ServiceType] = None,
        session_id: Optional[str] = None,
    ) -> None:
        """Record metrics for a committed debit and publish CreditsDebitedEvent."""
        self._metrics.observe_operation("debit", "ok")
        self._metrics.observe_granted(
            service_type.value if service_type else "unspecified", result.granted
        )
        await self._event_bus.publish(
            CreditsDebitedEvent(
                principal_id=result.principal_id,
                requested_seconds=result.requested,
                granted_seconds=result.granted,
                balance_after=result.new_balance,
                service_type=service_type.value if service_type else None,
                session_id=session_id,
            )
        )

    # ------------------------------------------------------------------
    # Credit
    # ------------------------------------------------------------------

    async def credit(
        self,
        principal_id: str,
        amount_seconds: int,
        source_event_id: str,
        *,
        amount_paid: int = 0,
        currency: Optional[str] = None,
        hours_purchased: Optional[int] = None,
        reference: Optional[str] = None,
        customer_reference: Optional[str] = None,
    ) -> CreditResult:
        """Credit a principal once per ``source_event_id``.

        A repeated ``source_event_id`` returns ``applied=False`` and the
        current balance of the principal the event was applied to.
        """
        if amount_seconds <= 0:
            raise InvalidArgumentError(f"Credit amount must be > 0, got {amount_seconds}")
        if not source_event_id:
            raise InvalidArgumentError("Credit requires a source event id")

        async def _work(tx: LedgerTransaction) -> CreditResult:
            existing = await tx.get_settlement(source_event_id)
            if existing is not None:
                current = await self._require_balance(tx, existing.principal_id)
                return CreditResult(
                    principal_id=existing.principal_id,
                    applied=False,
                    new_balance=current.balance_seconds,
                    balance_before=current.balance_seconds,
                )

            balance = await self._require_balance(tx, principal_id)
            before = balance.balance_seconds
            after = before + amount_seconds
            now = _utcnow()

            await tx.save_balance(
                balance.model_copy(update={"balance_seconds": after, "last_updated_at": now})
            )
            await tx.add_settlement(
                SettlementRecord(
                    event_id=source_event_id,
                    principal_id=principal_id,
                    seconds_credited=amount_seconds,
                    amount_paid=amount_paid,
                    currency=currency,
                    hours_purchased=hours_purchased,
                    reference=reference,
                    customer_reference=customer_reference,
                    processed_at=now,
                )
            )
            await tx.append_entry(
                LedgerEntry(
                    principal_id=principal_id,
                    action=LedgerAction.SETTLEMENT,
                    seconds_delta=amount_seconds,
                    requested_seconds=amount_seconds,
                    balance_before=before,
                    balance_after=after,
                    timestamp=now,
                    source_event_id=source_event_id,
                )
            )
            return CreditResult(
                principal_id=principal_id,
                applied=True,
                new_balance=after,
                balance_before=before,
            )

        result = await self.atomic(_work, operation="credit")

        if not result.applied:
            self._metrics.observe_operation("credit", "duplicate")
            logger.info(f"Settlement {source_event_id} already applied; credit is a no-op")
            return result

        self._metrics.observe_operation("credit", "ok")
        logger.info(
            f"Credited {amount_seconds}s to {principal_id} from {source_event_id} "
            f"({result.balance_before}s -> {result.new_balance}s)"
        )
        await self._event_bus.publish(
            CreditsSettledEvent(
                principal_id=principal_id,
                source_event_id=source_event_id,
                credited_seconds=amount_seconds,
                balance_after=result.new_balance,
            )
        )
        return result

    # ------------------------------------------------------------------
    # Accounts and reads
    # ------------------------------------------------------------------

    async def open_account(
        self, principal_id: str, initial_seconds: Optional[int] = None
    ) -> PrincipalBalance:
        """Create a balance with the initial grant; return the existing one if present."""
        grant = self._initial_credit_seconds if initial_seconds is None else initial_seconds
        if grant < 0:
            raise InvalidArgumentError(f"Initial grant must be >= 0, got {grant}")

        async def _work(tx: LedgerTransaction) -> tuple[PrincipalBalance, bool]:
            existing = await tx.get_balance(principal_id)
            if existing is not None:
                return existing, False

            now = _utcnow()
            balance = PrincipalBalance(
                principal_id=principal_id, balance_seconds=grant, last_updated_at=now
            )
            await tx.add_balance(balance)
            await tx.append_entry(
                LedgerEntry(
                    principal_id=principal_id,
                    action=LedgerAction.GRANT,
                    seconds_delta=grant,
                    requested_seconds=grant,
                    balance_before=0,
                    balance_after=grant,
                    timestamp=now,
                )
            )
            return balance, True

        balance, created = await self.atomic(_work, operation="open_account")
        if created:
            self._metrics.observe_operation("open_account", "ok")
            logger.info(f"Opened credit account for {principal_id} with {grant}s")
        return balance

    async def peek(self, principal_id: str) -> int:
        """Current balance in seconds, without mutating anything."""
        return (await self.get_balance(principal_id)).balance_seconds

    async def get_balance(self, principal_id: str) -> PrincipalBalance:
        """Last committed balance record."""
        balance = await self._store.get_balance(principal_id)
        if balance is None:
            raise PrincipalNotFoundError(principal_id)
        return balance

    async def history(
        self,
        principal_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> list[LedgerEntry]:
        """History entries of a principal within ``[since, until]``.

        Bounds without a UTC offset are taken as UTC.
        """
        since = _as_utc(since)
        until = _as_utc(until)
        if since is not None and until is not None and since > until:
            raise InvalidArgumentError("'since' must not be after 'until'")
        return await self._store.list_entries(principal_id, since=since, until=until)

    @staticmethod
    async def _require_balance(tx: LedgerTransaction, principal_id: str) -> PrincipalBalance:
        balance = await tx.get_balance(principal_id)
        if balance is None:
            raise PrincipalNotFoundError(principal_id)
        return balance
