"""Credit ledger protocols."""

from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol, TypeVar, runtime_checkable

from tollgate.core.protocols.ledger_store import LedgerTransaction
from tollgate.domains.credits.types import CreditResult, DebitResult
from tollgate.schemas.ledger import LedgerAction, LedgerEntry, PrincipalBalance, ServiceType

T = TypeVar("T")


@runtime_checkable
class CreditLedgerProtocol(Protocol):
    """Owns the balance invariants; the only writer of balances and history.

    Every mutation is a read-modify-write inside one store transaction,
    retried on commit conflicts and surfaced as UnavailableError once the
    retry budget is spent.
    """

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
        """Debit up to ``amount_seconds``, clamping at zero.

        Raises InsufficientCreditsError when the balance is already zero
        and a positive amount is requested, unless ``allow_zero``.
        """
        ...

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
        """Credit ``amount_seconds`` once per ``source_event_id``."""
        ...

    async def peek(self, principal_id: str) -> int:
        """Current balance in seconds."""
        ...

    async def get_balance(self, principal_id: str) -> PrincipalBalance:
        """Current balance record."""
        ...

    async def open_account(
        self, principal_id: str, initial_seconds: Optional[int] = None
    ) -> PrincipalBalance:
        """Create the principal's balance with the initial grant, or return the existing one."""
        ...

    async def history(
        self,
        principal_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> list[LedgerEntry]:
        """History entries of a principal in a time range, oldest first."""
        ...

    async def atomic(
        self, work: Callable[[LedgerTransaction], Awaitable[T]], *, operation: str = "ledger"
    ) -> T:
        """Run ``work`` in a store transaction with conflict retries."""
        ...

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
        """Debit inside a caller-owned transaction (no retry, no event)."""
        ...

    async def publish_debit(
        self,
        result: DebitResult,
        *,
        service_type: Optional[ServiceType] = None,
        session_id: Optional[str] = None,
    ) -> None:
        """Announce a committed debit to metrics and the event bus."""
        ...
