"""Usage session protocols."""

from typing import Optional, Protocol, runtime_checkable

from tollgate.domains.sessions.types import SessionProgress
from tollgate.schemas.ledger import ServiceType
from tollgate.schemas.session import UsageSession


@runtime_checkable
class SessionTrackerProtocol(Protocol):
    """Manages usage sessions and turns their consumption into ledger debits.

    ``start`` is idempotent per session id. ``increment`` and ``end`` are
    real consumption events and are never deduplicated.
    """

    async def start(
        self,
        principal_id: str,
        service_type: ServiceType,
        session_id: Optional[str] = None,
    ) -> UsageSession:
        """Open an active session without debiting."""
        ...

    async def increment(
        self,
        session_id: str,
        seconds_used: int,
        *,
        principal_id: Optional[str] = None,
    ) -> SessionProgress:
        """Debit consumption against an active session."""
        ...

    async def end(
        self,
        session_id: str,
        final_seconds_used: int,
        *,
        principal_id: Optional[str] = None,
    ) -> SessionProgress:
        """Debit the final consumption and close the session."""
        ...

    async def get(self, session_id: str, *, principal_id: Optional[str] = None) -> UsageSession:
        """Read a session."""
        ...
