"""Usage session types."""

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from tollgate.domains.credits.types import DebitResult
from tollgate.schemas.session import SessionState, UsageSession


@dataclass(frozen=True)
class SessionProgress:
    """A session after an operation, with the debit it committed (if any)."""

    session: UsageSession
    debit: Optional[DebitResult] = None

    @property
    def remaining(self) -> int:
        """Balance after the debit."""
        return self.debit.new_balance if self.debit else 0

    @property
    def granted(self) -> int:
        """Seconds actually debited."""
        return self.debit.granted if self.debit else 0

    @property
    def status(self) -> SessionState:
        """Session state after the operation."""
        return self.session.state


def generate_session_id() -> str:
    """New opaque session id."""
    return f"session_{uuid4().hex}"
