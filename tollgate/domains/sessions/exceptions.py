"""Usage session exceptions."""

from typing import Optional

from tollgate.core.exceptions import ConflictError, InvalidStateError, NotFoundException
from tollgate.schemas.session import SessionState


class SessionNotFoundError(NotFoundException):
    """Raised when a session does not exist or belongs to another principal."""

    def __init__(self, session_id: str, message: Optional[str] = None) -> None:
        """Initialize with the session id."""
        self.session_id = session_id
        super().__init__(message or f"Usage session '{session_id}' not found")


class SessionStateError(InvalidStateError):
    """Raised when consumption is reported against a terminal session."""

    def __init__(self, session_id: str, state: SessionState) -> None:
        """Initialize with the session id and its current state."""
        self.session_id = session_id
        self.state = state
        super().__init__(f"Usage session '{session_id}' is {state.value}; it accepts no more usage")


class SessionConflictError(ConflictError):
    """Raised when a session id is reused for another principal or service."""

    def __init__(self, session_id: str) -> None:
        """Initialize with the session id."""
        self.session_id = session_id
        super().__init__(
            f"Session id '{session_id}' is already in use by a different principal or service"
        )
