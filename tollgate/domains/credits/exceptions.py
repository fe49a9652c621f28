"""Credit ledger exceptions."""

from typing import Optional

from tollgate.core.exceptions import (
    BadRequestError,
    NotFoundException,
    PaymentRequiredException,
)


class PrincipalNotFoundError(NotFoundException):
    """Raised when a principal has no balance record."""

    def __init__(self, principal_id: str, message: Optional[str] = None) -> None:
        """Initialize with the missing principal id."""
        self.principal_id = principal_id
        super().__init__(message or f"No credit account for principal '{principal_id}'")


class InsufficientCreditsError(PaymentRequiredException):
    """Raised when a positive debit is requested against a zero balance."""

    def __init__(
        self,
        principal_id: str,
        requested_seconds: int,
        available_seconds: int = 0,
        message: Optional[str] = None,
    ) -> None:
        """Initialize with principal, requested and available seconds."""
        if message is None:
            message = (
                f"Insufficient credits: requested {requested_seconds}s, "
                f"{available_seconds}s available"
            )
        self.principal_id = principal_id
        self.requested_seconds = requested_seconds
        self.available_seconds = available_seconds
        super().__init__(message)


class InvalidArgumentError(BadRequestError):
    """Raised for ledger arguments outside their domain (e.g. negative amounts)."""

    def __init__(self, message: str = "Invalid argument") -> None:
        """Initialize with default message."""
        super().__init__(message)

