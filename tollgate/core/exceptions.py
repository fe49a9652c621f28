"""Shared exceptions module."""

from typing import Optional

from pydantic import ValidationError


class TollgateException(Exception):
    """Base exception for Tollgate services."""

    pass


class NotFoundException(TollgateException):
    """Exception raised when an object is not found."""

    def __init__(self, message: Optional[str] = "Object not found"):
        """Create a new NotFoundException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class BadRequestError(TollgateException):
    """Exception raised when a request is well-formed JSON but semantically invalid."""

    def __init__(self, message: Optional[str] = "Invalid request"):
        """Create a new BadRequestError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class ConflictError(TollgateException):
    """Exception raised when a write collides with an existing resource."""

    def __init__(self, message: Optional[str] = "Resource conflict"):
        """Create a new ConflictError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class InvalidStateError(TollgateException):
    """Exception raised when an object is in an invalid state.

    Used when the requested operation is not allowed given the current
    state of the resource it targets.
    """

    def __init__(self, message: Optional[str] = "Object is in an invalid state"):
        """Create a new InvalidStateError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class PaymentRequiredException(InvalidStateError):
    """Exception raised when an action requires purchasing more credits."""

    def __init__(self, message: Optional[str] = "Payment required"):
        """Create a new PaymentRequiredException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class UnavailableError(TollgateException):
    """Exception raised when a transient failure persists past the retry budget.

    Callers may retry the whole operation later.
    """

    def __init__(
        self,
        message: Optional[str] = "Service temporarily unavailable",
        retry_after: float = 1.0,
    ):
        """Create a new UnavailableError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.
            retry_after (float): Suggested delay in seconds before retrying.

        """
        self.message = message
        self.retry_after = retry_after
        super().__init__(self.message)


class TransactionConflictError(TollgateException):
    """Exception raised by a ledger store when a commit loses to a concurrent write.

    Retryable: the credit ledger retries it internally and surfaces
    UnavailableError once its attempts are exhausted.
    """

    def __init__(self, message: Optional[str] = "Concurrent modification detected"):
        """Create a new TransactionConflictError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


def unpack_validation_error(exc: ValidationError) -> dict:
    """Unpack a Pydantic validation error into a dictionary.

    Args:
    ----
        exc (ValidationError): The Pydantic validation error.

    Returns:
    -------
        dict: The dictionary representation of the validation error.

    """
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        error_messages.append({field: error["msg"]})

    return {"errors": error_messages}
