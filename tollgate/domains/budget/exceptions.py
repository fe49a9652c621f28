"""Budget exceptions."""

from tollgate.core.exceptions import NotFoundException


class BudgetConfigNotFoundError(NotFoundException):
    """Raised when a principal has no budget configuration."""

    def __init__(self, principal_id: str) -> None:
        """Initialize with the principal id."""
        self.principal_id = principal_id
        super().__init__(f"No budget configured for principal '{principal_id}'")
