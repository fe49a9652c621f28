"""Usage service protocols."""

from typing import Protocol, runtime_checkable

from tollgate.schemas.usage import CreditsResponse, TrackUsageRequest, TrackUsageResponse


@runtime_checkable
class UsageServiceProtocol(Protocol):
    """Request-level policy over the session tracker and the credit ledger."""

    async def track_usage(
        self, principal_id: str, request: TrackUsageRequest
    ) -> TrackUsageResponse:
        """Apply one start/increment/end report for a principal."""
        ...

    async def get_credits(self, principal_id: str) -> CreditsResponse:
        """Current balance with an HH:MM:SS breakdown."""
        ...
