"""Usage service: TrackUsage and GetCredits."""

from tollgate.domains.credits.exceptions import InsufficientCreditsError, InvalidArgumentError
from tollgate.domains.credits.protocols import CreditLedgerProtocol
from tollgate.domains.credits.types import split_seconds
from tollgate.domains.sessions.protocols import SessionTrackerProtocol
from tollgate.domains.sessions.types import SessionProgress
from tollgate.domains.usage.protocols import UsageServiceProtocol
from tollgate.schemas.session import SessionState
from tollgate.schemas.usage import (
    CreditsResponse,
    TrackUsageRequest,
    TrackUsageResponse,
    UsageAction,
)

_END_MESSAGES = {
    SessionState.COMPLETED: "Session completed",
    SessionState.COMPLETED_WITH_INSUFFICIENT_CREDITS: (
        "Session closed; remaining credits did not cover the final usage"
    ),
}


class UsageService(UsageServiceProtocol):
    """Validates a usage report against the balance, then drives the tracker.

    Only ``start`` is accepted on an empty balance, so a client can always
    open a session (and show the purchase prompt) but never consume.
    """

    def __init__(self, ledger: CreditLedgerProtocol, tracker: SessionTrackerProtocol) -> None:
        """Initialize with the credit ledger and the session tracker."""
        self._ledger = ledger
        self._tracker = tracker

    async def track_usage(
        self, principal_id: str, request: TrackUsageRequest
    ) -> TrackUsageResponse:
        balance = await self._ledger.peek(principal_id)

        if request.action_type == UsageAction.START:
            session = await self._tracker.start(
                principal_id, request.service_type, request.session_id
            )
            return TrackUsageResponse(
                remaining_credits=balance,
                total_credits_before=balance,
                credits_used=0,
                status=session.state,
                session_id=session.session_id,
                message="Session started",
            )

        if balance == 0:
            raise InsufficientCreditsError(
                principal_id,
                requested_seconds=request.seconds_used,
                available_seconds=0,
                message="No credits remaining; purchase more time to continue",
            )
        if not request.session_id:
            raise InvalidArgumentError(f"session_id is required for {request.action_type.value}")

        if request.action_type == UsageAction.INCREMENT:
            progress = await self._tracker.increment(
                request.session_id, request.seconds_used, principal_id=principal_id
            )
            message = f"Used {progress.granted}s of {progress.session.service_type.value}"
        else:
            progress = await self._tracker.end(
                request.session_id, request.seconds_used, principal_id=principal_id
            )
            message = _END_MESSAGES[progress.status]

        return _progress_response(progress, message)

    async def get_credits(self, principal_id: str) -> CreditsResponse:
        balance = await self._ledger.get_balance(principal_id)
        breakdown = split_seconds(balance.balance_seconds)
        return CreditsResponse(
            balance_seconds=balance.balance_seconds,
            formatted_hms=breakdown.formatted,
            hours=breakdown.hours,
            minutes=breakdown.minutes,
            seconds=breakdown.seconds,
            last_activity_at=balance.last_activity_at,
        )


def _progress_response(progress: SessionProgress, message: str) -> TrackUsageResponse:
    return TrackUsageResponse(
        remaining_credits=progress.remaining,
        total_credits_before=progress.debit.balance_before,
        credits_used=progress.granted,
        status=progress.status,
        session_id=progress.session.session_id,
        message=message,
    )
