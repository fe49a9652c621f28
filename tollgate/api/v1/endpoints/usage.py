"""API endpoints for usage tracking."""

from fastapi import APIRouter, Depends

from tollgate import schemas
from tollgate.api import deps
from tollgate.api.context import ApiContext
from tollgate.api.deps import Inject
from tollgate.domains.usage.protocols import UsageServiceProtocol

router = APIRouter()


@router.post("/track", response_model=schemas.TrackUsageResponse)
async def track_usage(
    request: schemas.TrackUsageRequest,
    ctx: ApiContext = Depends(deps.get_context),
    usage: UsageServiceProtocol = Inject(UsageServiceProtocol),
) -> schemas.TrackUsageResponse:
    """Report usage of a metered service.

    ``start`` opens a session without debiting. ``increment`` debits
    ``seconds_used`` against an active session, and ``end`` debits the
    final consumption and closes it. When the balance is exhausted
    ``increment`` and ``end`` fail with 402.

    Args:
        request: Service, action, seconds used and session id
        ctx: API context
        usage: Usage service

    Returns:
        Balance before and after, the seconds actually debited, and the
        session state
    """
    response = await usage.track_usage(ctx.principal_id, request)
    ctx.logger.debug(
        f"{request.action_type.value} {request.service_type.value} session "
        f"{response.session_id}: used {response.credits_used}s, "
        f"{response.remaining_credits}s left"
    )
    return response
