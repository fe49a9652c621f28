"""API endpoint for payment provider webhooks."""

import math
from typing import Optional

from fastapi import APIRouter, Header, Request, Response
from fastapi.responses import JSONResponse

from tollgate import schemas
from tollgate.api.deps import Inject
from tollgate.core.exceptions import UnavailableError
from tollgate.core.logging import logger
from tollgate.domains.credits.exceptions import PrincipalNotFoundError
from tollgate.domains.settlement.protocols import SettlementWebhookProtocol

router = APIRouter()


@router.post("/webhook", include_in_schema=False)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    webhook: SettlementWebhookProtocol = Inject(SettlementWebhookProtocol),
) -> Response:
    """Handle Stripe webhook events.

    Security:
    - Verifies the webhook signature (inside the processor)
    - Idempotent on the event id

    Returns:
        200 when processed, deduplicated, skipped or ignored; 400 on a bad
        signature or malformed event; 422 for a principal with no account;
        503 when the ledger is contended, so Stripe retries; 500 otherwise.
    """
    payload = await request.body()
    if not stripe_signature:
        return JSONResponse(status_code=400, content={"detail": "Missing Stripe-Signature"})

    try:
        result = await webhook.process(payload, stripe_signature)
    except PrincipalNotFoundError as e:
        return JSONResponse(status_code=422, content={"detail": str(e)})
    except UnavailableError as e:
        return JSONResponse(
            status_code=503,
            content={"detail": str(e)},
            headers={"Retry-After": str(max(1, math.ceil(e.retry_after)))},
        )
    except ValueError as e:
        logger.warning(f"Rejected payment webhook: {e}")
        return JSONResponse(status_code=400, content={"detail": str(e)})
    except Exception as e:
        logger.error(f"Payment webhook processing failed: {e}", exc_info=True)
        return Response(status_code=500)

    body = schemas.WebhookResponse(
        event_id=result.event_id,
        event_type=result.event_type,
        outcome=result.outcome.value,
        new_balance=result.settlement.new_balance if result.settlement else None,
    )
    return JSONResponse(status_code=200, content=body.model_dump())
