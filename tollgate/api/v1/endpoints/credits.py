"""API endpoints for credit balances and history."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tollgate import schemas
from tollgate.api import deps
from tollgate.api.context import ApiContext
from tollgate.api.deps import Inject
from tollgate.domains.credits.protocols import CreditLedgerProtocol
from tollgate.domains.usage.protocols import UsageServiceProtocol

router = APIRouter()


@router.get("", response_model=schemas.CreditsResponse)
async def get_credits(
    ctx: ApiContext = Depends(deps.get_context),
    usage: UsageServiceProtocol = Inject(UsageServiceProtocol),
) -> schemas.CreditsResponse:
    """Get the remaining balance, in seconds and as HH:MM:SS."""
    return await usage.get_credits(ctx.principal_id)


@router.post("/account", response_model=schemas.CreditsResponse)
async def open_account(
    ctx: ApiContext = Depends(deps.get_context),
    ledger: CreditLedgerProtocol = Inject(CreditLedgerProtocol),
    usage: UsageServiceProtocol = Inject(UsageServiceProtocol),
) -> schemas.CreditsResponse:
    """Open the caller's credit account with the initial grant.

    Safe to call repeatedly: an existing account is returned unchanged.
    """
    await ledger.open_account(ctx.principal_id)
    return await usage.get_credits(ctx.principal_id)


@router.get("/history", response_model=List[schemas.LedgerEntry])
async def get_history(
    since: Optional[datetime] = Query(None, description="Inclusive lower bound"),
    until: Optional[datetime] = Query(None, description="Inclusive upper bound"),
    ctx: ApiContext = Depends(deps.get_context),
    ledger: CreditLedgerProtocol = Inject(CreditLedgerProtocol),
) -> List[schemas.LedgerEntry]:
    """List the caller's balance mutations, oldest first."""
    return await ledger.history(ctx.principal_id, since=since, until=until)
