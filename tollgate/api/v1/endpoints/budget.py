"""API endpoints for budget configuration and alerts."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tollgate import schemas
from tollgate.api import deps
from tollgate.api.context import ApiContext
from tollgate.api.deps import Inject
from tollgate.core.config import settings
from tollgate.domains.budget.protocols import (
    BudgetAlertDispatcherProtocol,
    BudgetMonitorProtocol,
)

router = APIRouter()


@router.post("/evaluate", response_model=schemas.BudgetEvaluationResponse)
async def evaluate_budget(
    window_days: Optional[int] = Query(None, gt=0, description="Defaults to the config period"),
    ctx: ApiContext = Depends(deps.get_context),
    dispatcher: BudgetAlertDispatcherProtocol = Inject(BudgetAlertDispatcherProtocol),
) -> schemas.BudgetEvaluationResponse:
    """Evaluate spend against the caller's budget.

    A new alert is handed to the notifier unless the same alert type was
    already raised inside the window.
    """
    alert, notified = await dispatcher.dispatch(ctx.principal_id, window_days)
    return schemas.BudgetEvaluationResponse(alert=alert, notified=notified)


@router.put("/config", response_model=schemas.BudgetConfig)
async def set_budget_config(
    update: schemas.BudgetConfigUpdate,
    ctx: ApiContext = Depends(deps.get_context),
    monitor: BudgetMonitorProtocol = Inject(BudgetMonitorProtocol),
) -> schemas.BudgetConfig:
    """Create or replace the caller's budget configuration."""
    config = await monitor.set_config(ctx.principal_id, update)
    ctx.logger.info(
        f"Budget set: limit {config.spend_limit_seconds}s, warning at "
        f"{config.warning_threshold_percent}%, {config.period_days}d window"
    )
    return config


@router.get("/config", response_model=schemas.BudgetConfig)
async def get_budget_config(
    ctx: ApiContext = Depends(deps.get_context),
    monitor: BudgetMonitorProtocol = Inject(BudgetMonitorProtocol),
) -> schemas.BudgetConfig:
    """Get the caller's budget configuration."""
    return await monitor.get_config(ctx.principal_id)


@router.get("/alerts", response_model=List[schemas.BudgetAlert])
async def list_budget_alerts(
    limit: Optional[int] = Query(None, gt=0, le=100),
    ctx: ApiContext = Depends(deps.get_context),
    monitor: BudgetMonitorProtocol = Inject(BudgetMonitorProtocol),
) -> List[schemas.BudgetAlert]:
    """List the caller's most recent budget alerts, newest first."""
    return await monitor.list_alerts(
        ctx.principal_id, limit=limit or settings.BUDGET_ALERT_HISTORY_LIMIT
    )
