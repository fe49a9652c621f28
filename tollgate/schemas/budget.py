"""Budget monitor schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class AlertType(str, Enum):
    """Budget alert severities, from least to most severe."""

    WARNING = "warning"
    LIMIT = "limit"
    EXCEEDED = "exceeded"


class BudgetConfigBase(BaseModel):
    """Spend limit configuration for a principal.

    Spend is measured in debited seconds over a rolling window of
    ``period_days``.
    """

    enabled: bool = Field(True, description="Whether evaluations run for this principal")
    spend_limit_seconds: int = Field(..., gt=0, description="Spend that counts as the limit")
    warning_threshold_percent: int = Field(
        80, ge=1, le=100, description="Percentage of the limit that triggers a warning"
    )
    period_days: int = Field(30, gt=0, description="Default rolling window in days")


class BudgetConfigUpdate(BudgetConfigBase):
    """Request schema for setting a budget configuration."""

    pass


class BudgetConfig(BudgetConfigBase):
    """Stored budget configuration."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    principal_id: str
    updated_at: datetime


class BudgetAlert(BaseModel):
    """An alert produced by a budget evaluation."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID = Field(default_factory=uuid4)
    principal_id: str
    alert_type: AlertType
    current_spend: int = Field(..., ge=0)
    threshold: int = Field(..., ge=0)
    window_days: int = Field(..., gt=0)
    timestamp: datetime


class BudgetEvaluationResponse(BaseModel):
    """Response of an on-demand budget evaluation."""

    alert: Optional[BudgetAlert] = None
    notified: bool = False
