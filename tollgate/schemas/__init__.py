"""Pydantic schemas shared by the domains, the stores, and the API."""

from tollgate.schemas.billing import WebhookResponse
from tollgate.schemas.budget import (
    AlertType,
    BudgetAlert,
    BudgetConfig,
    BudgetConfigUpdate,
    BudgetEvaluationResponse,
)
from tollgate.schemas.ledger import (
    LedgerAction,
    LedgerEntry,
    PrincipalBalance,
    ServiceType,
    SettlementRecord,
)
from tollgate.schemas.session import SessionState, UsageSession
from tollgate.schemas.usage import (
    CreditsResponse,
    TrackUsageRequest,
    TrackUsageResponse,
    UsageAction,
)

__all__ = [
    "AlertType",
    "BudgetAlert",
    "BudgetConfig",
    "BudgetConfigUpdate",
    "BudgetEvaluationResponse",
    "CreditsResponse",
    "LedgerAction",
    "LedgerEntry",
    "PrincipalBalance",
    "ServiceType",
    "SessionState",
    "SettlementRecord",
    "TrackUsageRequest",
    "TrackUsageResponse",
    "UsageAction",
    "UsageSession",
    "WebhookResponse",
]
