"""Credit ledger schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class ServiceType(str, Enum):
    """Metered services that draw from the shared balance."""

    TOOLS = "tools"
    CHATBOT = "chatbot"


class LedgerAction(str, Enum):
    """Kind of mutation a history entry records."""

    GRANT = "grant"
    INCREMENT = "increment"
    END = "end"
    SETTLEMENT = "settlement"


class PrincipalBalance(BaseModel):
    """A principal's current balance.

    ``version`` increases on every committed write; stores reject a write
    whose version no longer matches the stored record.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    principal_id: str
    balance_seconds: int = Field(..., ge=0)
    last_activity_at: Optional[datetime] = None
    last_updated_at: datetime
    version: int = 0


class LedgerEntry(BaseModel):
    """Append-only history entry, one per committed balance mutation."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID = Field(default_factory=uuid4)
    principal_id: str
    action: LedgerAction
    seconds_delta: int = Field(..., description="Signed change; negative for debits")
    requested_seconds: int = Field(..., ge=0)
    balance_before: int = Field(..., ge=0)
    balance_after: int = Field(..., ge=0)
    timestamp: datetime
    service_type: Optional[ServiceType] = None
    session_id: Optional[str] = None
    source_event_id: Optional[str] = None


class SettlementRecord(BaseModel):
    """Audit record of an applied payment settlement.

    ``event_id`` is the upstream event id and the deduplication key.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    event_id: str
    principal_id: str
    seconds_credited: int = Field(..., gt=0)
    amount_paid: int = Field(..., ge=0, description="Minor currency units (e.g. cents)")
    currency: Optional[str] = None
    hours_purchased: Optional[int] = None
    reference: Optional[str] = Field(None, description="Checkout session id")
    customer_reference: Optional[str] = None
    processed_at: datetime
