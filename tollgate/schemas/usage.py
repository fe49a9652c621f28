"""Usage tracking API schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from tollgate.schemas.ledger import ServiceType
from tollgate.schemas.session import SessionState


class UsageAction(str, Enum):
    """Actions a client reports against a usage session."""

    START = "start"
    INCREMENT = "increment"
    END = "end"


class TrackUsageRequest(BaseModel):
    """Request schema for reporting usage."""

    service_type: ServiceType
    action_type: UsageAction
    seconds_used: int = Field(1, ge=1, description="Seconds consumed since the last report")
    session_id: Optional[str] = Field(
        None, min_length=1, max_length=128, description="Generated on start when omitted"
    )


class TrackUsageResponse(BaseModel):
    """Result of a usage report."""

    remaining_credits: int
    total_credits_before: int
    credits_used: int
    status: SessionState
    session_id: str
    message: str


class CreditsResponse(BaseModel):
    """Current balance in seconds and broken down for display."""

    balance_seconds: int
    formatted_hms: str = Field(..., description="HH:MM:SS")
    hours: int
    minutes: int
    seconds: int
    last_activity_at: Optional[datetime] = None
