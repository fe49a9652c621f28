"""Usage session schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tollgate.schemas.ledger import ServiceType


class SessionState(str, Enum):
    """Usage session lifecycle states."""

    ACTIVE = "active"
    COMPLETED = "completed"
    COMPLETED_WITH_INSUFFICIENT_CREDITS = "completed_with_insufficient_credits"

    @property
    def is_terminal(self) -> bool:
        """Terminal sessions accept no further consumption."""
        return self is not SessionState.ACTIVE


class UsageSession(BaseModel):
    """A bounded period of consumption of one service by one principal."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    session_id: str
    principal_id: str
    service_type: ServiceType
    state: SessionState = SessionState.ACTIVE
    started_at: datetime
    ended_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    seconds_consumed: int = Field(0, ge=0)
    version: int = 0
