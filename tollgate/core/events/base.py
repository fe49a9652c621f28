"""Base class for all domain events."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from tollgate.core.events.enums import EventType


class DomainEvent(BaseModel):
    """Frozen, validated event carrying the fields the bus routes on.

    Subclasses narrow ``event_type`` to their own enum member.
    """

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    principal_id: str
