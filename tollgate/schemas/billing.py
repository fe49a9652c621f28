"""Payment webhook schemas."""

from typing import Optional

from pydantic import BaseModel


class WebhookResponse(BaseModel):
    """Acknowledgement of a payment webhook delivery."""

    event_id: str
    event_type: str
    outcome: str
    new_balance: Optional[int] = None
