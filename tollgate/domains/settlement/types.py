"""Settlement types.

SettlementEvent is the typed form of a payment confirmation. Webhook
payloads are converted into it at the boundary, so nothing past this
module ever reads provider metadata strings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tollgate.domains.credits.types import SECONDS_PER_HOUR
from tollgate.domains.settlement.exceptions import InvalidSettlementEventError

# Checkout metadata keys written by the checkout flow.
METADATA_PRINCIPAL_KEYS = ("userId", "principal_id")
METADATA_SECONDS_KEYS = ("hoursInSeconds", "seconds_to_credit")
METADATA_HOURS_KEY = "hours"


class SettlementEvent(BaseModel):
    """A validated payment confirmation, keyed by the upstream event id."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    event_id: str = Field(..., min_length=1)
    principal_id: str = Field(..., min_length=1)
    seconds_to_credit: int = Field(..., gt=0)
    amount_paid: int = Field(0, ge=0, description="Minor currency units (e.g. cents)")
    currency: Optional[str] = Field(None, max_length=8)
    hours_purchased: Optional[int] = Field(None, gt=0)
    reference: Optional[str] = None
    customer_reference: Optional[str] = None

    @classmethod
    def parse(cls, **fields: Any) -> "SettlementEvent":
        """Build an event, converting validation failures to InvalidSettlementEventError."""
        try:
            return cls(**fields)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidSettlementEventError(fields.get("event_id"), problems) from e

    @classmethod
    def from_checkout_session(
        cls, event_id: str, session: Mapping[str, Any]
    ) -> "SettlementEvent":
        """Extract a settlement from a Stripe checkout session object.

        The purchased seconds come from ``hoursInSeconds``; when only
        ``hours`` is present it is converted.
        """
        metadata = session.get("metadata") or {}
        principal_id = _first(metadata, METADATA_PRINCIPAL_KEYS)
        seconds = _first(metadata, METADATA_SECONDS_KEYS)
        hours = metadata.get(METADATA_HOURS_KEY)

        if principal_id is None:
            raise InvalidSettlementEventError(event_id, "metadata has no principal id (userId)")
        if seconds is None and hours is None:
            raise InvalidSettlementEventError(
                event_id, "metadata has neither hoursInSeconds nor hours"
            )
        if seconds is None:
            try:
                seconds = int(hours) * SECONDS_PER_HOUR
            except (TypeError, ValueError) as e:
                raise InvalidSettlementEventError(
                    event_id, f"hours is not an integer: {hours!r}"
                ) from e

        customer = session.get("customer")
        if isinstance(customer, Mapping):
            customer = customer.get("id")

        return cls.parse(
            event_id=event_id,
            principal_id=principal_id,
            seconds_to_credit=seconds,
            amount_paid=session.get("amount_total") or 0,
            currency=session.get("currency"),
            hours_purchased=hours,
            reference=session.get("id"),
            customer_reference=customer if isinstance(customer, str) else None,
        )


def _first(metadata: Mapping[str, Any], keys: tuple[str, ...]) -> Optional[Any]:
    for key in keys:
        value = metadata.get(key)
        if value not in (None, ""):
            return value
    return None


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of a settlement. ``applied`` is False for a redelivered event."""

    event_id: str
    principal_id: str
    applied: bool
    new_balance: int


class WebhookOutcome(str, Enum):
    """What a webhook delivery resulted in. All of these are acknowledged with 200."""

    SETTLED = "settled"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    IGNORED = "ignored"


@dataclass(frozen=True)
class WebhookResult:
    """Result of processing one webhook delivery."""

    event_id: str
    event_type: str
    outcome: WebhookOutcome
    settlement: Optional[SettlementResult] = None
