"""Applied payment settlement model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tollgate.models._base import Base


class SettlementEvent(Base):
    """One row per upstream payment event applied to a balance.

    The primary key on ``event_id`` is what makes settlement exactly-once.
    """

    __tablename__ = "settlement_event"

    event_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    principal_id: Mapped[str] = mapped_column(String(128), nullable=False)
    seconds_credited: Mapped[int] = mapped_column(Integer, nullable=False)
    amount_paid: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    hours_purchased: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_settlement_event_principal_id", "principal_id"),)
