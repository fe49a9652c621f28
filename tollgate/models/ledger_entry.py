"""Ledger history entry model."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tollgate.models._base import Base


class LedgerEntry(Base):
    """Append-only history of balance mutations.

    Rows are never updated; there is deliberately no modified_at column.
    """

    __tablename__ = "ledger_entry"

    id: Mapped[UUID] = mapped_column(primary_key=True)
    principal_id: Mapped[str] = mapped_column(String(128), nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    seconds_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    requested_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_before: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    service_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    source_event_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_ledger_entry_principal_timestamp", "principal_id", "timestamp"),
        Index("idx_ledger_entry_session_id", "session_id"),
    )
