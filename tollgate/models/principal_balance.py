"""Principal balance model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tollgate.models._base import Base, TimestampMixin


class PrincipalBalance(Base, TimestampMixin):
    """Current credit balance of a principal, in seconds."""

    __tablename__ = "principal_balance"

    principal_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    balance_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    last_activity_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("balance_seconds >= 0", name="ck_principal_balance_non_negative"),
    )
