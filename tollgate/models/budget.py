"""Budget configuration and alert models."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tollgate.models._base import Base


class BudgetConfig(Base):
    """Spend limit configuration, one row per principal."""

    __tablename__ = "budget_config"

    principal_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    spend_limit_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    warning_threshold_percent: Mapped[int] = mapped_column(Integer, nullable=False, default=80)
    period_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class BudgetAlert(Base):
    """A persisted budget alert."""

    __tablename__ = "budget_alert"

    id: Mapped[UUID] = mapped_column(primary_key=True)
    principal_id: Mapped[str] = mapped_column(String(128), nullable=False)
    alert_type: Mapped[str] = mapped_column(String(32), nullable=False)
    current_spend: Mapped[int] = mapped_column(Integer, nullable=False)
    threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    window_days: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_budget_alert_principal_timestamp", "principal_id", "timestamp"),)
