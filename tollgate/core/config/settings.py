"""Application settings.

All defaults live here. Values are loaded from the environment (and an
optional ``.env`` file) through pydantic-settings.
"""

from typing import List, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tollgate.core.config.enums import Environment, LedgerStoreBackend


class Settings(BaseSettings):
    """Tollgate service settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Tollgate"
    ENVIRONMENT: Environment = Environment.LOCAL
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = Field("", description="Comma-separated list of allowed origins")

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "tollgate"
    POSTGRES_PASSWORD: str = "tollgate"
    POSTGRES_DB: str = "tollgate"
    POSTGRES_SSLMODE: Optional[str] = None
    DB_POOL_SIZE: int = Field(20, gt=0)
    DB_POOL_MAX_OVERFLOW: int = Field(40, ge=0)
    RUN_ALEMBIC_MIGRATIONS: bool = False

    # Ledger
    LEDGER_STORE_BACKEND: LedgerStoreBackend = LedgerStoreBackend.POSTGRES
    LEDGER_MAX_ATTEMPTS: int = Field(3, ge=1, description="Commit attempts per ledger mutation")
    LEDGER_BACKOFF_BASE_SECONDS: float = Field(0.05, ge=0)
    LEDGER_BACKOFF_MAX_SECONDS: float = Field(0.5, ge=0)
    INITIAL_CREDIT_SECONDS: int = Field(
        2700, ge=0, description="Grant on account creation (900s tools + 1800s chatbot)"
    )

    # Stripe
    STRIPE_ENABLED: bool = False
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None

    # Authentication
    AUTH_ENABLED: bool = False
    AUTH_JWT_SECRET: Optional[str] = None
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: Optional[str] = None

    # Budget
    BUDGET_EVALUATE_ON_DEBIT: bool = True
    BUDGET_ALERT_HISTORY_LIMIT: int = Field(10, gt=0)

    # Metrics
    METRICS_ENABLED: bool = False
    METRICS_HOST: str = "0.0.0.0"
    METRICS_PORT: int = Field(9090, ge=0, le=65535)

    @property
    def cors_origins(self) -> List[str]:
        """Parsed CORS origins."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:
        """Async SQLAlchemy URI for the asyncpg driver."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def is_local(self) -> bool:
        """Whether the service runs on a developer machine."""
        return self.ENVIRONMENT == Environment.LOCAL
