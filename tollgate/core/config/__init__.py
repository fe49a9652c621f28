"""Configuration module for the Tollgate service.

Provides centralized configuration management with type-safe enums.

Usage:
    from tollgate.core.config import settings, LedgerStoreBackend, Environment

    if settings.LEDGER_STORE_BACKEND == LedgerStoreBackend.MEMORY:
        ...
"""

from tollgate.core.config.enums import Environment, LedgerStoreBackend
from tollgate.core.config.settings import Settings

__all__ = [
    "Settings",
    "LedgerStoreBackend",
    "Environment",
    "settings",
]

# Singleton settings instance
settings = Settings()
