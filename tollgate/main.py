"""Main module of the FastAPI application.

Sets up the application, its middleware, and the exception handlers that
turn domain errors into HTTP responses.
"""

import os
import subprocess
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from tollgate.api.middleware import (
    add_request_id,
    exception_logging_middleware,
    log_requests,
    not_found_exception_handler,
    payment_required_exception_handler,
    tollgate_exception_handler,
    unavailable_exception_handler,
    validation_exception_handler,
)
from tollgate.api.v1.api import api_router
from tollgate.api.v1.endpoints import health
from tollgate.core.config import LedgerStoreBackend, settings
from tollgate.core.exceptions import (
    NotFoundException,
    PaymentRequiredException,
    TollgateException,
    UnavailableError,
)
from tollgate.core.logging import logger


def _run_migrations() -> None:
    project_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    env = os.environ.copy()
    env["PYTHONPATH"] = project_dir
    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        check=True,
        cwd=project_dir,
        env=env,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events.

    Initializes the DI container, runs alembic migrations, and starts the
    metrics server.
    """
    from tollgate.core import container as container_mod
    from tollgate.core.container import initialize_container

    logger.info("Initializing dependency injection container...")
    initialize_container(settings)
    logger.info("Container initialized successfully")

    if settings.RUN_ALEMBIC_MIGRATIONS and (
        settings.LEDGER_STORE_BACKEND == LedgerStoreBackend.POSTGRES
    ):
        logger.info("Running alembic migrations...")
        _run_migrations()

    metrics_server = None
    if settings.METRICS_ENABLED:
        from tollgate.api.metrics import MetricsServer

        metrics_server = MetricsServer(
            container_mod.container.metrics_renderer,
            port=settings.METRICS_PORT,
            host=settings.METRICS_HOST,
        )
        await metrics_server.start()

    try:
        yield
    finally:
        if metrics_server is not None:
            await metrics_server.stop()
        if settings.LEDGER_STORE_BACKEND == LedgerStoreBackend.POSTGRES:
            from tollgate.db.session import async_engine

            await async_engine.dispose()
        container_mod.reset_container()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(api_router, prefix="/v1")

# Order matters: first registered = outermost middleware (processes request first)
app.middleware("http")(add_request_id)
app.middleware("http")(log_requests)
app.middleware("http")(exception_logging_middleware)

# Register exception handlers
app.exception_handler(RequestValidationError)(validation_exception_handler)
app.exception_handler(ValidationError)(validation_exception_handler)
app.exception_handler(NotFoundException)(not_found_exception_handler)
app.exception_handler(PaymentRequiredException)(payment_required_exception_handler)
app.exception_handler(UnavailableError)(unavailable_exception_handler)
app.exception_handler(TollgateException)(tollgate_exception_handler)

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
