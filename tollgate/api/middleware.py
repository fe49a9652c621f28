"""Middleware and exception handlers for the FastAPI application."""

import math
import time
import traceback
import uuid

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tollgate.core.exceptions import (
    BadRequestError,
    ConflictError,
    InvalidStateError,
    NotFoundException,
    PaymentRequiredException,
    TollgateException,
    UnavailableError,
    unpack_validation_error,
)
from tollgate.core.logging import logger
from tollgate.domains.credits.exceptions import InsufficientCreditsError


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    An incoming ``X-Request-ID`` is kept so traces can span services.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log handled requests with their duration and status."""
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.info(
        f"Handled request {request.method} {request.url.path} in {duration:.3f} seconds. "
        f"Response code: {response.status_code}"
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions and return a 500."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")
        return JSONResponse(
            status_code=500,
            content={"detail": f"Internal Server Error: {exc.__class__.__name__}"},
        )


# Exception handlers
async def validation_exception_handler(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """Exception handler for request and model validation errors.

    Returns:
    -------
        JSONResponse: 422 with one ``{location: message}`` item per error, e.g.
            ``{"errors": [{"body.service_type": "Input should be 'tools' or 'chatbot'"}]}``

    """
    error_messages = unpack_validation_error(exc)
    logger.warning(f"Validation error on {request.url.path}: {error_messages}")
    return JSONResponse(status_code=422, content=error_messages)


async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """Exception handler for NotFoundException.

    Returns:
    -------
        JSONResponse: A 404 Not Found status response that details the error message.

    """
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def payment_required_exception_handler(
    request: Request, exc: PaymentRequiredException
) -> JSONResponse:
    """Exception handler for PaymentRequiredException.

    Insufficient credits carry the balances so clients can show them
    without a second round trip.
    """
    content = {"detail": str(exc)}
    if isinstance(exc, InsufficientCreditsError):
        content.update(
            code="insufficient_credits",
            available_seconds=exc.available_seconds,
            requested_seconds=exc.requested_seconds,
        )
    return JSONResponse(status_code=402, content=content)


async def unavailable_exception_handler(request: Request, exc: UnavailableError) -> JSONResponse:
    """Exception handler for UnavailableError: 503 with a Retry-After header."""
    logger.warning(f"Service unavailable for {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc)},
        headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))},
    )


async def tollgate_exception_handler(request: Request, exc: TollgateException) -> JSONResponse:
    """Generic exception handler for all TollgateException types.

    Maps exception base classes to HTTP status codes, so any domain
    exception inheriting from BadRequestError, ConflictError, etc. gets
    the right code without registering it here. NotFound, PaymentRequired
    and Unavailable have dedicated handlers registered before this one.
    """
    status_map = {
        BadRequestError: 400,
        InvalidStateError: 400,
        ConflictError: 409,
    }

    for exc_type, code in status_map.items():
        if isinstance(exc, exc_type):
            return JSONResponse(status_code=code, content={"detail": str(exc)})

    logger.error(f"Unmapped {exc.__class__.__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})

