"""Dependencies that are used in the API endpoints."""

import uuid
from typing import Optional, Tuple, get_type_hints

import jwt
from fastapi import Depends, Header, HTTPException, Request

from tollgate.api.context import ApiContext
from tollgate.core import container as container_mod
from tollgate.core.config import settings
from tollgate.core.container import Container
from tollgate.core.logging import logger


def _authenticate_bearer(authorization: Optional[str]) -> Tuple[str, dict]:
    """Verify a ``Bearer`` JWT and return its subject as the principal id."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    token = authorization.split(" ", 1)[1].strip()

    if not settings.AUTH_JWT_SECRET:
        logger.error("AUTH_ENABLED is set but AUTH_JWT_SECRET is empty")
        raise HTTPException(status_code=401, detail="Token authentication is not configured")

    try:
        claims = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options={"verify_aud": settings.AUTH_JWT_AUDIENCE is not None},
        )
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e

    principal_id = claims.get("sub")
    if not principal_id:
        raise HTTPException(status_code=401, detail="Token has no subject")
    return str(principal_id), {"jwt_claims": claims}


def _authenticate_header(x_principal_id: Optional[str]) -> Tuple[str, dict]:
    """Trust the X-Principal-ID header. Only used when auth is disabled."""
    if not x_principal_id or not x_principal_id.strip():
        raise HTTPException(status_code=401, detail="X-Principal-ID header is required")
    return x_principal_id.strip(), {"disabled_auth": True}


async def get_context(
    request: Request,
    authorization: Optional[str] = Header(None),
    x_principal_id: Optional[str] = Header(None, alias="X-Principal-ID"),
) -> ApiContext:
    """Create the API context for the request.

    With AUTH_ENABLED the principal is the ``sub`` claim of a verified JWT;
    otherwise it is read from the X-Principal-ID header.

    Raises:
    ------
        HTTPException: 401 if no principal can be established.
    """
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    if settings.AUTH_ENABLED:
        principal_id, auth_metadata = _authenticate_bearer(authorization)
        auth_method = "jwt"
    else:
        principal_id, auth_metadata = _authenticate_header(x_principal_id)
        auth_method = "header"

    ctx_logger = logger.with_context(
        request_id=request_id,
        principal_id=principal_id,
        auth_method=auth_method,
        endpoint=request.url.path,
    )
    return ApiContext(
        principal_id=principal_id,
        request_id=request_id,
        logger=ctx_logger,
        auth_method=auth_method,
        auth_metadata=auth_metadata,
    )


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------


def get_container() -> Container:
    """Get the DI container. Initialized at startup."""
    c = container_mod.container
    if c is None:
        raise RuntimeError("Container not initialized. Call initialize_container() first.")
    return c


# Cache of protocol_type -> Container field name, built once at first call.
_INJECT_CACHE: dict[type, str] = {}


def _resolve_field_name(protocol_type: type) -> str:
    """Find which Container field matches the given protocol type."""
    if not _INJECT_CACHE:
        for name, hint in get_type_hints(Container).items():
            _INJECT_CACHE[hint] = name

    field_name = _INJECT_CACHE.get(protocol_type)
    if field_name is None:
        available = list(_INJECT_CACHE.values())
        raise TypeError(
            f"No binding for {protocol_type.__name__} in Container. Available fields: {available}"
        )
    return field_name


def Inject(protocol_type: type):  # noqa: N802 - uppercase to match FastAPI convention
    """Resolve a protocol implementation from the DI container.

    Usage in FastAPI endpoints::

        @router.get("/")
        async def read(usage: UsageServiceProtocol = Inject(UsageServiceProtocol)):
            ...
    """
    field_name = _resolve_field_name(protocol_type)

    def _resolve(c: Container = Depends(get_container)):
        return getattr(c, field_name)

    return Depends(_resolve)
