"""API test fixtures.

Provides an async HTTP client wired to the FastAPI app with the DI container
overridden to use fakes. Available to all colocated API tests under api/.

Pattern:
    1. Override get_container -> returns test_container (fakes at the edges)
    2. Override get_context  -> returns an ApiContext for TEST_PRINCIPAL_ID
    3. Test hits the endpoint, asserts on HTTP response + store/fake state
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tollgate.api.context import ApiContext
from tollgate.api.deps import get_container, get_context
from tollgate.core.logging import logger

TEST_PRINCIPAL_ID = "user_test"
TEST_REQUEST_ID = "test-request-00000000"


def _make_fake_context() -> ApiContext:
    """Build a minimal ApiContext for API tests."""
    return ApiContext(
        principal_id=TEST_PRINCIPAL_ID,
        request_id=TEST_REQUEST_ID,
        logger=logger.with_context(request_id=TEST_REQUEST_ID),
        auth_method="header",
        auth_metadata={"test": True},
    )


@pytest_asyncio.fixture
async def client(test_container):
    """Async HTTP client with faked DI container and auth context."""
    from tollgate.main import app

    fake_ctx = _make_fake_context()

    app.dependency_overrides[get_container] = lambda: test_container
    app.dependency_overrides[get_context] = lambda: fake_ctx

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def unauthenticated_client(test_container):
    """Async HTTP client with faked DI container and the real auth dependency."""
    from tollgate.main import app

    app.dependency_overrides[get_container] = lambda: test_container

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
