"""Shared test configuration and fixtures.

The hotel backend is replaced by ``FakeBackend`` behind an
``httpx.MockTransport``; the API is exercised in-process through
``ASGITransport`` with the backend client dependency overridden.
"""

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from danjam.api.deps import get_backend_client, get_wallet_store
from danjam.clients.backend import BackendClient
from danjam.main import app
from danjam.services.booking import BookingService
from danjam.services.wallet import CouponWalletStore
from tests.factories import BACKEND_URL, FakeBackend

# ---------------------------------------------------------------------------
# Fake backend and services
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def backend_client(fake_backend: FakeBackend) -> AsyncGenerator[BackendClient, None]:
    """Backend client wired to the fake backend, retrying without delay."""
    async with BackendClient(
        "test-token",
        base_url=BACKEND_URL,
        max_retries=2,
        backoff_seconds=0,
        transport=httpx.MockTransport(fake_backend.handler),
    ) as client:
        yield client


@pytest.fixture
def wallet_store() -> CouponWalletStore:
    return CouponWalletStore()


@pytest.fixture
def booking_service(
    backend_client: BackendClient, wallet_store: CouponWalletStore
) -> BookingService:
    return BookingService(backend_client, wallet_store)


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    backend_client: BackendClient, wallet_store: CouponWalletStore
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient against the app, backed by the fake backend."""

    async def override_get_backend_client() -> AsyncGenerator[BackendClient, None]:
        yield backend_client

    app.dependency_overrides[get_backend_client] = override_get_backend_client
    app.dependency_overrides[get_wallet_store] = lambda: wallet_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer test-token"}
