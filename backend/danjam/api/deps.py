"""Shared API dependencies: single import point for all routers.

The customer's bearer token is not validated here; it is forwarded to the
hotel backend, which owns authentication::

    from danjam.api.deps import get_booking_service
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from danjam.clients.backend import BackendClient
from danjam.clients.errors import BackendApiError
from danjam.pricing.errors import (
    CouponNotEligibleError,
    DiscountConflictError,
    MissingInputError,
    PricingError,
)
from danjam.services.booking import BookingService
from danjam.services.wallet import CouponWalletStore

# Strict bearer: rejects requests without a token
_bearer_scheme = HTTPBearer()

# One wallet store per process; the consumption tracker is its only writer.
wallet_store = CouponWalletStore()


async def get_backend_client(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
) -> AsyncGenerator[BackendClient, None]:
    """Yield a backend client carrying the caller's token, closed after the request."""
    async with BackendClient(credentials.credentials) as client:
        yield client


def get_wallet_store() -> CouponWalletStore:
    return wallet_store


def get_booking_service(
    client: BackendClient = Depends(get_backend_client),
    wallet: CouponWalletStore = Depends(get_wallet_store),
) -> BookingService:
    return BookingService(client, wallet)


def http_error(exc: PricingError | BackendApiError) -> HTTPException:
    """Translate engine and backend failures into HTTP errors.

    Backend 4xx responses keep their status; anything else from the backend
    becomes a 502.
    """
    if isinstance(exc, DiscountConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": exc.message,
                "pricing": exc.result.model_dump(by_alias=True, mode="json"),
            },
        )
    if isinstance(exc, CouponNotEligibleError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, MissingInputError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, BackendApiError):
        code = exc.status_code if 400 <= exc.status_code < 500 else status.HTTP_502_BAD_GATEWAY
        return HTTPException(status_code=code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


__all__ = [
    "get_backend_client",
    "get_wallet_store",
    "get_booking_service",
    "http_error",
    "wallet_store",
]
