"""Coupon wallet API router."""

from fastapi import APIRouter, Depends, Query

from danjam.api.deps import get_booking_service, http_error
from danjam.clients.errors import BackendApiError
from danjam.schemas.promotion import Coupon
from danjam.services.booking import BookingService

router = APIRouter(prefix="/api/v1/coupons", tags=["coupons"])


@router.get(
    "/wallet",
    response_model=list[Coupon],
    summary="Refresh and return the customer's coupon wallet",
)
async def get_wallet(
    customer_id: str = Query(..., alias="customerId", min_length=1),
    service: BookingService = Depends(get_booking_service),
) -> list[Coupon]:
    """Always re-fetches, replacing any optimistic local state."""
    try:
        return list(await service.refresh_wallet(customer_id))
    except BackendApiError as exc:
        raise http_error(exc) from exc
