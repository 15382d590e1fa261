"""Reservations API router.

Confirmation recomputes the price server-side; the client never submits one.
Coupon consumption and restoration failures are returned as ``warnings``
rather than errors.
"""

from fastapi import APIRouter, Depends, Query, status

from danjam.api.deps import get_booking_service, http_error
from danjam.clients.errors import BackendApiError
from danjam.pricing.errors import PricingError
from danjam.schemas.quote import ReservationRequest
from danjam.schemas.reservation import (
    CancellationResult,
    ReservationHistory,
    ReservationResult,
)
from danjam.services.booking import BookingService

router = APIRouter(prefix="/api/v1/reservations", tags=["reservations"])


@router.post(
    "",
    response_model=ReservationResult,
    status_code=status.HTTP_201_CREATED,
    summary="Confirm a reservation",
)
async def create_reservation(
    body: ReservationRequest,
    service: BookingService = Depends(get_booking_service),
) -> ReservationResult:
    try:
        return await service.confirm(body)
    except (PricingError, BackendApiError) as exc:
        raise http_error(exc) from exc


@router.get(
    "/history",
    response_model=ReservationHistory,
    summary="Customer reservation history",
)
async def reservation_history(
    service: BookingService = Depends(get_booking_service),
) -> ReservationHistory:
    try:
        return await service.history()
    except BackendApiError as exc:
        raise http_error(exc) from exc


@router.delete(
    "/{reservation_id}",
    response_model=CancellationResult,
    summary="Cancel a reservation",
)
async def cancel_reservation(
    reservation_id: str,
    customer_id: str | None = Query(None, alias="customerId"),
    coupon_uuid: str | None = Query(None, alias="couponUuid", description="Coupon to restore"),
    service: BookingService = Depends(get_booking_service),
) -> CancellationResult:
    try:
        return await service.cancel(
            reservation_id, customer_id=customer_id, coupon_uuid=coupon_uuid
        )
    except BackendApiError as exc:
        raise http_error(exc) from exc
