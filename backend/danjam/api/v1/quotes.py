"""Quote API router: engine prices for a hotel's rooms."""

from fastapi import APIRouter, Depends

from danjam.api.deps import get_booking_service, http_error
from danjam.clients.errors import BackendApiError
from danjam.pricing.errors import PricingError
from danjam.schemas.pricing import PricingResult
from danjam.schemas.quote import QuoteRequest, QuoteResponse, SelectCouponRequest
from danjam.services.booking import BookingService

router = APIRouter(prefix="/api/v1/quotes", tags=["quotes"])


@router.post(
    "",
    response_model=QuoteResponse,
    summary="Price every available room for a stay",
)
async def create_quote(
    body: QuoteRequest,
    service: BookingService = Depends(get_booking_service),
) -> QuoteResponse:
    """Each room gets its default price: event discount, else best coupon, else none."""
    try:
        return await service.quote(body.hotel_id, body.stay, customer_id=body.customer_id)
    except (PricingError, BackendApiError) as exc:
        raise http_error(exc) from exc


@router.post(
    "/select-coupon",
    response_model=PricingResult,
    summary="Apply or clear a coupon for one room",
)
async def select_coupon(
    body: SelectCouponRequest,
    service: BookingService = Depends(get_booking_service),
) -> PricingResult:
    """Returns 409 with the event price when the room already has an event discount."""
    try:
        if body.coupon_id is None:
            return await service.clear_coupon(
                body.hotel_id, body.stay, body.room_type, customer_id=body.customer_id
            )
        return await service.select_coupon(
            body.hotel_id,
            body.stay,
            body.room_type,
            body.coupon_id,
            customer_id=body.customer_id,
        )
    except (PricingError, BackendApiError) as exc:
        raise http_error(exc) from exc
