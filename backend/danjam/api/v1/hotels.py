"""Hotel list and running events API router."""

from fastapi import APIRouter, Depends

from danjam.api.deps import get_booking_service, http_error
from danjam.clients.errors import BackendApiError
from danjam.schemas.hotel import HotelSummary
from danjam.schemas.quote import ActiveEvent
from danjam.services.booking import BookingService

router = APIRouter(prefix="/api/v1", tags=["hotels"])


@router.get("/hotels", response_model=list[HotelSummary], summary="List hotels")
async def list_hotels(
    service: BookingService = Depends(get_booking_service),
) -> list[HotelSummary]:
    try:
        return await service.hotels()
    except BackendApiError as exc:
        raise http_error(exc) from exc


@router.get("/events", response_model=list[ActiveEvent], summary="Events running today")
async def list_active_events(
    service: BookingService = Depends(get_booking_service),
) -> list[ActiveEvent]:
    """Hotels whose settings fail to load are skipped, not reported as errors."""
    try:
        return await service.active_events()
    except BackendApiError as exc:
        raise http_error(exc) from exc
