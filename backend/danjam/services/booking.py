"""Booking orchestration: load inputs, price rooms, confirm and cancel reservations."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any
from zoneinfo import ZoneInfo

from danjam.clients.backend import BackendClient
from danjam.clients.errors import BackendApiError
from danjam.config import settings
from danjam.pricing.errors import DiscountConflictError, MissingInputError
from danjam.pricing.events import active_events_on
from danjam.pricing.room_types import normalize_room_type
from danjam.pricing.selector import RoomPricing
from danjam.schemas.hotel import HotelSettings, HotelSummary, RoomOffer
from danjam.schemas.pricing import PricingResult, Stay
from danjam.schemas.promotion import Coupon
from danjam.schemas.quote import ActiveEvent, QuoteResponse, ReservationRequest, RoomQuote
from danjam.schemas.reservation import (
    CancellationResult,
    ReservationCreate,
    ReservationHistory,
    ReservationResult,
)
from danjam.services.consumption import CouponConsumptionTracker
from danjam.services.wallet import CouponWalletStore

logger = logging.getLogger(__name__)

MISSING_RESERVATION_ID_MESSAGE = (
    "The reservation is confirmed, but the coupon could not be marked as used "
    "because the backend returned no reservation id."
)


@dataclass(frozen=True)
class PricingInputs:
    """Everything the engine needs for one hotel and stay, loaded up front."""

    hotel: HotelSettings
    offers: tuple[RoomOffer, ...]
    wallet: tuple[Coupon, ...]


def today_in_zone(tz_name: str | None = None) -> date:
    """Calendar date in the configured timezone; coupon validity is judged against it."""
    return datetime.now(ZoneInfo(tz_name or settings.timezone)).date()


def stay_timestamp(day: date, clock: str | None, default: str, tz_name: str | None = None) -> str:
    """ISO timestamp for ``day`` at the hotel's ``HH:MM`` check-in/out time."""
    try:
        moment = time.fromisoformat(clock or default)
    except ValueError:
        logger.warning("Invalid hotel time %r, falling back to %s", clock, default)
        moment = time.fromisoformat(default)
    zone = ZoneInfo(tz_name or settings.timezone)
    return datetime.combine(day, moment, tzinfo=zone).isoformat()


def extract_reservation_id(response: dict[str, Any]) -> str | None:
    """The backend has answered with the id at several different places."""
    for container in (response, response.get("reservation"), response.get("data")):
        if not isinstance(container, dict):
            continue
        for key in ("reservationId", "_id", "id"):
            if container.get(key):
                return str(container[key])
    return None


class BookingService:
    """Customer booking flow on top of the pricing engine."""

    def __init__(self, client: BackendClient, wallet: CouponWalletStore) -> None:
        self.client = client
        self.wallet = wallet
        self.tracker = CouponConsumptionTracker(wallet, client)

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    async def load_inputs(
        self, hotel_id: str, stay: Stay, customer_id: str | None = None
    ) -> PricingInputs:
        """Fetch hotel settings and availability concurrently, then the customer's wallet."""
        hotel, offers = await asyncio.gather(
            self.client.fetch_hotel_settings(hotel_id, stay.check_in, stay.check_out),
            self.client.fetch_availability(hotel_id, stay.check_in, stay.check_out),
        )
        wallet: tuple[Coupon, ...] = ()
        if customer_id:
            wallet = await self.wallet.load(customer_id, self.client)
        return PricingInputs(hotel=hotel, offers=tuple(offers), wallet=wallet)

    def session(
        self, inputs: PricingInputs, offer: RoomOffer, stay: Stay, today: date
    ) -> RoomPricing:
        return RoomPricing(
            offer,
            stay,
            inputs.hotel.events,
            inputs.hotel.coupons,
            inputs.wallet,
            today=today,
        )

    async def _room_session(
        self,
        hotel_id: str,
        stay: Stay,
        room_type: str,
        customer_id: str | None,
        today: date | None,
    ) -> tuple[PricingInputs, RoomPricing]:
        inputs = await self.load_inputs(hotel_id, stay, customer_id)
        room_key = normalize_room_type(room_type)
        offer = next(
            (o for o in inputs.offers if normalize_room_type(o.room_type) == room_key), None
        )
        if offer is None:
            raise MissingInputError(f"Room type {room_type!r} is not available for these dates")
        return inputs, self.session(inputs, offer, stay, today or today_in_zone())

    async def quote(
        self,
        hotel_id: str,
        stay: Stay,
        customer_id: str | None = None,
        today: date | None = None,
    ) -> QuoteResponse:
        """Default price (event, best coupon or none) for every available room."""
        inputs = await self.load_inputs(hotel_id, stay, customer_id)
        today = today or today_in_zone()
        rooms = []
        for offer in inputs.offers:
            session = self.session(inputs, offer, stay, today)
            rooms.append(
                RoomQuote(
                    offer=offer,
                    pricing=session.current(),
                    eligible_coupons=list(session.eligible_coupons),
                    representative_coupons=list(session.representatives),
                )
            )
        return QuoteResponse(
            hotel_id=hotel_id,
            hotel_name=inputs.hotel.hotel_name,
            check_in=stay.check_in,
            check_out=stay.check_out,
            rooms=rooms,
        )

    async def select_coupon(
        self,
        hotel_id: str,
        stay: Stay,
        room_type: str,
        coupon_id: str,
        customer_id: str | None = None,
        today: date | None = None,
    ) -> PricingResult:
        """Price one room with a customer-chosen coupon.

        Raises:
            DiscountConflictError: The room already has an event discount.
            CouponNotEligibleError: The coupon does not apply to this room.
        """
        _, session = await self._room_session(hotel_id, stay, room_type, customer_id, today)
        return session.select_coupon(coupon_id)

    async def clear_coupon(
        self,
        hotel_id: str,
        stay: Stay,
        room_type: str,
        customer_id: str | None = None,
        today: date | None = None,
    ) -> PricingResult:
        _, session = await self._room_session(hotel_id, stay, room_type, customer_id, today)
        return session.clear_coupon()

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    async def confirm(
        self, request: ReservationRequest, today: date | None = None
    ) -> ReservationResult:
        """Recompute the price, create the reservation, then consume its coupon."""
        stay = request.stay
        inputs, session = await self._room_session(
            request.hotel_id, stay, request.room_type, request.customer_id, today
        )
        warnings: list[str] = []
        if request.coupon_id:
            try:
                pricing = session.select_coupon(request.coupon_id)
            except DiscountConflictError as exc:
                pricing = exc.result
                warnings.append(exc.message)
        else:
            pricing = session.current()

        payload = ReservationCreate.from_pricing(
            hotel_id=request.hotel_id,
            check_in=stay_timestamp(
                stay.check_in, inputs.hotel.check_in_time, settings.default_check_in_time
            ),
            check_out=stay_timestamp(
                stay.check_out, inputs.hotel.check_out_time, settings.default_check_out_time
            ),
            pricing=pricing,
            site_name=settings.reservation_site_name,
            special_requests=request.special_requests,
        )
        response = await self.client.create_reservation(payload)
        reservation_id = extract_reservation_id(response)
        logger.info(
            "Reservation %s created at hotel %s (%s, %d won)",
            reservation_id,
            request.hotel_id,
            pricing.room_type,
            pricing.final_price,
        )

        consumption = None
        if pricing.discount_source == "coupon" and pricing.coupon_uuid:
            if reservation_id is None:
                logger.warning(
                    "Reservation at hotel %s has no id; coupon %s not consumed",
                    request.hotel_id,
                    pricing.coupon_uuid,
                )
                warnings.append(MISSING_RESERVATION_ID_MESSAGE)
            else:
                consumption = await self.tracker.consume(
                    hotel_id=request.hotel_id,
                    coupon_uuid=pricing.coupon_uuid,
                    reservation_id=reservation_id,
                    customer_id=request.customer_id,
                )
                if consumption.warning:
                    warnings.append(consumption.warning)

        return ReservationResult(
            reservation_id=reservation_id,
            reservation=response,
            pricing=pricing,
            consumption=consumption,
            warnings=warnings,
        )

    async def cancel(
        self,
        reservation_id: str,
        customer_id: str | None = None,
        coupon_uuid: str | None = None,
    ) -> CancellationResult:
        """Cancel a reservation and give back the coupon it used, if any."""
        response = await self.client.cancel_reservation(reservation_id)
        logger.info("Reservation %s cancelled", reservation_id)
        restoration = None
        warnings: list[str] = []
        if coupon_uuid:
            restoration = await self.tracker.restore(
                coupon_uuid=coupon_uuid, customer_id=customer_id
            )
            if restoration.warning:
                warnings.append(restoration.warning)
        return CancellationResult(
            reservation_id=reservation_id,
            response=response,
            restoration=restoration,
            warnings=warnings,
        )

    async def history(self) -> ReservationHistory:
        return await self.client.fetch_reservation_history()

    # ------------------------------------------------------------------
    # Hotels, coupons and events
    # ------------------------------------------------------------------

    async def hotels(self) -> list[HotelSummary]:
        return await self.client.fetch_hotel_list()

    async def refresh_wallet(self, customer_id: str) -> tuple[Coupon, ...]:
        return await self.wallet.refresh(customer_id, self.client)

    async def active_events(self, today: date | None = None) -> list[ActiveEvent]:
        """Events running today across all hotels.

        A hotel whose settings cannot be loaded is logged and skipped.
        """
        today = today or today_in_zone()
        hotels = await self.hotels()
        results = await asyncio.gather(
            *(self.client.fetch_hotel_settings(h.hotel_id) for h in hotels),
            return_exceptions=True,
        )

        active: list[ActiveEvent] = []
        for hotel, result in zip(hotels, results):
            if isinstance(result, BackendApiError):
                logger.warning(
                    "Skipping events of hotel %s: %s", hotel.hotel_id, result.message
                )
                continue
            if isinstance(result, BaseException):
                raise result
            for event in active_events_on(result.events, today):
                active.append(
                    ActiveEvent(
                        hotel_id=hotel.hotel_id,
                        hotel_name=result.hotel_name or hotel.hotel_name,
                        event_uuid=event.uuid,
                        event_name=event.name,
                        discount_type=event.discount_type,
                        discount_value=event.discount_value,
                        applicable_room_types=event.applicable_room_types,
                        start_date=event.start_date,
                        end_date=event.end_date,
                    )
                )
        return active
