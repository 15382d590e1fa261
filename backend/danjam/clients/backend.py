"""Async client for the hotel backend's customer REST API.

One ``httpx.AsyncClient`` per customer session; the customer's bearer token is
forwarded on every request. Network errors and 5xx responses are retried with
exponential backoff, 4xx responses are raised immediately.
"""

import asyncio
import hashlib
import logging
from datetime import date
from typing import Any

import httpx

from danjam.clients.errors import BackendApiError, CouponConsumptionError
from danjam.config import settings
from danjam.schemas.hotel import HotelSettings, HotelSummary, RoomOffer
from danjam.schemas.promotion import Coupon
from danjam.schemas.reservation import (
    ConsumeCouponRequest,
    ReservationCreate,
    ReservationHistory,
)

logger = logging.getLogger(__name__)


class BackendClient:
    """Thin wrapper over the hotel backend endpoints the booking flow needs."""

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.principal = (
            hashlib.sha256(token.encode()).hexdigest() if token else "anonymous"
        )
        self._max_retries = settings.api_max_retries if max_retries is None else max_retries
        self._backoff = (
            settings.api_retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.api_timeout_seconds,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        default_message: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request, retrying transient failures, and return the decoded body."""
        for attempt in range(self._max_retries + 1):
            try:
                response = await self._client.request(method, path, params=params, json=json)
            except httpx.RequestError as exc:
                if attempt < self._max_retries:
                    logger.warning(
                        "Backend %s %s failed (%s), retry %d/%d",
                        method, path, exc, attempt + 1, self._max_retries,
                    )
                    await asyncio.sleep(self._backoff * 2**attempt)
                    continue
                logger.error("Backend %s %s unreachable: %s", method, path, exc)
                raise BackendApiError(503, default_message) from exc

            if response.status_code >= 500 and attempt < self._max_retries:
                logger.warning(
                    "Backend %s %s returned %d, retry %d/%d",
                    method, path, response.status_code, attempt + 1, self._max_retries,
                )
                await asyncio.sleep(self._backoff * 2**attempt)
                continue

            if response.is_error:
                raise BackendApiError.from_response(response, default_message)
            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError as exc:
                raise BackendApiError(502, f"{default_message}: invalid JSON") from exc

        # Unreachable: the final attempt either returns or raises.
        raise BackendApiError(503, default_message)

    # ------------------------------------------------------------------
    # Hotels
    # ------------------------------------------------------------------

    async def fetch_hotel_list(self) -> list[HotelSummary]:
        data = await self._request(
            "GET", "/api/customer/hotel-list", default_message="Failed to load hotel list"
        )
        hotels = data.get("hotels", []) if isinstance(data, dict) else data
        return [
            HotelSummary.model_validate(h)
            for h in hotels or []
            if isinstance(h, dict) and h.get("hotelId")
        ]

    async def fetch_hotel_settings(
        self,
        hotel_id: str,
        check_in: date | None = None,
        check_out: date | None = None,
    ) -> HotelSettings:
        """Room types, events and hotel-pool coupons for ``hotel_id``."""
        params: dict[str, Any] = {"hotelId": hotel_id}
        if check_in and check_out:
            params["checkIn"] = check_in.isoformat()
            params["checkOut"] = check_out.isoformat()
        data = await self._request(
            "GET",
            "/api/customer/hotel-settings",
            params=params,
            default_message="Failed to load hotel settings",
        )
        return HotelSettings.model_validate({"hotelId": hotel_id, **data})

    async def fetch_availability(
        self, hotel_id: str, check_in: date, check_out: date
    ) -> list[RoomOffer]:
        """Bookable room types with nightly price and remaining units."""
        data = await self._request(
            "GET",
            "/api/customer/hotel-availability",
            params={
                "hotelId": hotel_id,
                "checkIn": check_in.isoformat(),
                "checkOut": check_out.isoformat(),
            },
            default_message="Failed to load hotel availability",
        )
        return [
            RoomOffer.model_validate({"hotelId": hotel_id, **room})
            for room in data.get("availability") or []
        ]

    # ------------------------------------------------------------------
    # Coupons
    # ------------------------------------------------------------------

    async def fetch_wallet(self) -> list[Coupon]:
        """The customer's own coupons, used and unused."""
        data = await self._request(
            "GET", "/api/customer/coupons/wallet", default_message="Failed to load coupon wallet"
        )
        return [
            Coupon.model_validate({**c, "source": "wallet"}) for c in data.get("coupons") or []
        ]

    async def fetch_available_coupons(self) -> list[Coupon]:
        """Hotel coupons the customer could still claim."""
        data = await self._request(
            "GET",
            "/api/customer/available-coupons",
            default_message="Failed to load available coupons",
        )
        return [
            Coupon.model_validate({**c, "source": "hotel"}) for c in data.get("coupons") or []
        ]

    async def use_coupon(self, request: ConsumeCouponRequest) -> dict[str, Any]:
        """Tell the backend a coupon was spent on a reservation.

        Raises:
            CouponConsumptionError: The call failed for any reason.
        """
        try:
            return await self._request(
                "POST",
                "/api/customer/coupons/use",
                json=request.model_dump(by_alias=True),
                default_message="Failed to use coupon",
            )
        except BackendApiError as exc:
            raise CouponConsumptionError(exc.status_code, exc.message, exc.payload) from exc

    async def restore_coupon(self, coupon_uuid: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/api/customer/coupons/restore",
            json={"couponUuid": coupon_uuid},
            default_message="Failed to restore coupon",
        )

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    async def create_reservation(self, payload: ReservationCreate) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/api/customer/reservation",
            json=payload.model_dump(by_alias=True),
            default_message="Failed to save reservation",
        )

    async def cancel_reservation(self, reservation_id: str) -> dict[str, Any]:
        return await self._request(
            "DELETE",
            f"/api/customer/reservation/{reservation_id}",
            default_message="Failed to cancel reservation",
        )

    async def fetch_reservation_history(self) -> ReservationHistory:
        data = await self._request(
            "GET", "/api/customer/history", default_message="Failed to load reservation history"
        )
        if not isinstance(data, dict):
            raise BackendApiError(502, "Invalid response format", data)
        if not isinstance(data.get("history"), list):
            raise BackendApiError(502, "History is not an array", data)
        return ReservationHistory.model_validate(data)
