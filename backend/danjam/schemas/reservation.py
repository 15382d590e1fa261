"""Pydantic v2 schemas for reservations and coupon consumption."""

from typing import Any

from pydantic import Field, model_validator

from danjam.schemas.common import CamelModel, DiscountType
from danjam.schemas.pricing import PricingResult

# ---------------------------------------------------------------------------
# Backend payloads
# ---------------------------------------------------------------------------


class ReservationCreate(CamelModel):
    """Reservation payload sent to the hotel backend once pricing is settled."""

    hotel_id: str
    room_info: str
    check_in: str
    check_out: str
    site_name: str | None = None
    price: int
    original_price: int
    discount: float = 0
    fixed_discount: float = 0
    discount_type: DiscountType | None = None
    event_name: str | None = None
    event_uuid: str | None = None
    special_requests: str | None = None
    coupon_uuid: str | None = None
    coupon_code: str | None = None
    coupon_discount: float = 0
    coupon_fixed_discount: int = 0
    # The reservation endpoint reads both keys; each carries the stay total.
    coupon_total_fixed_discount: int = 0

    @classmethod
    def from_pricing(
        cls,
        *,
        hotel_id: str,
        check_in: str,
        check_out: str,
        pricing: PricingResult,
        site_name: str | None = None,
        special_requests: str | None = None,
    ) -> "ReservationCreate":
        """Populate price and discount fields from the engine's decision."""
        return cls(
            hotel_id=hotel_id,
            room_info=pricing.room_type,
            check_in=check_in,
            check_out=check_out,
            site_name=site_name,
            price=pricing.final_price,
            original_price=pricing.original_price,
            discount=pricing.discount,
            fixed_discount=pricing.fixed_discount,
            discount_type=pricing.discount_type,
            event_name=pricing.event_name,
            event_uuid=pricing.event_uuid,
            special_requests=special_requests,
            coupon_uuid=pricing.coupon_uuid,
            coupon_code=pricing.coupon_code,
            coupon_discount=pricing.coupon_discount,
            coupon_fixed_discount=pricing.coupon_fixed_discount,
            coupon_total_fixed_discount=pricing.coupon_fixed_discount,
        )


class ConsumeCouponRequest(CamelModel):
    """Body of the backend's coupon-use call."""

    hotel_id: str
    coupon_uuid: str
    reservation_id: str
    customer_id: str


class ConsumptionOutcome(CamelModel):
    """What happened when a coupon was consumed (or restored)."""

    coupon_uuid: str
    marked_locally: bool
    confirmed: bool
    warning: str | None = None


# ---------------------------------------------------------------------------
# Reservation history
# ---------------------------------------------------------------------------


class ReservationHistoryItem(CamelModel):
    """A past or upcoming reservation as shown in the customer's history."""

    reservation_id: str | None = Field(None, alias="_id")
    hotel_id: str | None = None
    hotel_name: str = "알 수 없음"
    room_info: str | None = None
    check_in: str = ""
    check_out: str = ""
    price: float = 0
    reservation_status: str | None = None
    coupon_uuid: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _fill_missing(cls, data: Any) -> Any:
        """Backend history rows may carry nulls or non-numeric prices."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not isinstance(data.get("price"), (int, float)) or isinstance(data.get("price"), bool):
            data["price"] = 0
        for key in ("hotelName", "checkIn", "checkOut"):
            if not data.get(key):
                data.pop(key, None)
        return data


class ReservationHistory(CamelModel):
    history: list[ReservationHistoryItem] = Field(default_factory=list)
    total_visits: int = 0


class ReservationResult(CamelModel):
    """Confirmed reservation plus the pricing and consumption that went with it."""

    reservation_id: str | None = None
    reservation: dict[str, Any] = Field(default_factory=dict)
    pricing: PricingResult
    consumption: ConsumptionOutcome | None = None
    warnings: list[str] = Field(default_factory=list)


class CancellationResult(CamelModel):
    reservation_id: str
    response: dict[str, Any] = Field(default_factory=dict)
    restoration: ConsumptionOutcome | None = None
    warnings: list[str] = Field(default_factory=list)
