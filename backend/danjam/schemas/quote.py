"""Request/response schemas for the quote, reservation and event endpoints."""

from datetime import date

from pydantic import Field, model_validator

from danjam.schemas.common import CamelModel, DiscountType
from danjam.schemas.hotel import RoomOffer
from danjam.schemas.pricing import PricingResult, Stay
from danjam.schemas.promotion import Coupon

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class QuoteRequest(CamelModel):
    """Price every room of a hotel for a stay."""

    hotel_id: str = Field(..., min_length=1)
    check_in: date
    check_out: date
    customer_id: str | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "QuoteRequest":
        if self.check_out < self.check_in:
            raise ValueError("check_out must not be before check_in")
        return self

    @property
    def stay(self) -> Stay:
        return Stay(check_in=self.check_in, check_out=self.check_out)


class SelectCouponRequest(QuoteRequest):
    """Manually apply (or, with ``coupon_id=None``, clear) a coupon for one room."""

    room_type: str = Field(..., min_length=1)
    coupon_id: str | None = None


class ReservationRequest(QuoteRequest):
    """Confirm a reservation for one room at its engine-computed price."""

    room_type: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    coupon_id: str | None = None
    special_requests: str | None = Field(None, max_length=1000)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class RoomQuote(CamelModel):
    """Price of one room plus the coupons the customer could switch to."""

    offer: RoomOffer
    pricing: PricingResult
    eligible_coupons: list[Coupon] = Field(default_factory=list)
    representative_coupons: list[Coupon] = Field(default_factory=list)


class QuoteResponse(CamelModel):
    hotel_id: str
    hotel_name: str | None = None
    check_in: date
    check_out: date
    rooms: list[RoomQuote] = Field(default_factory=list)


class ActiveEvent(CamelModel):
    """A promotion running today at one of the listed hotels."""

    hotel_id: str
    hotel_name: str | None = None
    event_uuid: str | None = None
    event_name: str | None = None
    discount_type: DiscountType
    discount_value: float
    applicable_room_types: list[str] = Field(default_factory=list)
    start_date: date
    end_date: date
