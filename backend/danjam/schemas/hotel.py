"""Pydantic v2 schemas for hotel settings and room availability."""

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from danjam.schemas.common import CamelModel
from danjam.schemas.promotion import Coupon, PromotionEvent


class RoomOffer(CamelModel):
    """One bookable room type for a searched date range (immutable per search)."""

    hotel_id: str
    room_type: str = Field(..., validation_alias=AliasChoices("roomInfo", "roomType", "room_type"))
    nightly_base_price: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("price", "nightlyBasePrice", "nightly_base_price"),
    )
    available_units: int = Field(
        0,
        validation_alias=AliasChoices("availableRooms", "availableUnits", "available_units"),
    )

    model_config = ConfigDict(frozen=True)


class RoomTypeInfo(CamelModel):
    """Room type definition from the hotel's settings."""

    room_info: str
    name_kor: str | None = None
    name_eng: str | None = None
    price: int = Field(0, ge=0)
    stock: int = 0
    room_numbers: list[str] = Field(default_factory=list)


class HotelSettings(CamelModel):
    """Customer-facing hotel settings: room types, running events, hotel coupons."""

    hotel_id: str
    hotel_name: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    room_types: list[RoomTypeInfo] = Field(default_factory=list)
    events: list[PromotionEvent] = Field(default_factory=list)
    coupons: list[Coupon] = Field(default_factory=list)
    check_in_time: str | None = None
    check_out_time: str | None = None

    @field_validator("coupons", mode="before")
    @classmethod
    def _mark_hotel_pool(cls, value: object) -> object:
        """Coupons published in hotel settings belong to the hotel's shared pool."""
        if isinstance(value, list):
            return [{**c, "source": "hotel"} if isinstance(c, dict) else c for c in value]
        return value


class HotelSummary(CamelModel):
    """Entry of the customer hotel list."""

    hotel_id: str
    hotel_name: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
