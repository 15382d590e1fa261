"""Pydantic v2 schemas for hotel promotional events and coupons."""

from typing import Literal

from pydantic import AliasChoices, ConfigDict, Field

from danjam.pricing.discount import Discount, make_discount
from danjam.schemas.common import CalendarDate, CamelModel, DiscountType

CouponSource = Literal["hotel", "wallet"]


class PromotionEvent(CamelModel):
    """A hotel-defined, date-bounded discount applied automatically to matching rooms."""

    uuid: str | None = Field(None, validation_alias=AliasChoices("uuid", "id", "_id"))
    name: str | None = Field(None, validation_alias=AliasChoices("eventName", "name"))
    discount_type: DiscountType
    discount_value: float = Field(0, ge=0)
    applicable_room_types: list[str] = Field(default_factory=list)
    start_date: CalendarDate
    end_date: CalendarDate
    is_active: bool = True

    model_config = ConfigDict(frozen=True)

    @property
    def discount(self) -> Discount:
        return make_discount(self.discount_type, self.discount_value)


class Coupon(CamelModel):
    """A coupon from either the hotel's shared pool or the customer's wallet.

    Hotel-pool coupons carry ``max_uses``/``used_count`` and are implicitly
    scoped to the hotel that published them. Wallet coupons carry an explicit
    ``hotel_id`` and a single-use ``used`` flag.
    """

    coupon_uuid: str | None = Field(
        None,
        validation_alias=AliasChoices("couponUuid", "uuid", "id", "_id"),
    )
    code: str | None = None
    name: str | None = None
    discount_type: DiscountType
    discount_value: float = Field(0, ge=0)
    applicable_room_type: str | None = None
    start_date: CalendarDate
    end_date: CalendarDate
    is_active: bool = True

    # Hotel pool
    max_uses: int | None = None
    used_count: int = 0

    # Customer wallet
    hotel_id: str | None = None
    used: bool = False

    source: CouponSource = "wallet"

    model_config = ConfigDict(frozen=True)

    @property
    def identity(self) -> str | None:
        """Identifier used to merge the two pools and to record consumption."""
        return self.coupon_uuid or self.code

    @property
    def remaining_uses(self) -> int | None:
        if self.max_uses is None:
            return None
        return self.max_uses - self.used_count

    @property
    def discount(self) -> Discount:
        return make_discount(self.discount_type, self.discount_value)
