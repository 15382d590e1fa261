"""Pydantic v2 schemas for stays and computed pricing results."""

from datetime import date
from enum import Enum
from typing import Literal

from pydantic import ConfigDict, computed_field, model_validator

from danjam.schemas.common import CamelModel, DiscountType

DiscountSource = Literal["none", "event", "coupon"]


class DiscountState(str, Enum):
    """Where a room's pricing session currently stands."""

    NO_DISCOUNT = "no_discount"
    EVENT_DISCOUNT = "event_discount"
    AUTO_COUPON = "auto_coupon"
    MANUAL_COUPON = "manual_coupon"
    REJECTED = "rejected"


class Stay(CamelModel):
    """Check-in/check-out calendar dates for a reservation."""

    check_in: date
    check_out: date

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_dates(self) -> "Stay":
        """Reject a check-out before check-in. Same-day stays fall to the night floor."""
        if self.check_out < self.check_in:
            raise ValueError("check_out must not be before check_in")
        return self

    @property
    def date_diff(self) -> int:
        return (self.check_out - self.check_in).days

    def nights(self, min_nights: int) -> int:
        """Billable nights: the calendar difference, floored at ``min_nights``."""
        return max(self.date_diff, min_nights)


class PricingResult(CamelModel):
    """The single authoritative price for one room offer.

    Exactly one of event or coupon contributes. Event fields carry the raw
    event magnitudes (``discount`` percent, ``fixed_discount`` per night,
    ``total_fixed_discount`` prorated by overlap nights); coupon fields carry
    the coupon's percent or its total fixed amount over the stay.
    """

    room_type: str
    nights: int
    original_price: int
    final_price: int
    discount_source: DiscountSource = "none"
    state: DiscountState = DiscountState.NO_DISCOUNT

    # Event
    discount: float = 0
    fixed_discount: float = 0
    discount_type: DiscountType | None = None
    event_name: str | None = None
    event_uuid: str | None = None
    total_fixed_discount: int = 0

    # Coupon
    coupon_code: str | None = None
    coupon_uuid: str | None = None
    coupon_discount: float = 0
    coupon_fixed_discount: int = 0
    coupon_discount_type: DiscountType | None = None
    coupon_discount_value: float = 0

    warning: str | None = None

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def show_original_price(self) -> bool:
        """Whether the UI should strike through the undiscounted price."""
        return any(
            (
                self.discount > 0,
                self.fixed_discount > 0,
                self.coupon_discount > 0,
                self.coupon_fixed_discount > 0,
            )
        )
