"""Pricing engine exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from danjam.schemas.pricing import PricingResult

DISCOUNT_CONFLICT_MESSAGE = "Coupons cannot be combined with an event discount."


class PricingError(Exception):
    """Base class for pricing engine errors."""


class MissingInputError(PricingError):
    """Room, stay or hotel settings were not loaded before pricing was requested."""


class CouponNotEligibleError(PricingError):
    """The selected coupon is not usable for this room today."""

    def __init__(self, coupon_id: str) -> None:
        super().__init__(f"Coupon {coupon_id} is not eligible for this room")
        self.coupon_id = coupon_id


class DiscountConflictError(PricingError):
    """A coupon was selected while an event discount is active.

    ``result`` is the pricing that stays in effect after the selection was
    dropped.
    """

    def __init__(self, result: PricingResult, message: str = DISCOUNT_CONFLICT_MESSAGE) -> None:
        super().__init__(message)
        self.message = message
        self.result = result
