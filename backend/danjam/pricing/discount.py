"""Discount terms: a percentage off the stay total or a fixed amount per night.

Both events and coupons express their terms as one of these two types, so
every price computation goes through the same two methods:

* ``amount_off``: the effective monetary discount, used to rank competing
  coupons (unrounded).
* ``final_price``: the payable price after the discount is applied.

``nights`` is the number of nights a fixed discount is multiplied by. Callers
decide which count applies: coupons use the full stay, events use the nights
that actually overlap the event window.
"""

from dataclasses import dataclass
from decimal import Decimal

from danjam.pricing.calculator import fixed_price, percentage_price, to_decimal

MAX_PERCENT = Decimal(100)


@dataclass(frozen=True)
class Percentage:
    """Percent of the stay total, clamped to ``[0, 100]``."""

    value: Decimal

    def __post_init__(self) -> None:
        clamped = min(max(to_decimal(self.value), Decimal(0)), MAX_PERCENT)
        object.__setattr__(self, "value", clamped)

    @property
    def discount_type(self) -> str:
        return "percentage"

    def amount_off(self, original_price: int, nights: int) -> Decimal:
        return to_decimal(original_price) * self.value / MAX_PERCENT

    def final_price(self, original_price: int, nights: int) -> int:
        return percentage_price(original_price, self.value)


@dataclass(frozen=True)
class Fixed:
    """Fixed amount (minor currency units) off per night."""

    value: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", max(to_decimal(self.value), Decimal(0)))

    @property
    def discount_type(self) -> str:
        return "fixed"

    def amount_off(self, original_price: int, nights: int) -> Decimal:
        return self.value * nights

    def final_price(self, original_price: int, nights: int) -> int:
        return fixed_price(original_price, self.amount_off(original_price, nights))


Discount = Percentage | Fixed


def make_discount(discount_type: str, value: int | float | Decimal) -> Discount:
    """Build the discount for a backend ``discountType``/``discountValue`` pair."""
    if discount_type == "percentage":
        return Percentage(to_decimal(value))
    if discount_type == "fixed":
        return Fixed(to_decimal(value))
    raise ValueError(f"Unknown discount type: {discount_type!r}")
