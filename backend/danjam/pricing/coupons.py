"""Coupon eligibility, de-duplication and best-coupon ranking."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from danjam.pricing.room_types import ALL_ROOM_TYPES, normalize_room_type
from danjam.schemas.promotion import Coupon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibleCoupons:
    """Coupons usable for one room today, kept per pool."""

    hotel: tuple[Coupon, ...] = ()
    wallet: tuple[Coupon, ...] = ()

    def combined(self) -> list[Coupon]:
        """Wallet coupons first, then the hotel pool."""
        return [*self.wallet, *self.hotel]


def room_scope_matches(coupon: Coupon, room_key: str) -> bool:
    """True for unrestricted coupons, the ``all`` wildcard, or the same room type."""
    if not coupon.applicable_room_type:
        return True
    coupon_key = normalize_room_type(coupon.applicable_room_type)
    return coupon_key in (ALL_ROOM_TYPES, room_key)


def within_validity(coupon: Coupon, today: date) -> bool:
    return coupon.start_date <= today <= coupon.end_date


def is_hotel_coupon_eligible(coupon: Coupon, room_key: str, today: date) -> bool:
    remaining = coupon.remaining_uses
    return (
        coupon.is_active
        and remaining is not None
        and remaining > 0
        and within_validity(coupon, today)
        and room_scope_matches(coupon, room_key)
    )


def is_wallet_coupon_eligible(
    coupon: Coupon, room_key: str, hotel_id: str, today: date
) -> bool:
    return (
        not coupon.used
        and coupon.hotel_id == hotel_id
        and within_validity(coupon, today)
        and room_scope_matches(coupon, room_key)
    )


def filter_coupons(
    hotel_coupons: Iterable[Coupon],
    wallet_coupons: Iterable[Coupon],
    room_type: str,
    hotel_id: str,
    today: date,
) -> EligibleCoupons:
    """Coupons usable for ``room_type`` at ``hotel_id``.

    Validity windows are checked against ``today``, not the stay dates: a
    coupon valid today is eligible for a stay months away, and one that
    expires before the stay starts is still eligible until it expires.
    """
    room_key = normalize_room_type(room_type)
    return EligibleCoupons(
        hotel=tuple(c for c in hotel_coupons if is_hotel_coupon_eligible(c, room_key, today)),
        wallet=tuple(
            c for c in wallet_coupons if is_wallet_coupon_eligible(c, room_key, hotel_id, today)
        ),
    )


def merge_by_identity(coupons: Iterable[Coupon]) -> list[Coupon]:
    """Collapse coupons sharing an identifier.

    A later entry replaces an earlier one but keeps the earlier position, so
    with wallet-then-hotel ordering the hotel-pool record shadows the wallet
    record. Coupons without any identifier are kept as-is.
    """
    merged: dict[object, Coupon] = {}
    for index, coupon in enumerate(coupons):
        key = coupon.identity if coupon.identity is not None else ("anonymous", index)
        merged[key] = coupon
    return list(merged.values())


def representative_key(coupon: Coupon) -> str:
    """``discountType-discountValue-roomType`` grouping key for display.

    Built from the coupon's raw value, so a 150% coupon is not grouped with a
    100% one even though both price the same.
    """
    value = format(Decimal(str(coupon.discount_value)).normalize(), "f")
    return f"{coupon.discount_type}-{value}-{normalize_room_type(coupon.applicable_room_type)}"


def representative_coupons(coupons: Iterable[Coupon]) -> list[Coupon]:
    """First coupon per distinct set of discount terms, in list order."""
    representatives: dict[str, Coupon] = {}
    for coupon in coupons:
        representatives.setdefault(representative_key(coupon), coupon)
    return list(representatives.values())


def effective_discount(coupon: Coupon, original_price: int, nights: int) -> Decimal:
    """Monetary amount the coupon would remove; fixed coupons count every stay night."""
    return coupon.discount.amount_off(original_price, nights)


def pick_best_coupon(
    coupons: Sequence[Coupon], original_price: int, nights: int
) -> Coupon | None:
    """Coupon with the largest effective discount; ties go to the earliest.

    Coupons that would save nothing are never picked.
    """
    best: Coupon | None = None
    best_amount = Decimal(0)
    for coupon in coupons:
        amount = effective_discount(coupon, original_price, nights)
        if amount > best_amount:
            best, best_amount = coupon, amount
    if best is not None:
        logger.debug("Best coupon %s saves %s", best.identity, best_amount)
    return best


def find_coupon(coupons: Iterable[Coupon], coupon_id: str) -> Coupon | None:
    """Look up a coupon by uuid or code."""
    for coupon in coupons:
        if coupon_id in (coupon.coupon_uuid, coupon.code):
            return coupon
    return None
