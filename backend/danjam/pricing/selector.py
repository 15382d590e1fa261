"""Best-discount selection: one authoritative price per room offer.

``RoomPricing`` is a small state machine:

* ``NO_DISCOUNT``: nothing applies.
* ``EVENT_DISCOUNT``: a matching event sets the price; coupons are never
  auto-applied on top.
* ``AUTO_COUPON``: no event; the coupon with the largest effective
  discount is applied.
* ``MANUAL_COUPON``: the customer picked a coupon from the eligible set.
* ``REJECTED``: the customer tried to add a coupon to an event price;
  the selection is dropped and the event price stays.

Sessions never touch wallet state, so recomputing is free of side effects.
"""

import logging
from collections.abc import Iterable
from datetime import date

from danjam.config import settings
from danjam.pricing.calculator import round_half_up, stay_total
from danjam.pricing.coupons import (
    filter_coupons,
    find_coupon,
    merge_by_identity,
    pick_best_coupon,
    representative_coupons,
)
from danjam.pricing.discount import Percentage
from danjam.pricing.errors import (
    DISCOUNT_CONFLICT_MESSAGE,
    CouponNotEligibleError,
    DiscountConflictError,
    MissingInputError,
)
from danjam.pricing.events import EventDiscount, resolve_event_discount
from danjam.schemas.hotel import RoomOffer
from danjam.schemas.pricing import DiscountState, PricingResult, Stay
from danjam.schemas.promotion import Coupon, PromotionEvent

logger = logging.getLogger(__name__)


class RoomPricing:
    """Pricing session for one room offer and stay."""

    def __init__(
        self,
        offer: RoomOffer | None,
        stay: Stay | None,
        events: Iterable[PromotionEvent] | None,
        hotel_coupons: Iterable[Coupon] = (),
        wallet_coupons: Iterable[Coupon] = (),
        *,
        today: date,
        min_nights: int | None = None,
    ) -> None:
        if offer is None:
            raise MissingInputError("Room offer is required for pricing")
        if stay is None:
            raise MissingInputError("Stay dates are required for pricing")
        if events is None:
            raise MissingInputError("Hotel settings must be loaded before pricing")

        self.offer = offer
        self.stay = stay
        self.nights = stay.nights(settings.min_stay_nights if min_nights is None else min_nights)
        self.original_price = stay_total(offer.nightly_base_price, self.nights)
        self.event = resolve_event_discount(offer.room_type, stay, events, self.nights)

        eligible = filter_coupons(
            hotel_coupons, wallet_coupons, offer.room_type, offer.hotel_id, today
        ).combined()
        self.eligible_coupons: tuple[Coupon, ...] = tuple(merge_by_identity(eligible))
        self.representatives: tuple[Coupon, ...] = tuple(representative_coupons(eligible))

        self._selected: Coupon | None = None
        self._state = DiscountState.NO_DISCOUNT
        self._apply_default()

    @property
    def state(self) -> DiscountState:
        return self._state

    @property
    def selected_coupon(self) -> Coupon | None:
        return self._selected

    def _apply_default(self) -> None:
        if self.event.is_active:
            self._selected = None
            self._state = DiscountState.EVENT_DISCOUNT
            return
        self._selected = pick_best_coupon(self.eligible_coupons, self.original_price, self.nights)
        self._state = DiscountState.AUTO_COUPON if self._selected else DiscountState.NO_DISCOUNT

    def current(self) -> PricingResult:
        """Price for the session's current state."""
        if self.event.is_active:
            warning = DISCOUNT_CONFLICT_MESSAGE if self._state is DiscountState.REJECTED else None
            return self._event_result(self.event, warning)
        if self._selected is not None:
            return self._coupon_result(self._selected)
        return self._base_result()

    def select_coupon(self, coupon_id: str) -> PricingResult:
        """Apply a customer-chosen coupon in place of the automatic pick.

        Raises:
            DiscountConflictError: An event discount is active. The selection
                is cleared and the event price stays in effect.
            CouponNotEligibleError: ``coupon_id`` is not usable for this room.
        """
        if self.event.is_active:
            self._selected = None
            self._state = DiscountState.REJECTED
            logger.info(
                "Rejected coupon %s for %s: event %s is active",
                coupon_id,
                self.offer.room_type,
                self.event.event_uuid,
            )
            raise DiscountConflictError(self.current())

        coupon = find_coupon(self.eligible_coupons, coupon_id)
        if coupon is None:
            raise CouponNotEligibleError(coupon_id)
        self._selected = coupon
        self._state = DiscountState.MANUAL_COUPON
        return self.current()

    def clear_coupon(self) -> PricingResult:
        """Drop a manual selection (or a rejection) and return to the default price."""
        self._apply_default()
        return self.current()

    # ------------------------------------------------------------------
    # Result builders
    # ------------------------------------------------------------------

    def _base_result(self) -> PricingResult:
        return PricingResult(
            room_type=self.offer.room_type,
            nights=self.nights,
            original_price=self.original_price,
            final_price=self.original_price,
            discount_source="none",
            state=self._state,
        )

    def _event_result(self, event: EventDiscount, warning: str | None) -> PricingResult:
        final_price = self.original_price
        applied = event.as_discount()
        if applied is not None:
            discount, nights = applied
            final_price = discount.final_price(self.original_price, nights)
        return PricingResult(
            room_type=self.offer.room_type,
            nights=self.nights,
            original_price=self.original_price,
            final_price=final_price,
            discount_source="event",
            state=self._state,
            discount=event.discount,
            fixed_discount=event.fixed_discount,
            discount_type=event.discount_type,
            event_name=event.event_name,
            event_uuid=event.event_uuid,
            total_fixed_discount=event.total_fixed_discount,
            warning=warning,
        )

    def _coupon_result(self, coupon: Coupon) -> PricingResult:
        discount = coupon.discount
        final_price = discount.final_price(self.original_price, self.nights)
        if isinstance(discount, Percentage):
            percent = float(discount.value)
            fixed_total = 0
            shown_value: float = percent
        else:
            percent = 0.0
            fixed_total = round_half_up(discount.amount_off(self.original_price, self.nights))
            shown_value = fixed_total
        return PricingResult(
            room_type=self.offer.room_type,
            nights=self.nights,
            original_price=self.original_price,
            final_price=final_price,
            discount_source="coupon",
            state=self._state,
            coupon_code=coupon.code,
            coupon_uuid=coupon.identity,
            coupon_discount=percent,
            coupon_fixed_discount=fixed_total,
            coupon_discount_type=discount.discount_type,
            coupon_discount_value=shown_value,
        )


def price_room(
    offer: RoomOffer,
    stay: Stay,
    events: Iterable[PromotionEvent],
    hotel_coupons: Iterable[Coupon] = (),
    wallet_coupons: Iterable[Coupon] = (),
    *,
    today: date,
    coupon_id: str | None = None,
    min_nights: int | None = None,
) -> PricingResult:
    """One-shot pricing: default selection, or ``coupon_id`` when given."""
    session = RoomPricing(
        offer,
        stay,
        events,
        hotel_coupons,
        wallet_coupons,
        today=today,
        min_nights=min_nights,
    )
    if coupon_id is None:
        return session.current()
    return session.select_coupon(coupon_id)
