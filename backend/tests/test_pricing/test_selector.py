"""Tests for the best-discount selector: states, booking scenarios and invariants."""

from datetime import date

import pytest

from danjam.pricing.errors import (
    DISCOUNT_CONFLICT_MESSAGE,
    CouponNotEligibleError,
    DiscountConflictError,
    MissingInputError,
)
from danjam.pricing.selector import RoomPricing, price_room
from danjam.schemas.pricing import DiscountState, Stay
from tests.factories import (
    TODAY,
    make_coupon,
    make_event,
    make_hotel_coupon,
    make_offer,
    make_stay,
)


def _session(events=(), hotel=(), wallet=(), offer=None, stay=None):
    return RoomPricing(
        offer or make_offer(),
        stay or make_stay(),
        list(events),
        hotel,
        wallet,
        today=TODAY,
    )


# ---------------------------------------------------------------------------
# Booking scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    """100,000/night for two nights unless stated otherwise."""

    def test_fixed_coupon_without_event(self):
        result = _session(wallet=[make_coupon(value=10_000)]).current()
        assert result.original_price == 200_000
        assert result.final_price == 180_000
        assert result.discount_source == "coupon"
        assert result.coupon_fixed_discount == 20_000
        assert result.state is DiscountState.AUTO_COUPON

    def test_event_wins_and_coupon_is_rejected(self):
        coupon = make_coupon(discount_type="percentage", value=30)
        session = _session(events=[make_event(value=20)], wallet=[coupon])
        assert session.current().final_price == 160_000
        assert session.state is DiscountState.EVENT_DISCOUNT

        with pytest.raises(DiscountConflictError) as exc_info:
            session.select_coupon("cpn-1")

        fallback = exc_info.value.result
        assert fallback.final_price == 160_000
        assert fallback.discount_source == "event"
        assert fallback.coupon_uuid is None
        assert fallback.warning == DISCOUNT_CONFLICT_MESSAGE
        assert session.state is DiscountState.REJECTED
        assert session.selected_coupon is None

    def test_fixed_event_for_one_of_two_nights(self):
        event = make_event(
            discount_type="fixed", value=5_000, start=date(2025, 5, 25), end=date(2025, 6, 1)
        )
        result = _session(events=[event]).current()
        assert result.total_fixed_discount == 5_000
        assert result.final_price == 195_000

    def test_fixed_coupon_beats_percentage_by_effective_amount(self):
        percent = make_coupon(uuid="pct", discount_type="percentage", value=10)
        fixed = make_coupon(uuid="fix", value=15_000)
        result = _session(wallet=[percent, fixed]).current()
        assert result.coupon_uuid == "fix"
        assert result.final_price == 170_000

    def test_coupon_validity_uses_today(self):
        far_stay = Stay(check_in=date(2025, 6, 30), check_out=date(2025, 7, 2))
        coupon = make_coupon(start=TODAY, end=TODAY)
        result = _session(wallet=[coupon], stay=far_stay).current()
        assert result.discount_source == "coupon"

        later = RoomPricing(make_offer(), far_stay, [], (), [coupon], today=date(2025, 5, 2))
        assert later.current().discount_source == "none"


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------


class TestStates:
    def test_no_discount(self):
        result = _session().current()
        assert result.state is DiscountState.NO_DISCOUNT
        assert result.final_price == result.original_price == 200_000
        assert not result.show_original_price

    def test_manual_override_and_clear(self):
        best = make_coupon(uuid="best", value=20_000)
        small = make_hotel_coupon(uuid="small", value=5)
        session = _session(hotel=[small], wallet=[best])
        assert session.current().coupon_uuid == "best"

        manual = session.select_coupon("small")
        assert session.state is DiscountState.MANUAL_COUPON
        assert manual.final_price == 190_000
        assert manual.coupon_discount == 5
        assert manual.coupon_discount_type == "percentage"
        assert manual.coupon_fixed_discount == 0

        cleared = session.clear_coupon()
        assert session.state is DiscountState.AUTO_COUPON
        assert cleared.coupon_uuid == "best"

    def test_ineligible_selection(self):
        session = _session(wallet=[make_coupon()])
        with pytest.raises(CouponNotEligibleError):
            session.select_coupon("missing")
        assert session.state is DiscountState.AUTO_COUPON

    def test_clear_after_rejection_restores_event(self):
        session = _session(events=[make_event()], wallet=[make_coupon()])
        with pytest.raises(DiscountConflictError):
            session.select_coupon("cpn-1")
        result = session.clear_coupon()
        assert session.state is DiscountState.EVENT_DISCOUNT
        assert result.warning is None

    def test_coupons_listed_even_when_event_applies(self):
        session = _session(events=[make_event()], wallet=[make_coupon()])
        assert [c.coupon_uuid for c in session.eligible_coupons] == ["cpn-1"]
        assert session.current().discount_source == "event"

    @pytest.mark.parametrize(
        ("offer", "stay", "events"),
        [
            (None, make_stay(), []),
            (make_offer(), None, []),
            (make_offer(), make_stay(), None),
        ],
    )
    def test_missing_input(self, offer, stay, events):
        with pytest.raises(MissingInputError):
            RoomPricing(offer, stay, events, today=TODAY)

    def test_same_day_stay_billed_one_night(self):
        stay = Stay(check_in=date(2025, 6, 1), check_out=date(2025, 6, 1))
        result = _session(stay=stay).current()
        assert result.nights == 1
        assert result.final_price == 100_000

    def test_same_day_stay_under_fixed_event(self):
        stay = Stay(check_in=date(2025, 6, 1), check_out=date(2025, 6, 1))
        event = make_event(
            discount_type="fixed", value=5_000, start=date(2025, 5, 20), end=date(2025, 6, 10)
        )
        result = _session(events=[event], wallet=[make_coupon()], stay=stay).current()
        assert result.discount_source == "event"
        assert result.total_fixed_discount == 5_000
        assert result.final_price == 95_000
        assert result.show_original_price

    def test_same_day_stay_under_percentage_event(self):
        stay = Stay(check_in=date(2025, 6, 1), check_out=date(2025, 6, 1))
        event = make_event(start=date(2025, 5, 20), end=date(2025, 6, 10))
        assert _session(events=[event], stay=stay).current().final_price == 80_000

    def test_price_room_with_coupon_id(self):
        small = make_coupon(uuid="small", value=1_000)
        big = make_coupon(uuid="big", value=9_000)
        result = price_room(
            make_offer(), make_stay(), [], (), [small, big], today=TODAY, coupon_id="small"
        )
        assert result.coupon_uuid == "small"
        assert result.final_price == 198_000


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------


class TestInvariants:
    @pytest.mark.parametrize(
        ("events", "wallet"),
        [
            ([], []),
            ([make_event()], []),
            ([], [make_coupon()]),
            ([make_event()], [make_coupon()]),
            ([make_event(discount_type="fixed", value=3_000)], [make_coupon()]),
        ],
    )
    def test_exclusivity(self, events, wallet):
        result = _session(events=events, wallet=wallet).current()
        event_part = result.discount > 0 or result.fixed_discount > 0
        coupon_part = result.coupon_discount > 0 or result.coupon_fixed_discount > 0
        assert not (event_part and coupon_part)

    def test_fixed_coupon_larger_than_price(self):
        result = _session(wallet=[make_coupon(value=150_000)]).current()
        assert result.final_price == 0

    def test_fixed_event_larger_than_price(self):
        event = make_event(discount_type="fixed", value=300_000)
        assert _session(events=[event]).current().final_price == 0

    def test_percentage_coupon_clamped(self):
        coupon = make_coupon(discount_type="percentage", value=150)
        result = _session(wallet=[coupon]).current()
        assert result.final_price == 0
        assert result.coupon_discount == 100

    def test_idempotent_and_wallet_untouched(self):
        wallet = [make_coupon(uuid="a"), make_coupon(uuid="b", value=12_000)]
        first = _session(wallet=wallet).current()
        second = _session(wallet=wallet).current()
        assert first == second
        assert all(not c.used for c in wallet)
