"""Event applicability: which hotel promotion applies to a room for a stay."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from danjam.pricing.calculator import round_half_up
from danjam.pricing.discount import Discount, Fixed, Percentage
from danjam.pricing.room_types import normalize_room_type
from danjam.schemas.pricing import Stay
from danjam.schemas.promotion import PromotionEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventDiscount:
    """Outcome of event resolution for one room.

    ``discount`` and ``fixed_discount`` are the largest percentage and fixed
    values seen among matching events. ``discount_type`` names the event left
    standing in the single selected slot, which is the one actually priced.
    """

    discount: float = 0
    fixed_discount: float = 0
    discount_type: str | None = None
    event_name: str | None = None
    event_uuid: str | None = None
    overlap_nights: int = 0
    total_fixed_discount: int = 0

    @property
    def is_active(self) -> bool:
        return self.discount > 0 or self.fixed_discount > 0

    def as_discount(self) -> tuple[Discount, int] | None:
        """The discount to price with and the night count it multiplies by."""
        if self.discount_type == "fixed" and self.total_fixed_discount > 0:
            return Fixed(self.fixed_discount), self.overlap_nights
        if self.discount_type == "percentage" and self.discount > 0:
            return Percentage(self.discount), self.overlap_nights
        return None


NO_EVENT = EventDiscount()


def billing_end(stay: Stay, nights: int | None = None) -> date:
    """Exclusive end of the billed nights.

    A same-day stay billed as one night covers ``[check_in, check_in + 1)``.
    """
    if nights is None:
        return stay.check_out
    return max(stay.check_out, stay.check_in + timedelta(days=nights))


def overlap_nights(stay: Stay, event: PromotionEvent, nights: int | None = None) -> int:
    """Billed nights that fall inside the event (end date inclusive)."""
    start = max(stay.check_in, event.start_date)
    end = min(billing_end(stay, nights), event.end_date + timedelta(days=1))
    return max((end - start).days, 0)


def event_applies(
    event: PromotionEvent, room_key: str, stay: Stay, nights: int | None = None
) -> bool:
    if not event.is_active:
        return False
    if room_key not in {normalize_room_type(rt) for rt in event.applicable_room_types}:
        return False
    return event.start_date < billing_end(stay, nights) and event.end_date >= stay.check_in


def resolve_event_discount(
    room_type: str,
    stay: Stay,
    events: Iterable[PromotionEvent],
    nights: int | None = None,
) -> EventDiscount:
    """Find the event discount for ``room_type`` over ``stay``.

    ``nights`` is the billed night count; when it exceeds the calendar
    difference the billed interval is extended from check-in to match.

    Percentage and fixed maxima are tracked separately and never compared by
    monetary effect: whichever event most recently raised the maximum of its
    own type occupies the selected slot. A later fixed event can therefore
    displace an earlier, larger percentage event.
    """
    room_key = normalize_room_type(room_type)
    max_percent = 0.0
    max_fixed = 0.0
    selected: PromotionEvent | None = None
    selected_overlap = 0

    for event in events:
        if not event_applies(event, room_key, stay, nights):
            continue
        overlap = overlap_nights(stay, event, nights)
        value = float(event.discount.value)
        if event.discount_type == "percentage" and value > max_percent:
            max_percent = value
            selected, selected_overlap = event, overlap
        elif event.discount_type == "fixed" and value > max_fixed:
            max_fixed = value
            selected, selected_overlap = event, overlap

    if selected is None:
        return NO_EVENT

    total_fixed = 0
    if selected.discount_type == "fixed":
        total_fixed = round_half_up(selected.discount.amount_off(0, selected_overlap))

    logger.debug(
        "Event %s (%s) applies to %s for %d night(s)",
        selected.uuid,
        selected.discount_type,
        room_key,
        selected_overlap,
    )
    return EventDiscount(
        discount=max_percent,
        fixed_discount=max_fixed,
        discount_type=selected.discount_type,
        event_name=selected.name,
        event_uuid=selected.uuid,
        overlap_nights=selected_overlap,
        total_fixed_discount=total_fixed,
    )


def active_events_on(events: Iterable[PromotionEvent], today: date) -> list[PromotionEvent]:
    """Events running today, regardless of room type."""
    return [e for e in events if e.is_active and e.start_date <= today <= e.end_date]
