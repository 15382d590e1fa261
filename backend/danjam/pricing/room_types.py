"""Room-type key normalization shared by event and coupon matching."""

import re

ALL_ROOM_TYPES = "all"

_SEPARATORS = re.compile(r"[\s\-]+")


def normalize_room_type(value: str | None) -> str:
    """Lower-case a room type and drop whitespace and hyphens ("Deluxe Twin" -> "deluxetwin")."""
    if not value:
        return ""
    return _SEPARATORS.sub("", value).lower()
