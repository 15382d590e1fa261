"""Price arithmetic for stays: integer minor currency units throughout."""

from decimal import ROUND_HALF_UP, Decimal

_HUNDRED = Decimal(100)


def to_decimal(value: int | float | Decimal) -> Decimal:
    """Convert a numeric input to Decimal without float artefacts (0.1 -> '0.1')."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Decimal) -> int:
    """Round to the nearest whole unit, halves away from zero."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def stay_total(nightly_price: int, nights: int) -> int:
    """Pre-discount price for the whole stay."""
    return nightly_price * nights


def percentage_price(original_price: int, percent: Decimal) -> int:
    """``round(original × (1 − percent/100))``."""
    return round_half_up(to_decimal(original_price) * (_HUNDRED - percent) / _HUNDRED)


def fixed_price(original_price: int, amount: Decimal) -> int:
    """``max(0, original − amount)``; a discount larger than the price yields zero."""
    return max(0, round_half_up(to_decimal(original_price) - amount))
