from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .errors import InvalidDurationError, InvalidPartySizeError

HOURLY_RATES = {6: 250, 12: 400}
DURATION_DISCOUNTS = {1: 0, 3: 0, 6: 10, 12: 15}
LOYALTY_THRESHOLD = 5
LOYALTY_DISCOUNT = 2


@dataclass(frozen=True)
class PriceBreakdown:
    base_rate: int
    subtotal: int
    final_price: int
    duration_discount: int
    duration_discount_label: str
    promo_discount: int
    loyalty_discount: int


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _percent_off(value: Decimal, percent: int) -> Decimal:
    return value * (Decimal(100 - percent) / Decimal(100))


def duration_discount_label(duration: int) -> str:
    discount = DURATION_DISCOUNTS[duration]
    if discount == 0:
        return "No discount"
    return f"{discount}% off for {duration} hours"


def compute_price(members: int, duration: int, booking_count: int, promo_discount: int) -> PriceBreakdown:
    """
    Price one booking.

    `booking_count` already includes the booking being priced, so the loyalty
    discount starts at the customer's fifth completed booking. Discounts are
    applied in order (duration, promo, loyalty) and the final price is rounded
    once at the end.
    """
    if members not in HOURLY_RATES:
        raise InvalidPartySizeError(f"party size must be one of {sorted(HOURLY_RATES)}")
    if duration not in DURATION_DISCOUNTS:
        raise InvalidDurationError(f"duration must be one of {sorted(DURATION_DISCOUNTS)}")
    if not 0 <= promo_discount <= 100:
        raise ValueError("promo discount must be between 0 and 100")

    rate = HOURLY_RATES[members]
    duration_discount = DURATION_DISCOUNTS[duration]
    subtotal = _percent_off(Decimal(rate * duration), duration_discount)

    loyalty_discount = LOYALTY_DISCOUNT if booking_count >= LOYALTY_THRESHOLD else 0
    final = _percent_off(_percent_off(subtotal, promo_discount), loyalty_discount)

    return PriceBreakdown(
        base_rate=rate,
        subtotal=_round_half_up(subtotal),
        final_price=_round_half_up(final),
        duration_discount=duration_discount,
        duration_discount_label=duration_discount_label(duration),
        promo_discount=promo_discount,
        loyalty_discount=loyalty_discount,
    )
