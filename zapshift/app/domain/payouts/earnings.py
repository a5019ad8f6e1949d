"""
Rider earning calculation.

Riders earn a fraction of the declared parcel cost: a higher share for
deliveries inside one district, a lower one across districts.
"""

from decimal import Decimal, ROUND_HALF_UP

from zapshift.app.core.config import Settings


def earning_rate(sender_district: str, receiver_district: str, settings: Settings) -> Decimal:
    """Rate applied to the parcel cost for this route."""
    if sender_district == receiver_district:
        return settings.same_district_rate
    return settings.cross_district_rate


def compute_rider_earning(cost: int, sender_district: str, receiver_district: str, settings: Settings) -> int:
    """Earning in the currency's smallest unit, rounded half up (1001 at 0.8 -> 801)."""
    rate = earning_rate(sender_district, receiver_district, settings)
    amount = (Decimal(cost) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(amount)
