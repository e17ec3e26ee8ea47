from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from geocache.config import settings


def _round_half_away(value: float, places: int) -> float:
    # ROUND_HALF_UP on Decimal rounds ties away from zero, so negatives mirror positives
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_coordinates(lat: float, lng: float, places: int | None = None) -> tuple[float, float]:
    """
    Reduce precision for privacy-safe public display.
    3 places is roughly 111 m at the equator. Idempotent; whole numbers stay exact.
    """
    p = settings.coordinate_precision if places is None else places
    return _round_half_away(float(lat), p), _round_half_away(float(lng), p)
