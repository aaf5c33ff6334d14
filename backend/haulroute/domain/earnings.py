from __future__ import annotations

from typing import Sequence

from haulroute.domain.models import DeliveryStop


def estimate_earnings(
    ordered_stops: Sequence[DeliveryStop],
    price_per_stop: float,
) -> float:
    """Flat per-stop estimate. A negative rate is treated as no rate."""

    if price_per_stop < 0:
        return 0.0
    return len(ordered_stops) * float(price_per_stop)
