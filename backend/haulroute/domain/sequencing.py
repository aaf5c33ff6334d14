from __future__ import annotations

from typing import Sequence

from haulroute.domain.geometry import Coordinate, distance_km
from haulroute.domain.models import DeliveryStop


def sequence(start: Coordinate, stops: Sequence[DeliveryStop]) -> list[DeliveryStop]:
    """
    Order stops with the greedy nearest-neighbor heuristic.

    Args:
        start: Position the driver departs from.
        stops: Candidate stops; each is visited exactly once.

    Returns:
        Stops in visiting order. Each step picks the remaining stop closest to
        the current position; on equal distance the one listed first wins.
        The tour is a local optimum, not the shortest possible one.
    """
    remaining = list(stops)
    ordered: list[DeliveryStop] = []
    current = start

    while remaining:
        best_index = 0
        best_distance = distance_km(current, remaining[0].pickup_coordinate)
        for index in range(1, len(remaining)):
            candidate = distance_km(current, remaining[index].pickup_coordinate)
            if candidate < best_distance:
                best_index = index
                best_distance = candidate

        chosen = remaining.pop(best_index)
        ordered.append(chosen)
        current = chosen.pickup_coordinate

    return ordered
