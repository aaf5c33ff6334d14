from __future__ import annotations

from typing import Iterable
from uuid import uuid4

from haulroute.core.logging import get_logger
from haulroute.domain.earnings import estimate_earnings
from haulroute.domain.filtering import filter_stops
from haulroute.domain.geometry import Coordinate
from haulroute.domain.models import DeliveryStop, DriverPreferences, Route
from haulroute.domain.sequencing import sequence


_logger = get_logger(__name__)


def build_route(
    start: Coordinate,
    candidate_stops: Iterable[DeliveryStop],
    prefs: DriverPreferences,
    price_per_stop: float,
    *,
    title: str | None = None,
    route_id: str | None = None,
    driver_id: str | None = None,
) -> Route:
    """Filter, sequence and price candidate stops into a route from ``start``.

    Never raises for bad data: an out-of-range start gives the empty route,
    stops with out-of-range coordinates or non-positive cargo are skipped, and
    a repeated stop id keeps only its first occurrence.
    A route with no stops is a valid "nothing to do" answer.
    """

    route_id = route_id or uuid4().hex
    title = title or f"Route {route_id[:8]}"

    def _empty() -> Route:
        return Route(
            id=route_id,
            title=title,
            ordered_stops=(),
            polyline=(start,),
            estimated_earnings=0.0,
            driver_id=driver_id,
        )

    if not start.is_valid():
        _logger.warning(
            "Route build skipped",
            reason="invalid start",
            latitude=start.latitude,
            longitude=start.longitude,
        )
        return _empty()

    candidates = filter_stops(_unique_by_id(candidate_stops), prefs)
    usable = [stop for stop in candidates if _is_usable(stop)]
    if len(usable) != len(candidates):
        _logger.warning(
            "Skipped invalid stops",
            skipped=[stop.id for stop in candidates if not _is_usable(stop)],
        )

    _logger.info(
        "Route build started",
        route_id=route_id,
        candidates=len(usable),
        countries=sorted(prefs.preferred_countries),
    )

    if not usable:
        _logger.info("Route build finished", route_id=route_id, stops=0)
        return _empty()

    ordered = sequence(start, usable)
    earnings = estimate_earnings(ordered, price_per_stop)

    route = Route(
        id=route_id,
        title=title,
        ordered_stops=tuple(stop.id for stop in ordered),
        polyline=(start, *(stop.pickup_coordinate for stop in ordered)),
        estimated_earnings=earnings,
        driver_id=driver_id,
    )

    _logger.info(
        "Route build finished",
        route_id=route_id,
        stops=len(ordered),
        distance_km=round(route.total_distance_km, 3),
        earnings=earnings,
    )
    return route


def _is_usable(stop: DeliveryStop) -> bool:
    return stop.pickup_coordinate.is_valid() and stop.cargo.is_valid()


def _unique_by_id(stops: Iterable[DeliveryStop]) -> list[DeliveryStop]:
    """Keep the first stop seen for each id."""

    seen: set[str] = set()
    unique: list[DeliveryStop] = []
    duplicates: list[str] = []
    for stop in stops:
        if stop.id in seen:
            duplicates.append(stop.id)
            continue
        seen.add(stop.id)
        unique.append(stop)
    if duplicates:
        _logger.warning("Skipped duplicate stops", skipped=duplicates)
    return unique
