from __future__ import annotations

from typing import Iterable

from haulroute.domain.models import DeliveryStop, DriverPreferences


def filter_stops(
    stops: Iterable[DeliveryStop],
    prefs: DriverPreferences,
) -> list[DeliveryStop]:
    """
    Narrow candidate stops to those a driver should be offered.

    Stops that are no longer pending are always dropped. The country filter
    only applies when the driver has named at least one preferred country.
    Input order is preserved.
    """
    countries = prefs.preferred_countries
    return [
        stop
        for stop in stops
        if stop.status == "pending"
        and (not countries or stop.country_of_pickup in countries)
    ]
