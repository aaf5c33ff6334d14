from haulroute.domain.models import (
    DriverPreferences,
    preferences_to_record,
    stop_to_record,
)
from haulroute.services.watcher import RouteWatcher

from conftest import AARHUS, COPENHAGEN, ESBJERG, ODENSE, make_stop


def test_watcher_rebuilds_on_each_snapshot(store):
    routes = []
    watcher = RouteWatcher(
        store, "trucker-1", COPENHAGEN, routes.append, price_per_stop=10.0
    )
    watcher.start()

    assert routes and routes[-1].is_empty

    store.set("deliveries/aarhus", stop_to_record(make_stop("aarhus", AARHUS)))
    store.set("deliveries/odense", stop_to_record(make_stop("odense", ODENSE)))

    assert watcher.latest is not None
    assert watcher.latest.ordered_stops == ("odense", "aarhus")
    assert watcher.latest.estimated_earnings == 20.0

    store.update("deliveries/odense", {"status": "accepted"})
    assert watcher.latest.ordered_stops == ("aarhus",)

    watcher.stop()
    count = len(routes)
    store.set("deliveries/esbjerg", stop_to_record(make_stop("esbjerg", ESBJERG)))
    assert len(routes) == count


def test_watcher_follows_preferences_and_position(store):
    store.set("users/trucker-1", {"role": "trucker"})
    store.set("deliveries/aarhus", stop_to_record(make_stop("aarhus", AARHUS)))
    store.set(
        "deliveries/kiel",
        stop_to_record(make_stop("kiel", ESBJERG, country="Germany")),
    )
    routes = []
    watcher = RouteWatcher(store, "trucker-1", COPENHAGEN, routes.append)
    watcher.start()

    assert set(watcher.latest.ordered_stops) == {"aarhus", "kiel"}

    prefs = DriverPreferences(preferred_countries=frozenset({"Germany"}))
    store.update("users/trucker-1", {"preferences": preferences_to_record(prefs)})
    assert watcher.latest.ordered_stops == ("kiel",)

    moved = watcher.move_to(ESBJERG)
    assert moved.polyline[0] == ESBJERG
    assert routes[-1] is moved
    assert len({route.id for route in routes}) == 1
    watcher.stop()
