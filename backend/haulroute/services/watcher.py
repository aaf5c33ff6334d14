from __future__ import annotations

from threading import Lock
from typing import Any, Callable
from uuid import uuid4

from haulroute.core.logging import get_logger
from haulroute.domain.geometry import Coordinate
from haulroute.domain.models import (
    DeliveryStop,
    DriverPreferences,
    Route,
    preferences_from_record,
)
from haulroute.services.delivery_service import (
    DELIVERIES,
    USERS,
    stops_from_snapshot,
)
from haulroute.services.routing import build_route
from haulroute.services.store import DocumentStore


RouteCallback = Callable[[Route], None]


_logger = get_logger(__name__)


class RouteWatcher:
    """Keeps a driver's route current as deliveries and preferences change.

    Each store notification replaces the cached snapshot wholesale and the
    route is rebuilt from the latest deliveries and preferences.
    """

    def __init__(
        self,
        store: DocumentStore,
        driver_id: str,
        start: Coordinate,
        on_route: RouteCallback,
        *,
        price_per_stop: float = 100.0,
        title: str | None = None,
    ) -> None:
        self._store = store
        self._driver_id = driver_id
        self._start = start
        self._on_route = on_route
        self._price_per_stop = price_per_stop
        self._route_id = uuid4().hex
        self._title = title
        self._lock = Lock()
        self._stops: list[DeliveryStop] = []
        self._prefs = DriverPreferences()
        self._latest: Route | None = None
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def latest(self) -> Route | None:
        return self._latest

    def start(self) -> None:
        if self._unsubscribers:
            return
        _logger.info("Route watcher started", driver_id=self._driver_id)
        self._unsubscribers = [
            self._store.subscribe(
                f"{USERS}/{self._driver_id}", self._on_user_snapshot
            ),
            self._store.subscribe(DELIVERIES, self._on_deliveries_snapshot),
        ]

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        _logger.info("Route watcher stopped", driver_id=self._driver_id)

    def move_to(self, start: Coordinate) -> Route:
        """Update the driver position and rebuild immediately."""

        with self._lock:
            self._start = start
        return self._rebuild()

    def _on_user_snapshot(self, snapshot: Any) -> None:
        prefs_payload = (
            snapshot.get("preferences") if isinstance(snapshot, dict) else None
        )
        with self._lock:
            self._prefs = (
                preferences_from_record(prefs_payload)
                if isinstance(prefs_payload, dict)
                else DriverPreferences()
            )
        self._rebuild()

    def _on_deliveries_snapshot(self, snapshot: Any) -> None:
        with self._lock:
            self._stops = stops_from_snapshot(snapshot)
        self._rebuild()

    def _rebuild(self) -> Route:
        with self._lock:
            route = build_route(
                self._start,
                self._stops,
                self._prefs,
                self._price_per_stop,
                title=self._title,
                route_id=self._route_id,
                driver_id=self._driver_id,
            )
            self._latest = route
        self._on_route(route)
        return route
