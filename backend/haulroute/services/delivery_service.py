from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Literal

from haulroute.core.logging import get_logger
from haulroute.domain.address import country_from_address
from haulroute.domain.geometry import Coordinate
from haulroute.domain.models import (
    Cargo,
    DeliveryStop,
    DriverPreferences,
    Role,
    Route,
    preferences_from_record,
    preferences_to_record,
    route_from_record,
    route_to_record,
    stop_from_record,
    stop_to_record,
)
from haulroute.services.geocoding import (
    ReverseGeocodeResult,
    geocode_address,
    reverse_geocode,
)
from haulroute.services.routing import build_route
from haulroute.services.store import DocumentStore

if TYPE_CHECKING:
    from haulroute.services.watcher import RouteWatcher


GeocoderCallable = Callable[[str], Awaitable[Coordinate | None]]
ReverseGeocoderCallable = Callable[
    [float, float], Awaitable[ReverseGeocodeResult | None]
]
RouteBuilder = Callable[..., Route]

DELIVERIES = "deliveries"
ROUTES = "routes"
USERS = "users"


_logger = get_logger(__name__)


class DeliveryError(Exception):
    """Base class for errors surfaced to callers of the delivery service."""


class UserNotFound(DeliveryError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"Unknown user '{user_id}'")


class RoleNotPermitted(DeliveryError):
    def __init__(self, user_id: str, required: Role) -> None:
        self.user_id = user_id
        self.required = required
        super().__init__(f"User '{user_id}' must have role '{required.value}'")


class LocationNotResolved(DeliveryError):
    """Raised when neither a coordinate nor a geocodable address was supplied."""


class RouteNotFound(DeliveryError):
    def __init__(self, route_id: str) -> None:
        self.route_id = route_id
        super().__init__(f"Route '{route_id}' not found")


class RouteNotAssigned(DeliveryError):
    def __init__(self, route_id: str, user_id: str) -> None:
        self.route_id = route_id
        self.user_id = user_id
        super().__init__(f"Route '{route_id}' was not planned for '{user_id}'")


class StopUnavailable(DeliveryError):
    def __init__(self, stop_ids: Iterable[str]) -> None:
        self.stop_ids = list(stop_ids)
        super().__init__(
            "Deliveries no longer available: " + ", ".join(self.stop_ids)
        )


@dataclass(slots=True)
class DeliveryDraft:
    """A company's delivery submission before location resolution."""

    cargo: Cargo
    coordinate: Coordinate | None = None
    address: str | None = None
    details: str | None = None


@dataclass(slots=True)
class UserRecord:
    user_id: str
    role: Role
    preferences: DriverPreferences | None = None


class DeliveryService:
    """Coordinates the store, location service and route planning."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        price_per_stop: float = 100.0,
        country_source: Literal["address", "geocoder"] = "address",
        geocoder: GeocoderCallable = geocode_address,
        reverse_geocoder: ReverseGeocoderCallable = reverse_geocode,
        route_builder: RouteBuilder = build_route,
    ) -> None:
        self._store = store
        self._price_per_stop = price_per_stop
        self._country_source = country_source
        self._geocoder = geocoder
        self._reverse_geocoder = reverse_geocoder
        self._route_builder = route_builder
        self._lock = asyncio.Lock()

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def price_per_stop(self) -> float:
        return self._price_per_stop

    async def register_user(self, user_id: str, role: Role) -> UserRecord:
        await asyncio.to_thread(
            self._store.update, f"{USERS}/{user_id}", {"role": role.value}
        )
        _logger.info("User registered", user_id=user_id, role=role.value)
        return await self.get_user(user_id)

    async def get_user(self, user_id: str) -> UserRecord:
        payload = await asyncio.to_thread(self._store.get, f"{USERS}/{user_id}")
        if not isinstance(payload, dict) or "role" not in payload:
            raise UserNotFound(user_id)
        try:
            role = Role(payload["role"])
        except ValueError as exc:
            raise UserNotFound(user_id) from exc
        prefs_payload = payload.get("preferences")
        return UserRecord(
            user_id=user_id,
            role=role,
            preferences=preferences_from_record(prefs_payload)
            if isinstance(prefs_payload, dict)
            else None,
        )

    async def require_role(self, user_id: str, role: Role) -> UserRecord:
        user = await self.get_user(user_id)
        if user.role is not role:
            _logger.warning(
                "Role check failed",
                user_id=user_id,
                role=user.role.value,
                required=role.value,
            )
            raise RoleNotPermitted(user_id, role)
        return user

    async def save_preferences(
        self, user_id: str, prefs: DriverPreferences
    ) -> DriverPreferences:
        await self.require_role(user_id, Role.TRUCKER)
        await asyncio.to_thread(
            self._store.update,
            f"{USERS}/{user_id}",
            {"preferences": preferences_to_record(prefs)},
        )
        _logger.info(
            "Preferences saved",
            user_id=user_id,
            countries=sorted(prefs.preferred_countries),
        )
        return prefs

    async def get_preferences(self, user_id: str) -> DriverPreferences:
        user = await self.require_role(user_id, Role.TRUCKER)
        return user.preferences or DriverPreferences()

    async def create_delivery(self, user_id: str, draft: DeliveryDraft) -> DeliveryStop:
        await self.require_role(user_id, Role.COMPANY)

        coordinate, address, country = await self._resolve_location(draft)

        stop = DeliveryStop(
            id="",
            pickup_coordinate=coordinate,
            pickup_address=address,
            country_of_pickup=country,
            cargo=draft.cargo,
            details=draft.details,
            created_by=user_id,
        )
        record = stop_to_record(stop)
        record["created_at"] = datetime.now(timezone.utc).isoformat()
        stop_id = await asyncio.to_thread(self._store.push, DELIVERIES, record)

        _logger.info(
            "Delivery created",
            delivery_id=stop_id,
            created_by=user_id,
            country=country,
            latitude=coordinate.latitude,
            longitude=coordinate.longitude,
        )
        return replace(stop, id=stop_id)

    async def list_deliveries(self, status: str | None = None) -> list[DeliveryStop]:
        snapshot = await asyncio.to_thread(self._store.children, DELIVERIES)
        stops = stops_from_snapshot(snapshot)
        if status is not None:
            stops = [stop for stop in stops if stop.status == status]
        return stops

    async def plan_route(
        self,
        user_id: str,
        start: Coordinate,
        *,
        title: str | None = None,
    ) -> Route:
        """Sequence the pending deliveries matching the driver's preferences."""

        user = await self.require_role(user_id, Role.TRUCKER)
        prefs = user.preferences or DriverPreferences()
        stops = await self.list_deliveries()

        route = await asyncio.to_thread(
            self._route_builder,
            start,
            stops,
            prefs,
            self._price_per_stop,
            title=title,
            driver_id=user_id,
        )

        if route.is_empty:
            _logger.info("Route plan empty", user_id=user_id, candidates=len(stops))
            return route

        await asyncio.to_thread(
            self._store.set, f"{ROUTES}/{route.id}", route_to_record(route)
        )
        _logger.info(
            "Route planned",
            user_id=user_id,
            route_id=route.id,
            stops=len(route.ordered_stops),
            earnings=route.estimated_earnings,
        )
        return route

    async def list_routes(self) -> list[Route]:
        snapshot = await asyncio.to_thread(self._store.children, ROUTES)
        return [route_from_record(key, value) for key, value in snapshot.items()]

    async def get_route(self, route_id: str) -> Route:
        payload = await asyncio.to_thread(self._store.get, f"{ROUTES}/{route_id}")
        if not isinstance(payload, dict) or "stops" not in payload:
            raise RouteNotFound(route_id)
        return route_from_record(route_id, payload)

    async def accept_route(self, user_id: str, route_id: str) -> Route:
        """Claim every stop of a planned route for the calling driver."""

        await self.require_role(user_id, Role.TRUCKER)

        async with self._lock:
            route = await self.get_route(route_id)
            if route.driver_id is not None and route.driver_id != user_id:
                _logger.warning(
                    "Route acceptance rejected",
                    route_id=route_id,
                    user_id=user_id,
                    planned_for=route.driver_id,
                )
                raise RouteNotAssigned(route_id, user_id)
            stops = await self.list_deliveries()
            by_id = {stop.id: stop for stop in stops}

            unavailable = [
                stop_id
                for stop_id in route.ordered_stops
                if stop_id not in by_id
                or by_id[stop_id].status != "pending"
                or by_id[stop_id].route_id not in (None, route_id)
            ]
            if route.status == "accepted" or unavailable:
                _logger.warning(
                    "Route acceptance rejected",
                    route_id=route_id,
                    user_id=user_id,
                    unavailable=unavailable,
                    status=route.status,
                )
                raise StopUnavailable(unavailable or route.ordered_stops)

            for stop_id in route.ordered_stops:
                await asyncio.to_thread(
                    self._store.update,
                    f"{DELIVERIES}/{stop_id}",
                    {"status": "accepted", "route_id": route_id},
                )

            accepted = replace(route, status="accepted", driver_id=user_id)
            await asyncio.to_thread(
                self._store.set, f"{ROUTES}/{route_id}", route_to_record(accepted)
            )

        _logger.info(
            "Route accepted",
            route_id=route_id,
            user_id=user_id,
            stops=len(accepted.ordered_stops),
        )
        return accepted

    def watch_route(
        self,
        driver_id: str,
        start: Coordinate,
        on_route: Callable[[Route], None],
        *,
        title: str | None = None,
    ) -> RouteWatcher:
        """Start a watcher that re-plans the driver's route on every change."""

        from haulroute.services.watcher import RouteWatcher

        watcher = RouteWatcher(
            self._store,
            driver_id,
            start,
            on_route,
            price_per_stop=self._price_per_stop,
            title=title,
        )
        watcher.start()
        return watcher

    async def _resolve_location(
        self, draft: DeliveryDraft
    ) -> tuple[Coordinate, str | None, str | None]:
        coordinate = draft.coordinate
        address = draft.address.strip() if draft.address else None
        structured_country: str | None = None

        if coordinate is None:
            if not address:
                raise LocationNotResolved("A pickup address or coordinate is required")
            coordinate = await self._geocoder(address)
            if coordinate is None:
                raise LocationNotResolved(f"Could not locate address '{address}'")

        if not address:
            resolved = await self._reverse_geocoder(
                coordinate.latitude, coordinate.longitude
            )
            if resolved is None:
                _logger.warning(
                    "Pickup address unresolved",
                    latitude=coordinate.latitude,
                    longitude=coordinate.longitude,
                )
            else:
                address = resolved.address
                structured_country = resolved.country

        if self._country_source == "geocoder" and structured_country:
            country = structured_country
        else:
            country = country_from_address(address)

        return coordinate, address, country


def stops_from_snapshot(snapshot: object) -> list[DeliveryStop]:
    """Decode a ``deliveries`` snapshot, skipping records that cannot be read."""

    if not isinstance(snapshot, dict):
        return []
    stops: list[DeliveryStop] = []
    for key, value in snapshot.items():
        try:
            stops.append(stop_from_record(key, value))
        except (KeyError, TypeError, ValueError) as exc:
            _logger.warning(
                "Skipping malformed delivery", delivery_id=key, error=str(exc)
            )
    return stops


_delivery_service: DeliveryService | None = None


def get_delivery_service(
    storage_root: Path,
    *,
    price_per_stop: float = 100.0,
    country_source: Literal["address", "geocoder"] = "address",
) -> DeliveryService:
    global _delivery_service
    if _delivery_service is None:
        store = DocumentStore(storage_root / "haulroute.db")
        _delivery_service = DeliveryService(
            store,
            price_per_stop=price_per_stop,
            country_source=country_source,
        )
    return _delivery_service
