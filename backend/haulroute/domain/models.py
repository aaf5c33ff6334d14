from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Mapping

from haulroute.domain.geometry import Coordinate, path_length_km

StopStatus = Literal["pending", "accepted"]
RouteStatus = Literal["planned", "accepted"]


class Role(str, Enum):
    TRUCKER = "trucker"
    COMPANY = "company"


@dataclass(frozen=True, slots=True)
class Cargo:
    weight_kg: float
    height_cm: float
    width_cm: float
    length_cm: float

    @property
    def volume_m3(self) -> float:
        return (self.height_cm * self.width_cm * self.length_cm) / 1_000_000

    def is_valid(self) -> bool:
        return all(
            value > 0
            for value in (self.weight_kg, self.height_cm, self.width_cm, self.length_cm)
        )


@dataclass(frozen=True, slots=True)
class DeliveryStop:
    """A delivery request awaiting pickup."""

    id: str
    pickup_coordinate: Coordinate
    pickup_address: str | None
    country_of_pickup: str | None
    cargo: Cargo
    route_id: str | None = None
    status: StopStatus = "pending"
    details: str | None = None
    created_by: str | None = None


@dataclass(frozen=True, slots=True)
class DriverPreferences:
    preferred_countries: frozenset[str] = frozenset()
    truck_type: str = ""
    fuel_economy_km_per_l: float = 1.0
    cargo_space_m3: float = 1.0
    driving_hours_per_day: int = 8
    sleep_duration_hours: int = 8


@dataclass(frozen=True, slots=True)
class Route:
    """Ordered visiting sequence with its derived polyline and earnings."""

    id: str
    title: str
    ordered_stops: tuple[str, ...]
    polyline: tuple[Coordinate, ...]
    estimated_earnings: float = 0.0
    driver_id: str | None = None
    status: RouteStatus = "planned"

    @property
    def total_distance_km(self) -> float:
        return path_length_km(self.polyline)

    @property
    def is_empty(self) -> bool:
        return not self.ordered_stops


def coordinate_to_record(coordinate: Coordinate) -> dict[str, float]:
    return {"latitude": coordinate.latitude, "longitude": coordinate.longitude}


def coordinate_from_record(payload: Mapping[str, Any]) -> Coordinate:
    return Coordinate(float(payload["latitude"]), float(payload["longitude"]))


def stop_to_record(stop: DeliveryStop) -> dict[str, Any]:
    return {
        "location": coordinate_to_record(stop.pickup_coordinate),
        "pickup_address": stop.pickup_address,
        "country": stop.country_of_pickup,
        "weight": stop.cargo.weight_kg,
        "height": stop.cargo.height_cm,
        "width": stop.cargo.width_cm,
        "length": stop.cargo.length_cm,
        "route_id": stop.route_id,
        "status": stop.status,
        "details": stop.details,
        "created_by": stop.created_by,
    }


def stop_from_record(stop_id: str, payload: Mapping[str, Any]) -> DeliveryStop:
    return DeliveryStop(
        id=stop_id,
        pickup_coordinate=coordinate_from_record(payload["location"]),
        pickup_address=payload.get("pickup_address"),
        country_of_pickup=payload.get("country"),
        cargo=Cargo(
            weight_kg=float(payload["weight"]),
            height_cm=float(payload["height"]),
            width_cm=float(payload["width"]),
            length_cm=float(payload["length"]),
        ),
        route_id=payload.get("route_id"),
        status=payload.get("status", "pending"),
        details=payload.get("details"),
        created_by=payload.get("created_by"),
    )


def preferences_to_record(prefs: DriverPreferences) -> dict[str, Any]:
    return {
        "preferred_countries": sorted(prefs.preferred_countries),
        "truck_type": prefs.truck_type,
        "fuel_economy": prefs.fuel_economy_km_per_l,
        "cargo_space": prefs.cargo_space_m3,
        "driving_hours": prefs.driving_hours_per_day,
        "sleep_duration": prefs.sleep_duration_hours,
    }


def preferences_from_record(payload: Mapping[str, Any]) -> DriverPreferences:
    return DriverPreferences(
        preferred_countries=frozenset(payload.get("preferred_countries") or ()),
        truck_type=payload.get("truck_type", ""),
        fuel_economy_km_per_l=float(payload.get("fuel_economy", 1.0)),
        cargo_space_m3=float(payload.get("cargo_space", 1.0)),
        driving_hours_per_day=int(payload.get("driving_hours", 8)),
        sleep_duration_hours=int(payload.get("sleep_duration", 8)),
    )


def route_to_record(route: Route) -> dict[str, Any]:
    return {
        "title": route.title,
        "stops": list(route.ordered_stops),
        "coordinates": [coordinate_to_record(point) for point in route.polyline],
        "estimated_earnings": route.estimated_earnings,
        "driver_id": route.driver_id,
        "status": route.status,
    }


def route_from_record(route_id: str, payload: Mapping[str, Any]) -> Route:
    return Route(
        id=route_id,
        title=payload.get("title", route_id),
        ordered_stops=tuple(payload.get("stops") or ()),
        polyline=tuple(
            coordinate_from_record(point) for point in payload.get("coordinates") or ()
        ),
        estimated_earnings=float(payload.get("estimated_earnings", 0.0)),
        driver_id=payload.get("driver_id"),
        status=payload.get("status", "planned"),
    )
