from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from haulroute.domain.models import Route
from haulroute.schemas.common import CoordinatePayload


class RoutePlanRequest(BaseModel):
    origin: CoordinatePayload
    title: str | None = None

    @field_validator("title", mode="before")
    def _normalize_title(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None


class RouteResponse(BaseModel):
    id: str
    title: str
    stops: list[str] = Field(default_factory=list)
    coordinates: list[CoordinatePayload] = Field(default_factory=list)
    estimated_earnings: float = 0.0
    total_distance_km: float = 0.0
    status: Literal["planned", "accepted"] = "planned"
    driver_id: str | None = None

    @classmethod
    def from_domain(cls, route: Route) -> "RouteResponse":
        return cls(
            id=route.id,
            title=route.title,
            stops=list(route.ordered_stops),
            coordinates=[
                CoordinatePayload.from_domain(point) for point in route.polyline
            ],
            estimated_earnings=route.estimated_earnings,
            total_distance_km=route.total_distance_km,
            status=route.status,
            driver_id=route.driver_id,
        )


class RouteListResponse(BaseModel):
    routes: list[RouteResponse] = Field(default_factory=list)
