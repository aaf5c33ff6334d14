from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from haulroute.domain.models import Cargo, DeliveryStop
from haulroute.schemas.common import CoordinatePayload


class DeliveryCreateRequest(BaseModel):
    pickup_address: str | None = None
    location: CoordinatePayload | None = None
    coordinates: str | None = Field(
        default=None, description="Pickup position written as 'latitude, longitude'."
    )
    details: str | None = None
    weight: float = Field(..., gt=0, description="Weight in kg.")
    height: float = Field(..., gt=0, description="Height in cm.")
    width: float = Field(..., gt=0, description="Width in cm.")
    length: float = Field(..., gt=0, description="Length in cm.")

    @field_validator("pickup_address", "details", "coordinates", mode="before")
    def _strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None

    @model_validator(mode="after")
    def _resolve_coordinates(self) -> "DeliveryCreateRequest":
        if self.location is None and self.coordinates:
            self.location = parse_coordinate_text(self.coordinates)
        if self.location is None and not self.pickup_address:
            raise ValueError("Either a pickup address or coordinates are required")
        return self

    def to_cargo(self) -> Cargo:
        return Cargo(
            weight_kg=self.weight,
            height_cm=self.height,
            width_cm=self.width,
            length_cm=self.length,
        )


def parse_coordinate_text(text: str) -> CoordinatePayload:
    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 2:
        raise ValueError("Coordinates must be written as 'latitude, longitude'")
    try:
        latitude, longitude = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise ValueError("Coordinates must be numeric") from exc
    return CoordinatePayload(latitude=latitude, longitude=longitude)


class CargoPayload(BaseModel):
    weight_kg: float
    height_cm: float
    width_cm: float
    length_cm: float
    volume_m3: float


class DeliveryResponse(BaseModel):
    id: str
    pickup_address: str | None = None
    country: str | None = None
    location: CoordinatePayload
    cargo: CargoPayload
    details: str | None = None
    status: Literal["pending", "accepted"]
    route_id: str | None = None
    created_by: str | None = None

    @classmethod
    def from_domain(cls, stop: DeliveryStop) -> "DeliveryResponse":
        return cls(
            id=stop.id,
            pickup_address=stop.pickup_address,
            country=stop.country_of_pickup,
            location=CoordinatePayload.from_domain(stop.pickup_coordinate),
            cargo=CargoPayload(
                weight_kg=stop.cargo.weight_kg,
                height_cm=stop.cargo.height_cm,
                width_cm=stop.cargo.width_cm,
                length_cm=stop.cargo.length_cm,
                volume_m3=stop.cargo.volume_m3,
            ),
            details=stop.details,
            status=stop.status,
            route_id=stop.route_id,
            created_by=stop.created_by,
        )


class DeliveryListResponse(BaseModel):
    deliveries: list[DeliveryResponse] = Field(default_factory=list)
