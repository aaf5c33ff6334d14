from __future__ import annotations

from pydantic import BaseModel, Field

from haulroute.domain.geometry import Coordinate


class CoordinatePayload(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    def to_domain(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @classmethod
    def from_domain(cls, coordinate: Coordinate) -> "CoordinatePayload":
        return cls(latitude=coordinate.latitude, longitude=coordinate.longitude)
