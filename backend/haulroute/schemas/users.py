from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from haulroute.domain.address import split_countries
from haulroute.domain.models import DriverPreferences, Role


class UserCreateRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    role: Role

    @field_validator("user_id", mode="before")
    def _strip_user_id(cls, value: str) -> str:
        return str(value).strip()


class UserResponse(BaseModel):
    user_id: str
    role: Role


class PreferencesPayload(BaseModel):
    preferred_countries: list[str] = Field(default_factory=list)
    truck_type: str = Field(..., min_length=1)
    fuel_economy: float = Field(..., gt=0, description="Fuel economy in km/l.")
    cargo_space: float = Field(..., gt=0, description="Cargo space in m3.")
    driving_hours: int = Field(8, ge=4, le=12)
    sleep_duration: int = Field(8, ge=4, le=12)

    @field_validator("preferred_countries", mode="before")
    def _split_countries(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return sorted(split_countries(value))
        if isinstance(value, (list, tuple, set, frozenset)):
            return sorted({str(item).strip() for item in value if str(item).strip()})
        return value  # type: ignore[return-value]

    @field_validator("truck_type", mode="before")
    def _strip_truck_type(cls, value: str) -> str:
        return str(value).strip()

    def to_domain(self) -> DriverPreferences:
        return DriverPreferences(
            preferred_countries=frozenset(self.preferred_countries),
            truck_type=self.truck_type,
            fuel_economy_km_per_l=self.fuel_economy,
            cargo_space_m3=self.cargo_space,
            driving_hours_per_day=self.driving_hours,
            sleep_duration_hours=self.sleep_duration,
        )

    @classmethod
    def from_domain(cls, prefs: DriverPreferences) -> "PreferencesPayload":
        return cls(
            preferred_countries=sorted(prefs.preferred_countries),
            truck_type=prefs.truck_type or "unspecified",
            fuel_economy=prefs.fuel_economy_km_per_l,
            cargo_space=prefs.cargo_space_m3,
            driving_hours=prefs.driving_hours_per_day,
            sleep_duration=prefs.sleep_duration_hours,
        )
