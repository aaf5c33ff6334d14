from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    debug: bool = Field(False, alias="HAULROUTE_DEBUG")
    storage_root: Path = Field(Path("./data"), alias="HAULROUTE_STORAGE_ROOT")

    geocoder_provider: Literal["google", "nominatim"] = Field(
        "nominatim", alias="HAULROUTE_GEOCODER_PROVIDER"
    )
    geocoder_user_agent: str = Field(
        "haulroute-geocoder", alias="HAULROUTE_GEOCODER_USER_AGENT"
    )
    geocoder_domain: str | None = Field(None, alias="HAULROUTE_GEOCODER_DOMAIN")
    geocoder_api_key: str | None = Field(None, alias="HAULROUTE_GEOCODER_API_KEY")
    geocoder_timeout: float = Field(10.0, alias="HAULROUTE_GEOCODER_TIMEOUT")
    geocoder_cache_ttl: int = Field(
        60 * 60 * 24, alias="HAULROUTE_GEOCODER_CACHE_TTL"
    )

    # Route planning
    price_per_stop: float = Field(100.0, ge=0.0, alias="HAULROUTE_PRICE_PER_STOP")
    country_source: Literal["address", "geocoder"] = Field(
        "address", alias="HAULROUTE_COUNTRY_SOURCE"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("storage_root", mode="before")
    def _expand_storage_root(cls, value: Path | str) -> Path:
        """Expand user and resolve the storage directory."""
        path = Path(value).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("geocoder_provider", "country_source", mode="before")
    def _normalize_choice(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]
