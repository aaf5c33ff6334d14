from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Mapping, TYPE_CHECKING, cast

from cachetools import TTLCache
from geopy.exc import (
    GeocoderQuotaExceeded,
    GeocoderTimedOut,
    GeopyError,
)
from geopy.geocoders import get_geocoder_for_service
from geopy.geocoders.base import Geocoder

from haulroute.core.config import get_settings
from haulroute.core.logging import get_logger
from haulroute.domain.geometry import Coordinate

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from haulroute.core.config import Settings
    from geopy.location import Location

_logger = get_logger(__name__)
_cache: TTLCache | None = None
_cache_lock = asyncio.Lock()
_geocoder_lock = asyncio.Lock()
_geocode_call_lock = asyncio.Lock()
_geocoder: Geocoder | None = None


class GeocodeConfigurationError(RuntimeError):
    """Raised when the geocoder cannot be configured with provided settings."""


@dataclass(frozen=True, slots=True)
class ReverseGeocodeResult:
    address: str
    country: str | None = None


async def geocode_address(text: str) -> Coordinate | None:
    """Resolve free-form address text to a coordinate, or None when not found."""

    query = text.strip()
    if not query:
        return None

    key = ("forward", query)
    cached = await _cache_get(key)
    if cached is not None:
        _logger.info("Geocoding cache hit", query=query)
        return cached

    location = await _lookup(lambda geocoder, kwargs: geocoder.geocode(query, **kwargs))
    if location is None:
        return None

    latitude = getattr(location, "latitude", None)
    longitude = getattr(location, "longitude", None)
    if latitude is None or longitude is None:
        _logger.warning("Invalid geocoder response", query=query)
        return None

    result = Coordinate(float(latitude), float(longitude))
    await _cache_put(key, result)
    _logger.info(
        "Geocoding success",
        query=query,
        latitude=result.latitude,
        longitude=result.longitude,
    )
    return result


async def reverse_geocode(
    latitude: float,
    longitude: float,
) -> ReverseGeocodeResult | None:
    """Resolve a coordinate to an address, or None when nothing is found."""

    key = ("reverse", round(latitude, 6), round(longitude, 6))
    cached = await _cache_get(key)
    if cached is not None:
        _logger.info(
            "Reverse geocoding cache hit", latitude=latitude, longitude=longitude
        )
        return cached

    location = await _lookup(
        lambda geocoder, kwargs: geocoder.reverse((latitude, longitude), **kwargs)
    )
    if location is None:
        return None

    raw = _raw_payload(location)
    address = getattr(location, "address", None)
    if not address:
        display_name = raw.get("display_name")
        if isinstance(display_name, str):
            address = display_name
    if not address:
        _logger.warning(
            "Invalid reverse geocoder response", latitude=latitude, longitude=longitude
        )
        return None

    result = ReverseGeocodeResult(address=address, country=extract_country(raw))
    await _cache_put(key, result)
    _logger.info(
        "Reverse geocoding success",
        latitude=latitude,
        longitude=longitude,
        address=address,
        country=result.country,
    )
    return result


async def _lookup(
    call: Callable[[Geocoder, dict[str, object]], "Location | None"],
) -> "Location | None":
    settings = get_settings()
    try:
        geocoder = await _get_geocoder()
    except GeocodeConfigurationError as exc:
        _logger.error("Geocoding misconfiguration", error=str(exc))
        return None

    kwargs: dict[str, object] = {"exactly_one": True}
    if settings.geocoder_provider == "nominatim":
        kwargs["addressdetails"] = True

    try:
        async with _geocode_call_lock:
            location = await asyncio.to_thread(call, geocoder, kwargs)
    except (GeocoderQuotaExceeded, GeocoderTimedOut) as exc:
        message = (
            "Geocoding quota exceeded"
            if isinstance(exc, GeocoderQuotaExceeded)
            else "Geocoding timed out"
        )
        _logger.warning(message, error=str(exc))
        return None
    except GeopyError as exc:
        _logger.warning("Geocoding failed", error=str(exc))
        return None

    if location is None:
        _logger.info("No geocoding candidates")
    return location


async def _get_geocoder() -> Geocoder:
    global _geocoder
    async with _geocoder_lock:
        if _geocoder is None:
            settings = get_settings()
            _geocoder = _create_geocoder(settings)
        return _geocoder


def _create_geocoder(settings: "Settings") -> Geocoder:
    provider = settings.geocoder_provider
    timeout = settings.geocoder_timeout
    user_agent = settings.geocoder_user_agent or "haulroute-geocoder"

    if provider == "google":
        api_key = _require_api_key(provider, settings.geocoder_api_key)
        geocoder_cls = get_geocoder_for_service("googlev3")
        kwargs: dict[str, Any] = {
            "api_key": api_key,
            "timeout": timeout,
            "user_agent": user_agent,
        }
        if settings.geocoder_domain:
            kwargs["domain"] = settings.geocoder_domain
        return geocoder_cls(**kwargs)

    if provider == "nominatim":
        geocoder_cls = get_geocoder_for_service("nominatim")
        kwargs = {"user_agent": user_agent, "timeout": timeout}
        if settings.geocoder_domain:
            kwargs["domain"] = settings.geocoder_domain
        return geocoder_cls(**kwargs)

    raise GeocodeConfigurationError(f"Unsupported geocoder provider '{provider}'")


def _require_api_key(provider: str, value: str | None) -> str:
    if value and value.strip():
        return value.strip()
    raise GeocodeConfigurationError(
        f"Geocoder provider '{provider}' requires HAULROUTE_GEOCODER_API_KEY to be set"
    )


def _raw_payload(location: "Location") -> Mapping[str, object]:
    raw_obj = getattr(location, "raw", {}) or {}
    if isinstance(raw_obj, Mapping):
        return cast(Mapping[str, object], raw_obj)
    return {}


def extract_country(raw: Mapping[str, object]) -> str | None:
    """Pull the structured country name out of a provider payload."""

    # Nominatim with addressdetails=True
    details = raw.get("address")
    if isinstance(details, Mapping):
        country = details.get("country")
        if isinstance(country, str) and country.strip():
            return country.strip()

    # Google address_components
    components = raw.get("address_components")
    if isinstance(components, list):
        for component in components:
            if not isinstance(component, Mapping):
                continue
            types = component.get("types") or []
            name = component.get("long_name")
            if "country" in types and isinstance(name, str) and name.strip():
                return name.strip()

    return None


def _get_cache() -> TTLCache:
    global _cache
    if _cache is None:
        _cache = TTLCache(maxsize=512, ttl=get_settings().geocoder_cache_ttl)
    return _cache


async def _cache_get(key: tuple) -> Any:
    async with _cache_lock:
        return _get_cache().get(key)


async def _cache_put(key: tuple, value: Any) -> None:
    async with _cache_lock:
        _get_cache()[key] = value
