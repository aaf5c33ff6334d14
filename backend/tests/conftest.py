from __future__ import annotations

import pytest

from haulroute.domain.geometry import Coordinate
from haulroute.domain.models import Cargo, DeliveryStop
from haulroute.services import geocoding
from haulroute.services.store import DocumentStore


COPENHAGEN = Coordinate(55.676, 12.568)
AARHUS = Coordinate(56.16, 10.20)
ODENSE = Coordinate(55.40, 10.38)
ESBJERG = Coordinate(55.47, 8.45)


def make_stop(
    stop_id: str,
    coordinate: Coordinate,
    *,
    country: str | None = "Denmark",
    status: str = "pending",
) -> DeliveryStop:
    return DeliveryStop(
        id=stop_id,
        pickup_coordinate=coordinate,
        pickup_address=f"{stop_id} street, {country}" if country else None,
        country_of_pickup=country,
        cargo=Cargo(weight_kg=120.0, height_cm=80.0, width_cm=60.0, length_cm=120.0),
        status=status,  # type: ignore[arg-type]
    )


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path / "haulroute.db")


@pytest.fixture(autouse=True)
def _reset_geocoder(monkeypatch):
    monkeypatch.setattr(geocoding, "_cache", None)
    monkeypatch.setattr(geocoding, "_geocoder", None)
