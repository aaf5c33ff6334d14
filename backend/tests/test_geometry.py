import math
import random

import pytest

from haulroute.domain.geometry import Coordinate, distance_km, path_length_km

from conftest import AARHUS, COPENHAGEN


def test_distance_is_zero_for_same_point():
    assert distance_km(COPENHAGEN, COPENHAGEN) == 0.0


def test_distance_copenhagen_aarhus():
    assert distance_km(COPENHAGEN, AARHUS) == pytest.approx(157, abs=3)


def test_distance_is_symmetric_and_non_negative():
    rng = random.Random(7)
    for _ in range(200):
        a = Coordinate(rng.uniform(-90, 90), rng.uniform(-180, 180))
        b = Coordinate(rng.uniform(-90, 90), rng.uniform(-180, 180))
        forward = distance_km(a, b)
        assert forward >= 0
        assert forward == pytest.approx(distance_km(b, a), abs=1e-9)


def test_antipodal_points_do_not_produce_nan():
    distance = distance_km(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))
    assert not math.isnan(distance)
    assert distance == pytest.approx(math.pi * 6371.0)


def test_coordinate_validity():
    assert Coordinate(90.0, -180.0).is_valid()
    assert not Coordinate(91.0, 0.0).is_valid()
    assert not Coordinate(0.0, 180.5).is_valid()


def test_path_length_sums_legs():
    assert path_length_km([COPENHAGEN]) == 0.0
    assert path_length_km([COPENHAGEN, AARHUS, COPENHAGEN]) == pytest.approx(
        2 * distance_km(COPENHAGEN, AARHUS)
    )
