import random

from haulroute.domain.geometry import Coordinate, distance_km
from haulroute.domain.sequencing import sequence

from conftest import AARHUS, COPENHAGEN, ESBJERG, ODENSE, make_stop


def test_sequence_empty_and_single():
    stop = make_stop("only", AARHUS)

    assert sequence(COPENHAGEN, []) == []
    assert sequence(COPENHAGEN, [stop]) == [stop]


def test_sequence_danish_cities_nearest_neighbor():
    stops = [
        make_stop("aarhus", AARHUS),
        make_stop("odense", ODENSE),
        make_stop("esbjerg", ESBJERG),
    ]

    # First leg: Odense is closer to Copenhagen than Aarhus or Esbjerg.
    assert distance_km(COPENHAGEN, ODENSE) < distance_km(COPENHAGEN, AARHUS)
    assert distance_km(COPENHAGEN, ODENSE) < distance_km(COPENHAGEN, ESBJERG)
    # Second leg: from Odense, Aarhus beats Esbjerg.
    assert distance_km(ODENSE, AARHUS) < distance_km(ODENSE, ESBJERG)

    ordered = sequence(COPENHAGEN, stops)

    assert [stop.id for stop in ordered] == ["odense", "aarhus", "esbjerg"]


def test_sequence_ties_keep_input_order():
    same = Coordinate(55.0, 10.0)
    stops = [make_stop("first", same), make_stop("second", same)]

    ordered = sequence(COPENHAGEN, stops)

    assert [stop.id for stop in ordered] == ["first", "second"]


def test_sequence_is_permutation_and_greedy():
    rng = random.Random(42)
    stops = [
        make_stop(f"s{i}", Coordinate(rng.uniform(54, 58), rng.uniform(8, 13)))
        for i in range(25)
    ]

    ordered = sequence(COPENHAGEN, stops)

    assert sorted(stop.id for stop in ordered) == sorted(stop.id for stop in stops)
    assert len({stop.id for stop in ordered}) == len(stops)

    current = COPENHAGEN
    for index, chosen in enumerate(ordered):
        chosen_distance = distance_km(current, chosen.pickup_coordinate)
        for other in ordered[index + 1 :]:
            assert chosen_distance <= distance_km(current, other.pickup_coordinate)
        current = chosen.pickup_coordinate


def test_sequence_does_not_mutate_input():
    stops = [make_stop("a", AARHUS), make_stop("b", ODENSE)]

    sequence(COPENHAGEN, stops)

    assert [stop.id for stop in stops] == ["a", "b"]
