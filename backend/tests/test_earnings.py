import pytest

from haulroute.domain.earnings import estimate_earnings

from conftest import AARHUS, ODENSE, make_stop


def test_earnings_are_flat_per_stop():
    stops = [make_stop("a", AARHUS), make_stop("b", ODENSE)]

    assert estimate_earnings(stops, 125.5) == pytest.approx(251.0)


def test_earnings_for_no_stops_is_zero():
    assert estimate_earnings([], 100.0) == 0


def test_negative_rate_gives_zero():
    assert estimate_earnings([make_stop("a", AARHUS)], -5.0) == 0.0
