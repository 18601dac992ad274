import math

import pytest

from tests.helpers import PRAGUE
from utils.errors import InvalidCoordinate
from utils.geo_utils import distance_km, is_inside, validate_coordinate
from utils.zone_utils import Zone


def zone(radius=1000):
    return Zone(id="depot", name="Depot", center=PRAGUE, radius=radius)


def test_distance_is_zero_for_same_point():
    assert distance_km(PRAGUE, PRAGUE) == 0


def test_distance_prague_to_brno():
    # Roughly 185 km as the crow flies
    assert 180 < distance_km(PRAGUE, (49.1951, 16.6068)) < 190


def test_center_is_inside():
    assert is_inside(PRAGUE, zone())


def test_point_two_km_away_is_outside():
    north = (PRAGUE[0] + 0.018, PRAGUE[1])
    assert 1.9 < distance_km(PRAGUE, north) < 2.1
    assert not is_inside(north, zone())


@pytest.mark.parametrize("offset", [0.001, 0.005, 0.0085])
def test_points_strictly_inside(offset):
    assert is_inside((PRAGUE[0] + offset, PRAGUE[1]), zone())


def test_boundary_counts_as_inside():
    point = (PRAGUE[0] + 0.005, PRAGUE[1])
    exact = zone(radius=distance_km(PRAGUE, point) * 1000)
    assert is_inside(point, exact)


def test_just_past_boundary_is_outside():
    point = (PRAGUE[0] + 0.005, PRAGUE[1])
    tight = zone(radius=distance_km(PRAGUE, point) * 1000 - 0.01)
    assert not is_inside(point, tight)


def test_validate_coordinate_coerces_strings():
    assert validate_coordinate("50.1", "14.2") == (50.1, 14.2)


@pytest.mark.parametrize("lat, lon", [
    (None, 14.0),
    (50.0, None),
    ("north", 14.0),
    (91.0, 14.0),
    (-90.5, 14.0),
    (50.0, 180.5),
    (math.nan, 14.0),
    (True, 14.0),
])
def test_validate_coordinate_rejects(lat, lon):
    with pytest.raises(InvalidCoordinate):
        validate_coordinate(lat, lon)


def test_invalid_coordinate_is_a_value_error():
    with pytest.raises(ValueError):
        validate_coordinate(100, 0)
