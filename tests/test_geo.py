import math

import pytest

from core.domain import Location
from core.geo import centroid, distance_m, haversine_m, site_key


def test_haversine_known_distance():
    # one degree of latitude on a 6,371 km sphere
    d = haversine_m(0.0, 0.0, 1.0, 0.0)
    assert abs(d - 6371000.0 * math.pi / 180) < 1e-6
    assert haversine_m(40.7128, -74.006, 40.7128, -74.006) == 0.0


def test_distance_is_symmetric():
    a = Location(40.7128, -74.0060)
    b = Location(40.7300, -73.9950)
    assert distance_m(a, b) == pytest.approx(distance_m(b, a))
    assert 2000 < distance_m(a, b) < 2200


def test_site_key_quantization_boundary():
    # differ beyond the 4th decimal -> same site
    assert site_key(Location(10.123456, -20.987654)) == site_key(Location(10.123459, -20.987651))
    # differ at the 4th decimal -> different sites
    assert site_key(Location(10.1234, -20.9876)) != site_key(Location(10.1235, -20.9876))
    assert site_key(Location(10.1234, -20.9876)) != site_key(Location(10.1234, -20.9877))


def test_site_key_is_integer_pair():
    key = site_key(Location(40.71280001, -74.00600002))
    assert key == (407128, -740060)
    assert isinstance(key.lat_e4, int) and isinstance(key.lon_e4, int)


def test_centroid_is_arithmetic_mean():
    c = centroid([Location(1.0, 2.0), Location(3.0, 4.0)])
    assert c == Location(2.0, 3.0)
    with pytest.raises(ValueError):
        centroid([])
