import math
from typing import Iterable, NamedTuple

from core.domain import Location

EARTH_RADIUS_M = 6371000.0
SITE_KEY_SCALE = 10_000  # 4 decimal places, ~11 m at the equator


class SiteKey(NamedTuple):
    lat_e4: int
    lon_e4: int


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def distance_m(a: Location, b: Location) -> float:
    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)


def _quantize(value: float) -> int:
    # half-up rounding; round() would be banker's rounding
    return int(math.floor(value * SITE_KEY_SCALE + 0.5))


def site_key(location: Location) -> SiteKey:
    return SiteKey(_quantize(location.latitude), _quantize(location.longitude))


def centroid(locations: Iterable[Location]) -> Location:
    """Unweighted mean of latitudes and longitudes; fine at hotspot-radius scale."""
    pts = list(locations)
    if not pts:
        raise ValueError("centroid of an empty set")
    lat = sum(p.latitude for p in pts) / len(pts)
    lon = sum(p.longitude for p in pts) / len(pts)
    return Location(lat, lon)
