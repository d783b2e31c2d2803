import math

from pyproj import Geod

from fixfilter.core.point import Point

# Shared WGS84 ellipsoid; Geod.inv is safe to call concurrently.
_geod = Geod(ellps="WGS84")

EARTH_RADIUS_M = 6371000.0


def geodesic_distance(p1: Point, p2: Point) -> float:
    """
    Distance in meters between two fixes on the WGS84 ellipsoid.

    Solves the inverse geodesic problem, which is what platform location
    APIs use, so velocities near the threshold match device-side filtering.
    """
    if p1.lat == p2.lat and p1.lon == p2.lon:
        return 0.0
    _, _, dist = _geod.inv(p1.lon, p1.lat, p2.lon, p2.lat)
    return float(dist)


def haversine_distance(p1: Point, p2: Point) -> float:
    """Great-circle distance in meters on a sphere of radius EARTH_RADIUS_M."""
    phi1 = math.radians(p1.lat)
    phi2 = math.radians(p2.lat)
    d_phi = math.radians(p2.lat - p1.lat)
    d_lambda = math.radians(p2.lon - p1.lon)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


# Selectable by name from scripts; the filter defaults to "geodesic".
DISTANCE_FUNCTIONS = {
    "geodesic": geodesic_distance,
    "haversine": haversine_distance,
}
