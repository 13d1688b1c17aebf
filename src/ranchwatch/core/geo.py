"""Great-circle distance between ranch locations."""

import math

from ranchwatch.core.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_distance(point1: GeoPoint, point2: GeoPoint) -> float:
    """Distance in kilometres between two points using the haversine formula.

    Coordinates are not validated: a NaN coordinate yields NaN.
    """
    lat1 = math.radians(point1.latitude)
    lat2 = math.radians(point2.latitude)
    d_lat = math.radians(point2.latitude - point1.latitude)
    d_lon = math.radians(point2.longitude - point1.longitude)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    if a > 1.0:
        # rounding near antipodal points
        a = 1.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c
