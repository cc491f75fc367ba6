"""
Geographic helpers for communities and reports.

Coordinates are WGS84 degrees. The ``location`` columns hold the same point
as WKT (``POINT(lng lat)``) so a PostGIS-backed deployment can cast them.
"""

import math

EARTH_RADIUS_KM = 6371.0


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Return True when lat/lng fall inside the WGS84 ranges."""
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def to_wkt_point(lat: float, lng: float) -> str:
    """
    Build the WKT point stored alongside lat/lng.

    Note the axis order: WKT is longitude first.

    >>> to_wkt_point(40.0, -74.0)
    'POINT(-74.0 40.0)'
    """
    return f"POINT({float(lng)} {float(lat)})"


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c
