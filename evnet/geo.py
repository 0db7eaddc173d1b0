"""
Great-circle distance utilities.
"""

from math import asin, cos, radians, sin, sqrt
from typing import Sequence
import numpy as np

from evnet.models import Coord


EARTH_RADIUS_KM = 6371.0


def distance_km(p1: Coord, p2: Coord) -> float:
    """
    Haversine distance in km between two (lng, lat) points.
    """
    lng1, lat1 = p1
    lng2, lat2 = p2
    d_lat = radians(lat2 - lat1)
    d_lng = radians(lng2 - lng1)
    a = (
        sin(d_lat / 2) ** 2
        + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(a)))


def distances_km(origin: Coord, coords: Sequence[Coord] | np.ndarray) -> np.ndarray:
    """
    Haversine distances in km from `origin` to every point of `coords`.
    """
    pts = np.asarray(coords, dtype=np.float64).reshape(-1, 2)
    lng0, lat0 = np.radians(origin[0]), np.radians(origin[1])
    lng = np.radians(pts[:, 0])
    lat = np.radians(pts[:, 1])
    a = (
        np.sin((lat - lat0) / 2) ** 2
        + np.cos(lat0) * np.cos(lat) * np.sin((lng - lng0) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * np.arcsin(np.minimum(1.0, np.sqrt(a)))
