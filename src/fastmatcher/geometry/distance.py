"""
Great-circle distance between WGS84 coordinates.

Uses the haversine formula on a spherical Earth. Accurate to roughly 0.5%
against the ellipsoidal geodesic, which is ample for choosing candidates.
"""

import math

import numpy as np

EARTH_RADIUS_KM = 6371.0


def great_circle_distance_km(
    lat1: float, lon1: float, lat2: float, lon2: float
) -> float:
    """
    Haversine distance between two points.

    Args:
        lat1: Latitude of the first point in degrees.
        lon1: Longitude of the first point in degrees.
        lat2: Latitude of the second point in degrees.
        lon2: Longitude of the second point in degrees.

    Returns:
        Non-negative distance in kilometers.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2) - math.radians(lon1)

    a = math.sin(dlat / 2) ** 2
    a += math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2

    # Floating error can push a slightly outside [0, 1] near antipodes
    a = min(1.0, max(0.0, a))

    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def great_circle_distance_km_array(
    lat1: np.ndarray, lon1: np.ndarray, lat2: np.ndarray, lon2: np.ndarray
) -> np.ndarray:
    """
    Vectorised haversine distance, element-wise over broadcastable arrays.

    Returns:
        Array of distances in kilometers.
    """
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = np.radians(lon2) - np.radians(lon1)

    a = np.sin(dlat / 2) ** 2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(
        dlon / 2
    ) ** 2
    a = np.clip(a, 0.0, 1.0)

    return 2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(a))
