"""
Geometry helpers: representative positions and great-circle distances.
"""

from fastmatcher.geometry.distance import (
    great_circle_distance_km,
    great_circle_distance_km_array,
)
from fastmatcher.geometry.position import (
    element_position,
    feature_position,
    representative_position,
)

__all__ = [
    "element_position",
    "feature_position",
    "great_circle_distance_km",
    "great_circle_distance_km_array",
    "representative_position",
]
