"""
Schema definitions using Pandera for input validation.

Input datasets are checked against these contracts before matching starts.
"""

from fastmatcher.schemas.geojson import FeatureSchema
from fastmatcher.schemas.overpass import (
    VALID_ELEMENT_TYPES,
    OverpassElementSchema,
    PointSchema,
)

__all__ = [
    "VALID_ELEMENT_TYPES",
    "FeatureSchema",
    "OverpassElementSchema",
    "PointSchema",
]
