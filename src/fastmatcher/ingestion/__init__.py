"""
Data ingestion module.

Loaders for Overpass exports and GeoJSON features with schema validation.
"""

from fastmatcher.ingestion.datasets import load_context
from fastmatcher.ingestion.geojson import GeoJSONLoader, load_features
from fastmatcher.ingestion.overpass import OverpassData, OverpassLoader, load_overpass

__all__ = [
    "GeoJSONLoader",
    "OverpassData",
    "OverpassLoader",
    "load_context",
    "load_features",
    "load_overpass",
]
