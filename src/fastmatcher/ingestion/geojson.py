"""
GeoJSON feature ingestion.

Only features whose properties carry the configured identifying property
are kept; the others cannot supply a tag value.
"""

from typing import Any

import pandas as pd
from shapely.errors import ShapelyError
from shapely.geometry import shape

from fastmatcher.config.settings import MatcherConfig
from fastmatcher.exceptions import DatasetError
from fastmatcher.geometry.position import representative_position
from fastmatcher.ingestion.base import DataLoader
from fastmatcher.models import Feature
from fastmatcher.schemas.geojson import FeatureSchema
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)


def filter_features_by_property(
    raw_features: list[dict[str, Any]], property_key: str
) -> list[dict[str, Any]]:
    """Keep features whose properties contain property_key."""
    return [
        feature
        for feature in raw_features
        if property_key in (feature.get("properties") or {})
    ]


def check_geometry(raw_feature: dict[str, Any]) -> None:
    """
    Ensure a feature's geometry parses as GeoJSON.

    Features without geometry are let through; they have no position and
    are excluded from matching later.

    Raises:
        DatasetError: If the geometry is malformed.
    """
    geometry = raw_feature.get("geometry")
    if geometry is None:
        return
    if not isinstance(geometry, dict):
        msg = f"GeoJSON geometry must be an object, got {type(geometry).__name__}"
        raise DatasetError(msg)
    try:
        shape(geometry)
    except (ShapelyError, AttributeError, KeyError, TypeError, ValueError, IndexError) as e:
        msg = f"Malformed GeoJSON geometry: {geometry.get('type')!r}: {e}"
        raise DatasetError(msg) from e


class GeoJSONLoader(DataLoader[FeatureSchema, list[Feature]]):
    """Loader for GeoJSON FeatureCollections."""

    def __init__(self, config: MatcherConfig) -> None:
        """Initialize GeoJSON loader."""
        super().__init__(config, FeatureSchema)

    def _load_raw(self) -> Any:
        """Load the GeoJSON file."""
        return self._read_json(self.resolve_path(self.config.data_paths.geojson))

    def _parse(self, raw: Any) -> list[Feature]:
        """Filter features on the identifying property and wrap them."""
        if not isinstance(raw, dict) or not isinstance(raw.get("features"), list):
            msg = "GeoJSON must be a FeatureCollection with a 'features' list"
            raise DatasetError(msg)

        property_key = self.config.tagging.feature_tag
        kept = filter_features_by_property(raw["features"], property_key)

        for raw_feature in kept:
            check_geometry(raw_feature)

        log.info(
            "Filtered features by property",
            property=property_key,
            n_features=len(raw["features"]),
            n_kept=len(kept),
        )

        return [Feature.from_geojson(raw_feature) for raw_feature in kept]

    def _to_frame(self, parsed: list[Feature]) -> pd.DataFrame:
        """One row per feature with its representative position."""
        rows = []
        for feature in parsed:
            position = representative_position(feature)
            rows.append(
                {
                    "geometry_type": feature.geometry_type,
                    "lat": position.lat if position is not None else None,
                    "lon": position.lon if position is not None else None,
                }
            )
        return pd.DataFrame(rows, columns=["geometry_type", "lat", "lon"])


def load_features(config: MatcherConfig, *, validate: bool = True) -> list[Feature]:
    """Convenience function to load the configured GeoJSON features."""
    return GeoJSONLoader(config).load(validate=validate)
