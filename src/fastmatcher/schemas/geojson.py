"""
Pandera schema for GeoJSON features.

One row per feature kept for matching, with its representative position.
Unsupported geometries have no position and pass with null coordinates.
"""

import pandera.pandas as pa
from pandera.typing import Series


class FeatureSchema(pa.DataFrameModel):
    """Schema for features carrying the identifying property."""

    geometry_type: Series[str] = pa.Field(description="GeoJSON geometry type")
    lat: Series[float] = pa.Field(
        ge=-90.0,
        le=90.0,
        nullable=True,
        description="Representative latitude in WGS84",
    )
    lon: Series[float] = pa.Field(
        ge=-180.0,
        le=180.0,
        nullable=True,
        description="Representative longitude in WGS84",
    )

    class Config:
        """Schema configuration."""

        name = "FeatureSchema"
        strict = False
        coerce = True
