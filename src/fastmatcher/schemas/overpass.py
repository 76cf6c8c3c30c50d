"""
Pandera schemas for Overpass export data.

Validated after the raw JSON has been split into elements and way nodes.
"""

import pandera.pandas as pa
from pandera.typing import Series

VALID_ELEMENT_TYPES = ["node", "way"]


class OverpassElementSchema(pa.DataFrameModel):
    """
    Schema for OSM elements eligible for matching.

    One row per element; nodes carry coordinates, ways do not.
    """

    id: Series[int] = pa.Field(description="OSM element id")
    type: Series[str] = pa.Field(
        isin=VALID_ELEMENT_TYPES,
        description="OSM element type",
    )
    version: Series[int] = pa.Field(ge=1, description="Element version")
    changeset: Series[int] = pa.Field(ge=0, description="Last changeset id")
    user: Series[str] = pa.Field(description="Last editor")
    timestamp: Series[str] = pa.Field(description="Last edit timestamp")
    lat: Series[float] = pa.Field(
        ge=-90.0, le=90.0, nullable=True, description="Node latitude in WGS84"
    )
    lon: Series[float] = pa.Field(
        ge=-180.0, le=180.0, nullable=True, description="Node longitude in WGS84"
    )

    class Config:
        """Schema configuration."""

        name = "OverpassElementSchema"
        strict = False
        coerce = True


class PointSchema(pa.DataFrameModel):
    """Schema for way nodes held in the point store."""

    id: Series[int] = pa.Field(description="OSM node id", unique=True)
    lat: Series[float] = pa.Field(ge=-90.0, le=90.0, description="Latitude in WGS84")
    lon: Series[float] = pa.Field(
        ge=-180.0, le=180.0, description="Longitude in WGS84"
    )

    class Config:
        """Schema configuration."""

        name = "PointSchema"
        strict = False
        coerce = True
