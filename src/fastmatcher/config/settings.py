"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DataPathsConfig(BaseModel):
    """Input dataset paths.

    Paths are relative to data_root; loaders resolve them.
    """

    model_config = ConfigDict(frozen=True)

    data_root: Path = Field(
        default=Path("./data"), description="Root directory for input files"
    )
    overpass: Path = Field(description="Overpass JSON export (queried with 'out meta;')")
    geojson: Path = Field(description="GeoJSON FeatureCollection to match against")


class TaggingConfig(BaseModel):
    """Which tag is written and where its value comes from."""

    model_config = ConfigDict(frozen=True)

    osm_tag: str = Field(description="Tag key written onto accepted elements")
    feature_tag: str = Field(
        description="Feature property supplying the tag value; features without it are ignored"
    )

    @field_validator("osm_tag", "feature_tag")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Ensure keys are non-empty."""
        if not v.strip():
            msg = "Tag keys must not be empty"
            raise ValueError(msg)
        return v


class MatchingConfig(BaseModel):
    """Candidate search configuration."""

    model_config = ConfigDict(frozen=True)

    radius_m: float | None = Field(
        default=None,
        gt=0,
        description="Primary radius in meters; None uses half the smallest feature distance",
    )

    @property
    def radius_km(self) -> float | None:
        """Primary radius in kilometers."""
        if self.radius_m is None:
            return None
        return self.radius_m / 1000


class OutputConfig(BaseModel):
    """Output paths configuration.

    Files land in {output_root}/{project}/.
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(
        default=Path("./output"), description="Root directory for all outputs"
    )
    accepted_file: str = Field(default="accepted.osc")
    rejected_file: str = Field(default="rejected.geojson")
    generator: str = Field(
        default="fastmatcher", description="Generator attribute of the OsmChange root"
    )


class MatcherConfig(BaseModel):
    """Complete matcher configuration."""

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'warsaw-schools')")

    data_paths: DataPathsConfig
    tagging: TaggingConfig
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def radius_km(self) -> float | None:
        """Convenience accessor for the configured radius."""
        return self.matching.radius_km

    @property
    def output_dir(self) -> Path:
        """Directory for this project's exports."""
        return self.output.output_root / self.project

    @property
    def accepted_path(self) -> Path:
        """Path of the accepted OsmChange file."""
        return self.output_dir / self.output.accepted_file

    @property
    def rejected_path(self) -> Path:
        """Path of the rejected GeoJSON file."""
        return self.output_dir / self.output.rejected_file
