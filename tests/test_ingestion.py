"""Tests for Overpass and GeoJSON ingestion."""

import json
from pathlib import Path
from typing import Any

import pytest

from fastmatcher.config.settings import MatcherConfig
from fastmatcher.exceptions import DatasetError
from fastmatcher.ingestion import (
    GeoJSONLoader,
    OverpassLoader,
    load_context,
    load_features,
    load_overpass,
)
from fastmatcher.ingestion.geojson import check_geometry, filter_features_by_property
from fastmatcher.ingestion.overpass import has_metadata, split_elements
from fastmatcher.models import ElementKind, Position


class TestSplitElements:
    """Tests for separating elements from way nodes."""

    def test_elements_and_point_store(self, overpass_payload: dict[str, Any]) -> None:
        """Test metadata elements are kept and way nodes stored."""
        data = split_elements(overpass_payload["elements"])

        assert [(e.kind, e.id) for e in data.elements] == [
            (ElementKind.NODE, 1),
            (ElementKind.WAY, 10),
            (ElementKind.NODE, 2),
        ]
        assert set(data.point_store) == {101, 102, 103}
        assert data.point_store[102] == Position(52.2402, 21.0200)

    def test_metadata_carried(self, overpass_payload: dict[str, Any]) -> None:
        """Test provenance fields are read."""
        node = split_elements(overpass_payload["elements"]).elements[0]

        assert node.metadata.version == 3
        assert node.metadata.user == "mapper"
        assert node.metadata.changeset == 100
        assert node.metadata.uid == 7
        assert node.tags == {"amenity": "school", "name": "School A"}

    def test_way_node_refs(self, overpass_payload: dict[str, Any]) -> None:
        """Test way node order and repeats are preserved."""
        way = split_elements(overpass_payload["elements"]).elements[1]
        assert way.node_ids == (101, 102, 103, 101)

    def test_missing_way_nodes_skipped(self) -> None:
        """Test references to absent nodes are not stored."""
        raw = [
            {
                "type": "way",
                "id": 5,
                "nodes": [1, 2],
                "version": 1,
                "user": "u",
                "timestamp": "t",
                "changeset": 1,
            },
            {"type": "node", "id": 1, "lat": 1.0, "lon": 2.0},
        ]

        data = split_elements(raw)

        assert set(data.point_store) == {1}

    def test_has_metadata(self) -> None:
        """Test metadata detection requires all fields."""
        assert has_metadata(
            {"version": 1, "user": "u", "timestamp": "t", "changeset": 1}
        )
        assert not has_metadata({"version": 1, "user": "u"})


class TestOverpassLoader:
    """Tests for loading the Overpass file."""

    def test_paths_resolved_against_data_root(
        self, matcher_config: MatcherConfig, data_dir: Path
    ) -> None:
        """Test both loaders read from data_root."""
        assert OverpassLoader(matcher_config).resolve_path(
            matcher_config.data_paths.overpass
        ) == data_dir / "schools.json"
        assert GeoJSONLoader(matcher_config).resolve_path(
            matcher_config.data_paths.geojson
        ) == data_dir / "registry.geojson"

    def test_load(self, matcher_config: MatcherConfig) -> None:
        """Test the fixture export loads and validates."""
        data = load_overpass(matcher_config)
        assert len(data.elements) == 3
        assert len(data.point_store) == 3

    def test_missing_file(self, matcher_config: MatcherConfig, data_dir: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        (data_dir / "schools.json").unlink()
        with pytest.raises(FileNotFoundError):
            load_overpass(matcher_config)

    def test_malformed_json(self, matcher_config: MatcherConfig, data_dir: Path) -> None:
        """Test that unparsable JSON raises DatasetError."""
        (data_dir / "schools.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(DatasetError, match="Parsing data error"):
            load_overpass(matcher_config)

    def test_missing_elements_list(
        self, matcher_config: MatcherConfig, data_dir: Path
    ) -> None:
        """Test that a payload without elements raises DatasetError."""
        (data_dir / "schools.json").write_text("{}", encoding="utf-8")
        with pytest.raises(DatasetError, match="'elements'"):
            load_overpass(matcher_config)

    def test_invalid_coordinates(
        self,
        matcher_config: MatcherConfig,
        data_dir: Path,
        overpass_payload: dict[str, Any],
    ) -> None:
        """Test that out-of-range latitude fails validation."""
        overpass_payload["elements"][0]["lat"] = 95.0
        (data_dir / "schools.json").write_text(
            json.dumps(overpass_payload), encoding="utf-8"
        )

        with pytest.raises(DatasetError, match="OverpassElementSchema"):
            load_overpass(matcher_config)

        assert load_overpass(matcher_config, validate=False).elements[0].lat == 95.0


class TestGeoJSONLoader:
    """Tests for loading the GeoJSON file."""

    def test_filter_by_property(self, geojson_payload: dict[str, Any]) -> None:
        """Test features without the property are dropped."""
        kept = filter_features_by_property(geojson_payload["features"], "ref")
        assert [f["properties"]["ref"] for f in kept] == ["A1", "B2", "Z9"]

    def test_load(self, matcher_config: MatcherConfig) -> None:
        """Test features load in file order."""
        features = load_features(matcher_config)

        assert [f.properties["ref"] for f in features] == ["A1", "B2", "Z9"]
        assert [f.geometry_type for f in features] == ["Point", "Polygon", "Point"]

    def test_not_a_collection(self, matcher_config: MatcherConfig, data_dir: Path) -> None:
        """Test that a bare geometry raises DatasetError."""
        (data_dir / "registry.geojson").write_text(
            json.dumps({"type": "Point", "coordinates": [0, 0]}), encoding="utf-8"
        )
        with pytest.raises(DatasetError, match="FeatureCollection"):
            load_features(matcher_config)

    def test_check_geometry(self) -> None:
        """Test malformed geometry is reported and null geometry passes."""
        check_geometry({"type": "Feature", "geometry": None})
        with pytest.raises(DatasetError):
            check_geometry({"type": "Feature", "geometry": "POINT (0 0)"})
        with pytest.raises(DatasetError):
            check_geometry(
                {
                    "type": "Feature",
                    "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 1]]]},
                }
            )


class TestLoadContext:
    """Tests for loading both datasets together."""

    def test_load_context(self, matcher_config: MatcherConfig) -> None:
        """Test the context carries both datasets and tagging keys."""
        context = load_context(matcher_config)

        assert len(context.elements) == 3
        assert len(context.features) == 3
        assert len(context.point_store) == 3
        assert context.tagging.osm_tag == "ref:school"
