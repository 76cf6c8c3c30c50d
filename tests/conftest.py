"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

from fastmatcher.config.settings import (
    DataPathsConfig,
    MatcherConfig,
    MatchingConfig,
    OutputConfig,
    TaggingConfig,
)
from fastmatcher.models import Element, ElementKind, Feature, PointStore, Position, Provenance


def make_node(
    node_id: int,
    lat: float,
    lon: float,
    tags: dict[str, str] | None = None,
    version: int = 1,
) -> Element:
    """Build a node element with default metadata."""
    return Element(
        id=node_id,
        kind=ElementKind.NODE,
        tags=tags or {},
        metadata=Provenance(
            version=version, user="mapper", timestamp="2023-01-01T00:00:00Z", changeset=100
        ),
        lat=lat,
        lon=lon,
    )


def make_way(
    way_id: int,
    node_ids: list[int],
    tags: dict[str, str] | None = None,
    version: int = 1,
) -> Element:
    """Build a way element with default metadata."""
    return Element(
        id=way_id,
        kind=ElementKind.WAY,
        tags=tags or {},
        metadata=Provenance(
            version=version, user="mapper", timestamp="2023-01-01T00:00:00Z", changeset=100
        ),
        node_ids=tuple(node_ids),
    )


def make_point_feature(lat: float, lon: float, **properties: Any) -> Feature:
    """Build a GeoJSON Point feature."""
    return Feature.from_geojson(
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [lon, lat]},
            "properties": properties,
        }
    )


@pytest.fixture
def overpass_payload() -> dict[str, Any]:
    """Overpass export with two nodes, one way, its nodes and a relation."""
    meta = {
        "user": "mapper",
        "timestamp": "2023-01-01T00:00:00Z",
        "changeset": 100,
        "uid": 7,
    }
    return {
        "version": 0.6,
        "elements": [
            {
                "type": "node",
                "id": 1,
                "lat": 52.2300,
                "lon": 21.0100,
                "version": 3,
                "tags": {"amenity": "school", "name": "School A"},
                **meta,
            },
            {
                "type": "way",
                "id": 10,
                "nodes": [101, 102, 103, 101],
                "version": 2,
                "tags": {"building": "school"},
                **meta,
            },
            {"type": "node", "id": 101, "lat": 52.2400, "lon": 21.0200},
            {"type": "node", "id": 102, "lat": 52.2402, "lon": 21.0200},
            {"type": "node", "id": 103, "lat": 52.2402, "lon": 21.0203},
            {
                "type": "node",
                "id": 2,
                "lat": 52.3000,
                "lon": 21.1000,
                "version": 1,
                "tags": {"amenity": "school"},
                **meta,
            },
            {
                "type": "relation",
                "id": 20,
                "members": [],
                "version": 1,
                "tags": {"type": "multipolygon"},
                **meta,
            },
        ],
    }


@pytest.fixture
def geojson_payload() -> dict[str, Any]:
    """FeatureCollection near the Overpass fixture; one feature lacks 'ref'."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [21.0101, 52.2301]},
                "properties": {"ref": "A1", "name": "School A"},
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [
                        [
                            [21.0201, 52.2401],
                            [21.0202, 52.2401],
                            [21.0202, 52.2402],
                            [21.0201, 52.2401],
                        ]
                    ],
                },
                "properties": {"ref": "B2"},
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [21.0500, 52.2500]},
                "properties": {"name": "No ref"},
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [22.0, 53.0]},
                "properties": {"ref": "Z9"},
            },
        ],
    }


@pytest.fixture
def data_dir(
    tmp_path: Path, overpass_payload: dict[str, Any], geojson_payload: dict[str, Any]
) -> Path:
    """Directory holding the fixture datasets as files."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "schools.json").write_text(json.dumps(overpass_payload), encoding="utf-8")
    (directory / "registry.geojson").write_text(
        json.dumps(geojson_payload), encoding="utf-8"
    )
    return directory


@pytest.fixture
def matcher_config(tmp_path: Path, data_dir: Path) -> MatcherConfig:
    """Configuration pointing at the fixture datasets."""
    return MatcherConfig(
        project="test-schools",
        data_paths=DataPathsConfig(
            data_root=data_dir,
            overpass=Path("schools.json"),
            geojson=Path("registry.geojson"),
        ),
        tagging=TaggingConfig(osm_tag="ref:school", feature_tag="ref"),
        matching=MatchingConfig(radius_m=50.0),
        output=OutputConfig(output_root=tmp_path / "output"),
    )


@pytest.fixture
def point_store() -> PointStore:
    """Nodes of a small square way."""
    return PointStore(
        {
            101: Position(52.2400, 21.0200),
            102: Position(52.2402, 21.0200),
            103: Position(52.2402, 21.0203),
        }
    )
