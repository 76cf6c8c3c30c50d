"""
Overpass export ingestion.

The Overpass query must end with "out meta;" so elements carry the version,
user, timestamp and changeset needed to write an OsmChange file. Nodes that
lack metadata are only there to give ways their geometry; they go to the
point store instead of the element list.
"""

from dataclasses import dataclass
from typing import Any

import pandas as pd

from fastmatcher.config.settings import MatcherConfig
from fastmatcher.exceptions import DatasetError
from fastmatcher.ingestion.base import DataLoader
from fastmatcher.models import Element, ElementKind, PointStore, Position, Provenance
from fastmatcher.schemas.overpass import OverpassElementSchema, PointSchema
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)

METADATA_KEYS = ("version", "user", "timestamp", "changeset")


@dataclass
class OverpassData:
    """
    Parsed Overpass export.

    Attributes:
        elements: Nodes and ways with metadata, relations excluded.
        point_store: Coordinates of the nodes referenced by those ways.
    """

    elements: list[Element]
    point_store: PointStore


def has_metadata(raw_element: dict[str, Any]) -> bool:
    """Whether an Overpass element carries the "out meta;" attributes."""
    return all(key in raw_element for key in METADATA_KEYS)


def _element_from_raw(raw: dict[str, Any]) -> Element:
    kind = ElementKind(raw["type"])
    metadata = Provenance(
        version=int(raw["version"]),
        user=str(raw["user"]),
        timestamp=str(raw["timestamp"]),
        changeset=int(raw["changeset"]),
        uid=int(raw["uid"]) if raw.get("uid") is not None else None,
    )
    tags = {str(k): str(v) for k, v in (raw.get("tags") or {}).items()}

    if kind is ElementKind.NODE:
        return Element(
            id=int(raw["id"]),
            kind=kind,
            tags=tags,
            metadata=metadata,
            lat=float(raw["lat"]) if raw.get("lat") is not None else None,
            lon=float(raw["lon"]) if raw.get("lon") is not None else None,
        )

    return Element(
        id=int(raw["id"]),
        kind=kind,
        tags=tags,
        metadata=metadata,
        node_ids=tuple(int(n) for n in raw.get("nodes") or ()),
    )


def split_elements(raw_elements: list[dict[str, Any]]) -> OverpassData:
    """
    Separate matchable elements from geometry-only nodes.

    Args:
        raw_elements: The "elements" list of an Overpass JSON export.

    Returns:
        OverpassData with elements and the point store for their ways.
    """
    nodes_by_id = {
        raw["id"]: raw for raw in raw_elements if raw.get("type") == "node"
    }

    elements: list[Element] = []
    n_relations = 0
    n_unsupported = 0

    for raw in raw_elements:
        if not has_metadata(raw):
            continue
        element_type = raw.get("type")
        if element_type == "relation":
            n_relations += 1
            continue
        if element_type not in (ElementKind.NODE.value, ElementKind.WAY.value):
            n_unsupported += 1
            log.warning(
                "Skipping unsupported element type",
                element_id=raw.get("id"),
                element_type=element_type,
            )
            continue
        elements.append(_element_from_raw(raw))

    points: dict[int, Position] = {}
    n_missing = 0
    for element in elements:
        if element.kind is not ElementKind.WAY:
            continue
        for node_id in element.node_ids:
            node = nodes_by_id.get(node_id)
            if node is None or node.get("lat") is None or node.get("lon") is None:
                n_missing += 1
                continue
            points[node_id] = Position(float(node["lat"]), float(node["lon"]))

    if n_missing:
        log.warning(
            "Ways reference nodes missing from the export",
            n_missing_refs=n_missing,
        )

    log.info(
        "Split Overpass elements",
        n_elements=len(elements),
        n_way_nodes=len(points),
        n_relations_excluded=n_relations,
        n_unsupported=n_unsupported,
    )

    return OverpassData(elements=elements, point_store=PointStore(points))


class OverpassLoader(DataLoader[OverpassElementSchema, OverpassData]):
    """Loader for Overpass JSON exports."""

    def __init__(self, config: MatcherConfig) -> None:
        """Initialize Overpass loader."""
        super().__init__(config, OverpassElementSchema)

    def _load_raw(self) -> Any:
        """Load the Overpass JSON file."""
        return self._read_json(self.resolve_path(self.config.data_paths.overpass))

    def _parse(self, raw: Any) -> OverpassData:
        """Split the raw export into elements and way nodes."""
        if not isinstance(raw, dict) or not isinstance(raw.get("elements"), list):
            msg = "Overpass export must be an object with an 'elements' list"
            raise DatasetError(msg)

        try:
            return split_elements(raw["elements"])
        except (KeyError, TypeError, ValueError) as e:
            msg = f"Malformed Overpass element: {e}"
            raise DatasetError(msg) from e

    def _to_frame(self, parsed: OverpassData) -> pd.DataFrame:
        """One row per element."""
        columns = ["id", "type", "version", "changeset", "user", "timestamp", "lat", "lon"]
        rows = [
            {
                "id": e.id,
                "type": e.kind.value,
                "version": e.metadata.version,
                "changeset": e.metadata.changeset,
                "user": e.metadata.user,
                "timestamp": e.metadata.timestamp,
                "lat": e.lat,
                "lon": e.lon,
            }
            for e in parsed.elements
        ]
        return pd.DataFrame(rows, columns=columns)

    def _validate(self, parsed: OverpassData) -> None:
        """Validate elements and the point store."""
        super()._validate(parsed)
        points = pd.DataFrame(
            [
                {"id": node_id, "lat": pos.lat, "lon": pos.lon}
                for node_id, pos in parsed.point_store.items()
            ],
            columns=["id", "lat", "lon"],
        )
        self._check(PointSchema, points)


def load_overpass(config: MatcherConfig, *, validate: bool = True) -> OverpassData:
    """Convenience function to load the configured Overpass export."""
    return OverpassLoader(config).load(validate=validate)
