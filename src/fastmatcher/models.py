"""
Core data model for element/feature matching.

Elements are OSM nodes and ways from an Overpass export. Features are
GeoJSON Point/Polygon features. A match record binds one element to at
most one feature and carries the operator's decision.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple


class ElementKind(str, Enum):
    """OSM element types supported for matching."""

    NODE = "node"  # point
    WAY = "way"  # polyline over referenced nodes


class Verification(str, Enum):
    """Operator decision on a match record."""

    UNSET = "unset"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Position(NamedTuple):
    """WGS84 latitude/longitude pair in degrees."""

    lat: float
    lon: float


@dataclass(frozen=True)
class Provenance:
    """
    OSM metadata needed to write an element back as a modification.

    Attributes:
        version: Element version the change applies to.
        user: Last editor's display name.
        timestamp: ISO timestamp of the last edit.
        changeset: Id of the changeset that produced this version.
        uid: Last editor's user id, when exported.
    """

    version: int
    user: str
    timestamp: str
    changeset: int
    uid: int | None = None


@dataclass(frozen=True)
class Element:
    """
    OSM element eligible for a tag update.

    Nodes carry their own coordinates; ways reference nodes by id and get
    their position through the point store.

    Attributes:
        id: OSM element id.
        kind: Node or way.
        tags: Existing OSM tags.
        metadata: Provenance for round-tripping edits.
        lat: Node latitude (nodes only).
        lon: Node longitude (nodes only).
        node_ids: Ordered node references (ways only).
    """

    id: int
    kind: ElementKind
    tags: dict[str, str]
    metadata: Provenance
    lat: float | None = None
    lon: float | None = None
    node_ids: tuple[int, ...] = ()


class PointStore(Mapping[int, Position]):
    """Read-only lookup of way nodes that are not elements themselves."""

    def __init__(self, points: Mapping[int, Position] | None = None) -> None:
        self._points: dict[int, Position] = dict(points or {})

    def __getitem__(self, node_id: int) -> Position:
        return self._points[node_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"PointStore(n_points={len(self._points)})"


@dataclass(frozen=True)
class Feature:
    """
    GeoJSON feature eligible to supply a tag value.

    Attributes:
        geometry_type: GeoJSON geometry type ("Point", "Polygon", ...).
        coordinates: GeoJSON coordinates ([lon, lat] order).
        properties: Feature properties.
        raw: The feature object exactly as read, used for re-export.
    """

    geometry_type: str
    coordinates: Any
    properties: dict[str, Any]
    raw: dict[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_geojson(cls, obj: dict[str, Any]) -> "Feature":
        """Build a feature from a GeoJSON feature object."""
        geometry = obj.get("geometry") or {}
        return cls(
            geometry_type=str(geometry.get("type")),
            coordinates=geometry.get("coordinates"),
            properties=dict(obj.get("properties") or {}),
            raw=obj,
        )


@dataclass(frozen=True)
class CandidateSet:
    """
    Features found around one element.

    Attributes:
        near: Feature indices within the radius.
        mid: Feature indices beyond the radius but within twice the radius.
    """

    near: tuple[int, ...] = ()
    mid: tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Whether no feature was found at all."""
        return not self.near and not self.mid


@dataclass
class MatchRecord:
    """
    Classifier verdict for one element.

    Attributes:
        element_index: Index into the element list.
        feature_index: Index into the feature list, None when unmatched.
        candidates: Candidate set the verdict was derived from.
        uncertain: Whether other plausible candidates exist.
        verification: Operator decision, changed only by the review session.
    """

    element_index: int
    feature_index: int | None
    candidates: CandidateSet
    uncertain: bool = False
    verification: Verification = Verification.UNSET

    @property
    def is_matched(self) -> bool:
        """Whether a feature was proposed for the element."""
        return self.feature_index is not None

    @property
    def verified(self) -> bool | None:
        """Decision as True (accepted), False (rejected) or None (undecided)."""
        if self.verification is Verification.ACCEPTED:
            return True
        if self.verification is Verification.REJECTED:
            return False
        return None
