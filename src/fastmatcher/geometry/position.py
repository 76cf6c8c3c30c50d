"""
Representative positions for elements and features.

Points stand for themselves. Ways and polygons are reduced to the plain
average of their vertices (not an area-weighted centroid), which is close
enough for buildings, short ways and similar compact shapes.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from fastmatcher.exceptions import UnresolvablePosition, UnsupportedGeometryKind
from fastmatcher.models import Element, ElementKind, Feature, Position
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)


def _mean_position(positions: Iterable[Position]) -> Position:
    """Unweighted mean of latitudes and of longitudes."""
    lat_sum = 0.0
    lon_sum = 0.0
    size = 0
    for lat, lon in positions:
        lat_sum += lat
        lon_sum += lon
        size += 1
    if size == 0:
        msg = "Cannot average an empty vertex list"
        raise UnresolvablePosition(msg)
    return Position(lat_sum / size, lon_sum / size)


def element_position(
    element: Element, point_store: Mapping[int, Position] | None = None
) -> Position:
    """
    Position of an OSM element.

    Args:
        element: Node or way.
        point_store: Lookup for the nodes referenced by ways.

    Returns:
        Node coordinates, or the mean of the way's node coordinates.

    Raises:
        UnresolvablePosition: If coordinates or referenced nodes are missing.
        UnsupportedGeometryKind: If the element is neither node nor way.
    """
    if element.kind is ElementKind.NODE:
        if element.lat is None or element.lon is None:
            msg = f"Node {element.id} has no coordinates"
            raise UnresolvablePosition(msg)
        return Position(element.lat, element.lon)

    if element.kind is ElementKind.WAY:
        store = point_store or {}
        missing = [node_id for node_id in element.node_ids if node_id not in store]
        if missing:
            msg = f"Way {element.id} references unknown nodes: {missing[:5]}"
            raise UnresolvablePosition(msg)
        return _mean_position(store[node_id] for node_id in element.node_ids)

    msg = f"Unsupported element type: {element.kind!r}, allowed: node/way"
    raise UnsupportedGeometryKind(msg)


def _outer_ring(coordinates: Any) -> list[Any]:
    """Outer ring of GeoJSON Polygon coordinates."""
    if not coordinates:
        return []
    return list(coordinates[0])


def feature_position(feature: Feature) -> Position:
    """
    Position of a GeoJSON feature.

    Args:
        feature: Point or Polygon feature.

    Returns:
        Point coordinates, or the mean of the outer ring's vertices.

    Raises:
        UnresolvablePosition: If the coordinates are empty or malformed.
        UnsupportedGeometryKind: If the geometry is neither Point nor Polygon.
    """
    try:
        if feature.geometry_type == "Point":
            lon, lat = feature.coordinates[:2]
            return Position(float(lat), float(lon))

        if feature.geometry_type == "Polygon":
            ring = _outer_ring(feature.coordinates)
            # GeoJSON rings repeat the first vertex at the end; it is kept in the average
            return _mean_position(
                Position(float(vertex[1]), float(vertex[0])) for vertex in ring
            )
    except (TypeError, ValueError, IndexError) as e:
        msg = f"Malformed {feature.geometry_type} coordinates"
        raise UnresolvablePosition(msg) from e

    msg = (
        f"Unsupported GeoJSON geometry type: {feature.geometry_type!r}, "
        "allowed: Point/Polygon"
    )
    raise UnsupportedGeometryKind(msg)


def representative_position(
    record: Element | Feature,
    point_store: Mapping[int, Position] | None = None,
) -> Position | None:
    """
    Representative position, or None when it cannot be computed.

    Geometry problems are logged and reported as None so batch callers can
    exclude the record without aborting.

    Args:
        record: Element or feature.
        point_store: Lookup for way nodes (elements only).

    Returns:
        Position, or None for unsupported or unresolvable geometry.
    """
    try:
        if isinstance(record, Element):
            return element_position(record, point_store)
        return feature_position(record)
    except (UnresolvablePosition, UnsupportedGeometryKind) as e:
        log.warning(
            "Excluding record without position",
            record_type=type(record).__name__,
            record_id=getattr(record, "id", None),
            reason=str(e),
        )
        return None
