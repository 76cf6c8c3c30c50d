"""
Export reviewed matches.

Accepted matches become an OsmChange document (.osc) that modifies the
matched elements' tags; editors such as JOSM load it directly:
https://wiki.openstreetmap.org/wiki/OsmChange

Rejected matches become a GeoJSON FeatureCollection holding the original
feature objects, ready for another pass.
"""

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lxml import etree

from fastmatcher.models import Element, ElementKind, Feature, MatchRecord, Verification
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)

OSM_CHANGE_VERSION = "0.6"
DEFAULT_GENERATOR = "fastmatcher"

# Nodes are written before ways
_KIND_ORDER = {ElementKind.NODE: 0, ElementKind.WAY: 1}

# Characters outside the XML 1.0 Char production
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


@dataclass
class ModifiedElement:
    """
    One child of an OsmChange modify block.

    Attributes:
        kind: Node or way.
        id: OSM element id.
        version: Element version.
        tags: Full tag set after modification.
        lat: Node latitude (nodes only).
        lon: Node longitude (nodes only).
        node_ids: Ordered node references (ways only).
    """

    kind: ElementKind
    id: int
    version: int
    tags: dict[str, str] = field(default_factory=dict)
    lat: float | None = None
    lon: float | None = None
    node_ids: list[int] = field(default_factory=list)


def _attr(value: Any) -> str:
    """
    Render an attribute value the way OSM tooling writes it.

    Control characters XML cannot carry are dropped.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return _XML_ILLEGAL.sub("", str(value))


def updated_tags(
    element: Element, feature: Feature, *, tag_key: str, property_key: str
) -> dict[str, str]:
    """
    Element tags with the configured tag set from the feature.

    Args:
        element: Matched element.
        feature: Matched feature.
        tag_key: Tag written onto the element.
        property_key: Feature property supplying the value.

    Returns:
        Copy of the element's tags; existing tags are preserved.
    """
    tags = dict(element.tags)
    tags[tag_key] = _attr(feature.properties[property_key])
    return tags


def _append_tags(parent: etree._Element, tags: dict[str, str]) -> None:
    for key, value in tags.items():
        etree.SubElement(parent, "tag", k=key, v=_attr(value))


def build_osm_change(
    records: Sequence[MatchRecord],
    elements: Sequence[Element],
    features: Sequence[Feature],
    *,
    tag_key: str,
    property_key: str,
    generator: str = DEFAULT_GENERATOR,
) -> etree._Element:
    """
    Build an OsmChange document from accepted records.

    Args:
        records: Accepted match records.
        elements: Element list the records index into.
        features: Feature list the records index into.
        tag_key: Tag written onto each element.
        property_key: Feature property supplying the tag value.
        generator: Value of the root generator attribute.

    Returns:
        The <osmChange> root element.

    Raises:
        ValueError: If a record is not accepted or has no feature.
    """
    root = etree.Element("osmChange", version=OSM_CHANGE_VERSION, generator=generator)
    etree.SubElement(root, "create")
    modify = etree.SubElement(root, "modify")

    ordered = sorted(records, key=lambda r: _KIND_ORDER[elements[r.element_index].kind])

    for record in ordered:
        if record.verification is not Verification.ACCEPTED or record.feature_index is None:
            msg = f"Record for element index {record.element_index} is not an accepted match"
            raise ValueError(msg)

        element = elements[record.element_index]
        feature = features[record.feature_index]
        tags = updated_tags(
            element, feature, tag_key=tag_key, property_key=property_key
        )

        if element.kind is ElementKind.NODE:
            child = etree.SubElement(
                modify,
                "node",
                id=_attr(element.id),
                lon=_attr(element.lon),
                lat=_attr(element.lat),
                version=_attr(element.metadata.version),
            )
        else:
            child = etree.SubElement(
                modify,
                "way",
                id=_attr(element.id),
                version=_attr(element.metadata.version),
            )
            # Node references are written as read; not re-checked here
            for node_id in element.node_ids:
                etree.SubElement(child, "nd", ref=_attr(node_id))

        _append_tags(child, tags)

    delete = etree.SubElement(root, "delete")
    delete.set("if-unused", "true")

    log.info("Built OsmChange document", n_modified=len(modify))

    return root


def serialize_osm_change(root: etree._Element) -> bytes:
    """Serialize an OsmChange document as UTF-8 XML."""
    return etree.tostring(
        root, xml_declaration=True, encoding="UTF-8", pretty_print=True
    )


def write_osm_change(root: etree._Element, path: Path) -> Path:
    """
    Write an OsmChange document to disk.

    Args:
        root: Document root from build_osm_change.
        path: Output path (conventionally *.osc).

    Returns:
        Path written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(serialize_osm_change(root))

    log.info(
        "Saved OsmChange file",
        path=str(path),
        size_kb=round(path.stat().st_size / 1e3, 2),
    )

    return path


def parse_osm_change(data: bytes | str) -> list[ModifiedElement]:
    """
    Read the modify block of an OsmChange document.

    Args:
        data: Serialized OsmChange XML.

    Returns:
        Modified elements in document order.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    root = etree.fromstring(data)

    modified: list[ModifiedElement] = []
    for child in root.iterfind("modify/*"):
        kind = ElementKind(child.tag)
        tags = {tag.get("k"): tag.get("v") for tag in child.iterfind("tag")}
        item = ModifiedElement(
            kind=kind,
            id=int(child.get("id")),
            version=int(child.get("version")),
            tags=tags,
        )
        if kind is ElementKind.NODE:
            item.lat = float(child.get("lat"))
            item.lon = float(child.get("lon"))
        else:
            item.node_ids = [int(nd.get("ref")) for nd in child.iterfind("nd")]
        modified.append(item)

    return modified


def build_rejected_collection(
    records: Sequence[MatchRecord], features: Sequence[Feature]
) -> dict[str, Any]:
    """
    FeatureCollection of the features proposed in rejected records.

    Features are included exactly as they were read.
    """
    return {
        "type": "FeatureCollection",
        "features": [
            features[r.feature_index].raw
            for r in records
            if r.feature_index is not None
        ],
    }


def write_rejected_geojson(collection: dict[str, Any], path: Path) -> Path:
    """
    Write a rejected-features collection as indented GeoJSON.

    Returns:
        Path written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(collection, f, indent=2, ensure_ascii=False)

    log.info(
        "Saved rejected features",
        path=str(path),
        n_features=len(collection["features"]),
    )

    return path
