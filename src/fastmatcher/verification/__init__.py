"""
Operator review of match proposals.

Provides the cursor-driven accept/reject session and the exports of its
outcome: an OsmChange file for accepted matches and a GeoJSON file with the
features of rejected ones.
"""

from fastmatcher.verification.export import (
    ModifiedElement,
    build_osm_change,
    build_rejected_collection,
    parse_osm_change,
    serialize_osm_change,
    write_osm_change,
    write_rejected_geojson,
)
from fastmatcher.verification.session import SessionProgress, VerificationSession

__all__ = [
    "ModifiedElement",
    "SessionProgress",
    "VerificationSession",
    "build_osm_change",
    "build_rejected_collection",
    "parse_osm_change",
    "serialize_osm_change",
    "write_osm_change",
    "write_rejected_geojson",
]
