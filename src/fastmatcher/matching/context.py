"""
Matching context.

Holds the loaded datasets and tagging settings for one run and passes them
explicitly through calibration, matching, review and export.
"""

from dataclasses import dataclass, field
from pathlib import Path

from fastmatcher.config.settings import TaggingConfig
from fastmatcher.geometry.distance import great_circle_distance_km
from fastmatcher.geometry.position import representative_position
from fastmatcher.matching.calibrator import CalibrationReport, calibrate
from fastmatcher.matching.classifier import (
    ClassificationSummary,
    classify_all,
    order_for_review,
    summarize,
)
from fastmatcher.matching.engine import find_candidates
from fastmatcher.models import CandidateSet, Element, Feature, MatchRecord, PointStore
from fastmatcher.utils.logging import get_logger
from fastmatcher.verification.export import (
    DEFAULT_GENERATOR,
    build_osm_change,
    build_rejected_collection,
    write_osm_change,
    write_rejected_geojson,
)
from fastmatcher.verification.session import VerificationSession

log = get_logger(__name__)


@dataclass
class MatchRun:
    """
    Result of one matching pass.

    Attributes:
        radius_km: Primary radius used.
        summary: Likely/uncertain/unmatched counts.
        candidates: Candidate set per element, in element order.
        records: Classified record per element, in element order.
    """

    radius_km: float
    summary: ClassificationSummary
    candidates: list[CandidateSet] = field(default_factory=list)
    records: list[MatchRecord] = field(default_factory=list)


@dataclass
class MatchContext:
    """
    Datasets and settings shared by every step of a run.

    Attributes:
        elements: OSM elements to match.
        point_store: Nodes referenced by ways.
        features: GeoJSON features filtered on the identifying property.
        tagging: Tag to write and property to read.
    """

    elements: list[Element]
    point_store: PointStore
    features: list[Feature]
    tagging: TaggingConfig

    def calibrate(self) -> CalibrationReport:
        """Measure feature spacing and suggest a radius."""
        return calibrate(self.features)

    def match(self, radius_km: float) -> MatchRun:
        """
        Find and classify candidates for every element.

        Args:
            radius_km: Primary radius in kilometers.

        Returns:
            MatchRun with candidates, records and summary.
        """
        candidates = find_candidates(
            self.elements, self.features, radius_km, self.point_store
        )
        records = classify_all(candidates)
        return MatchRun(
            radius_km=radius_km,
            candidates=candidates,
            records=records,
            summary=summarize(records),
        )

    def start_session(self, run: MatchRun) -> VerificationSession:
        """
        Create a review session over the matched records of a run.

        Raises:
            EmptySession: If no element was matched.
        """
        session = VerificationSession(order_for_review(run.records))
        log.info("Started review session", n_records=session.size)
        return session

    def element_of(self, record: MatchRecord) -> Element:
        """Element a record refers to."""
        return self.elements[record.element_index]

    def feature_of(self, record: MatchRecord) -> Feature | None:
        """Feature a record proposes, None when unmatched."""
        if record.feature_index is None:
            return None
        return self.features[record.feature_index]

    def distance_km(self, record: MatchRecord) -> float | None:
        """Distance between a record's element and feature, if both are positioned."""
        feature = self.feature_of(record)
        if feature is None:
            return None
        origin = representative_position(self.element_of(record), self.point_store)
        target = representative_position(feature)
        if origin is None or target is None:
            return None
        return great_circle_distance_km(*origin, *target)

    def export_accepted(
        self,
        session: VerificationSession,
        path: Path,
        *,
        generator: str = DEFAULT_GENERATOR,
    ) -> Path:
        """Write accepted records as an OsmChange file."""
        root = build_osm_change(
            session.accepted(),
            self.elements,
            self.features,
            tag_key=self.tagging.osm_tag,
            property_key=self.tagging.feature_tag,
            generator=generator,
        )
        return write_osm_change(root, path)

    def export_rejected(self, session: VerificationSession, path: Path) -> Path:
        """Write features of rejected records as GeoJSON."""
        collection = build_rejected_collection(session.rejected(), self.features)
        return write_rejected_geojson(collection, path)
