"""
Brute-force candidate search between elements and features.

Every positioned element is compared with every positioned feature using
two thresholds: features within the radius are "near", features within
twice the radius are "mid". No spatial index is used; datasets of a few
thousand records per side are well within reach of the O(n*m) scan.
"""

from collections.abc import Mapping, Sequence

from fastmatcher.geometry.distance import great_circle_distance_km
from fastmatcher.geometry.position import representative_position
from fastmatcher.models import CandidateSet, Element, Feature, Position
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)


def find_candidates(
    elements: Sequence[Element],
    features: Sequence[Feature],
    radius_km: float,
    point_store: Mapping[int, Position] | None = None,
) -> list[CandidateSet]:
    """
    Bucket features around each element by distance.

    Args:
        elements: OSM elements to match.
        features: GeoJSON features to match against.
        radius_km: Primary radius in kilometers.
        point_store: Lookup for the nodes referenced by ways.

    Returns:
        One CandidateSet per element, in element order. Elements without a
        position get an empty set.

    Raises:
        ValueError: If radius_km is not positive.
    """
    if radius_km <= 0:
        msg = f"Radius must be positive, got {radius_km}"
        raise ValueError(msg)

    outer_km = radius_km * 2

    log.info(
        "Finding candidates",
        n_elements=len(elements),
        n_features=len(features),
        radius_km=radius_km,
    )

    # Feature positions are independent of the element, resolve them once
    feature_positions = [
        (index, position)
        for index, feature in enumerate(features)
        if (position := representative_position(feature)) is not None
    ]

    results: list[CandidateSet] = []
    n_unpositioned = 0

    for element in elements:
        origin = representative_position(element, point_store)
        if origin is None:
            n_unpositioned += 1
            results.append(CandidateSet())
            continue

        near: list[int] = []
        mid: list[int] = []
        for index, position in feature_positions:
            distance = great_circle_distance_km(*origin, *position)
            if distance <= radius_km:
                near.append(index)
            elif distance <= outer_km:
                mid.append(index)

        results.append(CandidateSet(near=tuple(near), mid=tuple(mid)))

    log.info(
        "Found candidates",
        n_elements=len(results),
        n_with_candidates=sum(1 for c in results if not c.is_empty),
        n_unpositioned=n_unpositioned,
    )

    return results
