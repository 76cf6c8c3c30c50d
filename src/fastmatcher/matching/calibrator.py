"""
Radius calibration from feature spacing.

A matching radius below the smallest distance between two features makes
it unlikely that two features are both genuine candidates for one element.
Half of that smallest distance is suggested as the default radius.

The pass is quadratic in the number of features and meant to run once per
dataset.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from fastmatcher.geometry.distance import great_circle_distance_km_array
from fastmatcher.geometry.position import representative_position
from fastmatcher.models import Feature
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class CalibrationReport:
    """
    Result of measuring feature spacing.

    Attributes:
        n_features: Number of features measured.
        n_positioned: Features with a defined position.
        distances: Pairwise distances in km, ascending.
        smallest_m: Up to three smallest distances in meters.
        suggested_radius_m: Half of the smallest distance in meters, or None
            with fewer than two positioned features.
    """

    n_features: int
    n_positioned: int
    distances: list[float] = field(default_factory=list)
    smallest_m: list[float] = field(default_factory=list)
    suggested_radius_m: float | None = None

    @property
    def suggested_radius_km(self) -> float | None:
        """Suggested radius in kilometers."""
        if self.suggested_radius_m is None:
            return None
        return self.suggested_radius_m / 1000


def _positioned_coords(features: Sequence[Feature]) -> np.ndarray:
    """(lat, lon) rows for the features with a defined position."""
    positions = [representative_position(f) for f in features]
    return np.array([p for p in positions if p is not None], dtype=float).reshape(
        -1, 2
    )


def _pairwise_distances(coords: np.ndarray, *, sort: bool) -> list[float]:
    if len(coords) < 2:
        return []

    # Row-major upper triangle keeps the (i, j) order of a nested loop
    i_idx, j_idx = np.triu_indices(len(coords), k=1)
    distances = great_circle_distance_km_array(
        coords[i_idx, 0], coords[i_idx, 1], coords[j_idx, 0], coords[j_idx, 1]
    )

    if sort:
        distances = np.sort(distances, kind="stable")

    return [float(d) for d in distances]


def measure_distances(
    features: Sequence[Feature], *, sort: bool = True
) -> list[float]:
    """
    Distances between every unordered pair of positioned features.

    Features without a position are skipped.

    Args:
        features: Features to measure.
        sort: Sort ascending (default).

    Returns:
        n*(n-1)/2 distances in kilometers for n positioned features.
    """
    return _pairwise_distances(_positioned_coords(features), sort=sort)


def suggest_radius_km(distances: Sequence[float]) -> float | None:
    """Half of the smallest inter-feature distance, or None if there is none."""
    if not distances:
        return None
    return min(distances) / 2


def calibrate(features: Sequence[Feature]) -> CalibrationReport:
    """
    Measure feature spacing and suggest a matching radius.

    Args:
        features: Features to measure.

    Returns:
        CalibrationReport with sorted distances and the suggestion.
    """
    log.info("Measuring feature distances", n_features=len(features))

    coords = _positioned_coords(features)
    distances = _pairwise_distances(coords, sort=True)
    radius_km = suggest_radius_km(distances)

    report = CalibrationReport(
        n_features=len(features),
        n_positioned=len(coords),
        distances=distances,
        smallest_m=[round(d * 1000, 3) for d in distances[:3]],
        suggested_radius_m=(
            round(radius_km * 1000, 2) if radius_km is not None else None
        ),
    )

    log.info(
        "Measured feature distances",
        n_pairs=len(distances),
        smallest_m=report.smallest_m,
        suggested_radius_m=report.suggested_radius_m,
    )

    return report
