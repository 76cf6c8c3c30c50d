"""
Element-to-feature matching: radius calibration, candidate search and
classification into single proposals.
"""

from fastmatcher.matching.calibrator import (
    CalibrationReport,
    calibrate,
    measure_distances,
    suggest_radius_km,
)
from fastmatcher.matching.classifier import (
    ClassificationSummary,
    classify,
    classify_all,
    order_for_review,
    summarize,
)
from fastmatcher.matching.engine import find_candidates

__all__ = [
    "CalibrationReport",
    "ClassificationSummary",
    "calibrate",
    "classify",
    "classify_all",
    "find_candidates",
    "measure_distances",
    "order_for_review",
    "suggest_radius_km",
    "summarize",
]
