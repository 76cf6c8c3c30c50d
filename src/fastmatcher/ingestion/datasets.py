"""
Loading both datasets into a matching context.
"""

from fastmatcher.config.settings import MatcherConfig
from fastmatcher.ingestion.geojson import load_features
from fastmatcher.ingestion.overpass import load_overpass
from fastmatcher.matching.context import MatchContext
from fastmatcher.utils.logging import get_logger, log_context

log = get_logger(__name__)


def load_context(config: MatcherConfig, *, validate: bool = True) -> MatchContext:
    """
    Load the Overpass export and GeoJSON features for a project.

    Args:
        config: Matcher configuration.
        validate: Whether to validate both datasets against their schemas.

    Returns:
        MatchContext ready for calibration and matching.

    Raises:
        FileNotFoundError: If an input file is missing.
        DatasetError: If an input file is malformed.
    """
    with log_context(project=config.project):
        overpass = load_overpass(config, validate=validate)
        features = load_features(config, validate=validate)

        log.info(
            "Loaded datasets",
            n_elements=len(overpass.elements),
            n_way_nodes=len(overpass.point_store),
            n_features=len(features),
        )

    return MatchContext(
        elements=overpass.elements,
        point_store=overpass.point_store,
        features=features,
        tagging=config.tagging,
    )
