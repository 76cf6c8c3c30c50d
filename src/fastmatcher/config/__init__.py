"""
Configuration management with typed Pydantic models.

Provides project-scoped input paths, tagging keys and matching radius,
loaded from YAML with environment variable interpolation.
"""

from fastmatcher.config.loader import load_config
from fastmatcher.config.settings import (
    DataPathsConfig,
    MatcherConfig,
    MatchingConfig,
    OutputConfig,
    TaggingConfig,
)

__all__ = [
    "DataPathsConfig",
    "MatcherConfig",
    "MatchingConfig",
    "OutputConfig",
    "TaggingConfig",
    "load_config",
]
