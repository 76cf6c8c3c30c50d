"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project, data.overpass, data.geojson,
tags.osm, tags.feature
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from fastmatcher.config.settings import (
    DataPathsConfig,
    MatcherConfig,
    MatchingConfig,
    OutputConfig,
    TaggingConfig,
)


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> MatcherConfig:
    """
    Load matcher configuration from YAML file(s).

    Minimal config requires only:
        - project: str
        - data.overpass, data.geojson: paths
        - tags.osm, tags.feature: keys

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated MatcherConfig instance.
    """
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        # Try to find base.yaml in same directory
        potential_base = config_path.parent / "base.yaml"
        base_data = (
            load_yaml(potential_base)
            if potential_base.exists() and potential_base != config_path
            else {}
        )

    main_data = load_yaml(config_path)

    # Main overrides base
    merged = _deep_merge(base_data, main_data)

    project = merged.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    data_data = merged.get("data", {})
    for key in ("overpass", "geojson"):
        if not data_data.get(key):
            msg = f"Config must specify 'data.{key}'"
            raise ValueError(msg)

    data_paths = DataPathsConfig(
        data_root=Path(data_data.get("root", "./data")),
        overpass=Path(data_data["overpass"]),
        geojson=Path(data_data["geojson"]),
    )

    tags_data = merged.get("tags", {})
    for key in ("osm", "feature"):
        if not tags_data.get(key):
            msg = f"Config must specify 'tags.{key}'"
            raise ValueError(msg)

    tagging = TaggingConfig(
        osm_tag=str(tags_data["osm"]),
        feature_tag=str(tags_data["feature"]),
    )

    # Radius is optional; the calibrator suggests one when missing
    matching_data = merged.get("matching", {})
    radius_m = matching_data.get("radius_m")
    matching = MatchingConfig(
        radius_m=float(radius_m) if radius_m not in (None, "") else None,
    )

    output_data = merged.get("output", {})
    output = OutputConfig(
        output_root=Path(output_data.get("root", "./output")),
        accepted_file=output_data.get("accepted_file", "accepted.osc"),
        rejected_file=output_data.get("rejected_file", "rejected.geojson"),
        generator=output_data.get("generator", "fastmatcher"),
    )

    return MatcherConfig(
        project=project,
        data_paths=data_paths,
        tagging=tagging,
        matching=matching,
        output=output,
    )
