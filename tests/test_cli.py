"""Tests for the command-line interface."""

import json
from pathlib import Path
from typing import Any

import pytest
import yaml
from typer.testing import CliRunner

from fastmatcher.cli import _save, app
from fastmatcher.config.settings import MatcherConfig, OutputConfig
from fastmatcher.ingestion import load_context
from fastmatcher.verification import parse_osm_change

runner = CliRunner()


@pytest.fixture(autouse=True)
def keep_logging_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Leave structlog alone so loggers never bind to the runner's streams."""
    monkeypatch.setattr(
        "fastmatcher.utils.logging.configure_logging", lambda **kwargs: None
    )


@pytest.fixture
def config_file(tmp_path: Path, data_dir: Path) -> Path:
    """Project YAML pointing at the fixture datasets."""
    path = tmp_path / "project.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "project": "cli-test",
                "data": {
                    "root": str(data_dir),
                    "overpass": "schools.json",
                    "geojson": "registry.geojson",
                },
                "tags": {"osm": "ref:school", "feature": "ref"},
                "matching": {"radius_m": 50},
                "output": {"root": str(tmp_path / "output")},
            }
        ),
        encoding="utf-8",
    )
    return path


def test_version() -> None:
    """Test version command prints the package version."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "fastmatcher version" in result.output


def test_analyze(config_file: Path) -> None:
    """Test analyze prints the spacing table."""
    result = runner.invoke(app, ["analyze", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "Feature Spacing" in result.output


def test_match(config_file: Path) -> None:
    """Test match reports the proposals ready for review."""
    result = runner.invoke(app, ["match", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "2 matches ready for review" in result.output


def test_match_nothing_found(config_file: Path) -> None:
    """Test a tiny radius exits with an error."""
    result = runner.invoke(
        app, ["match", "--config", str(config_file), "--radius-m", "0.001"]
    )
    assert result.exit_code == 1


def test_verify_saves_decisions(config_file: Path, tmp_path: Path) -> None:
    """Test accepting then rejecting writes both exports on quit."""
    result = runner.invoke(
        app, ["verify", "--config", str(config_file)], input="p\no\nq\n"
    )

    assert result.exit_code == 0
    output_dir = tmp_path / "output" / "cli-test"
    (modified,) = parse_osm_change((output_dir / "accepted.osc").read_bytes())
    assert modified.id == 1
    assert (output_dir / "rejected.geojson").exists()


def test_zero_radius_option_rejected(config_file: Path) -> None:
    """Test an explicit zero radius is a usage error, not a fallback."""
    result = runner.invoke(
        app, ["match", "--config", str(config_file), "--radius-m", "0"]
    )
    assert result.exit_code == 2


def test_coincident_features_without_radius(
    tmp_path: Path, data_dir: Path, geojson_payload: dict[str, Any]
) -> None:
    """Test a zero suggested radius exits cleanly instead of matching."""
    geojson_payload["features"].append(geojson_payload["features"][0])
    (data_dir / "registry.geojson").write_text(
        json.dumps(geojson_payload), encoding="utf-8"
    )
    path = tmp_path / "no-radius.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "project": "cli-test",
                "data": {
                    "root": str(data_dir),
                    "overpass": "schools.json",
                    "geojson": "registry.geojson",
                },
                "tags": {"osm": "ref:school", "feature": "ref"},
            }
        ),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["match", "--config", str(path)])

    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)
    assert "Pass --radius-m" in result.output


def test_save_failure_keeps_session(
    tmp_path: Path, matcher_config: MatcherConfig
) -> None:
    """Test an unwritable output directory is reported, not raised."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    config = matcher_config.model_copy(
        update={"output": OutputConfig(output_root=blocker)}
    )
    context = load_context(config)
    session = context.start_session(context.match(0.05))
    session.advance()
    session.mark_accepted()

    assert _save(context, session, config) is False
    assert session.accepted_count == 1
    assert _save(context, session, matcher_config) is True
    assert matcher_config.accepted_path.exists()
