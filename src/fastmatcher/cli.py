"""Command-line interface for fastmatcher."""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import click
import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from fastmatcher.config.settings import MatcherConfig
    from fastmatcher.matching.context import MatchContext
    from fastmatcher.models import MatchRecord
    from fastmatcher.verification.session import VerificationSession

app = typer.Typer(
    name="fastmatcher",
    help="Match OSM elements to GeoJSON features and review the proposals.",
    no_args_is_help=True,
)

console = Console()

KEY_ACCEPT = "p"
KEY_REJECT = "o"
KEY_NEXT = "n"
KEY_BACK = "b"
KEY_SAVE = "s"
KEY_QUIT = "q"

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]
RadiusOption = Annotated[
    float | None,
    typer.Option(
        "--radius-m",
        "-r",
        help="Matching radius in meters. Defaults to config, then to the calibrated suggestion.",
        click_type=click.FloatRange(min=0.0, min_open=True),
    ),
]


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
    ] = "WARNING",
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit logs as JSON lines."),
    ] = False,
) -> None:
    """Configure logging for all commands."""
    from fastmatcher.utils.logging import configure_logging

    configure_logging(level=log_level, json_output=json_logs)


def _load(config: Path) -> tuple["MatcherConfig", "MatchContext"]:
    """Load configuration and datasets, exiting on failure."""
    from fastmatcher.config.loader import load_config
    from fastmatcher.exceptions import MatcherError
    from fastmatcher.ingestion import load_context

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    try:
        matcher_config = load_config(config)
        context = load_context(matcher_config)
    except (FileNotFoundError, ValueError, MatcherError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(
        f"[green]Loaded {len(context.elements)} elements from Overpass file.[/green]"
    )
    console.print(
        f"[green]Loaded {len(context.features)} features from GeoJSON file.[/green]"
    )
    return matcher_config, context


def _resolve_radius_km(
    radius_m: float | None, matcher_config: "MatcherConfig", context: "MatchContext"
) -> float:
    """Radius from the option, the config or the calibrator, in that order."""
    if radius_m is not None:
        return radius_m / 1000
    if matcher_config.radius_km is not None:
        return matcher_config.radius_km

    console.print("[cyan]No radius configured, measuring feature distances...[/cyan]")
    report = context.calibrate()
    # Features sharing a position give a zero suggestion
    if report.suggested_radius_km is None or report.suggested_radius_km <= 0:
        console.print(
            "[red]Error: Need at least two features at distinct positions to suggest a radius. "
            "Pass --radius-m.[/red]"
        )
        raise typer.Exit(code=1)

    console.print(f"[dim]Using suggested radius: {report.suggested_radius_m} m[/dim]")
    return report.suggested_radius_km


@app.command()
def analyze(config: ConfigOption) -> None:
    """Measure distances between features and suggest a matching radius."""
    _, context = _load(config)

    console.print("[cyan]Measuring distances...[/cyan]")
    report = context.calibrate()

    table = Table(title="Feature Spacing")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Features", str(report.n_features))
    table.add_row("Features with position", str(report.n_positioned))
    table.add_row("Measured pairs", str(len(report.distances)))
    table.add_row(
        "Three smallest distances (m)",
        ", ".join(str(d) for d in report.smallest_m) or "-",
    )
    table.add_row(
        "Suggested radius (m)",
        str(report.suggested_radius_m) if report.suggested_radius_m is not None else "-",
    )

    console.print(table)


def _print_summary(context: "MatchContext", radius_km: float) -> "VerificationSession":
    """Match, print the classification table and open a session."""
    from fastmatcher.exceptions import EmptySession

    console.print(f"[cyan]Finding matches within {radius_km * 1000:g} m...[/cyan]")
    try:
        run = context.match(radius_km)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    summary = run.summary

    table = Table(title="Match Classification")
    table.add_column("Class", style="cyan")
    table.add_column("Elements", style="green", justify="right")
    table.add_column("Share", style="green", justify="right")

    table.add_row("Likely", str(summary.n_likely), f"{summary.likely_percent}%")
    table.add_row(
        "Uncertain", str(summary.n_uncertain), f"{summary.uncertain_percent}%"
    )
    table.add_row("No match", str(summary.n_unmatched), f"{summary.unmatched_percent}%")

    console.print(table)

    try:
        return context.start_session(run)
    except EmptySession as e:
        console.print(f"[yellow]⚠ {e}. Try a larger radius.[/yellow]")
        raise typer.Exit(code=1) from e


@app.command()
def match(config: ConfigOption, radius_m: RadiusOption = None) -> None:
    """Find and classify matches without starting a review."""
    matcher_config, context = _load(config)
    radius_km = _resolve_radius_km(radius_m, matcher_config, context)
    session = _print_summary(context, radius_km)
    console.print(f"\n[green]{session.size} matches ready for review[/green]")
    console.print(f"[blue]Run review: fastmatcher verify --config {config}[/blue]")


def _show_record(
    context: "MatchContext", session: "VerificationSession", record: "MatchRecord"
) -> None:
    """Render one proposal with progress and decision state."""
    progress = session.progress()
    element = context.element_of(record)
    feature = context.feature_of(record)
    distance_km = context.distance_km(record)

    state = {True: "[green]accepted[/green]", False: "[red]rejected[/red]"}.get(
        record.verified, "[dim]undecided[/dim]"
    )
    certainty = "[yellow]uncertain[/yellow]" if record.uncertain else "likely"
    distance = f"{distance_km * 1000:.1f} m" if distance_km is not None else "-"

    console.rule(
        f"{progress.label}  accepted {progress.accepted}  rejected {progress.rejected}"
    )
    console.print(
        f"{element.kind.value} {element.id}  {certainty}  distance {distance}  {state}"
    )
    properties = feature.properties if feature is not None else {}
    # Text() keeps brackets in values from being read as rich markup
    console.print(
        Panel(
            Text(json.dumps(properties, indent=2, ensure_ascii=False)),
            title="Feature properties",
        )
    )
    console.print(
        Panel(
            Text(json.dumps(element.tags, indent=2, ensure_ascii=False)),
            title="Element tags",
        )
    )


def _save(
    context: "MatchContext",
    session: "VerificationSession",
    matcher_config: "MatcherConfig",
) -> bool:
    """Write both exports; report failures and keep the session open."""
    try:
        accepted_path = context.export_accepted(
            session,
            matcher_config.accepted_path,
            generator=matcher_config.output.generator,
        )
        rejected_path = context.export_rejected(session, matcher_config.rejected_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: Could not save review: {e}[/red]")
        return False

    console.print(f"[green]✓ Saved {session.accepted_count} accepted: {accepted_path}[/green]")
    console.print(f"[green]✓ Saved {session.rejected_count} rejected: {rejected_path}[/green]")
    return True


@app.command()
def verify(config: ConfigOption, radius_m: RadiusOption = None) -> None:
    """
    Review match proposals one by one.

    Keys: p accept, o reject, n next, b back, s save, q save and quit.
    Accepted matches are written as an OsmChange file, rejected ones as
    GeoJSON, both in the project output directory.
    """
    matcher_config, context = _load(config)
    radius_km = _resolve_radius_km(radius_m, matcher_config, context)
    session = _print_summary(context, radius_km)

    console.print(
        f"\n[bold]Keys: {KEY_ACCEPT} accept, {KEY_REJECT} reject, {KEY_NEXT} next, "
        f"{KEY_BACK} back, {KEY_SAVE} save, {KEY_QUIT} quit[/bold]"
    )

    session.advance()
    while True:
        current = session.current
        if current is not None:
            _show_record(context, session, current)

        key = Prompt.ask(
            "Decision",
            choices=[KEY_ACCEPT, KEY_REJECT, KEY_NEXT, KEY_BACK, KEY_SAVE, KEY_QUIT],
            default=KEY_NEXT,
            show_choices=False,
        )

        if key == KEY_ACCEPT:
            session.mark_accepted()
        elif key == KEY_REJECT:
            session.mark_rejected()
        elif key == KEY_NEXT:
            if session.advance() is None:
                console.print("[dim]Last match reached[/dim]")
        elif key == KEY_BACK:
            if session.retreat() is None:
                console.print("[dim]First match reached[/dim]")
        elif key == KEY_SAVE:
            _save(context, session, matcher_config)
        elif _save(context, session, matcher_config):
            break
        else:
            console.print("[yellow]Review kept open, fix the output path and quit again[/yellow]")

    progress = session.progress()
    console.print(
        f"[blue]Reviewed {progress.accepted + progress.rejected}/{progress.size}, "
        f"{progress.undecided} undecided[/blue]"
    )


@app.command()
def version() -> None:
    """Show version information."""
    from fastmatcher import __version__

    console.print(f"fastmatcher version {__version__}")


if __name__ == "__main__":
    app()
