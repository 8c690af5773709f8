"""Scenario CLI commands."""
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cluster_track.core.config import load_config
from cluster_track.core.exceptions import ClusterTrackError
from cluster_track.core.logging import (
    get_logger,
    log_duration,
    setup_logging_from_config,
    track_context,
)

app = typer.Typer(help="Scenario replay commands")
console = Console()
logger = get_logger(__name__)


@app.command()
def replay(
    scenario: Path = typer.Argument(..., exists=True, dir_okay=False, help="Scenario YAML file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration YAML"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save results to JSON"),
):
    """Replay recorded scans through a single track."""
    import json

    from cluster_track.tracking.replay import load_scenario, replay_scenario

    try:
        cfg = load_config(config)
        setup_logging_from_config(cfg.logging)
        loaded = load_scenario(scenario)
        with track_context(scenario=scenario.name, track_id=loaded.track_id):
            with log_duration(logger, "replay", scans=len(loaded.scans)):
                track, results = replay_scenario(loaded, cfg)
    except ClusterTrackError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Track {track.id}")
    table.add_column("Scan", style="cyan")
    table.add_column("Points")
    table.add_column("Mean")
    table.add_column("Velocity")
    table.add_column("Filtered (x, y, vx, vy)", style="magenta")
    table.add_column("Vertices")
    table.add_column("Moving", style="green")

    for r in results:
        table.add_row(
            str(r.index),
            str(r.points),
            f"({r.mean[0]:.3f}, {r.mean[1]:.3f})",
            f"({r.velocity[0]:.3f}, {r.velocity[1]:.3f})",
            "(" + ", ".join(f"{v:.3f}" for v in r.filtered) + ")",
            str(r.vertices),
            "yes" if r.moving else "no",
        )
        if r.error:
            table.add_row("", f"[red]{r.error}[/red]", "", "", "", "", "")

    console.print(table)
    console.print(f"Trajectory poses: {len(track.trajectory)}")

    if output:
        summary = {
            "track_id": track.id,
            "moving": track.moving,
            "color": list(track.color),
            "scans": [r.to_dict() for r in results],
            "trajectory": track.trajectory.to_numpy().tolist(),
        }
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w") as f:
            json.dump(summary, f, indent=2)
        console.print(f"\n[green]Results saved to {output}[/green]")


@app.command()
def simplify(
    points: list[str] = typer.Argument(..., help="Points as x,y pairs"),
    epsilon: float = typer.Option(0.1, "--epsilon", "-e", help="Simplification tolerance"),
):
    """Simplify one polyline with Ramer-Douglas-Peucker."""
    from cluster_track.shape.motion import MotionClassifier
    from cluster_track.shape.simplify import simplify as rdp

    try:
        parsed = [tuple(float(v) for v in p.split(",")) for p in points]
        vertices = rdp(parsed, epsilon)
    except (ValueError, ClusterTrackError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    for x, y in vertices:
        console.print(f"{x:.4f},{y:.4f}")
    static = MotionClassifier().is_static_shape(vertices)
    console.print(f"[bold]{len(vertices)} vertices, static shape: {static}[/bold]")
