"""CLI entry point for cluster tracking."""
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cluster_track.cli import scenario

app = typer.Typer(
    name="cluster-track",
    help="Single-object cluster tracking CLI",
    add_completion=False,
)

console = Console()

app.add_typer(scenario.app, name="scenario", help="Replay and inspect recorded scans")


@app.command()
def version():
    """Show version information."""
    from cluster_track import __version__
    console.print(f"cluster-track version {__version__}")


@app.command()
def config(
    path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration YAML"),
):
    """Show the effective configuration (file, environment and defaults) as YAML."""
    import yaml

    from cluster_track.core.config import load_config
    from cluster_track.core.exceptions import ConfigurationError

    try:
        cfg = load_config(path)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    console.print(yaml.safe_dump(cfg.model_dump(mode="json"), default_flow_style=False))


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
