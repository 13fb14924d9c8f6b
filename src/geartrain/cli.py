"""CLI entry point for the gear train simulator."""

import logging
import math
import os
from pathlib import Path
from typing import Optional

import typer
import yaml

app = typer.Typer(
    name="geartrain",
    help="Gear train simulator - meshing, speed ratios, lock and load for planar gear trains",
)


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv("GEARTRAIN_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    _configure_logging(verbose)


def _load_controller(project_file: Path):
    from .engine import GearTrainController
    from .storage import load_project

    if not project_file.exists():
        typer.echo(f"Error: Project file not found: {project_file}", err=True)
        raise typer.Exit(1)

    try:
        state = load_project(project_file)
    except (ValueError, yaml.YAMLError) as e:
        typer.echo(f"Validation error: {e}", err=True)
        raise typer.Exit(1)

    return GearTrainController(state)


def _print_train(controller) -> None:
    state = controller.state
    status = controller.status()

    typer.echo(f"  {'id':<16} {'teeth':>5} {'radius':>7} {'rpm':>8} {'ratio':>7}  meshes")
    for gear in state.gears:
        ratio = controller.gear_ratio(gear.id)
        ratio_text = f"1:{ratio:.2f}" if ratio is not None else "-"
        marker = "*" if gear.id == state.driver_gear_id else " "
        typer.echo(
            f"{marker} {gear.id:<16} {gear.teeth_count:>5} {gear.radius:>7.1f} "
            f"{gear.rpm:>8.2f} {ratio_text:>7}  {', '.join(sorted(gear.meshing_with)) or '-'}"
        )

    if status.locked:
        typer.echo(f"\nLOCKED: {', '.join(sorted(status.locked_gear_ids))}")
    else:
        typer.echo(f"\nLoad: {status.load_percentage:.0f}%")


@app.command()
def validate(
    project_file: Path = typer.Argument(..., help="Path to a YAML or JSON project file"),
) -> None:
    """Validate a project file without simulating it."""
    from .storage import read_project

    if not project_file.exists():
        typer.echo(f"Error: Project file not found: {project_file}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Validating project from {project_file}...")
    try:
        document = read_project(project_file)
    except (ValueError, yaml.YAMLError) as e:
        typer.echo(f"Validation error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Project valid (version {document.version})")
    typer.echo(f"  Gears: {len(document.gears)}")
    typer.echo(f"  Outputs: {len(document.outputs)}")
    typer.echo(f"  Driver: {document.driver_gear_id or '-'}")


@app.command()
def inspect(
    project_file: Path = typer.Argument(..., help="Path to a YAML or JSON project file"),
) -> None:
    """Rebuild the gear train and report meshes, speeds, lock and load."""
    controller = _load_controller(project_file)
    controller.tick(0.0)

    typer.echo(f"Gear train from {project_file}:\n")
    _print_train(controller)


@app.command()
def simulate(
    project_file: Path = typer.Argument(..., help="Path to a YAML or JSON project file"),
    seconds: float = typer.Option(1.0, "-s", "--seconds", min=0, help="Simulated time"),
    fps: int = typer.Option(60, "--fps", min=1, help="Animation ticks per second"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Save the spun project to this path"
    ),
) -> None:
    """Play the gear train for a while and report final rotations."""
    controller = _load_controller(project_file)
    state = controller.state

    if not state.gears:
        typer.echo("Nothing to simulate: project has no gears", err=True)
        raise typer.Exit(1)

    controller.toggle_play()
    ticks = int(round(seconds * fps))
    for _ in range(ticks):
        controller.tick(1.0 / fps)

    typer.echo(f"Simulated {ticks} ticks ({seconds:g}s at {fps} fps)\n")
    _print_train(controller)

    typer.echo("\nRotations (degrees):")
    for gear in state.gears:
        typer.echo(f"  {gear.id:<16} {math.degrees(gear.rotation):>10.2f}")
    for item in state.outputs:
        attached = item.attached_to_gear or "loose"
        typer.echo(f"  {item.id:<16} {math.degrees(item.rotation):>10.2f}  ({item.type.value} on {attached})")

    if output:
        from .storage import save_project

        save_project(state, output)
        typer.echo(f"\nProject saved to {output}")


if __name__ == "__main__":
    app()
