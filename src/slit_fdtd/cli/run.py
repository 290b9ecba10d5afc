"""Command-line tool for headless double-slit runs.

The slit-fdtd CLI runs the simulation for a fixed number of frames with
progress tracking, then reports the field state and the interference fringes
found at the screen column. The last frame and the intensity profile can be
exported as PNG images.
"""

import sys
import time
from pathlib import Path

import click
import numpy as np
from rich.console import Console
from rich.table import Table

from slit_fdtd import __version__
from slit_fdtd.simulation import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    DoubleSlitSimulation,
    SimulationParameters,
)

from .progress import SimulationProgress, cell_updates, format_time, print_simulation_info

console = Console()

PROFILE_IMAGE_WIDTH = 250


def save_png(path: Path, rgba: np.ndarray) -> None:
    """Write an RGBA uint8 image with matplotlib."""
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise click.ClickException(
            "PNG export requires matplotlib. Install with: pip install 'slit-fdtd[viz]'"
        ) from e
    plt.imsave(path, rgba)


def print_summary(simulation: DoubleSlitSimulation, runtime: float, frames: int) -> None:
    """Print field diagnostics and fringe rows after a run."""
    grid = simulation.grid
    profile = simulation.intensity
    fringes = profile.fringe_peaks()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Result", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Runtime", format_time(runtime))
    if runtime > 0:
        table.add_row("Throughput", f"{cell_updates(simulation, frames) / runtime / 1e6:.1f} Mcells/s")
    table.add_row("Steps", str(grid.time))
    table.add_row("Max |u|", f"{grid.max_amplitude():.4g}")
    table.add_row("Bounded", "yes" if grid.is_bounded() else "[red]no[/red]")
    table.add_row("Screen column", str(profile.column))
    table.add_row("Fringes", f"{len(fringes)} at rows {', '.join(str(r) for r in fringes) or '-'}")
    console.print(table)


@click.command()
@click.option("--width", type=click.IntRange(min=5), default=DEFAULT_WIDTH, show_default=True)
@click.option("--height", type=click.IntRange(min=5), default=DEFAULT_HEIGHT, show_default=True)
@click.option("--frames", "-n", type=click.IntRange(min=0), default=300, show_default=True)
@click.option("--gap", type=float, default=50.0, show_default=True, help="Slit gap in cells")
@click.option("--slit-width", type=float, default=15.0, show_default=True, help="Slit width in cells")
@click.option(
    "--frequency", type=float, default=0.07, show_default=True, help="Source frequency (rad/step)"
)
@click.option("--amplitude", type=float, default=2.0, show_default=True)
@click.option(
    "--screen",
    type=click.FloatRange(0, 100),
    default=85.0,
    show_default=True,
    help="Screen column as a percentage of width",
)
@click.option("--source-x", type=float, help="Source column (default: width/4)")
@click.option("--source-y", type=float, help="Source row (default: height/2)")
@click.option("--no-source", is_flag=True, help="Run without driving the source")
@click.option("--frame-png", type=click.Path(path_type=Path), help="Save the last frame as PNG")
@click.option(
    "--profile-png", type=click.Path(path_type=Path), help="Save the intensity profile as PNG"
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output with debug info")
@click.option("--dry-run", is_flag=True, help="Show parameters without running")
@click.version_option(version=__version__, prog_name="slit-fdtd")
def main(
    width: int,
    height: int,
    frames: int,
    gap: float,
    slit_width: float,
    frequency: float,
    amplitude: float,
    screen: float,
    source_x: float | None,
    source_y: float | None,
    no_source: bool,
    frame_png: Path | None,
    profile_png: Path | None,
    verbose: bool,
    dry_run: bool,
):
    """Run the double-slit FDTD simulation headless.

    Example:

    \b
        slit-fdtd --frames 400 --gap 40 --slit-width 8 --frequency 0.3 \\
            --frame-png frame.png --profile-png profile.png
    """
    try:
        console.print("\n[bold]Double-slit FDTD[/bold]", style="blue")
        console.print("─" * 60)

        source_position = None
        if source_x is not None or source_y is not None:
            source_position = (
                width / 4 if source_x is None else source_x,
                height / 2 if source_y is None else source_y,
            )

        params = SimulationParameters(
            slit_gap=gap,
            slit_width=slit_width,
            frequency=frequency,
            source_enabled=not no_source,
            probe_column_percent=screen,
            source_position=source_position,
            amplitude=amplitude,
        )
        simulation = DoubleSlitSimulation(width=width, height=height, params=params)

        if verbose:
            console.print(f"Parameters: {params}")

        print_simulation_info(console, simulation, params, frames)

        if dry_run:
            console.print("[yellow]Dry run - simulation not executed[/yellow]")
            return

        start_time = time.time()
        progress = SimulationProgress(console, simulation, frames)
        try:
            simulation.run(frames, params, callback=progress.update)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            sys.exit(130)  # Standard exit code for SIGINT
        finally:
            progress.finish()

        runtime = time.time() - start_time

        console.print("─" * 60)
        console.print("✓ [bold green]Simulation complete![/bold green]")
        print_summary(simulation, runtime, frames)

        if frame_png is not None:
            save_png(frame_png, simulation.renderer.pixels)
            console.print(f"  Frame: {frame_png}")
        if profile_png is not None:
            save_png(profile_png, simulation.intensity.render_bars(PROFILE_IMAGE_WIDTH, height))
            console.print(f"  Profile: {profile_png}")

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
