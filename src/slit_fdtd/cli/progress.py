"""Terminal progress and parameter reporting for slit-fdtd runs.

The bar counts animation frames rather than solver steps. Its stats field
shows lattice throughput (cell updates per second across all sub-steps) and
the resident memory of the process.
"""

import time
from typing import TYPE_CHECKING

import psutil
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from slit_fdtd.simulation import STEPS_PER_FRAME

if TYPE_CHECKING:
    from slit_fdtd.simulation import DoubleSlitSimulation, SimulationParameters

MB = 1024**2


def format_time(seconds: float) -> str:
    """Render a duration as "42s", "1m 23s" or "2h 15m"."""
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{seconds:.0f}s"


def cell_updates(simulation: "DoubleSlitSimulation", frames: int) -> int:
    """Number of cell updates performed by ``frames`` ticks."""
    grid = simulation.grid
    return frames * STEPS_PER_FRAME * grid.width * grid.height


class SimulationProgress:
    """Frame counter bar for DoubleSlitSimulation.run().

    Pass ``update`` as the run callback. Redraws are throttled to
    ``update_interval`` seconds so a fast small grid is not slowed down by
    the terminal.

    Example:
        >>> with SimulationProgress(console, simulation, frames) as progress:
        ...     simulation.run(frames, params, callback=progress.update)
    """

    def __init__(
        self,
        console: Console,
        simulation: "DoubleSlitSimulation",
        num_frames: int,
        update_interval: float = 0.1,
    ):
        self.simulation = simulation
        self.num_frames = num_frames
        self.update_interval = update_interval

        self._process = psutil.Process()
        self.peak_memory_mb = 0.0
        self.start_time = time.perf_counter()
        self._last_refresh = float("-inf")

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("Frames"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("eta"),
            TimeRemainingColumn(),
            TextColumn("{task.fields[stats]}"),
            console=console,
        )
        self.task = self.progress.add_task("frames", total=num_frames, stats="")
        self.progress.start()

    def update(self, frame: int):
        """Record that ``frame`` (0-indexed) has been drawn."""
        now = time.perf_counter()
        if now - self._last_refresh < self.update_interval:
            return
        self._last_refresh = now

        done = frame + 1
        elapsed = now - self.start_time
        mcells = cell_updates(self.simulation, done) / elapsed / 1e6 if elapsed > 0 else 0.0

        rss_mb = self._process.memory_info().rss / MB
        self.peak_memory_mb = max(self.peak_memory_mb, rss_mb)

        self.progress.update(
            self.task,
            completed=done,
            stats=f"{mcells:.1f} Mcells/s, {rss_mb:.0f} MB (peak {self.peak_memory_mb:.0f})",
        )

    def finish(self):
        """Show the final frame count and stop the bar; safe to call twice."""
        self.progress.update(self.task, completed=self.simulation.frame_count)
        self.progress.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finish()


def print_simulation_info(
    console: Console,
    simulation: "DoubleSlitSimulation",
    params: "SimulationParameters",
    num_frames: int,
):
    """Print the lattice, slit, source and screen settings before a run."""
    grid = simulation.grid
    sx, sy = simulation.source_position(params)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Grid", f"{grid.width} × {grid.height} ({grid.width * grid.height / 1e3:.0f}k cells)")
    table.add_row("Courant", f"{grid.courant:.4f}")
    table.add_row("Damping", f"{grid.damping}")
    table.add_row(
        "Slits",
        f"gap {params.slit_gap:g}, width {params.slit_width:g} at x={simulation.wall_x:g}",
    )
    if params.source_enabled:
        table.add_row(
            "Source",
            f"({sx:g}, {sy:g}), ω={params.frequency:g} rad/step, A={params.amplitude:g}",
        )
    else:
        table.add_row("Source", "disabled")
    table.add_row("Screen", f"{params.probe_column_percent:g}% of width")
    table.add_row(
        "Duration",
        f"{num_frames} frames ({num_frames * STEPS_PER_FRAME} steps)",
    )

    console.print(table)
    console.print()
