"""Frame-driven double-slit simulation.

Ties a FieldGrid, FrameRenderer and IntensityProfile together. Each tick takes
an immutable SimulationParameters snapshot and runs, in order:

    1. re-apply the slits if gap/width changed
    2. STEPS_PER_FRAME x (add_source if enabled, update)
    3. FrameRenderer.draw
    4. IntensityProfile.update

Example:
    >>> from slit_fdtd import DoubleSlitSimulation, SimulationParameters
    >>> sim = DoubleSlitSimulation(width=200, height=150)
    >>> params = SimulationParameters(slit_gap=40, slit_width=8, frequency=0.3)
    >>> sim.run(frames=100, params=params)
    >>> sim.grid.time
    300
"""

from __future__ import annotations

import time
import warnings
from collections.abc import Callable
from dataclasses import dataclass

from slit_fdtd.core.grid import MARGIN, SANITY_LIMIT, FieldGrid
from slit_fdtd.render.intensity import IntensityProfile
from slit_fdtd.render.renderer import FrameRenderer

DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 450

STEPS_PER_FRAME = 3


@dataclass(frozen=True)
class SimulationParameters:
    """Per-tick parameter snapshot supplied by the host.

    Args:
        slit_gap: Center-to-center aperture distance in cells
        slit_width: Aperture height in cells
        frequency: Source angular frequency in radians per step
        source_enabled: Whether the source drives the field this tick
        probe_column_percent: Screen column as a percentage of width (0-100)
        source_position: Source (x, y) in grid cells; None places it at
            (width/4, height/2)
        amplitude: Source amplitude
    """

    slit_gap: float = 50.0
    slit_width: float = 15.0
    frequency: float = 0.07
    source_enabled: bool = True
    probe_column_percent: float = 85.0
    source_position: tuple[float, float] | None = None
    amplitude: float = 2.0


def clamp_source_position(x: float, y: float, width: int, height: int) -> tuple[float, float]:
    """Keep a source position at least MARGIN cells from every edge."""
    x = min(max(x, MARGIN), width - MARGIN - 1)
    y = min(max(y, MARGIN), height - MARGIN - 1)
    return (x, y)


class DoubleSlitSimulation:
    """Headless host for the grid, renderer and intensity profile.

    Args:
        width: Grid width in cells (default: 600)
        height: Grid height in cells (default: 450)
        wall_x: Barrier column (default: width / 2)
        params: Initial parameters used to build the slits

    Attributes:
        grid: The FieldGrid being stepped
        renderer: FrameRenderer sharing the grid's arrays
        intensity: IntensityProfile sampled after each frame
        frame_count: Number of completed ticks
        frames_per_second: Ticks completed in the last full wall-clock second
    """

    def __init__(
        self,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        wall_x: float | None = None,
        params: SimulationParameters | None = None,
    ):
        self.grid = FieldGrid(width, height)
        self.renderer = FrameRenderer(width, height)
        self.intensity = IntensityProfile(height)
        self.wall_x = width / 2 if wall_x is None else wall_x

        params = params or SimulationParameters()
        self.grid.set_slits(params.slit_gap, params.slit_width, self.wall_x)
        self._slit_key = (params.slit_gap, params.slit_width)

        self.frame_count = 0
        self.frames_per_second = 0
        self._fps_frames = 0
        self._fps_start = time.perf_counter()

    def source_position(self, params: SimulationParameters) -> tuple[float, float]:
        """Resolved, edge-clamped source position for ``params``."""
        if params.source_position is None:
            x, y = self.grid.width / 4, self.grid.height / 2
        else:
            x, y = params.source_position
        return clamp_source_position(x, y, self.grid.width, self.grid.height)

    def tick(self, params: SimulationParameters) -> None:
        """Advance one animation frame with the given parameter snapshot."""
        grid = self.grid

        slit_key = (params.slit_gap, params.slit_width)
        if slit_key != self._slit_key:
            grid.set_slits(params.slit_gap, params.slit_width, self.wall_x)
            self._slit_key = slit_key

        sx, sy = self.source_position(params)
        for _ in range(STEPS_PER_FRAME):
            if params.source_enabled:
                grid.add_source(sx, sy, params.amplitude, params.frequency)
            grid.update()

        self.renderer.draw(grid, (sx, sy), params.probe_column_percent)
        self.intensity.update(grid, params.probe_column_percent)

        self.frame_count += 1
        self._count_frame()

    def _count_frame(self) -> None:
        self._fps_frames += 1
        now = time.perf_counter()
        if now - self._fps_start >= 1.0:
            self.frames_per_second = self._fps_frames
            self._fps_frames = 0
            self._fps_start = now

    def reset(self) -> None:
        """Clear the wavefield; walls and intensity history are kept."""
        self.grid.reset()

    def run(
        self,
        frames: int,
        params: SimulationParameters | None = None,
        progress: bool = False,
        callback: Callable[[int], None] | None = None,
        warn_unbounded: bool = True,
        sanity_limit: float = SANITY_LIMIT,
    ) -> None:
        """Run a fixed number of frames with one parameter snapshot.

        Args:
            frames: Number of ticks to run
            params: Parameter snapshot (default: SimulationParameters())
            progress: If True, show a tqdm progress bar
            callback: Function called after each frame with signature callback(frame)
            warn_unbounded: If True, emit a warning when the field leaves the
                sanity bound by the end of the run
            sanity_limit: Amplitude bound passed to FieldGrid.is_bounded()
        """
        params = params or SimulationParameters()

        if progress:
            from tqdm import tqdm

            iterator = tqdm(range(frames), desc="Double-slit simulation")
        else:
            iterator = range(frames)

        for frame in iterator:
            self.tick(params)
            if callback:
                callback(frame)

        if warn_unbounded and not self.grid.is_bounded(sanity_limit):
            warnings.warn(
                f"Field exceeded sanity bound {sanity_limit:g} after "
                f"{self.grid.time} steps (max |u| = {self.grid.max_amplitude():.3g})",
                UserWarning,
                stacklevel=2,
            )

    def __repr__(self) -> str:
        return f"DoubleSlitSimulation(grid={self.grid!r}, frames={self.frame_count})"
