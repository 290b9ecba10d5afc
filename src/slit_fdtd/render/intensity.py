"""Time-averaged intensity at the probe (screen) column.

The raw field oscillates in sign, so a single squared snapshot is noisy.
The profile keeps an exponential moving average per row:

    I[y] = I[y] * decay + u[y, column]² * (1 - decay)

and displays sqrt(I / max(I)) so the bars auto-scale to the current
interference pattern. The average is cleared whenever the probe column moves.

Example:
    >>> from slit_fdtd import FieldGrid, IntensityProfile
    >>> grid = FieldGrid(width=200, height=150)
    >>> profile = IntensityProfile(grid.height)
    >>> profile.update(grid, probe_column_percent=85)
    >>> profile.normalized().shape
    (150,)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from scipy.signal import find_peaks

if TYPE_CHECKING:
    from slit_fdtd.core.grid import FieldGrid

DEFAULT_DECAY = 0.92
DEFAULT_FLOOR = 0.001

# Fraction of the graph width used by a full-scale bar
BAR_SCALE = 0.95
CENTER_LINE_ALPHA = 0.2


class IntensityProfile:
    """Decayed running average of squared amplitude along one grid column.

    Args:
        height: Number of grid rows
        decay: Per-frame decay factor in [0, 1) (default: 0.92)
        floor: Lower bound for the normalization maximum (default: 0.001)

    Attributes:
        accumulator: float32 array of length height
        column: Grid column sampled by the last update(), or None
    """

    def __init__(self, height: int, decay: float = DEFAULT_DECAY, floor: float = DEFAULT_FLOOR):
        if height <= 0:
            raise ValueError(f"height must be positive, got {height}")
        if not 0.0 <= decay < 1.0:
            raise ValueError(f"decay must be in [0, 1), got {decay}")
        if floor <= 0:
            raise ValueError(f"floor must be positive, got {floor}")
        self.decay = decay
        self.floor = floor
        self.accumulator = np.zeros(height, dtype=np.float32)
        self.column: int | None = None
        self._sample = np.zeros(height, dtype=np.float32)

    @property
    def height(self) -> int:
        """Number of grid rows tracked by the accumulator."""
        return len(self.accumulator)

    def reset(self) -> None:
        """Clear the accumulated intensity."""
        self.accumulator.fill(0.0)

    @staticmethod
    def column_for(grid: FieldGrid, probe_column_percent: float) -> int:
        """Grid column for a probe position given as a percentage of width."""
        column = math.floor(grid.width * (probe_column_percent / 100))
        return min(max(column, 0), grid.width - 1)

    def update(self, grid: FieldGrid, probe_column_percent: float) -> None:
        """Fold the current field at the probe column into the average."""
        if grid.height != self.height:
            self.accumulator = np.zeros(grid.height, dtype=np.float32)
            self._sample = np.zeros(grid.height, dtype=np.float32)
            self.column = None

        column = self.column_for(grid, probe_column_percent)
        if column != self.column:
            # Samples from another column are meaningless here
            self.reset()
            self.column = column

        sample = self._sample
        np.square(grid.current[:, column], out=sample)
        sample *= 1.0 - self.decay
        self.accumulator *= self.decay
        self.accumulator += sample

    def peak(self) -> float:
        """Normalization maximum: max accumulated value, at least ``floor``."""
        return max(float(np.max(self.accumulator)), self.floor)

    def normalized(self) -> NDArray[np.float64]:
        """Per-row display level sqrt(I / peak) in [0, 1]."""
        return np.sqrt(self.accumulator.astype(np.float64) / self.peak())

    def fringe_peaks(self, prominence: float = 0.1) -> NDArray[np.intp]:
        """Rows of the local maxima (interference fringes) in the profile.

        Args:
            prominence: Minimum peak prominence on the normalized [0, 1] scale

        Returns:
            Sorted array of row indices
        """
        peaks, _ = find_peaks(self.normalized(), prominence=prominence)
        return peaks

    def render_bars(self, width: int, height: int) -> NDArray[np.uint8]:
        """Draw the profile as horizontal bars into a new RGBA image.

        Each display row maps to the grid row at the same relative height.
        Bars start at the left edge; a faint white line marks the center row.

        Args:
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            uint8 array of shape (height, width, 4)
        """
        image = np.zeros((height, width, 4), dtype=np.uint8)
        image[..., 3] = 255

        levels = self.normalized()
        grid_height = self.height
        for y in range(height):
            n = levels[math.floor((y / height) * grid_height)]
            bar_width = n * width * BAR_SCALE
            if bar_width > 0.5:
                image[y, : math.ceil(bar_width), :3] = (
                    math.floor(n * 100),
                    math.floor(150 + n * 105),
                    math.floor(n * 157),
                )

        center = height // 2
        row = image[center, :, :3].astype(np.float64)
        row = row * (1.0 - CENTER_LINE_ALPHA) + 255.0 * CENTER_LINE_ALPHA
        image[center, :, :3] = np.round(row).astype(np.uint8)
        return image

    def __repr__(self) -> str:
        return f"IntensityProfile(height={self.height}, decay={self.decay}, column={self.column})"
