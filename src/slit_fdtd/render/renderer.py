"""Wavefield to RGBA frame mapping.

Each draw() rewrites the whole pixel buffer from the grid's current field:

    - wall cells:         fixed WALL_COLOR
    - |tanh(25 u)| < 0.005: black
    - crest (u > 0):      cyan, brightness |tanh(25 u)|**0.6
    - trough (u < 0):     red,  brightness |tanh(25 u)|**0.6

followed by the dotted probe column and the source marker. Non-finite field
values are drawn as zero. The renderer keeps no history between frames.

Example:
    >>> from slit_fdtd import FieldGrid, FrameRenderer
    >>> grid = FieldGrid(width=200, height=150)
    >>> renderer = FrameRenderer(200, 150)
    >>> renderer.draw(grid, source_position=(50, 75), probe_column_percent=85)
    True
    >>> renderer.pixels.shape
    (150, 200, 4)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from slit_fdtd.core.grid import FieldGrid

# Visualization gain applied before the tanh saturation
VISUAL_GAIN = 25.0
# Mid-tone boost
GAMMA = 0.6
# |saturated amplitude| below this renders black
BLACK_THRESHOLD = 0.005

WALL_COLOR = (255, 50, 50, 255)
PROBE_COLOR = (0, 255, 100, 255)
SOURCE_COLOR = (255, 255, 255, 255)

# Source marker is a (2 * SOURCE_MARKER_RADIUS + 1) square
SOURCE_MARKER_RADIUS = 2


class FrameRenderer:
    """Render a FieldGrid snapshot into an RGBA pixel buffer.

    Args:
        width: Buffer width in pixels (must equal the grid width to draw)
        height: Buffer height in pixels (must equal the grid height to draw)

    Attributes:
        pixels: uint8 array of shape (height, width, 4), row-major RGBA
    """

    def __init__(self, width: int, height: int):
        self._allocate(width, height)

    def _allocate(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        shape = (self.height, self.width)

        self.pixels = np.zeros(shape + (4,), dtype=np.uint8)
        self.pixels[..., 3] = 255

        self._saturated = np.zeros(shape, dtype=np.float32)
        self._level = np.zeros(shape, dtype=np.float32)
        self._finite = np.zeros(shape, dtype=bool)
        self._lit = np.zeros(shape, dtype=bool)
        self._sign = np.zeros(shape, dtype=bool)
        self._mask = np.zeros(shape, dtype=bool)

    def resize(self, width: int, height: int) -> None:
        """Reallocate the buffer if the frame size changed."""
        if width != self.width or height != self.height:
            self._allocate(width, height)

    def draw(
        self,
        grid: FieldGrid,
        source_position: tuple[float, float] | None,
        probe_column_percent: float | None = None,
    ) -> bool:
        """Draw the grid's current field into ``pixels``.

        Args:
            grid: Field grid to render (shares arrays, nothing is copied)
            source_position: (x, y) of the source marker, or None for no marker
            probe_column_percent: Probe column as a percentage of the width,
                or None for no probe marker

        Returns:
            False (and leaves ``pixels`` untouched) when the grid size does
            not match the buffer, True otherwise.
        """
        if grid.shape != (self.height, self.width):
            return False

        saturated = self._saturated
        level = self._level
        mask = self._mask
        pixels = self.pixels

        # Guard against NaN/Infinity
        np.isfinite(grid.current, out=self._finite)
        saturated.fill(0.0)
        np.copyto(saturated, grid.current, where=self._finite)

        # Soft clipping to (-1, 1)
        saturated *= VISUAL_GAIN
        np.tanh(saturated, out=saturated)

        np.abs(saturated, out=level)
        np.greater_equal(level, BLACK_THRESHOLD, out=self._lit)
        np.power(level, GAMMA, out=level)
        level *= 255.0
        np.floor(level, out=level)

        pixels[..., :3] = 0
        pixels[..., 3] = 255

        # Crest -> cyan
        np.greater(saturated, 0.0, out=self._sign)
        np.logical_and(self._lit, self._sign, out=mask)
        np.copyto(pixels[..., 1], level, where=mask, casting="unsafe")
        np.copyto(pixels[..., 2], level, where=mask, casting="unsafe")

        # Trough -> red
        np.logical_not(self._sign, out=self._sign)
        np.logical_and(self._lit, self._sign, out=mask)
        np.copyto(pixels[..., 0], level, where=mask, casting="unsafe")

        np.equal(grid.walls, 0.0, out=mask)
        pixels[mask] = WALL_COLOR

        if probe_column_percent is not None:
            self._draw_probe_column(probe_column_percent)

        if source_position is not None:
            self._draw_source_marker(source_position)

        return True

    def _draw_probe_column(self, percent: float) -> None:
        """Dotted vertical line, 2 pixels on / 2 off."""
        x = math.floor(self.width * (percent / 100))
        if x < 0 or x >= self.width:
            return
        self.pixels[0::4, x] = PROBE_COLOR
        self.pixels[1::4, x] = PROBE_COLOR

    def _draw_source_marker(self, position: tuple[float, float]) -> None:
        sx = math.floor(position[0])
        sy = math.floor(position[1])
        r = SOURCE_MARKER_RADIUS
        x0, x1 = max(sx - r, 0), min(sx + r + 1, self.width)
        y0, y1 = max(sy - r, 0), min(sy + r + 1, self.height)
        if x0 < x1 and y0 < y1:
            self.pixels[y0:y1, x0:x1] = SOURCE_COLOR

    def to_bytes(self) -> bytes:
        """Pixel buffer as packed RGBA bytes, row-major."""
        return self.pixels.tobytes()

    def __repr__(self) -> str:
        return f"FrameRenderer(width={self.width}, height={self.height})"
