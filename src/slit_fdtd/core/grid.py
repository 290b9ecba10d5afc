"""2D scalar-wave FDTD field grid with a double-slit wall mask.

This module implements the explicit leapfrog update of the 2D scalar wave
equation on a uniform lattice, discretized with a 5-point Laplacian:

    u[n+1] = (2 u[n] - u[n-1] + C² ∇²u[n]) * damping

Stability: C ≤ 1/√2 (CFL condition for 2D). The default C = 1/√2 gives the
same numerical speed along axes and diagonals.

The domain is bounded by a pinned outer ring (u = 0), with a first-order
Mur absorbing boundary on the ring one cell further in. The stencil only
touches cells at least two cells from every edge.

Example:
    >>> from slit_fdtd import FieldGrid
    >>> grid = FieldGrid(width=600, height=450)
    >>> grid.set_slits(gap=50, slit_width=15, wall_x=300)
    >>> for _ in range(3):
    ...     grid.add_source(150, 225, amplitude=2.0, frequency=0.07)
    ...     grid.update()
    >>> grid.time
    3
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

# Optimal Courant number for 2D (isotropic propagation)
COURANT_2D = 1.0 / math.sqrt(2.0)

DEFAULT_DAMPING = 0.9999

# Cells reserved at every edge: outer pinned ring + Mur ring
MARGIN = 2
MIN_DIMENSION = 5

# Half-thickness of the slit wall in cells (wall spans 2*WALL_THICKNESS + 1)
WALL_THICKNESS = 2

# Source neighbourhood radius in cells
SOURCE_RADIUS = 2

# Amplitude above which the field is considered to have blown up
SANITY_LIMIT = 1.0e3

_offsets = np.arange(-SOURCE_RADIUS, SOURCE_RADIUS + 1, dtype=np.float64)
_SOURCE_FALLOFF = np.exp(-0.5 * np.hypot(_offsets[:, None], _offsets[None, :]))


@dataclass(frozen=True)
class SlitGeometry:
    """Double-slit barrier geometry in grid cells.

    Args:
        gap: Center-to-center distance between the two apertures
        slit_width: Height of each aperture
        wall_x: Column of the barrier center line
    """

    gap: float
    slit_width: float
    wall_x: float


class FieldGrid:
    """Scalar wavefield on a 2D lattice with obstacle mask and point source.

    The three time levels (t-1, t, t+1) live in one pre-allocated arena of
    shape (3, height, width). Each update writes the t+1 level and then
    rotates the role indices, so no field-sized array is allocated after
    construction.

    Args:
        width: Number of columns (≥ 5)
        height: Number of rows (≥ 5)
        damping: Global per-step amplitude factor in (0, 1]
        courant: Courant number in (0, 1/√2] (default: 1/√2)

    Attributes:
        walls: Obstacle mask (1.0 = open, 0.0 = wall), shape (height, width)
        courant, courant_squared, damping, mur_coefficient: Update constants
        slits: Last applied SlitGeometry, or None

    Example:
        >>> grid = FieldGrid(width=200, height=150)
        >>> grid.current.shape
        (150, 200)
    """

    def __init__(
        self,
        width: int,
        height: int,
        damping: float = DEFAULT_DAMPING,
        courant: float = COURANT_2D,
    ):
        if width < MIN_DIMENSION or height < MIN_DIMENSION:
            raise ValueError(
                f"Grid must be at least {MIN_DIMENSION}x{MIN_DIMENSION} cells, "
                f"got {width}x{height}"
            )
        if not 0.0 < damping <= 1.0:
            raise ValueError(f"damping must be in (0, 1], got {damping}")
        if not 0.0 < courant <= COURANT_2D + 1e-12:
            raise ValueError(
                f"courant must be in (0, 1/sqrt(2)] for a stable 2D update, got {courant}"
            )

        self._width = int(width)
        self._height = int(height)

        self.courant = courant
        self.courant_squared = courant * courant
        self.damping = damping
        self.mur_coefficient = (courant - 1.0) / (courant + 1.0)

        shape = (self._height, self._width)
        interior = (self._height - 2 * MARGIN, self._width - 2 * MARGIN)

        # Triple buffer arena and role indices into it
        self._arena = np.zeros((3,) + shape, dtype=np.float32)
        self._current, self._previous, self._next = 0, 1, 2

        self._walls = np.ones(shape, dtype=np.float32)
        self._solid = np.zeros(shape, dtype=bool)

        # Scratch buffers reused by every update()
        self._masked = np.zeros(shape, dtype=np.float32)
        self._laplacian = np.zeros(interior, dtype=np.float32)
        self._center = np.zeros(interior, dtype=np.float32)
        self._col_scratch = np.zeros(interior[0], dtype=np.float32)
        self._row_scratch = np.zeros(interior[1], dtype=np.float32)

        self._time = 0
        self.slits: SlitGeometry | None = None

    @property
    def width(self) -> int:
        """Number of columns."""
        return self._width

    @property
    def height(self) -> int:
        """Number of rows."""
        return self._height

    @property
    def shape(self) -> tuple[int, int]:
        """Array shape (height, width)."""
        return (self._height, self._width)

    @property
    def time(self) -> int:
        """Number of completed update() calls since construction or reset."""
        return self._time

    @property
    def current(self) -> NDArray[np.float32]:
        """Field at time step t."""
        return self._arena[self._current]

    @property
    def previous(self) -> NDArray[np.float32]:
        """Field at time step t-1."""
        return self._arena[self._previous]

    @property
    def next(self) -> NDArray[np.float32]:
        """Scratch level written by the next update()."""
        return self._arena[self._next]

    @property
    def walls(self) -> NDArray[np.float32]:
        """Obstacle mask (1.0 = open, 0.0 = wall)."""
        return self._walls

    @property
    def buffer_roles(self) -> tuple[int, int, int]:
        """Arena slots currently holding (current, previous, next)."""
        return (self._current, self._previous, self._next)

    def set_slits(self, gap: float, slit_width: float, wall_x: float) -> None:
        """Rebuild the barrier as a wall with two apertures.

        The wall mask is reset to fully open first, so repeated calls never
        accumulate. Field values at new wall cells are zeroed in both the
        current and previous levels. A column outside the grid is ignored.

        Args:
            gap: Center-to-center aperture distance in cells
            slit_width: Height of each aperture in cells
            wall_x: Barrier column (floored to an integer)
        """
        x = math.floor(wall_x)
        if x < 0 or x >= self._width:
            return

        center_y = self._height / 2
        rows = np.arange(self._height)
        half = slit_width / 2
        hole = (np.abs(rows - (center_y - gap / 2)) < half) | (
            np.abs(rows - (center_y + gap / 2)) < half
        )
        blocked = ~hole

        x0 = max(x - WALL_THICKNESS, 0)
        x1 = min(x + WALL_THICKNESS + 1, self._width)

        self._walls.fill(1.0)
        self._walls[blocked, x0:x1] = 0.0
        self.current[blocked, x0:x1] = 0.0
        self.previous[blocked, x0:x1] = 0.0
        np.equal(self._walls, 0.0, out=self._solid)

        self.slits = SlitGeometry(gap=gap, slit_width=slit_width, wall_x=wall_x)

    def add_source(self, x: float, y: float, amplitude: float, frequency: float) -> None:
        """Drive a soft point source at (x, y) for the current step.

        Writes ``amplitude * sin(time * frequency)`` weighted by
        ``exp(-0.5 * r)`` into the open cells within SOURCE_RADIUS of the
        floored position. Values are assigned, not added, so anything already
        at those cells is replaced. Cells inside the 2-cell edge margin are
        never touched. Call before update() for the source to drive that step.
        """
        ix = math.floor(x)
        iy = math.floor(y)

        x0 = max(ix - SOURCE_RADIUS, MARGIN)
        x1 = min(ix + SOURCE_RADIUS + 1, self._width - MARGIN)
        y0 = max(iy - SOURCE_RADIUS, MARGIN)
        y1 = min(iy + SOURCE_RADIUS + 1, self._height - MARGIN)
        if x0 >= x1 or y0 >= y1:
            return

        value = amplitude * math.sin(self._time * frequency)
        falloff = _SOURCE_FALLOFF[
            y0 - (iy - SOURCE_RADIUS):y1 - (iy - SOURCE_RADIUS),
            x0 - (ix - SOURCE_RADIUS):x1 - (ix - SOURCE_RADIUS),
        ]
        np.copyto(
            self.current[y0:y1, x0:x1],
            value * falloff,
            where=self._walls[y0:y1, x0:x1] > 0,
        )

    def update(self) -> None:
        """Advance the field by one time step.

        Interior cells (2-cell margin) use the 5-point stencil with wall
        neighbours read as zero; wall cells are forced to zero. The ring one
        cell in from the edge gets Mur's first-order ABC, and the outermost
        ring is pinned to zero. Buffers then rotate and time advances by one.
        """
        u = self.current
        u_prev = self.previous
        u_next = self.next
        inner = (slice(MARGIN, -MARGIN), slice(MARGIN, -MARGIN))

        # Neighbour reads see walls as zero
        masked = self._masked
        np.multiply(u, self._walls, out=masked)

        lap = self._laplacian
        np.add(masked[2:-2, 1:-3], masked[2:-2, 3:-1], out=lap)
        lap += masked[1:-3, 2:-2]
        lap += masked[3:-1, 2:-2]
        np.multiply(u[inner], 4.0, out=self._center)
        lap -= self._center
        lap *= self.courant_squared

        interior = u_next[inner]
        np.multiply(u[inner], 2.0, out=interior)
        interior -= u_prev[inner]
        interior += lap
        interior *= self.damping
        np.copyto(interior, 0.0, where=self._solid[inner])

        # Mur ABC: left, right, top, bottom
        self._apply_mur(u_next[2:-2, 1], u[2:-2, 1], u_next[2:-2, 2], u[2:-2, 2], self._col_scratch)
        self._apply_mur(u_next[2:-2, -2], u[2:-2, -2], u_next[2:-2, -3], u[2:-2, -3], self._col_scratch)
        self._apply_mur(u_next[1, 2:-2], u[1, 2:-2], u_next[2, 2:-2], u[2, 2:-2], self._row_scratch)
        self._apply_mur(u_next[-2, 2:-2], u[-2, 2:-2], u_next[-3, 2:-2], u[-3, 2:-2], self._row_scratch)

        # Mur ring corners
        u_next[1, 1] = 0.0
        u_next[1, -2] = 0.0
        u_next[-2, 1] = 0.0
        u_next[-2, -2] = 0.0

        # Outer edge: zero
        u_next[0, :] = 0.0
        u_next[-1, :] = 0.0
        u_next[:, 0] = 0.0
        u_next[:, -1] = 0.0

        self._current, self._previous, self._next = self._next, self._current, self._previous
        self._time += 1

    def _apply_mur(
        self,
        edge_next: NDArray[np.float32],
        edge_now: NDArray[np.float32],
        adjacent_next: NDArray[np.float32],
        adjacent_now: NDArray[np.float32],
        scratch: NDArray[np.float32],
    ) -> None:
        """edge_next = adjacent_now + mur * (adjacent_next - edge_now)."""
        np.subtract(adjacent_next, edge_now, out=scratch)
        scratch *= self.mur_coefficient
        np.add(scratch, adjacent_now, out=edge_next)

    def reset(self) -> None:
        """Zero the current and previous field levels and the step counter.

        The wall mask is left unchanged.
        """
        self.current.fill(0.0)
        self.previous.fill(0.0)
        self._time = 0

    def max_amplitude(self) -> float:
        """Largest finite |u| in the current field (0.0 if none)."""
        u = self.current
        finite = np.isfinite(u)
        if not finite.any():
            return 0.0
        return float(np.max(np.abs(u[finite])))

    def is_bounded(self, limit: float = SANITY_LIMIT) -> bool:
        """Check that the current field is finite and within ``limit``.

        This is a diagnostic only; update() never checks it.
        """
        u = self.current
        if not np.all(np.isfinite(u)):
            return False
        return bool(np.max(np.abs(u)) <= limit)

    def compute_energy(self) -> float:
        """Sum of squared field values over open cells."""
        u = self.current
        return float(np.sum(u[~self._solid].astype(np.float64) ** 2))

    def __repr__(self) -> str:
        return (
            f"FieldGrid(width={self._width}, height={self._height}, "
            f"time={self._time}, slits={self.slits})"
        )
