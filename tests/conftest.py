"""Shared fixtures for the slit-fdtd test suite."""

import pytest

from slit_fdtd import FieldGrid

# Slit layout used by slit_grid: wall at x=20, apertures centered on rows
# 20 and 40 (grid center 30), each covering rows with |y - c| < 3.
SLIT_GAP = 20
SLIT_WIDTH = 6
WALL_X = 20


@pytest.fixture
def small_grid():
    """Open 40 x 60 grid (width x height) for fast tests."""
    return FieldGrid(width=40, height=60)


@pytest.fixture
def slit_grid():
    """40 x 60 grid with a double slit at column 20."""
    grid = FieldGrid(width=40, height=60)
    grid.set_slits(SLIT_GAP, SLIT_WIDTH, WALL_X)
    return grid
