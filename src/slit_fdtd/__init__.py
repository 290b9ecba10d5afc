"""
slit-fdtd - double-slit wave interference with a 2D scalar FDTD solver.

Main exports:
- FieldGrid: 2D scalar-wave stepper with slit wall mask and point source
- FrameRenderer: Wavefield to RGBA pixel buffer
- IntensityProfile: Time-averaged intensity at the screen column
- DoubleSlitSimulation: Frame-driven host tying the three together
- SimulationParameters: Per-tick parameter snapshot
"""

from slit_fdtd.core.grid import COURANT_2D, FieldGrid, SlitGeometry
from slit_fdtd.render import FrameRenderer, IntensityProfile
from slit_fdtd.simulation import (
    STEPS_PER_FRAME,
    DoubleSlitSimulation,
    SimulationParameters,
    clamp_source_position,
)

# Submodules for more specific imports
from . import core, render

__version__ = "0.1.0"

__all__ = [
    # Solver
    "FieldGrid",
    "SlitGeometry",
    "COURANT_2D",
    # Rendering
    "FrameRenderer",
    "IntensityProfile",
    # Host loop
    "DoubleSlitSimulation",
    "SimulationParameters",
    "STEPS_PER_FRAME",
    "clamp_source_position",
    # Submodules
    "core",
    "render",
]
