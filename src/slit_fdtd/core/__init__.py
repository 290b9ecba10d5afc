"""Core FDTD solver components."""

from slit_fdtd.core.grid import (
    COURANT_2D,
    SOURCE_RADIUS,
    WALL_THICKNESS,
    FieldGrid,
    SlitGeometry,
)

__all__ = [
    "FieldGrid",
    "SlitGeometry",
    "COURANT_2D",
    "WALL_THICKNESS",
    "SOURCE_RADIUS",
]
