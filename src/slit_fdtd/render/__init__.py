"""Frame rendering and intensity profile for the wavefield."""

from slit_fdtd.render.intensity import IntensityProfile
from slit_fdtd.render.renderer import (
    PROBE_COLOR,
    SOURCE_COLOR,
    WALL_COLOR,
    FrameRenderer,
)

__all__ = [
    "FrameRenderer",
    "IntensityProfile",
    "WALL_COLOR",
    "PROBE_COLOR",
    "SOURCE_COLOR",
]
