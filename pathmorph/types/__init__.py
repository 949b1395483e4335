"""Type definitions for the geometry core.

This package contains all type definitions organized into focused modules:
- geometry: Point, Affine and angle/distance helpers
- commands: Line, quadratic and cubic segments plus vertex markers
- paths: Path model (ordered commands, pieces, SVG d-strings)
"""

from pathmorph.types.commands import (
    Command,
    CubicCommand,
    LineCommand,
    QuadraticCommand,
    line,
    quadratic,
    vertex_marker,
)
from pathmorph.types.geometry import (
    CONNECT_TOLERANCE,
    Affine,
    Point,
    angle_between,
    clamp_value,
    direction,
    distance,
    lerp,
    lerp_point,
    points_coincide,
)
from pathmorph.types.paths import Path, needs_move

__all__ = [
    "CONNECT_TOLERANCE",
    "Affine",
    "Command",
    "CubicCommand",
    "LineCommand",
    "Path",
    "Point",
    "QuadraticCommand",
    "angle_between",
    "clamp_value",
    "direction",
    "distance",
    "lerp",
    "lerp_point",
    "line",
    "needs_move",
    "points_coincide",
    "quadratic",
    "vertex_marker",
]
