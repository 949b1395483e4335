"""Core geometry types."""

import math
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

# Two points closer than this on both axes are the same point.
CONNECT_TOLERANCE = 1e-9


class Point(BaseModel):
    """An immutable 2D point."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation between two values."""
    return a + (b - a) * t


def lerp_point(p1: Point, p2: Point, t: float) -> Point:
    """Linearly interpolate between two points."""
    return Point(x=lerp(p1.x, p2.x, t), y=lerp(p1.y, p2.y, t))


def mix_point(p1: Point, p2: Point, t: float) -> Point:
    """Weighted average of two points, exact at t=0 and t=1."""
    s = 1 - t
    return Point(x=p1.x * s + p2.x * t, y=p1.y * s + p2.y * t)


def distance(p1: Point, p2: Point) -> float:
    """Calculate Euclidean distance between two points."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def points_coincide(p1: Point, p2: Point, tolerance: float = CONNECT_TOLERANCE) -> bool:
    """True when the two points are the same within floating point tolerance."""
    return abs(p1.x - p2.x) <= tolerance and abs(p1.y - p2.y) <= tolerance


def direction(origin: Point, target: Point) -> float:
    """Angle in radians of the vector from origin to target.

    Returns NaN when the two points are identical, since there is no direction.
    """
    dx = target.x - origin.x
    dy = target.y - origin.y
    if dx == 0 and dy == 0:
        return math.nan
    return math.atan2(dy, dx)


def angle_between(angle1: float, angle2: float) -> float:
    """Signed turn from angle1 to angle2, normalized to [-pi, pi].

    NaN in, NaN out.
    """
    return math.remainder(angle2 - angle1, math.tau)


def clamp_value(value: float, low: float, high: float) -> float:
    """Clamp a value to a range [low, high]."""
    return max(low, min(high, value))


@dataclass(frozen=True)
class Affine:
    """2D affine transform in SVG matrix order.

    x' = a*x + c*y + e
    y' = b*x + d*y + f
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> "Affine":
        return cls()

    @classmethod
    def translation(cls, dx: float, dy: float) -> "Affine":
        return cls(e=dx, f=dy)

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> "Affine":
        return cls(a=sx, d=sx if sy is None else sy)

    @classmethod
    def rotation(cls, radians: float) -> "Affine":
        cos, sin = math.cos(radians), math.sin(radians)
        return cls(a=cos, b=sin, c=-sin, d=cos)

    def apply(self, point: Point) -> Point:
        """Transform a single point."""
        return Point(
            x=self.a * point.x + self.c * point.y + self.e,
            y=self.b * point.x + self.d * point.y + self.f,
        )

    def then(self, other: "Affine") -> "Affine":
        """Transform that applies self first, then other."""
        return Affine(
            a=other.a * self.a + other.c * self.b,
            b=other.b * self.a + other.d * self.b,
            c=other.a * self.c + other.c * self.d,
            d=other.b * self.c + other.d * self.d,
            e=other.a * self.e + other.c * self.f + other.e,
            f=other.b * self.e + other.d * self.f + other.f,
        )
