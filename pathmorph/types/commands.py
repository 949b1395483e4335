"""Geometric commands: the line and Bezier segments a Path is built from.

Commands are immutable values. Every operation that changes geometry returns
a new command. Arguments named ``t`` are the Bezier parameter in [0, 1];
arguments named ``along`` are arc length measured from the command start.

Vertex markers are zero-length quadratic commands with ``is_vertex=True``.
The corner tagger inserts them at sharp bends; the shape matcher and the
morph interpolator treat them specially. Reversing or transforming a command
keeps the flag, splitting does not.
"""

from __future__ import annotations

import math
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from pathmorph.errors import InvariantViolation, UnsupportedCommandKind
from pathmorph.types.geometry import Affine, Point, direction, distance, mix_point

# 5-point Gauss-Legendre rule on [-1, 1]
_GAUSS_NODES = (
    -0.9061798459386640,
    -0.5384693101056831,
    0.0,
    0.5384693101056831,
    0.9061798459386640,
)
_GAUSS_WEIGHTS = (
    0.2369268850561891,
    0.4786286704993665,
    0.5688888888888889,
    0.4786286704993665,
    0.2369268850561891,
)
_GAUSS_PANELS = 8

_INVERSION_STEPS = 60
_INVERSION_TOLERANCE = 1e-12

# Below this ratio of curvature to speed a quadratic is integrated numerically
_FLAT_QUADRATIC = 1e-6


def _blossom(points: tuple[Point, ...], params: tuple[float, ...]) -> Point:
    """de Casteljau evaluation using a different parameter at each level.

    With every parameter equal to t this is the curve point at t. With
    mixed parameters it gives the control points of a sub-curve.
    """
    level = list(points)
    for t in params:
        level = [mix_point(p, q, t) for p, q in zip(level, level[1:])]
    return level[0]


def _sqrt_integral(u: float, k: float) -> float:
    """Antiderivative of sqrt(u**2 + k) for k >= 0."""
    root = math.sqrt(u * u + k)
    if k <= 0:
        return u * root / 2
    return (u * root + k * math.asinh(u / math.sqrt(k))) / 2


class _Segment(BaseModel):
    """Behavior shared by every command kind."""

    model_config = ConfigDict(frozen=True)

    is_vertex: bool = False

    @property
    def control_points(self) -> tuple[Point, ...]:
        raise NotImplementedError

    @classmethod
    def from_points(cls, points: tuple[Point, ...], *, is_vertex: bool = False) -> Command:
        raise NotImplementedError

    @property
    def degree(self) -> int:
        return len(self.control_points) - 1

    def at(self, t: float) -> Point:
        """Point on the curve at parameter t."""
        return _blossom(self.control_points, (t,) * self.degree)

    def velocity(self, t: float) -> tuple[float, float]:
        """First derivative of the curve at parameter t."""
        points = self.control_points
        n = self.degree
        head = _blossom(points[:-1], (t,) * (n - 1))
        tail = _blossom(points[1:], (t,) * (n - 1))
        return (n * (tail.x - head.x), n * (tail.y - head.y))

    def speed(self, t: float) -> float:
        return math.hypot(*self.velocity(t))

    def _arc_length(self, t0: float, t1: float) -> float:
        """Arc length between two parameters by composite Gauss-Legendre."""
        if t1 <= t0:
            return 0.0
        width = (t1 - t0) / _GAUSS_PANELS
        total = 0.0
        for panel in range(_GAUSS_PANELS):
            center = t0 + (panel + 0.5) * width
            for node, weight in zip(_GAUSS_NODES, _GAUSS_WEIGHTS, strict=True):
                total += weight * self.speed(center + node * width / 2)
        return total * width / 2

    def length(self) -> float:
        return self._arc_length(0.0, 1.0)

    def t_at_length(self, along: float) -> float:
        """Parameter at the given arc length from the start.

        Newton steps safeguarded by bisection. Out of range distances clamp
        to the ends.
        """
        total = self.length()
        if along <= 0 or total <= 0:
            return 0.0
        if along >= total:
            return 1.0
        low, high = 0.0, 1.0
        t = along / total
        for _ in range(_INVERSION_STEPS):
            error = self._arc_length(0.0, t) - along
            if abs(error) <= _INVERSION_TOLERANCE * max(1.0, total):
                break
            if error > 0:
                high = t
            else:
                low = t
            speed = self.speed(t)
            candidate = t - error / speed if speed > 0 else low - 1
            t = candidate if low < candidate < high else (low + high) / 2
        return t

    @property
    def incoming_angle(self) -> float:
        """Direction of travel leaving the start point, NaN if there is none."""
        first = self.control_points[0]
        for point in self.control_points[1:]:
            angle = direction(first, point)
            if not math.isnan(angle):
                return angle
        return math.nan

    @property
    def outgoing_angle(self) -> float:
        """Direction of travel arriving at the end point, NaN if there is none."""
        last = self.control_points[-1]
        for point in reversed(self.control_points[:-1]):
            angle = direction(point, last)
            if not math.isnan(angle):
                return angle
        return math.nan

    def split(self, t0: float, t1: float) -> Command:
        """The part of this command between two parameters.

        t0 == t1 gives a valid zero-length command at that point.
        """
        n = self.degree
        points = tuple(
            _blossom(self.control_points, (t0,) * (n - i) + (t1,) * i) for i in range(n + 1)
        )
        return self.from_points(points)

    def split_at(self, t: float) -> tuple[Command, Command]:
        """Cut in two at parameter t."""
        return self.split(0.0, t), self.split(t, 1.0)

    def split_at_length(self, along: float) -> tuple[Command, Command]:
        """Cut in two at the given arc length from the start."""
        return self.split_at(self.t_at_length(along))

    def multi_split(self, count: int) -> list[Command]:
        """Cut into count pieces of nearly equal arc length."""
        if count < 1:
            raise InvariantViolation(f"Cannot split a command into {count} pieces")
        if count == 1:
            return [self]  # type: ignore[list-item]
        total = self.length()
        if total > 0:
            ts = [self.t_at_length(total * i / count) for i in range(1, count)]
        else:
            ts = [i / count for i in range(1, count)]
        bounds = [0.0, *ts, 1.0]
        return [self.split(t0, t1) for t0, t1 in zip(bounds, bounds[1:])]

    def reverse(self) -> Command:
        """Same curve traveled the other way."""
        return self.from_points(tuple(reversed(self.control_points)), is_vertex=self.is_vertex)

    def transform(self, matrix: Affine) -> Command:
        return self.from_points(
            tuple(matrix.apply(p) for p in self.control_points), is_vertex=self.is_vertex
        )

    def to_quadratic(self) -> QuadraticCommand:
        raise UnsupportedCommandKind(f"{type(self).__name__} has no quadratic form")


class LineCommand(_Segment):
    """A straight segment."""

    kind: Literal["line"] = "line"
    start: Point
    end: Point

    @property
    def control_points(self) -> tuple[Point, ...]:
        return (self.start, self.end)

    @classmethod
    def from_points(cls, points: tuple[Point, ...], *, is_vertex: bool = False) -> LineCommand:
        start, end = points
        return cls(start=start, end=end, is_vertex=is_vertex)

    def length(self) -> float:
        return distance(self.start, self.end)

    def _arc_length(self, t0: float, t1: float) -> float:
        return self.length() * max(0.0, t1 - t0)

    def t_at_length(self, along: float) -> float:
        total = self.length()
        if along <= 0 or total <= 0:
            return 0.0
        if along >= total:
            return 1.0
        return along / total

    def to_quadratic(self) -> QuadraticCommand:
        """Exact quadratic form: the control point sits on the start point."""
        return QuadraticCommand(
            start=self.start, control=self.start, end=self.end, is_vertex=self.is_vertex
        )


class QuadraticCommand(_Segment):
    """A quadratic Bezier segment."""

    kind: Literal["quadratic"] = "quadratic"
    start: Point
    control: Point
    end: Point

    @property
    def control_points(self) -> tuple[Point, ...]:
        return (self.start, self.control, self.end)

    @classmethod
    def from_points(
        cls, points: tuple[Point, ...], *, is_vertex: bool = False
    ) -> QuadraticCommand:
        start, control, end = points
        return cls(start=start, control=control, end=end, is_vertex=is_vertex)

    def _arc_length(self, t0: float, t1: float) -> float:
        """Closed form integral of the speed, exact even through a cusp."""
        if t1 <= t0:
            return 0.0
        p0, p1, p2 = self.control_points
        ax, ay = p0.x - 2 * p1.x + p2.x, p0.y - 2 * p1.y + p2.y
        bx, by = 2 * (p1.x - p0.x), 2 * (p1.y - p0.y)
        # speed(t)**2 == qa*t**2 + qb*t + qc
        qa = 4 * (ax * ax + ay * ay)
        qb = 4 * (ax * bx + ay * by)
        qc = bx * bx + by * by
        if qa <= _FLAT_QUADRATIC * qc or qa == 0:
            return super()._arc_length(t0, t1)
        shift = qb / (2 * qa)
        k = max(0.0, (4 * qa * qc - qb * qb) / (4 * qa * qa))
        return math.sqrt(qa) * (_sqrt_integral(t1 + shift, k) - _sqrt_integral(t0 + shift, k))

    def to_quadratic(self) -> QuadraticCommand:
        return self


class CubicCommand(_Segment):
    """A cubic Bezier segment.

    Usable for static drawing and arc-length queries. Matching and
    interpolation reject it.
    """

    kind: Literal["cubic"] = "cubic"
    start: Point
    control1: Point
    control2: Point
    end: Point

    @property
    def control_points(self) -> tuple[Point, ...]:
        return (self.start, self.control1, self.control2, self.end)

    @classmethod
    def from_points(cls, points: tuple[Point, ...], *, is_vertex: bool = False) -> CubicCommand:
        start, control1, control2, end = points
        return cls(start=start, control1=control1, control2=control2, end=end, is_vertex=is_vertex)


Command = Annotated[LineCommand | QuadraticCommand | CubicCommand, Field(discriminator="kind")]


def vertex_marker(point: Point) -> QuadraticCommand:
    """Zero-length command marking a corner at point."""
    return QuadraticCommand(start=point, control=point, end=point, is_vertex=True)


def line(x0: float, y0: float, x1: float, y1: float) -> LineCommand:
    """Shorthand for a line from (x0, y0) to (x1, y1)."""
    return LineCommand(start=Point(x=x0, y=y0), end=Point(x=x1, y=y1))


def quadratic(
    x0: float, y0: float, cx: float, cy: float, x1: float, y1: float
) -> QuadraticCommand:
    """Shorthand for a quadratic Bezier from (x0, y0) via (cx, cy) to (x1, y1)."""
    return QuadraticCommand(
        start=Point(x=x0, y=y0), control=Point(x=cx, y=cy), end=Point(x=x1, y=y1)
    )
