"""Pure functions for path interpolation.

This module turns matched paths into ``progress -> Path`` functions. No side
effects or I/O; the same progress always gives the same path, so frames can
be rendered in any order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from pathmorph.corners import fix_corners
from pathmorph.errors import InvariantViolation, UnsupportedCommandKind
from pathmorph.types import LineCommand, Path, QuadraticCommand, lerp_point
from pathmorph.types.commands import Command

if TYPE_CHECKING:
    from pathmorph.config import ReorientPolicy
    from pathmorph.matching import MatchedShapes

# Type alias for a morph: progress in [0, 1] to a path
PathInterpolator = Callable[[float], Path]


def lerp_line(start: LineCommand, end: LineCommand, progress: float) -> LineCommand:
    return LineCommand(
        start=lerp_point(start.start, end.start, progress),
        end=lerp_point(start.end, end.end, progress),
    )


def lerp_quadratic(
    start: QuadraticCommand, end: QuadraticCommand, progress: float
) -> QuadraticCommand:
    return QuadraticCommand(
        start=lerp_point(start.start, end.start, progress),
        control=lerp_point(start.control, end.control, progress),
        end=lerp_point(start.end, end.end, progress),
    )


def interpolate_commands(
    from_commands: Sequence[QuadraticCommand],
    to_commands: Sequence[QuadraticCommand],
    progress: float,
) -> list[QuadraticCommand]:
    """Interpolate each control point of two equal-length command lists."""
    if len(from_commands) != len(to_commands):
        raise InvariantViolation(
            f"Cannot interpolate {len(from_commands)} commands with {len(to_commands)}"
        )
    return [
        lerp_quadratic(start, end, progress)
        for start, end in zip(from_commands, to_commands, strict=True)
    ]


def round_corners(
    commands: Sequence[QuadraticCommand],
    corners: Sequence[int],
    progress: float,
) -> list[QuadraticCommand]:
    """Replace vertex markers with rounded joins.

    Args:
        commands: One connected piece.
        corners: Indices of the vertex markers in ``commands``.
        progress: 0 means maximum rounding, 1 means a sharp corner.

    Returns:
        A new list of the same length. Around each corner, the command
        before loses the last ``min(1 - progress, 0.5)`` of its length,
        the command after loses the same fraction from its start,
        and the marker becomes a quadratic bridging the gap with the
        original corner point as its control point.
    """
    result = list(commands)
    to_remove = min(1 - progress, 0.5)
    for index in corners:
        if index <= 0 or index >= len(commands) - 1:
            raise InvariantViolation(f"Vertex marker at index {index} has no neighbor to round")
        before_original = commands[index - 1]
        after_original = commands[index + 1]
        before = before_original.split_at_length(
            before_original.length() * (1 - to_remove)
        )[0].to_quadratic()
        after = after_original.split_at_length(
            after_original.length() * to_remove
        )[1].to_quadratic()
        result[index - 1] = before
        result[index] = QuadraticCommand(
            start=before.end, control=before_original.end, end=after.start
        )
        result[index + 1] = after
    return result


def make_path_interpolator(from_path: Path, to_path: Path) -> PathInterpolator:
    """Interpolate between two paths with the same command kinds in the same order.

    Only the coordinates change. See ``match_shapes()`` for paths that do
    not already line up.

    Raises:
        InvariantViolation: The paths have different command counts.
        UnsupportedCommandKind: A pair is not line/line or quadratic/quadratic.
    """
    if len(from_path) != len(to_path):
        raise InvariantViolation(f"Paths have {len(from_path)} and {len(to_path)} commands")
    interpolators: list[Callable[[float], Command]] = []
    for index, (start, end) in enumerate(zip(from_path.commands, to_path.commands, strict=True)):
        if isinstance(start, LineCommand) and isinstance(end, LineCommand):
            interpolators.append(lambda p, s=start, e=end: lerp_line(s, e, p))
        elif isinstance(start, QuadraticCommand) and isinstance(end, QuadraticCommand):
            interpolators.append(lambda p, s=start, e=end: lerp_quadratic(s, e, p))
        else:
            raise UnsupportedCommandKind(
                f"Cannot interpolate {start.kind} into {end.kind} at command {index}"
            )

    def interpolate(progress: float) -> Path:
        if progress <= 0:
            return from_path
        if progress >= 1:
            return to_path
        return Path(commands=tuple(f(progress) for f in interpolators))

    return interpolate


def make_morph_interpolator(matched: MatchedShapes) -> PathInterpolator:
    """Interpolate a matched pair, rounding corners as they appear and vanish.

    Corners of the from side start sharp and round off as progress grows;
    corners of the to side start fully rounded and sharpen. Progress at or
    beyond the ends returns the matched paths themselves.
    """
    from_path = matched.from_path
    to_path = matched.to_path
    pieces = [
        (
            [c.to_quadratic() for c in a.commands],
            a.vertex_indices(),
            [c.to_quadratic() for c in b.commands],
            b.vertex_indices(),
        )
        for a, b in zip(matched.from_pieces, matched.to_pieces, strict=True)
    ]

    def interpolate(progress: float) -> Path:
        if progress <= 0:
            return from_path
        if progress >= 1:
            return to_path
        commands: list[QuadraticCommand] = []
        for a_commands, a_corners, b_commands, b_corners in pieces:
            start = round_corners(a_commands, a_corners, 1 - progress)
            end = round_corners(b_commands, b_corners, progress)
            commands.extend(interpolate_commands(start, end, progress))
        return Path(commands=tuple(commands))

    return interpolate


def morph(
    from_path: Path,
    to_path: Path,
    *,
    reorient: ReorientPolicy | None = None,
) -> PathInterpolator:
    """Tag corners, match and build the interpolator in one call."""
    from pathmorph.matching import match_shapes

    matched = match_shapes(fix_corners(from_path), fix_corners(to_path), reorient=reorient)
    return make_morph_interpolator(matched)
