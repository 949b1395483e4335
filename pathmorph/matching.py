"""Shape matching.

Restructure two paths so they can be interpolated command by command:
same number of connected pieces, and the same number of quadratic commands
in each pair of corresponding pieces. Call ``fix_corners()`` on the inputs
first to get rounded corner transitions.
"""

from __future__ import annotations

import heapq
import logging
import math
from collections.abc import Callable, Sequence

from pydantic import BaseModel, ConfigDict

from pathmorph.config import ReorientPolicy, settings
from pathmorph.errors import InvariantViolation
from pathmorph.types import Path, Point, QuadraticCommand, distance

logger = logging.getLogger(__name__)

Piece = list[QuadraticCommand]


class MatchedShapes(BaseModel):
    """Two paths restructured for command-by-command interpolation.

    ``from_pieces[i]`` morphs into ``to_pieces[i]``, and both hold the same
    number of quadratic commands. Pieces are kept explicitly: neighboring
    pieces cut from one connected run still touch, so they cannot be
    recovered from the concatenated path.
    """

    model_config = ConfigDict(frozen=True)

    from_pieces: tuple[Path, ...]
    to_pieces: tuple[Path, ...]

    @property
    def from_path(self) -> Path:
        return Path.concat(*self.from_pieces)

    @property
    def to_path(self) -> Path:
        return Path.concat(*self.to_pieces)

    @property
    def piece_count(self) -> int:
        return len(self.from_pieces)

    def interpolator(self) -> Callable[[float], Path]:
        """Function from progress in [0, 1] to the in-between path."""
        from pathmorph.interpolation import make_morph_interpolator

        return make_morph_interpolator(self)


def _piece_length(piece: Sequence[QuadraticCommand]) -> float:
    return sum(command.length() for command in piece)


def _next_to_vertex(commands: Sequence[QuadraticCommand], index: int) -> bool:
    before = index > 0 and commands[index - 1].is_vertex
    after = index + 1 < len(commands) and commands[index + 1].is_vertex
    return before or after


def add_commands(
    commands: Sequence[QuadraticCommand],
    desired_count: int,
    *,
    neighbor_weight: float | None = None,
) -> list[QuadraticCommand]:
    """Split commands until there are desired_count of them.

    The result looks the same as the input. The longest commands, measured
    after the splits already assigned to them, are split first. Vertex
    markers are never split. Commands touching a marker count at
    ``neighbor_weight`` times their length; rounding the corner shrinks them.
    """
    weight = settings.corner_neighbor_weight if neighbor_weight is None else neighbor_weight
    need = desired_count - len(commands)
    if need <= 0:
        return list(commands)

    priorities: dict[int, float] = {}
    for index, command in enumerate(commands):
        if command.is_vertex:
            continue
        length = command.length()
        if _next_to_vertex(commands, index):
            length *= weight
        priorities[index] = length
    if not priorities:
        raise InvariantViolation(
            f"Cannot grow {len(commands)} command(s) to {desired_count}: nothing to split"
        )

    counts = [1] * len(commands)
    heap = [(-priority, index) for index, priority in priorities.items()]
    heapq.heapify(heap)
    for _ in range(need):
        _, index = heapq.heappop(heap)
        counts[index] += 1
        heapq.heappush(heap, (-priorities[index] / counts[index], index))

    result: list[QuadraticCommand] = []
    for command, count in zip(commands, counts, strict=True):
        if count == 1:
            result.append(command)
        else:
            result.extend(piece.to_quadratic() for piece in command.multi_split(count))
    return result


def _break_at_corners(target: int, pieces: list[Piece]) -> list[Piece]:
    """Add pieces by cutting at vertex markers, last piece and last corner first.

    The marker at each cut is dropped; the two new ends need no rounding.
    """
    remaining = list(pieces)
    tail: list[Piece] = []
    while target > len(remaining) + len(tail) and remaining:
        last = remaining.pop()
        vertex_index = next(
            (i for i in range(len(last) - 1, -1, -1) if last[i].is_vertex), None
        )
        if vertex_index is None:
            tail.insert(0, last)
            continue
        before, after = last[:vertex_index], last[vertex_index + 1 :]
        if not before or not after:
            raise InvariantViolation("Vertex marker at the end of a piece")
        remaining.append(before)
        tail.insert(0, after)
    return remaining + tail


def _break_pieces_into_runs(target: int, pieces: list[Piece]) -> list[Piece]:
    """Add pieces by cutting pieces into runs of whole commands.

    Cuts go to whichever piece has the longest length per run, so new
    breakpoints are spread in proportion to arc length. A piece cannot be
    cut into more runs than it has commands.
    """
    need = target - len(pieces)
    if need < 1:
        return pieces
    lengths = [_piece_length(piece) for piece in pieces]
    counts = [1] * len(pieces)
    heap = [(-lengths[i], i) for i, piece in enumerate(pieces) if len(piece) > 1]
    heapq.heapify(heap)
    while need > 0 and heap:
        _, index = heapq.heappop(heap)
        counts[index] += 1
        need -= 1
        if counts[index] < len(pieces[index]):
            heapq.heappush(heap, (-lengths[index] / counts[index], index))

    result: list[Piece] = []
    for piece, count in zip(pieces, counts, strict=True):
        remaining = list(piece)
        for runs_left in range(count, 0, -1):
            size = math.floor(len(remaining) / runs_left + 0.5)
            result.append(remaining[:size])
            remaining = remaining[size:]
    return result


def _break_commands(target: int, pieces: list[Piece]) -> list[Piece]:
    """Add pieces by splitting commands once every piece is a single command."""
    need = target - len(pieces)
    if need < 0:
        raise InvariantViolation(f"Have {len(pieces)} pieces, wanted at most {target}")
    if need == 0:
        return pieces
    if any(len(piece) != 1 for piece in pieces):
        raise InvariantViolation("Pieces must be single commands before splitting commands")
    commands = add_commands([piece[0] for piece in pieces], target)
    return [[command] for command in commands]


def _grow_piece_count(target: int, pieces: list[Piece]) -> list[Piece]:
    """Cut pieces until there are exactly target of them."""
    before = len(pieces)
    pieces = _break_at_corners(target, pieces)
    at_corners = len(pieces)
    pieces = _break_pieces_into_runs(target, pieces)
    into_runs = len(pieces)
    pieces = _break_commands(target, pieces)
    logger.debug(
        f"Grew {before} piece(s) to {len(pieces)}: {at_corners - before} at corners, "
        f"{into_runs - at_corners} between commands, {len(pieces) - into_runs} inside commands"
    )
    if len(pieces) != target:
        raise InvariantViolation(f"Wanted {target} pieces, got {len(pieces)}")
    return pieces


def endpoint_distances(
    piece_a: Sequence[QuadraticCommand], piece_b: Sequence[QuadraticCommand]
) -> tuple[float, float]:
    """How far apart the ends of two pieces are, as is and with b reversed.

    Piece b is first translated so both pieces share the midpoint of their
    start and end points; only the relative layout of the ends matters.
    """
    a_start, a_end = piece_a[0].start, piece_a[-1].end
    b_start, b_end = piece_b[0].start, piece_b[-1].end
    dx = (a_start.x + a_end.x - b_start.x - b_end.x) / 2
    dy = (a_start.y + a_end.y - b_start.y - b_end.y) / 2
    b_start = Point(x=b_start.x + dx, y=b_start.y + dy)
    b_end = Point(x=b_end.x + dx, y=b_end.y + dy)
    current = distance(a_start, b_start) + distance(a_end, b_end)
    reversed_ = distance(a_start, b_end) + distance(a_end, b_start)
    return current, reversed_


def _reorient(piece_a: Piece, piece_b: Piece, policy: ReorientPolicy, index: int) -> Piece:
    current, reversed_ = endpoint_distances(piece_a, piece_b)
    if reversed_ >= current:
        return piece_b
    if policy == ReorientPolicy.NEAREST:
        logger.debug(f"Reversing piece {index}: end distance {reversed_:.3f} < {current:.3f}")
        return [command.reverse().to_quadratic() for command in reversed(piece_b)]
    logger.debug(
        f"Piece {index} would line up better reversed ({reversed_:.3f} < {current:.3f}), "
        f"keeping orientation"
    )
    return piece_b


def _drop_shared_corners(piece_a: Piece, piece_b: Piece) -> tuple[Piece, Piece]:
    """Remove vertex markers found at the same index on both sides."""
    piece_a, piece_b = list(piece_a), list(piece_b)
    for index in range(len(piece_a) - 1, -1, -1):
        if piece_a[index].is_vertex and piece_b[index].is_vertex:
            del piece_a[index]
            del piece_b[index]
    return piece_a, piece_b


def match_shapes(
    a: Path,
    b: Path,
    *,
    reorient: ReorientPolicy | None = None,
    neighbor_weight: float | None = None,
) -> MatchedShapes:
    """Restructure two paths so they can be interpolated command by command.

    Args:
        a: The path at progress 0.
        b: The path at progress 1.
        reorient: What to do when a piece of b would line up better with
            its partner reversed. Defaults to ``settings.reorient_policy``.
        neighbor_weight: Split priority of commands touching a corner,
            relative to their length. Defaults to
            ``settings.corner_neighbor_weight``.

    Returns:
        The matched pair. Neither input is modified.

    Raises:
        UnsupportedCommandKind: A path contains a cubic command.
        InvariantViolation: The paths cannot be balanced, e.g. one is empty
            and the other is not.
    """
    policy = settings.reorient_policy if reorient is None else reorient

    a_pieces: list[Piece] = [
        [command.to_quadratic() for command in piece.commands] for piece in a.split_on_move()
    ]
    b_pieces: list[Piece] = [
        [command.to_quadratic() for command in piece.commands] for piece in b.split_on_move()
    ]

    if len(a_pieces) > len(b_pieces):
        b_pieces = _grow_piece_count(len(a_pieces), b_pieces)
    elif len(b_pieces) > len(a_pieces):
        a_pieces = _grow_piece_count(len(b_pieces), a_pieces)

    from_pieces: list[Path] = []
    to_pieces: list[Path] = []
    for index, (piece_a, piece_b) in enumerate(zip(a_pieces, b_pieces, strict=True)):
        piece_b = _reorient(piece_a, piece_b, policy, index)
        if len(piece_a) < len(piece_b):
            piece_a = add_commands(piece_a, len(piece_b), neighbor_weight=neighbor_weight)
        elif len(piece_b) < len(piece_a):
            piece_b = add_commands(piece_b, len(piece_a), neighbor_weight=neighbor_weight)
        if len(piece_a) != len(piece_b):
            raise InvariantViolation(
                f"Piece {index} has {len(piece_a)} vs {len(piece_b)} commands after balancing"
            )
        piece_a, piece_b = _drop_shared_corners(piece_a, piece_b)
        from_pieces.append(Path(commands=tuple(piece_a)))
        to_pieces.append(Path(commands=tuple(piece_b)))

    logger.debug(
        f"Matched {len(from_pieces)} piece(s), "
        f"{sum(len(piece) for piece in from_pieces)} command(s) per side"
    )
    return MatchedShapes(from_pieces=tuple(from_pieces), to_pieces=tuple(to_pieces))
