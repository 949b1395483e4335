"""Corner tagging.

Pure functions that mark sharp bends in a path with zero-length vertex
markers so the morph interpolator can round them in and out smoothly.
"""

import logging
import math

from pathmorph.config import settings
from pathmorph.types import Command, Path, angle_between, needs_move, vertex_marker

logger = logging.getLogger(__name__)


def corner_angle(previous: Command, following: Command) -> float:
    """Signed turn between two consecutive commands, NaN if undefined."""
    return angle_between(previous.outgoing_angle, following.incoming_angle)


def fix_corners(path: Path, *, threshold: float | None = None) -> Path:
    """Insert a vertex marker at every sharp corner of a path.

    The result looks exactly like the input, but morphs into and out of
    other shapes more smoothly.

    Args:
        path: The path to tag. It is not modified.
        threshold: Smallest turn in radians that counts as a corner.
            Defaults to ``settings.corner_threshold``.

    Returns:
        A new path with vertex markers between the commands meeting at a
        corner. A command squeezed between two markers is cut into two
        pieces of equal length.
    """
    limit = settings.corner_threshold if threshold is None else threshold
    commands = path.commands

    tagged: list[Command] = []
    for command, next_command in zip(commands, commands[1:]):
        tagged.append(command)
        if needs_move(command, next_command):
            continue
        difference = corner_angle(command, next_command)
        if not math.isfinite(difference) or abs(difference) < limit:
            continue
        tagged.append(vertex_marker(command.end))
    if commands:
        tagged.append(commands[-1])

    # Rounding a corner trims the commands beside it; each corner gets its own half
    result: list[Command] = []
    last = len(tagged) - 1
    for index, command in enumerate(tagged):
        between_corners = (
            0 < index < last and tagged[index - 1].is_vertex and tagged[index + 1].is_vertex
        )
        if between_corners:
            result.extend(command.split_at_length(command.length() / 2))
        else:
            result.append(command)

    corner_count = sum(1 for command in result if command.is_vertex)
    if corner_count:
        logger.debug(f"Tagged {corner_count} corner(s) in a path of {len(commands)} command(s)")
    return Path(commands=tuple(result))
