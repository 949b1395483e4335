"""Arc-length index over a Path.

Look up the point at a given distance along a path, or cut out the part of
a path between two distances. A PathSplitter is immutable once built, so one
instance can serve any number of queries, in any order, from any thread.
"""

from __future__ import annotations

import bisect
from typing import NamedTuple

from pathmorph.types import Command, Path, Point, clamp_value


class _CommandSpan(NamedTuple):
    """Where one command sits in the path's arc-length space."""

    command: Command
    start: float
    length: float
    end: float


class PathSplitter:
    """Prefix-sum length index over the commands of a path.

    All distances are measured along the path: 0 is the start and
    ``length`` is the end. Out of range inputs are clamped.
    """

    __slots__ = ("_length", "_spans", "_starts", "_whole")

    def __init__(self, path: Path | str) -> None:
        if isinstance(path, str):
            path = Path.from_svg_d(path)
        spans: list[_CommandSpan] = []
        start = 0.0
        for command in path.commands:
            length = command.length()
            end = start + length
            spans.append(_CommandSpan(command, start, length, end))
            start = end
        self._whole = path
        self._spans = tuple(spans)
        self._starts = tuple(span.start for span in spans)
        self._length = start

    @classmethod
    def trim_path(cls, path: Path, from_distance: float, to_distance: float) -> Path:
        """One-off ``get()`` on a path you will not query again."""
        return cls(path).get(from_distance, to_distance)

    @classmethod
    def trim_progress(cls, path: Path, from_progress: float, to_progress: float) -> Path:
        """Like ``trim_path()`` with positions given as fractions of the length."""
        splitter = cls(path)
        return splitter.get(splitter.length * from_progress, splitter.length * to_progress)

    @property
    def whole(self) -> Path:
        return self._whole

    @property
    def length(self) -> float:
        return self._length

    def _find_command_at(self, position: float) -> int:
        """Index of the command owning a clamped position.

        A position on the boundary between two commands belongs to the later
        one. The very end of the path belongs to the last command.
        """
        return max(0, bisect.bisect_right(self._starts, position) - 1)

    def at(self, position: float) -> Point | None:
        """The point at the given distance along the path.

        Returns None for an empty path.
        """
        if not self._spans:
            return None
        position = clamp_value(position, 0.0, self._length)
        if position >= self._length:
            return self._spans[-1].command.end
        span = self._spans[self._find_command_at(position)]
        command = span.command
        return command.at(command.t_at_length(position - span.start))

    def get(self, from_distance: float, to_distance: float) -> Path:
        """The part of the path from one distance to another.

        If ``from_distance >= to_distance`` after clamping, the result is a
        single zero-length command at ``to_distance``. Commands entirely
        inside the range are copied unmodified.
        """
        if not self._spans:
            return self._whole
        from_distance = clamp_value(from_distance, 0.0, self._length)
        to_distance = clamp_value(to_distance, 0.0, self._length)
        if from_distance == 0 and to_distance == self._length:
            return self._whole
        if from_distance >= to_distance:
            from_distance = to_distance

        from_index = self._find_command_at(from_distance)
        to_index = self._find_command_at(to_distance)
        if from_index == to_index:
            span = self._spans[from_index]
            command = span.command
            return Path.of(
                command.split(
                    command.t_at_length(from_distance - span.start),
                    command.t_at_length(to_distance - span.start),
                )
            )

        commands: list[Command] = []

        # First command
        span = self._spans[from_index]
        local = from_distance - span.start
        if local <= 0:
            commands.append(span.command)
        elif local < span.length:
            commands.append(span.command.split(span.command.t_at_length(local), 1.0))

        # Middle commands as is
        commands.extend(span.command for span in self._spans[from_index + 1 : to_index])

        # Last command; local can overshoot its length through round-off
        span = self._spans[to_index]
        local = to_distance - span.start
        if local >= span.length:
            commands.append(span.command)
        elif local > 0:
            commands.append(span.command.split(0.0, span.command.t_at_length(local)))

        return Path(commands=tuple(commands))

    def trim(self, from_distance: float, to_distance: float) -> Path:
        """Alias of ``get()``."""
        return self.get(from_distance, to_distance)
