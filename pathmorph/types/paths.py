"""Path model: an ordered sequence of commands."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pathmorph.types.commands import Command
from pathmorph.types.geometry import Affine, Point, points_coincide


def needs_move(previous: Command, following: Command) -> bool:
    """True when the pen has to lift between two consecutive commands."""
    return not points_coincide(previous.end, following.start)


class Path(BaseModel):
    """An ordered, immutable sequence of commands.

    There is no explicit move command. A new piece starts wherever one
    command ends away from where the next one starts. The sequence may be
    empty; an empty path has zero length and draws nothing.
    """

    model_config = ConfigDict(frozen=True)

    commands: tuple[Command, ...] = ()

    @classmethod
    def of(cls, *commands: Command) -> Path:
        return cls(commands=commands)

    @classmethod
    def concat(cls, *paths: Path) -> Path:
        """Join paths end to end, keeping every command as is."""
        return cls(commands=tuple(c for path in paths for c in path.commands))

    @classmethod
    def from_svg_d(cls, d: str) -> Path:
        """Parse an SVG path 'd' attribute string."""
        from pathmorph.svg import parse_svg_path_d

        return parse_svg_path_d(d)

    def __len__(self) -> int:
        return len(self.commands)

    def is_empty(self) -> bool:
        return not self.commands

    @property
    def start(self) -> Point | None:
        return self.commands[0].start if self.commands else None

    @property
    def end(self) -> Point | None:
        return self.commands[-1].end if self.commands else None

    def length(self) -> float:
        return sum(command.length() for command in self.commands)

    @property
    def pieces_count(self) -> int:
        return len(self.split_on_move())

    def split_on_move(self) -> list[Path]:
        """Partition into maximal connected runs of commands."""
        pieces: list[list[Command]] = []
        for command in self.commands:
            if pieces and not needs_move(pieces[-1][-1], command):
                pieces[-1].append(command)
            else:
                pieces.append([command])
        return [Path(commands=tuple(piece)) for piece in pieces]

    def reverse(self) -> Path:
        """Reverse segment order and the direction of each segment."""
        return Path(commands=tuple(c.reverse() for c in reversed(self.commands)))

    def transform(self, matrix: Affine) -> Path:
        return Path(commands=tuple(c.transform(matrix) for c in self.commands))

    def translate(self, dx: float, dy: float) -> Path:
        return self.transform(Affine.translation(dx, dy))

    def vertex_indices(self) -> list[int]:
        """Indices of the vertex markers in this path."""
        return [index for index, command in enumerate(self.commands) if command.is_vertex]

    def to_svg_d(self) -> str:
        """Convert to an SVG path 'd' attribute."""
        d_parts: list[str] = []
        previous: Command | None = None
        for command in self.commands:
            if previous is None or needs_move(previous, command):
                d_parts.append(f"M {command.start.x} {command.start.y}")
            match command.kind:
                case "line":
                    d_parts.append(f"L {command.end.x} {command.end.y}")
                case "quadratic":
                    d_parts.append(
                        f"Q {command.control.x} {command.control.y} {command.end.x} {command.end.y}"
                    )
                case "cubic":
                    d_parts.append(
                        f"C {command.control1.x} {command.control1.y} "
                        f"{command.control2.x} {command.control2.y} "
                        f"{command.end.x} {command.end.y}"
                    )
            previous = command
        return " ".join(d_parts)
