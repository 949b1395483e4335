"""Rendering helpers for paths.

The geometry core only needs a surface that can stroke a path and stamp
end caps. ``PillowSurface`` is the raster implementation used for stills
and frame dumps. On top of that contract this module provides:

- ``stroke_colors()``: stroke a path in bands of color measured along its length
- ``Handwriting``: reveal one or more paths progressively, as if being written
"""

from __future__ import annotations

import bisect
import io
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal, NamedTuple, Protocol

from PIL import Image, ImageDraw
from pydantic import BaseModel, ConfigDict, Field

from pathmorph.config import settings
from pathmorph.errors import InvariantViolation
from pathmorph.palette import RAINBOW
from pathmorph.splitter import PathSplitter
from pathmorph.types import Affine, Path, Point, direction
from pathmorph.types.commands import Command

logger = logging.getLogger(__name__)

CapStyle = Literal["round", "square"]


class Surface(Protocol):
    """Anything that can draw line and Bezier segments."""

    def stroke(self, path: Path, color: str, width: float) -> None:
        """Stroke every piece of path with butt ends."""
        ...

    def cap(
        self,
        point: Point,
        color: str,
        width: float,
        *,
        style: CapStyle = "round",
        angle: float = 0.0,
    ) -> None:
        """Draw a cap for a stroke of the given width ending at point.

        ``angle`` is the direction the cap faces, away from the stroke. A
        round cap ignores it; a square cap reaches half the width that way.
        """
        ...


def flatten_command(command: Command, steps: int) -> list[tuple[float, float]]:
    """Sample a command as a polyline, both ends included."""
    if command.kind == "line":
        return [command.start.as_tuple(), command.end.as_tuple()]
    return [command.at(i / steps).as_tuple() for i in range(steps + 1)]


def path_to_point_lists(path: Path, steps: int) -> list[list[tuple[float, float]]]:
    """Convert a path to one polyline per connected piece."""
    polylines: list[list[tuple[float, float]]] = []
    for piece in path.split_on_move():
        points: list[tuple[float, float]] = []
        for command in piece.commands:
            sampled = flatten_command(command, steps)
            points.extend(sampled if not points else sampled[1:])
        polylines.append(points)
    return polylines


def bounding_box(paths: Iterable[Path]) -> tuple[float, float, float, float] | None:
    """(min_x, min_y, max_x, max_y) of every control point, None if there are none.

    Control points contain the curve, so this box always covers the drawing.
    """
    xs: list[float] = []
    ys: list[float] = []
    for path in paths:
        for command in path.commands:
            for point in command.control_points:
                xs.append(point.x)
                ys.append(point.y)
    if not xs:
        return None
    return (min(xs), min(ys), max(xs), max(ys))


def fit_transform(paths: Iterable[Path], width: int, height: int, padding: int = 0) -> Affine:
    """Scale and center paths to fill a width x height canvas."""
    box = bounding_box(paths)
    if box is None:
        return Affine.identity()
    min_x, min_y, max_x, max_y = box
    src_w = max(max_x - min_x, 1e-9)
    src_h = max(max_y - min_y, 1e-9)
    scale = min((width - 2 * padding) / src_w, (height - 2 * padding) / src_h)
    offset_x = (width - src_w * scale) / 2 - min_x * scale
    offset_y = (height - src_h * scale) / 2 - min_y * scale
    return Affine(a=scale, d=scale, e=offset_x, f=offset_y)


@dataclass(frozen=True)
class RenderOptions:
    """Configuration for raster rendering.

    Attributes:
        width: Output image width in pixels
        height: Output image height in pixels
        background: Background color, any CSS color Pillow understands
        flatten_steps: Polyline samples per curved command
        transform: Applied to every path before drawing (None for identity)
        optimize_png: Enable PNG optimization (slower but smaller)
    """

    width: int = field(default_factory=lambda: settings.render_width)
    height: int = field(default_factory=lambda: settings.render_height)
    background: str = field(default_factory=lambda: settings.render_background)
    flatten_steps: int = field(default_factory=lambda: settings.curve_flatten_steps)
    transform: Affine | None = None
    optimize_png: bool = False


class PillowSurface:
    """A raster surface backed by a Pillow image."""

    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions()
        self.image = Image.new(
            "RGBA", (self.options.width, self.options.height), self.options.background
        )
        self._draw = ImageDraw.Draw(self.image)

    def _scale(self) -> float:
        transform = self.options.transform
        if transform is None:
            return 1.0
        return (abs(transform.a * transform.d - transform.b * transform.c)) ** 0.5

    def stroke(self, path: Path, color: str, width: float) -> None:
        if self.options.transform is not None:
            path = path.transform(self.options.transform)
        stroke_width = max(1, round(width * self._scale()))
        for points in path_to_point_lists(path, self.options.flatten_steps):
            if len(points) >= 2:
                self._draw.line(points, fill=color, width=stroke_width, joint="curve")

    def cap(
        self,
        point: Point,
        color: str,
        width: float,
        *,
        style: CapStyle = "round",
        angle: float = 0.0,
    ) -> None:
        transform = self.options.transform
        if transform is not None:
            if style == "square":
                # Rotate the facing direction with the drawing
                ahead = Point(x=point.x + math.cos(angle), y=point.y + math.sin(angle))
                tip = transform.apply(ahead)
                point = transform.apply(point)
                angle = direction(point, tip)
            else:
                point = transform.apply(point)
        radius = width * self._scale() / 2
        if style == "round":
            self._draw.ellipse(
                [point.x - radius, point.y - radius, point.x + radius, point.y + radius],
                fill=color,
            )
            return
        if not math.isfinite(angle):
            angle = 0.0
        ux, uy = math.cos(angle) * radius, math.sin(angle) * radius
        nx, ny = -uy, ux
        corners = [
            (point.x + nx, point.y + ny),
            (point.x + nx + ux, point.y + ny + uy),
            (point.x - nx + ux, point.y - ny + uy),
            (point.x - nx, point.y - ny),
        ]
        self._draw.polygon(corners, fill=color)

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        self.image.convert("RGB").save(buffer, format="PNG", optimize=self.options.optimize_png)
        return buffer.getvalue()


def render_path(
    path: Path,
    options: RenderOptions | None = None,
    *,
    color: str = "#FFFFFF",
    width: float | None = None,
) -> bytes:
    """Render a single path to PNG bytes."""
    surface = PillowSurface(options)
    if not path.is_empty():
        surface.stroke(path, color, settings.stroke_width if width is None else width)
    return surface.to_png()


# =============================================================================
# Color bands
# =============================================================================


class StrokeColorsOptions(BaseModel):
    """How to split a path into colored sections.

    At most one of ``section_length``, ``repeat_count`` and ``color_count``
    may be set; setting none is the same as ``repeat_count=1``. At most one
    of ``offset`` and ``relative_offset`` may be set; the default is
    ``offset=0``.

    Attributes:
        colors: Colors to cycle through.
        offset: How far ahead to jump in the colors, in path units. Growing
            it slowly makes the bands crawl backward along the path.
        relative_offset: Offset as a fraction of a full cycle through the
            colors. 1 is a full cycle and looks the same as 0.
        section_length: Path length of each band.
        repeat_count: How many times to cycle through all the colors.
        color_count: How many bands to draw when the offset is 0.
        width: Stroke width, defaults to ``settings.stroke_width``.
        line_cap: With "round" or "square", bands are stroked with butt
            ends and caps are added only at the true ends of each piece.
    """

    model_config = ConfigDict(frozen=True)

    colors: tuple[str, ...] = Field(default=tuple(RAINBOW), min_length=1)
    offset: float | None = None
    relative_offset: float | None = None
    section_length: float | None = Field(default=None, gt=0)
    repeat_count: float | None = Field(default=None, gt=0)
    color_count: float | None = Field(default=None, gt=0)
    width: float | None = Field(default=None, gt=0)
    line_cap: Literal["butt", "round", "square"] = "butt"


class ColorSection(NamedTuple):
    """One colored band, from start to end along the path."""

    color: str
    start: float
    end: float
    path: Path


def _resolve_bands(options: StrokeColorsOptions, length: float) -> tuple[float, float]:
    """Section length and non-negative offset for a path of the given length."""
    sizing = [options.section_length, options.repeat_count, options.color_count]
    if sum(value is not None for value in sizing) > 1:
        raise InvariantViolation(
            "Set at most one of section_length, repeat_count and color_count"
        )
    if options.offset is not None and options.relative_offset is not None:
        raise InvariantViolation("Set at most one of offset and relative_offset")

    color_total = len(options.colors)
    if options.section_length is not None:
        section_length = options.section_length
    elif options.color_count is not None:
        section_length = length / options.color_count
    else:
        section_length = length / ((options.repeat_count or 1) * color_total)

    if options.offset is not None:
        offset = options.offset
    elif options.relative_offset is not None:
        offset = options.relative_offset * section_length * color_total
    else:
        offset = 0.0
    if offset < 0:
        offset %= color_total * section_length
    return section_length, offset


def color_sections(path: Path | PathSplitter, options: StrokeColorsOptions) -> list[ColorSection]:
    """Cut a path into colored bands.

    Returns an empty list for a zero-length path.
    """
    splitter = path if isinstance(path, PathSplitter) else PathSplitter(path)
    if splitter.length == 0:
        return []
    section_length, offset = _resolve_bands(options, splitter.length)

    sections: list[ColorSection] = []
    color_index = 0
    start = -offset
    while start < splitter.length:
        end = start + section_length
        if end > 0:
            color = options.colors[color_index % len(options.colors)]
            sections.append(ColorSection(color, start, end, splitter.trim(start, end)))
        start = end
        color_index += 1
    return sections


def stroke_colors(
    surface: Surface,
    path: Path,
    options: StrokeColorsOptions | None = None,
) -> None:
    """Stroke a path, changing color every so often along its length.

    An empty or zero-length path draws nothing.
    """
    options = options or StrokeColorsOptions()
    stroke_width = settings.stroke_width if options.width is None else options.width
    splitter = PathSplitter(path)
    sections = color_sections(splitter, options)
    if not sections:
        return

    for section in sections:
        surface.stroke(section.path, section.color, stroke_width)

    if options.line_cap != "butt":
        starts = [section.start for section in sections]
        position = 0.0
        for piece in path.split_on_move():
            piece_end = position + piece.length()
            # Start caps face back against the direction of travel
            ends = (
                (position, piece.start, piece.commands[0].incoming_angle + math.pi),
                (piece_end, piece.end, piece.commands[-1].outgoing_angle),
            )
            for at, point, facing in ends:
                index = min(max(bisect.bisect_right(starts, at) - 1, 0), len(sections) - 1)
                surface.cap(
                    point,  # type: ignore[arg-type]
                    sections[index].color,
                    stroke_width,
                    style=options.line_cap,
                    angle=facing,
                )
            position = piece_end
    logger.debug(f"Stroked {len(sections)} color section(s) over length {splitter.length:.3f}")


# =============================================================================
# Handwriting
# =============================================================================

# Keeps progress 0 from drawing a dot at the start of the first piece
_REVEAL_START = 0.0001


class Handwriting:
    """Trace out paths as if they were being written.

    Pieces are revealed one after another in order, each at the same speed.
    Progress 0 draws nothing and progress 1 draws everything.
    """

    def __init__(self, *paths: Path) -> None:
        self._pieces: list[tuple[PathSplitter, float, float]] = []
        start = _REVEAL_START
        for path in paths:
            for piece in path.split_on_move():
                splitter = PathSplitter(piece)
                end = start + splitter.length
                self._pieces.append((splitter, start, end))
                start = end
        self.total_length = start

    def path_at(self, progress: float) -> Path:
        """Everything visible at the given progress."""
        length = progress * self.total_length
        visible: list[Path] = []
        for splitter, start, end in self._pieces:
            if length <= start:
                break
            if length >= end:
                visible.append(splitter.whole)
            else:
                visible.append(splitter.get(0, length - start))
        return Path.concat(*visible)

    def draw_to(
        self, progress: float, surface: Surface, color: str, width: float | None = None
    ) -> None:
        path = self.path_at(progress)
        if path.is_empty():
            return
        surface.stroke(path, color, settings.stroke_width if width is None else width)
