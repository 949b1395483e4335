"""Read SVG path data into pathmorph Paths.

svgpathtools does the tokenizing; this module only maps its segments onto
pathmorph commands. Elliptical arcs have no pathmorph counterpart and are
approximated by quadratics.
"""

import logging
import math
import re
from xml.etree import ElementTree as ET

from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier, parse_path

from pathmorph.types import CubicCommand, LineCommand, Path, Point, QuadraticCommand
from pathmorph.types.commands import Command

logger = logging.getLogger(__name__)

# Sweep covered by one quadratic when approximating an elliptical arc
_DEGREES_PER_ARC_PIECE = 45.0

_XMLNS_ATTR = re.compile(r'\sxmlns="[^"]*"')


def _point(z: complex) -> Point:
    return Point(x=z.real, y=z.imag)


def _quadratic(segment: QuadraticBezier) -> QuadraticCommand:
    return QuadraticCommand(
        start=_point(segment.start), control=_point(segment.control), end=_point(segment.end)
    )


def _segment_commands(segment: object) -> list[Command]:
    if isinstance(segment, Line):
        return [LineCommand(start=_point(segment.start), end=_point(segment.end))]
    if isinstance(segment, QuadraticBezier):
        return [_quadratic(segment)]
    if isinstance(segment, CubicBezier):
        return [
            CubicCommand(
                start=_point(segment.start),
                control1=_point(segment.control1),
                control2=_point(segment.control2),
                end=_point(segment.end),
            )
        ]
    if isinstance(segment, Arc):
        # Round-off in the sweep must not add a sliver piece
        count = max(1, math.ceil(abs(segment.delta) / _DEGREES_PER_ARC_PIECE - 1e-9))
        return [_quadratic(q) for q in segment.as_quad_curves(count)]
    logger.debug(f"Skipping unknown SVG segment {segment!r}")
    return []


def parse_svg_path_d(d: str) -> Path:
    """Parse the ``d`` attribute of an SVG ``<path>``.

    Move commands start new pieces implicitly: the next command simply
    does not begin where the previous one ended. Text that svgpathtools
    cannot read is logged and yields an empty Path.
    """
    if not d or d.isspace():
        return Path()

    try:
        segments = parse_path(d)
    except Exception as e:
        logger.warning(f"Could not parse SVG path data {d!r}: {e}")
        return Path()

    return Path(commands=tuple(cmd for seg in segments for cmd in _segment_commands(seg)))


def parse_svg_string(svg_text: str) -> list[Path]:
    """Collect every non-empty ``<path>`` of an SVG document, in document order."""
    if not svg_text or svg_text.isspace():
        return []

    try:
        root = ET.fromstring(_XMLNS_ATTR.sub("", svg_text))
    except ET.ParseError as e:
        logger.warning(f"Could not parse SVG document: {e}")
        return []

    parsed = (parse_svg_path_d(elem.get("d", "")) for elem in root.iter("path"))
    return [path for path in parsed if not path.is_empty()]
