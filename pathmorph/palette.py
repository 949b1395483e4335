"""Color palettes for banded strokes."""

from typing import NamedTuple


class Rainbow(NamedTuple):
    """Nine bright, distinct colors that read well on black or white.

    Any CSS color string Pillow understands works in a palette; these are
    the defaults for ``stroke_colors()``.
    """

    red: str = "rgb(255, 0, 0)"
    orange: str = "rgb(255, 128, 0)"  # slightly different from css orange
    yellow: str = "#d8d800"  # darkened so it stays readable on white
    green: str = "#0e0"
    cyan: str = "#00d8d8"
    my_blue: str = "rgb(0, 128, 255)"  # css blue is too dark on black
    css_blue: str = "rgb(32, 64, 255)"
    violet: str = "rgb(128, 0, 255)"
    magenta: str = "rgb(255, 0, 255)"


RAINBOW = Rainbow()
