"""CLI for pathmorph - inspect paths and render stills.

Usage:
    python -m pathmorph.cli inspect "M 0 0 L 10 0 L 10 10"
    python -m pathmorph.cli frame "M 0 0 L 10 0" "M 0 0 L 5 5 L 10 0" -p 0.5 -o frame.png
    python -m pathmorph.cli bands "M 0 0 L 90 0" --out bands.png --color-count 3
"""

import logging
from enum import Enum
from pathlib import Path as FilePath

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from pathmorph.config import ReorientPolicy, settings
from pathmorph.corners import fix_corners
from pathmorph.errors import PathMorphError
from pathmorph.interpolation import morph
from pathmorph.logging_config import setup_dev_logging
from pathmorph.rendering import (
    PillowSurface,
    RenderOptions,
    StrokeColorsOptions,
    fit_transform,
    stroke_colors,
)
from pathmorph.types import Path

app = typer.Typer(
    name="pathmorph",
    help="Inspect, morph and render vector paths",
    add_completion=False,
)
console = Console()


class LineCap(str, Enum):
    """How band strokes end at the ends of each piece."""

    BUTT = "butt"
    ROUND = "round"
    SQUARE = "square"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug messages"),
) -> None:
    """Inspect, morph and render vector paths."""
    setup_dev_logging(logging.DEBUG if verbose else logging.WARNING)


def _parse(d: str, label: str = "path") -> Path:
    path = Path.from_svg_d(d)
    if path.is_empty():
        console.print(f"[red]No drawable commands in {label} data: {d!r}[/red]")
        raise typer.Exit(1)
    return path


def _write_png(surface: PillowSurface, out: FilePath) -> None:
    out.write_bytes(surface.to_png())
    console.print(f"[green]Wrote {out}[/green] ({surface.options.width}x{surface.options.height})")


@app.command("inspect")
def inspect(
    d: str = typer.Argument(..., help="SVG path data"),
    corners: bool = typer.Option(True, help="Tag corners before listing"),
) -> None:
    """Show the pieces of a path with their lengths and corners.

    Examples:
        pathmorph inspect "M 0 0 L 10 0 L 10 10"
        pathmorph inspect "M 0 0 Q 5 5 10 0" --no-corners
    """
    path = _parse(d)
    if corners:
        path = fix_corners(path)

    table = Table(title="Pieces", box=box.ROUNDED)
    table.add_column("#", style="dim")
    table.add_column("Start", style="cyan")
    table.add_column("End", style="cyan")
    table.add_column("Commands", justify="right")
    table.add_column("Corners", justify="right", style="yellow")
    table.add_column("Length", justify="right", style="green")

    for index, piece in enumerate(path.split_on_move()):
        start, end = piece.start, piece.end
        table.add_row(
            str(index),
            f"({start.x:g}, {start.y:g})" if start else "-",
            f"({end.x:g}, {end.y:g})" if end else "-",
            str(len(piece)),
            str(len(piece.vertex_indices())),
            f"{piece.length():.3f}",
        )

    console.print(table)
    console.print(f"\nTotal: {len(path)} command(s), length {path.length():.3f}")


@app.command("frame")
def frame(
    from_d: str = typer.Argument(..., help="SVG path data at progress 0"),
    to_d: str = typer.Argument(..., help="SVG path data at progress 1"),
    progress: float = typer.Option(0.5, "--progress", "-p", min=0.0, max=1.0),
    out: FilePath = typer.Option(..., "--out", "-o", help="PNG file to write"),
    width: int | None = typer.Option(None, help="Image width in pixels"),
    height: int | None = typer.Option(None, help="Image height in pixels"),
    color: str = typer.Option("#FFFFFF", help="Stroke color"),
    stroke_width: float | None = typer.Option(None, "--stroke-width", help="Stroke width"),
    reorient: ReorientPolicy | None = typer.Option(None, help="Piece orientation policy"),
) -> None:
    """Render a single frame of a morph between two paths.

    Examples:
        pathmorph frame "M 0 0 L 10 0" "M 0 0 L 5 5 L 10 0" -p 0.25 -o frame.png
    """
    from_path = _parse(from_d, "from")
    to_path = _parse(to_d, "to")

    try:
        interpolator = morph(from_path, to_path, reorient=reorient)
        current = interpolator(progress)
    except PathMorphError as e:
        console.print(f"[red]Failed to morph paths: {e}[/red]")
        raise typer.Exit(1) from e

    defaults = RenderOptions()
    size = (width or defaults.width, height or defaults.height)
    surface = PillowSurface(
        RenderOptions(
            width=size[0],
            height=size[1],
            transform=fit_transform([from_path, to_path], *size, padding=20),
        )
    )
    if not current.is_empty():
        surface.stroke(
            current, color, settings.stroke_width if stroke_width is None else stroke_width
        )
    _write_png(surface, out)


@app.command("bands")
def bands(
    d: str = typer.Argument(..., help="SVG path data"),
    out: FilePath = typer.Option(..., "--out", "-o", help="PNG file to write"),
    section_length: float | None = typer.Option(None, help="Path length of each band"),
    repeat_count: float | None = typer.Option(None, help="Times to cycle through the colors"),
    color_count: float | None = typer.Option(None, help="Number of bands"),
    offset: float | None = typer.Option(None, help="Shift the bands along the path"),
    line_cap: LineCap = typer.Option(LineCap.BUTT, "--line-cap", help="Piece end style"),
    stroke_width: float | None = typer.Option(None, "--stroke-width", help="Stroke width"),
) -> None:
    """Render a path stroked in bands of rainbow colors.

    Examples:
        pathmorph bands "M 0 0 L 90 0" -o bands.png --color-count 3
        pathmorph bands "M 0 0 Q 50 80 100 0" -o bands.png --repeat-count 2 --line-cap round
    """
    path = _parse(d)

    try:
        band_options = StrokeColorsOptions(
            section_length=section_length,
            repeat_count=repeat_count,
            color_count=color_count,
            offset=offset,
            width=stroke_width,
            line_cap=line_cap.value,
        )
        defaults = RenderOptions()
        surface = PillowSurface(
            RenderOptions(
                transform=fit_transform([path], defaults.width, defaults.height, padding=20)
            )
        )
        stroke_colors(surface, path, band_options)
    except (PathMorphError, ValueError) as e:
        console.print(f"[red]Failed to draw bands: {e}[/red]")
        raise typer.Exit(1) from e

    _write_png(surface, out)


if __name__ == "__main__":
    app()
