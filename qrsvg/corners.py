"""Corner Pattern Renderer: the three 7x7 finder patterns (outer ring + inner dot)."""

from dataclasses import dataclass
from typing import NamedTuple

from qrsvg.config import FINDER_SIZE, CornerDotStyle, CornerSquareStyle
from qrsvg.paths import (
    circle_at,
    circle_path,
    fmt,
    rounded_rect_path,
    rounded_rect_path_reversed,
    square_path,
)

# Outer corner radius of the "extra-rounded" ring, in modules. 1.5 reads as a
# rounded square; 3.5 (half the side) would collapse into the "dot" style.
EXTRA_ROUNDED_RING_RADIUS = 1.5


class CornerOrigin(NamedTuple):
    """Grid position (column, row) of a finder pattern's top-left module."""
    col: int
    row: int
    id: str


@dataclass(frozen=True)
class CornerPattern:
    outer: str
    inner: str


def corner_origins(module_count: int) -> tuple[CornerOrigin, ...]:
    """Top-left, top-right and bottom-left finder origins; bottom-right never has one."""
    far = module_count - FINDER_SIZE
    return (
        CornerOrigin(0, 0, "top-left"),
        CornerOrigin(far, 0, "top-right"),
        CornerOrigin(0, far, "bottom-left"),
    )


def _square_ring(x: float, y: float, size: float, module: float) -> str:
    hole = size - 2 * module
    return (
        f"{square_path(x, y, size)} "
        f"M {fmt(x + module)} {fmt(y + module)} v {fmt(hole)} h {fmt(hole)} v {fmt(-hole)} Z"
    )


def _circle_ring(x: float, y: float, size: float, module: float) -> str:
    cx, cy = x + size / 2, y + size / 2
    return f"{circle_at(cx, cy, size / 2)} {circle_at(cx, cy, size / 2 - module, sweep=1)}"


def _rounded_ring(x: float, y: float, size: float, module: float) -> str:
    r = module * EXTRA_ROUNDED_RING_RADIUS
    inner_r = r - module
    hole = size - 2 * module
    return (
        rounded_rect_path(x, y, size, size, r, r, r, r) + " "
        + rounded_rect_path_reversed(x + module, y + module, hole, hole,
                                     inner_r, inner_r, inner_r, inner_r)
    )


def corner_dot_path(x: float, y: float, size: float, style: CornerDotStyle | str) -> str:
    """The 3x3 centre of a finder pattern."""
    try:
        style = CornerDotStyle(style)
    except ValueError:
        style = CornerDotStyle.SQUARE
    if style is CornerDotStyle.DOT:
        return circle_path(x, y, size)
    if style is CornerDotStyle.EXTRA_ROUNDED:
        r = size / 2
        return rounded_rect_path(x, y, size, size, r, r, r, r)
    return square_path(x, y, size)


def generate_corner_pattern(
    square_style: CornerSquareStyle | str,
    dot_style: CornerDotStyle | str,
    x: float,
    y: float,
    size: float,
) -> CornerPattern:
    """Outer ring and inner dot for one finder pattern of side *size* at (x, y).

    The outer path carries its own hole and must be filled with
    ``fill-rule="evenodd"``.
    """
    module = size / FINDER_SIZE
    try:
        square_style = CornerSquareStyle(square_style)
    except ValueError:
        square_style = CornerSquareStyle.SQUARE

    if square_style is CornerSquareStyle.DOT:
        outer = _circle_ring(x, y, size, module)
    elif square_style is CornerSquareStyle.EXTRA_ROUNDED:
        outer = _rounded_ring(x, y, size, module)
    else:
        outer = _square_ring(x, y, size, module)

    inner = corner_dot_path(x + 2 * module, y + 2 * module, 3 * module, dot_style)
    return CornerPattern(outer=outer, inner=inner)
