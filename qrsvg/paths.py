"""Path Generator: single-cell SVG path fragments with neighbor-aware corner rounding."""

import re
from dataclasses import dataclass

from qrsvg.config import DotStyle

_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


@dataclass(frozen=True)
class Neighbors:
    """Occupancy of the four edge-adjacent cells.

    A side is occupied only when the neighbour is dark and is neither part of
    a finder pattern nor inside the logo exclusion zone.
    """

    top: bool = False
    right: bool = False
    bottom: bool = False
    left: bool = False


ISOLATED = Neighbors()


def fmt(value: float) -> str:
    """Compact number formatting for path data (``10``, ``2.5``, ``0.3333``)."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def parse_length(value: str | None, default: float) -> float:
    """Leading number of an SVG length attribute (``"300px"`` -> 300.0)."""
    if not value:
        return default
    m = _LENGTH_RE.match(value)
    return float(m.group(1)) if m else default


def clamp_radius(radius: float, width: float, height: float) -> float:
    """Clamp a corner radius to half the smaller side so arcs never self-intersect."""
    return max(0.0, min(radius, min(width, height) / 2))


# ---------------------------------------------------------------------------
# Primitive shapes
# ---------------------------------------------------------------------------

def square_path(x: float, y: float, size: float) -> str:
    return f"M {fmt(x)} {fmt(y)} h {fmt(size)} v {fmt(size)} h {fmt(-size)} Z"


def circle_path(x: float, y: float, size: float) -> str:
    """Circle inscribed in the cell, drawn as two semicircular arcs."""
    return circle_at(x + size / 2, y + size / 2, size / 2)


def circle_at(cx: float, cy: float, r: float, sweep: int = 0) -> str:
    """Closed circle around (cx, cy); ``sweep=1`` reverses the winding for holes."""
    return (
        f"M {fmt(cx - r)} {fmt(cy)} "
        f"A {fmt(r)} {fmt(r)} 0 1 {sweep} {fmt(cx + r)} {fmt(cy)} "
        f"A {fmt(r)} {fmt(r)} 0 1 {sweep} {fmt(cx - r)} {fmt(cy)} Z"
    )


def rounded_rect_path(
    x: float, y: float, width: float, height: float,
    tl: float, tr: float, br: float, bl: float,
) -> str:
    """Rounded rectangle with independent corner radii, walked clockwise from top-left.

    Arcs are only emitted for corners with a non-zero radius.
    """
    tl, tr, br, bl = (clamp_radius(r, width, height) for r in (tl, tr, br, bl))

    path = [f"M {fmt(x + tl)} {fmt(y)}"]

    path.append(f"L {fmt(x + width - tr)} {fmt(y)}")
    if tr > 0:
        path.append(f"A {fmt(tr)} {fmt(tr)} 0 0 1 {fmt(x + width)} {fmt(y + tr)}")

    path.append(f"L {fmt(x + width)} {fmt(y + height - br)}")
    if br > 0:
        path.append(f"A {fmt(br)} {fmt(br)} 0 0 1 {fmt(x + width - br)} {fmt(y + height)}")

    path.append(f"L {fmt(x + bl)} {fmt(y + height)}")
    if bl > 0:
        path.append(f"A {fmt(bl)} {fmt(bl)} 0 0 1 {fmt(x)} {fmt(y + height - bl)}")

    path.append(f"L {fmt(x)} {fmt(y + tl)}")
    if tl > 0:
        path.append(f"A {fmt(tl)} {fmt(tl)} 0 0 1 {fmt(x + tl)} {fmt(y)}")

    path.append("Z")
    return " ".join(path)


def rounded_rect_path_reversed(
    x: float, y: float, width: float, height: float,
    tl: float, tr: float, br: float, bl: float,
) -> str:
    """Counter-clockwise rounded rectangle, used to cut holes out of a filled shape."""
    tl, tr, br, bl = (clamp_radius(r, width, height) for r in (tl, tr, br, bl))

    path = [f"M {fmt(x + tl)} {fmt(y)}"]

    if tl > 0:
        path.append(f"A {fmt(tl)} {fmt(tl)} 0 0 0 {fmt(x)} {fmt(y + tl)}")
    path.append(f"L {fmt(x)} {fmt(y + height - bl)}")

    if bl > 0:
        path.append(f"A {fmt(bl)} {fmt(bl)} 0 0 0 {fmt(x + bl)} {fmt(y + height)}")
    path.append(f"L {fmt(x + width - br)} {fmt(y + height)}")

    if br > 0:
        path.append(f"A {fmt(br)} {fmt(br)} 0 0 0 {fmt(x + width)} {fmt(y + height - br)}")
    path.append(f"L {fmt(x + width)} {fmt(y + tr)}")

    if tr > 0:
        path.append(f"A {fmt(tr)} {fmt(tr)} 0 0 0 {fmt(x + width - tr)} {fmt(y)}")
    path.append(f"L {fmt(x + tl)} {fmt(y)}")

    path.append("Z")
    return " ".join(path)


# ---------------------------------------------------------------------------
# Corner radius rules
# ---------------------------------------------------------------------------

def exposed_corner_radii(size: float, n: Neighbors) -> tuple[float, float, float, float]:
    """(tl, tr, br, bl) radii: half the cell wherever both sides of a corner are free.

    A corner touching a filled neighbour stays square, otherwise adjacent
    cells would visually disconnect.
    """
    r = size / 2
    return (
        r if not n.top and not n.left else 0.0,
        r if not n.top and not n.right else 0.0,
        r if not n.bottom and not n.right else 0.0,
        r if not n.bottom and not n.left else 0.0,
    )


def classy_corner_radii(size: float, n: Neighbors) -> tuple[float, float, float, float]:
    """Only the bottom-right corner rounds, and only when it is exposed."""
    br = size / 2 if not n.bottom and not n.right else 0.0
    return 0.0, 0.0, br, 0.0


def generate_cell_path(
    style: DotStyle | str,
    x: float,
    y: float,
    size: float,
    neighbors: Neighbors = ISOLATED,
) -> str:
    """Path fragment for one dark cell at (x, y) with side *size*.

    ``rounded``, ``extra-rounded`` and ``classy-rounded`` share the same
    geometry; unknown styles render as squares.
    """
    try:
        style = DotStyle(style)
    except ValueError:
        style = DotStyle.SQUARE

    if style is DotStyle.DOTS:
        return circle_path(x, y, size)
    if style in (DotStyle.ROUNDED, DotStyle.EXTRA_ROUNDED, DotStyle.CLASSY_ROUNDED):
        return rounded_rect_path(x, y, size, size, *exposed_corner_radii(size, neighbors))
    if style is DotStyle.CLASSY:
        return rounded_rect_path(x, y, size, size, *classy_corner_radii(size, neighbors))
    return square_path(x, y, size)
