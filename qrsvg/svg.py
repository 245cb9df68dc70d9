"""SVG Assembler: composes gradients, frame, modules, finders and logo into one document.

Layer order is fixed::

    <defs>  ->  background  ->  frame  ->  qr-code (dots + corners)  ->  logo

Clip paths must be defined before use, the background must sit under the
frame and code, and the logo goes last so it covers the code. Element ids
(``qr-dots``, ``corner-top-left``, ``logo`` ...) are stable so the output can
be edited by hand in vector tools.
"""

import asyncio
from pathlib import Path

from qrsvg.config import FINDER_SIZE, GRADIENT_ID, StyleOptions
from qrsvg.corners import corner_origins, generate_corner_pattern
from qrsvg.frame import layout_frame
from qrsvg.gradient import build_gradient_def, gradient_active, resolve_fill
from qrsvg.grid import CellGrid
from qrsvg.logging import audit, get_logger, trace
from qrsvg.logo import LogoEmbedded, LogoLoader, embed_logo, exclusion_for
from qrsvg.matrix import QRMatrix
from qrsvg.paths import fmt, generate_cell_path

log = get_logger("svg")

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
SVG_OPEN = (
    '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
    'viewBox="0 0 {w} {h}" width="{w}" height="{h}">'
)


def data_module_path(grid: CellGrid, style: StyleOptions) -> tuple[str, int]:
    """Concatenated path data for every data module, and the number of cells drawn."""
    fragments = [
        generate_cell_path(style.dots_type, x, y, grid.cell_size, neighbors)
        for _row, _col, x, y, neighbors in grid.data_cells()
    ]
    return " ".join(fragments), len(fragments)


def corner_groups(grid: CellGrid, style: StyleOptions, fill: str) -> list[str]:
    """Markup for the three finder patterns."""
    parts = []
    finder_side = FINDER_SIZE * grid.cell_size
    for corner in corner_origins(grid.module_count):
        x, y = grid.origin(corner.row, corner.col)
        pattern = generate_corner_pattern(
            style.corners_square_type, style.corners_dot_type, x, y, finder_side,
        )
        parts.append(f'    <g id="corner-{corner.id}">')
        parts.append(
            f'      <path id="corner-{corner.id}-outer" fill="{fill}" fill-rule="evenodd" '
            f'd="{pattern.outer}"/>'
        )
        parts.append(f'      <path id="corner-{corner.id}-inner" fill="{fill}" d="{pattern.inner}"/>')
        parts.append("    </g>")
    return parts


@trace
async def render_svg(
    matrix: QRMatrix,
    size: float,
    margin: float,
    style: StyleOptions,
    processed_logo_url: str | None = None,
    loader: LogoLoader | None = None,
    logo_timeout: float | None = None,
) -> str:
    """Render *matrix* as a standalone SVG document string.

    Args:
        matrix: Encoded QR grid (``module_count`` + ``is_dark``).
        size: Side of the QR drawing area, margin included.
        margin: Quiet zone around the modules, in output units.
        style: Immutable style options for this render.
        processed_logo_url: Logo with its shape mask already applied; wins
            over ``style.logo.url``.
        loader: Raster logo fetcher (``qrsvg.logo.default_loader`` if None).
        logo_timeout: Seconds to wait for the raster logo.

    The only awaited step is the raster logo. A logo that cannot be loaded
    is left out; the rest of the document is always produced.
    """
    layout = layout_frame(style.frame, size)
    ox, oy = layout.qr_offset_x, layout.qr_offset_y

    # Start the logo early; its markup is only needed at the end
    logo_task = asyncio.ensure_future(embed_logo(
        style.logo, size, ox, oy,
        processed_url=processed_logo_url, loader=loader, timeout=logo_timeout,
    ))

    grid = CellGrid(
        matrix=matrix,
        cell_size=(size - 2 * margin) / matrix.module_count,
        margin=margin,
        offset_x=ox,
        offset_y=oy,
        exclusion=exclusion_for(style.logo, size, ox, oy, processed_url=processed_logo_url),
    )
    fill = resolve_fill(style)
    dots_path, cell_count = data_module_path(grid, style)

    logo = await logo_task

    width, height = fmt(layout.width), fmt(layout.height)
    parts = [XML_DECLARATION, SVG_OPEN.format(w=width, h=height)]

    parts.append("  <defs>")
    if gradient_active(style):
        parts.append(build_gradient_def(style.gradient, GRADIENT_ID))
    if isinstance(logo, LogoEmbedded) and logo.clip_def:
        parts.append(logo.clip_def)
    parts.append("  </defs>")

    parts.append('  <g id="background">')
    if layout.has_frame:
        parts.append(
            f'    <rect fill="{style.background_color}" width="{width}" height="{height}" '
            f'rx="{layout.corner_radius}"/>'
        )
    else:
        parts.append(f'    <rect fill="{style.background_color}" width="{fmt(size)}" height="{fmt(size)}"/>')
    parts.append("  </g>")

    if layout.has_frame:
        parts.append('  <g id="frame">')
        parts.extend(layout.chrome)
        parts.append("  </g>")

    parts.append('  <g id="qr-code">')
    parts.append(f'    <path id="qr-dots" fill="{fill}" fill-rule="nonzero" d="{dots_path}"/>')
    parts.extend(corner_groups(grid, style, fill))
    parts.append("  </g>")

    if isinstance(logo, LogoEmbedded):
        parts.append(logo.markup)

    parts.append("</svg>")

    audit("svg.rendered", logger=log,
          modules=f"{matrix.module_count}x{matrix.module_count}",
          cells=cell_count, dots=getattr(style.dots_type, "value", style.dots_type),
          gradient=gradient_active(style), frame=layout.has_frame,
          logo="embedded" if isinstance(logo, LogoEmbedded) else logo.reason,
          size=f"{width}x{height}")
    return "\n".join(parts)


def render_svg_sync(
    matrix: QRMatrix,
    size: float,
    margin: float,
    style: StyleOptions,
    processed_logo_url: str | None = None,
    loader: LogoLoader | None = None,
    logo_timeout: float | None = None,
) -> str:
    """Blocking wrapper around ``render_svg`` for callers without an event loop."""
    return asyncio.run(render_svg(
        matrix, size, margin, style,
        processed_logo_url=processed_logo_url, loader=loader, logo_timeout=logo_timeout,
    ))


def write_svg(svg: str, path: str | Path) -> Path:
    """Write *svg* to *path* (``.svg`` suffix added when missing) as UTF-8."""
    path = Path(path)
    if path.suffix.lower() != ".svg":
        path = path.with_name(path.name + ".svg")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(svg, encoding="utf-8")
    audit("svg.written", logger=log, path=str(path), bytes=len(svg.encode("utf-8")))
    return path
