"""QR-SVG CLI: render styled QR codes to editable SVG."""

import argparse
import json
import sys
from pathlib import Path

from qrsvg.config import (
    CornerDotStyle,
    CornerSquareStyle,
    DotStyle,
    FrameIcon,
    FrameStyle,
    IconPosition,
    LogoShape,
    QRPattern,
    StyleOptions,
)
from qrsvg.errors import LogoLoadError, StyleConfigError
from qrsvg.logging import audit, get_logger, setup_logging

log = get_logger("cli")

# CLI flag -> style key; None values are left to the style file / defaults
_STYLE_FLAGS = {
    "color": "dots_color",
    "background": "background_color",
    "dots": "dots_type",
    "corner_square": "corners_square_type",
    "corner_dot": "corners_dot_type",
    "ecc": "error_correction_level",
    "logo": "logo_url",
    "logo_shape": "logo_shape",
    "logo_size": "logo_size",
    "logo_margin": "logo_margin",
    "frame": "frame_style",
    "label": "frame_label",
    "frame_color": "frame_color",
    "icon": "frame_icon",
    "icon_position": "frame_icon_position",
    "roundness": "qr_roundness",
}


def _choices(enum_cls) -> list[str]:
    return [m.value for m in enum_cls]


def build_style(args) -> StyleOptions:
    """Merge ``--style`` JSON with per-flag overrides.

    A roundness value (``qrRoundness`` or ``--roundness``) replaces the
    dot and corner styles with the matching discrete ones.
    """
    from qrsvg.roundness import resolve_style_roundness

    raw: dict = {}
    if args.style:
        try:
            raw = json.loads(Path(args.style).read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StyleConfigError(f"{args.style}: invalid JSON ({exc})") from exc
    for flag, key in _STYLE_FLAGS.items():
        value = getattr(args, flag, None)
        if value is not None:
            raw[key] = value
    if getattr(args, "logo_svg", None):
        raw["logo_svg_content"] = Path(args.logo_svg).read_text(encoding="utf-8")
    style = StyleOptions.from_dict(raw)
    return resolve_style_roundness(style, getattr(args, "pattern", None) or QRPattern.DOTS)


def _masked_logo(style: StyleOptions) -> str | None:
    """Shape-masked PNG data URL of the raster logo, or None if it cannot be read."""
    import io

    from PIL import Image, UnidentifiedImageError

    from qrsvg.logo import default_loader, logo_mask_data_url

    try:
        raw = default_loader(style.logo.url)
        with Image.open(io.BytesIO(raw)) as img:
            return logo_mask_data_url(img, style.logo.shape)
    except (LogoLoadError, UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        log.warning("logo mask skipped: %s", exc)
        return None


def cmd_render(args):
    """Encode data and write a styled SVG."""
    from qrsvg.matrix import encode_matrix
    from qrsvg.svg import render_svg_sync, write_svg

    style = build_style(args)
    matrix = encode_matrix(args.data, ecc=style.error_correction_level, version=args.version)

    processed = None
    if args.mask_logo and style.logo.url:
        processed = _masked_logo(style)

    svg = render_svg_sync(matrix, args.size, args.margin, style,
                          processed_logo_url=processed, logo_timeout=args.logo_timeout)
    path = write_svg(svg, args.output)
    print(f"Rendered: {path} ({matrix.module_count}x{matrix.module_count} modules, {len(svg)} bytes)")


def cmd_roundness(args):
    """Apply continuous roundness to the rects of an existing SVG."""
    from qrsvg.roundness import apply_roundness_to_markup

    src = Path(args.input)
    out = Path(args.output) if args.output else src
    out.write_text(apply_roundness_to_markup(src.read_text(encoding="utf-8"), args.roundness),
                   encoding="utf-8")
    print(f"Roundness {args.roundness:g}% applied: {out}")


def cmd_analyze(args):
    """Print a scannability report for a style."""
    from qrsvg.scannability import analyze_scannability

    style = build_style(args)
    data_length = len(args.data) if args.data else None
    result = analyze_scannability(style, data_length=data_length)
    print(result.summary())
    sys.exit(0 if result.score in ("excellent", "good") else 1)


def _add_style_flags(p: argparse.ArgumentParser):
    p.add_argument("--style", default=None, help="JSON style file (snake_case or camelCase keys)")
    p.add_argument("--color", default=None, help="Module colour (e.g. '#000000')")
    p.add_argument("--background", default=None, help="Background colour")
    p.add_argument("-e", "--ecc", default=None, choices=["L", "M", "Q", "H"], help="Error correction level")
    p.add_argument("--logo", default=None, help="Raster logo path, file: or http(s) URL")
    p.add_argument("--logo-size", type=float, default=None, help="Logo size as a fraction of the code")
    p.add_argument("--roundness", type=float, default=None,
                   help="Roundness 0-100 (%%); picks dot and corner styles")
    p.add_argument("--pattern", default=None, choices=_choices(QRPattern),
                   help="Module pattern used with --roundness")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="qrsvg", description="QR-SVG: styled, editable QR code SVGs")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- render ---
    p_render = subparsers.add_parser("render", help="Render a QR code to SVG")
    p_render.add_argument("data", help="URL or data to encode")
    p_render.add_argument("-o", "--output", default="output/qr.svg", help="Output SVG path")
    p_render.add_argument("-v", "--version", type=int, default=None, help="QR version 1-40 (auto if omitted)")
    p_render.add_argument("--size", type=float, default=300, help="QR drawing area size")
    p_render.add_argument("--margin", type=float, default=16, help="Quiet zone in output units")
    _add_style_flags(p_render)
    p_render.add_argument("--dots", default=None, choices=_choices(DotStyle), help="Data module style")
    p_render.add_argument("--corner-square", default=None, choices=_choices(CornerSquareStyle))
    p_render.add_argument("--corner-dot", default=None, choices=_choices(CornerDotStyle))
    p_render.add_argument("--logo-svg", default=None, help="SVG logo file, embedded as vectors")
    p_render.add_argument("--logo-shape", default=None, choices=_choices(LogoShape))
    p_render.add_argument("--logo-margin", type=float, default=None, help="Clear space around the logo")
    p_render.add_argument("--mask-logo", action="store_true",
                          help="Cut the raster logo to its shape before embedding")
    p_render.add_argument("--logo-timeout", type=float, default=None, help="Raster logo load timeout (s)")
    p_render.add_argument("--frame", default=None, choices=_choices(FrameStyle), help="Frame style")
    p_render.add_argument("--label", default=None, help="Frame label text")
    p_render.add_argument("--frame-color", default=None, help="Frame colour")
    p_render.add_argument("--icon", default=None, choices=_choices(FrameIcon), help="Label icon")
    p_render.add_argument("--icon-position", default=None, choices=_choices(IconPosition))

    # --- roundness ---
    p_round = subparsers.add_parser("roundness", help="Round module rects of an existing SVG")
    p_round.add_argument("input", help="SVG file to post-process")
    p_round.add_argument("-r", "--roundness", type=float, default=50, help="Roundness 0-100 (%%)")
    p_round.add_argument("-o", "--output", default=None, help="Output path (default: in place)")

    # --- analyze ---
    p_an = subparsers.add_parser("analyze", help="Scannability report for a style")
    p_an.add_argument("data", nargs="?", default=None, help="Data to be encoded (for density checks)")
    _add_style_flags(p_an)

    args = parser.parse_args(argv)

    # Setup logging before any command runs
    level = "DEBUG" if args.verbose else "INFO"
    setup_logging(level=level, log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "render": cmd_render,
        "roundness": cmd_roundness,
        "analyze": cmd_analyze,
    }
    try:
        commands[args.command](args)
    except StyleConfigError as exc:
        parser.error(str(exc))
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
