"""Roundness Post-Processor: continuous corner radii on an already rendered rect-based SVG.

Used for live previews where modules come out as plain ``<rect>`` elements.
It has no neighbour context, so it is a coarser pass than the export Path
Generator; the two only share the "radius clamped to half the smaller side"
rule. Also maps a 0-100 roundness value to the discrete export styles.
"""

import xml.etree.ElementTree as ET
from dataclasses import replace

from qrsvg.config import CornerDotStyle, CornerSquareStyle, DotStyle, QRPattern, StyleOptions
from qrsvg.logging import audit, get_logger, trace
from qrsvg.logo import SVG_NS
from qrsvg.paths import clamp_radius, parse_length

log = get_logger("roundness")

# Serialise SVG elements without an ns0: prefix
ET.register_namespace("", SVG_NS)

# A rect at (0, 0) covering this share of the root is the background
BACKGROUND_COVERAGE = 0.99

# Discrete break points (roundness %)
DOT_SQUARE_BELOW = 20
DOT_ROUNDED_BELOW = 40
DOT_EXTRA_ROUNDED_BELOW = 60
CORNER_SQUARE_BELOW = 25
CORNER_EXTRA_ROUNDED_BELOW = 70
CORNER_DOT_SQUARE_BELOW = 40


def clamp_roundness(roundness: float) -> float:
    return max(0.0, min(100.0, float(roundness)))


def _local(tag) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _find_svg(document) -> ET.Element | None:
    root = document.getroot() if isinstance(document, ET.ElementTree) else document
    if root is None:
        return None
    if _local(root.tag) == "svg":
        return root
    for el in root.iter():
        if _local(el.tag) == "svg":
            return el
    return None


@trace
def apply_roundness(document: ET.Element | ET.ElementTree | None, roundness: float) -> int:
    """Set ``rx``/``ry`` on every module rect of *document*, in place.

    ``radius = roundness/100 * min(width, height)/2`` with roundness clamped
    to [0, 100]. The background rect and zero-size rects are left alone.
    Returns the number of rects updated. The tree is mutated; callers must
    not run this concurrently on the same document.
    """
    svg = _find_svg(document) if document is not None else None
    if svg is None:
        return 0

    pct = clamp_roundness(roundness)
    svg_width = parse_length(svg.get("width"), 0.0)
    svg_height = parse_length(svg.get("height"), 0.0)

    updated = 0
    for rect in svg.iter():
        if _local(rect.tag) != "rect":
            continue
        width = parse_length(rect.get("width"), 0.0)
        height = parse_length(rect.get("height"), 0.0)
        if width <= 0 or height <= 0:
            continue

        x = parse_length(rect.get("x"), 0.0)
        y = parse_length(rect.get("y"), 0.0)
        is_background = (
            x == 0 and y == 0
            and width >= svg_width * BACKGROUND_COVERAGE
            and height >= svg_height * BACKGROUND_COVERAGE
        )
        if is_background:
            continue

        radius = clamp_radius(pct / 100 * (min(width, height) / 2), width, height)
        rect.set("rx", f"{radius:.2f}")
        rect.set("ry", f"{radius:.2f}")
        updated += 1

    audit("roundness.applied", logger=log, roundness=pct, rects=updated)
    return updated


def apply_roundness_to_markup(svg_markup: str, roundness: float) -> str:
    """Parse, post-process, and re-serialise an SVG string."""
    root = ET.fromstring(svg_markup)
    apply_roundness(root, roundness)
    return ET.tostring(root, encoding="unicode")


# ---------------------------------------------------------------------------
# Discrete style mapping
# ---------------------------------------------------------------------------

def dot_style_for_pattern(pattern: QRPattern | str, roundness: float) -> DotStyle:
    """Dot style for a preview pattern.

    ``solid`` always renders squares (rounded afterwards by ``apply_roundness``);
    ``dots`` steps through the discrete styles as roundness grows.
    """
    if QRPattern(pattern) is QRPattern.SOLID:
        return DotStyle.SQUARE
    if roundness < DOT_SQUARE_BELOW:
        return DotStyle.SQUARE
    if roundness < DOT_ROUNDED_BELOW:
        return DotStyle.ROUNDED
    if roundness < DOT_EXTRA_ROUNDED_BELOW:
        return DotStyle.EXTRA_ROUNDED
    return DotStyle.DOTS


def should_post_process(pattern: QRPattern | str) -> bool:
    return QRPattern(pattern) is QRPattern.SOLID


def corner_square_style_for_roundness(roundness: float) -> CornerSquareStyle:
    if roundness < CORNER_SQUARE_BELOW:
        return CornerSquareStyle.SQUARE
    if roundness < CORNER_EXTRA_ROUNDED_BELOW:
        return CornerSquareStyle.EXTRA_ROUNDED
    return CornerSquareStyle.DOT


def corner_dot_style_for_roundness(roundness: float) -> CornerDotStyle:
    if roundness < CORNER_DOT_SQUARE_BELOW:
        return CornerDotStyle.SQUARE
    return CornerDotStyle.DOT


def resolve_style_roundness(style: StyleOptions, pattern: QRPattern | str = QRPattern.DOTS) -> StyleOptions:
    """Replace the discrete dot and corner styles with those for ``style.qr_roundness``.

    Styles without a roundness value come back unchanged.
    """
    if style.qr_roundness is None:
        return style
    roundness = clamp_roundness(style.qr_roundness)
    return replace(
        style,
        dots_type=dot_style_for_pattern(pattern, roundness),
        corners_square_type=corner_square_style_for_roundness(roundness),
        corners_dot_type=corner_dot_style_for_roundness(roundness),
    )
