"""Frame/Label Layout Engine: canvas growth, QR offset, and frame chrome markup."""

from dataclasses import dataclass, field
from types import MappingProxyType

from qrsvg.config import (
    FRAME_PADDING,
    FRAME_STROKE_WIDTH,
    LABEL_HEIGHT,
    FontFamily,
    FontSize,
    FrameConfig,
    FrameIcon,
    FrameStyle,
    IconPosition,
)
from qrsvg.logging import audit, get_logger
from qrsvg.paths import fmt

log = get_logger("frame")

# Simplified lucide icons, 24-unit viewBox
FRAME_ICON_PATHS = MappingProxyType({
    FrameIcon.NONE: "",
    FrameIcon.QR_CODE: "M3 3h6v6H3zm2 2v2h2V5zm7-2h6v6h-6zm2 2v2h2V5zM3 12h6v6H3zm2 2v2h2v-2zm13-2h1v3h-3v-1h2zm-3 3h1v3h-1zm2 0h3v1h-3zm0 2h3v1h-2v1h-1z",
    FrameIcon.SMARTPHONE: "M12 18h.01M7 2h10a2 2 0 012 2v16a2 2 0 01-2 2H7a2 2 0 01-2-2V4a2 2 0 012-2z",
    FrameIcon.CAMERA: "M23 19a2 2 0 01-2 2H3a2 2 0 01-2-2V8a2 2 0 012-2h4l2-3h6l2 3h4a2 2 0 012 2zM12 17a4 4 0 100-8 4 4 0 000 8z",
    FrameIcon.ARROW_RIGHT: "M5 12h14m-7-7l7 7-7 7",
    FrameIcon.DOWNLOAD: "M21 15v4a2 2 0 01-2 2H5a2 2 0 01-2-2v-4m4-5l5 5 5-5m-5 5V3",
    FrameIcon.EXTERNAL_LINK: "M18 13v6a2 2 0 01-2 2H5a2 2 0 01-2-2V8a2 2 0 012-2h6m4-3h6v6m-11 5L21 3",
    FrameIcon.SCAN: "M3 7V5a2 2 0 012-2h2m10 0h2a2 2 0 012 2v2m0 10v2a2 2 0 01-2 2h-2m-10 0H5a2 2 0 01-2-2v-2",
    FrameIcon.FINGER_PRINT: "M2 12C2 6.5 6.5 2 12 2a10 10 0 018 4m-4 8a4 4 0 00-8 0m-1.3-2a6 6 0 0111.6 0M12 12v4",
})
ICON_VIEWBOX = 24

FONT_SIZES = MappingProxyType({
    FontSize.SM: 12,
    FontSize.BASE: 14,
    FontSize.LG: 16,
    FontSize.XL: 18,
})

FONT_FAMILIES = MappingProxyType({
    FontFamily.SANS: 'system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif',
    FontFamily.SERIF: 'Georgia, "Times New Roman", serif',
    FontFamily.MONO: '"SF Mono", Monaco, "Cascadia Code", monospace',
    FontFamily.ROUNDED: '"SF Pro Rounded", system-ui, sans-serif',
})

FRAME_RADII = MappingProxyType({
    FrameStyle.ROUNDED: 40,
    FrameStyle.SIMPLE: 0,
})
DEFAULT_FRAME_RADIUS = 16

# Label styles the vector export can lay out
LABEL_STYLES = frozenset({FrameStyle.TOP_LABEL, FrameStyle.BADGE, FrameStyle.BOTTOM_LABEL})

# Rough glyph advance as a fraction of the font size
CHAR_WIDTH = 0.6

_XML_ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&apos;"}


def escape_xml(text: str) -> str:
    return "".join(_XML_ESCAPES.get(ch, ch) for ch in text)


@dataclass(frozen=True)
class FrameLayout:
    extra_width: float = 0.0
    extra_height: float = 0.0
    qr_offset_x: float = 0.0
    qr_offset_y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    corner_radius: float = 0.0
    chrome: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_frame(self) -> bool:
        return bool(self.chrome)


def frame_radius(style: FrameStyle) -> int:
    return FRAME_RADII.get(style, DEFAULT_FRAME_RADIUS)


def _font_attrs(frame: FrameConfig) -> tuple[int, str]:
    return FONT_SIZES[FontSize(frame.font_size)], FONT_FAMILIES[FontFamily(frame.font_family)]


def _top_label(frame: FrameConfig, width: float) -> list[str]:
    font_size, family = _font_attrs(frame)
    pill_width = len(frame.label) * font_size * CHAR_WIDTH + 24
    cx = width / 2
    cy = FRAME_PADDING / 2
    return [
        f'    <rect x="{fmt(cx - pill_width / 2)}" y="{fmt(cy - 12)}" width="{fmt(pill_width)}" '
        f'height="24" rx="12" fill="{frame.color}"/>',
        f'    <text x="{fmt(cx)}" y="{fmt(cy + 5)}" text-anchor="middle" fill="white" '
        f'font-family="{escape_xml(family)}" font-size="{font_size}" font-weight="600">'
        f"{escape_xml(frame.label)}</text>",
    ]


def _badge_label(frame: FrameConfig, width: float) -> list[str]:
    font_size, family = _font_attrs(frame)
    return [
        f'    <text x="{fmt(width / 2)}" y="{fmt(FRAME_PADDING + font_size)}" text-anchor="middle" '
        f'fill="{frame.color}" font-family="{escape_xml(family)}" font-size="{font_size}" '
        f'font-weight="700" letter-spacing="0.1em" text-transform="uppercase">'
        f"{escape_xml(frame.label.upper())}</text>",
    ]


def icon_offset(position: IconPosition, label: str, font_size: float) -> float:
    """Horizontal icon offset from the label centre, proportional to label length."""
    half_text = len(label) * font_size * 0.3
    if IconPosition(position) is IconPosition.LEFT:
        return -(half_text + font_size)
    return half_text + 4


def _bottom_label(frame: FrameConfig, width: float, height: float) -> list[str]:
    font_size, family = _font_attrs(frame)
    cx = width / 2
    baseline = height - FRAME_PADDING + font_size / 2
    parts = []

    icon_path = FRAME_ICON_PATHS.get(FrameIcon(frame.icon), "")
    position = IconPosition(frame.icon_position)
    if icon_path and position is not IconPosition.NONE:
        icon_size = font_size
        dx = icon_offset(position, frame.label, font_size)
        parts.append(
            f'    <g transform="translate({fmt(cx + dx - icon_size / 2)}, {fmt(baseline - icon_size / 2)})">'
        )
        parts.append(
            f'      <path d="{icon_path}" fill="none" stroke="{frame.color}" stroke-width="1.5" '
            f'stroke-linecap="round" stroke-linejoin="round" '
            f'transform="scale({fmt(icon_size / ICON_VIEWBOX)})"/>'
        )
        parts.append("    </g>")

    parts.append(
        f'    <text x="{fmt(cx)}" y="{fmt(baseline)}" text-anchor="middle" fill="{frame.color}" '
        f'font-family="{escape_xml(family)}" font-size="{font_size}" font-weight="600">'
        f"{escape_xml(frame.label)}</text>"
    )
    return parts


def layout_frame(frame: FrameConfig, canvas_size: float) -> FrameLayout:
    """Grow the canvas for *frame* and emit its chrome elements.

    Returns a zero-offset layout of size *canvas_size* when there is no frame.
    Labels are only drawn for ``top-label``, ``badge`` and ``bottom-label``;
    other styles get the border alone.
    """
    style = FrameStyle(frame.style)
    if style is FrameStyle.NONE:
        return FrameLayout(width=canvas_size, height=canvas_size)

    has_label = frame.has_label
    top_band = LABEL_HEIGHT if has_label and style in (FrameStyle.TOP_LABEL, FrameStyle.BADGE) else 0
    bottom_band = LABEL_HEIGHT if has_label and style is FrameStyle.BOTTOM_LABEL else 0

    extra_width = FRAME_PADDING * 2
    extra_height = FRAME_PADDING * 2 + top_band + bottom_band
    width = canvas_size + extra_width
    height = canvas_size + extra_height
    radius = frame_radius(style)

    chrome = [
        f'    <rect x="0" y="0" width="{fmt(width)}" height="{fmt(height)}" rx="{radius}" '
        f'fill="none" stroke="{frame.color}" stroke-width="{FRAME_STROKE_WIDTH}"/>'
    ]
    if has_label and style in LABEL_STYLES:
        if style is FrameStyle.TOP_LABEL:
            chrome.extend(_top_label(frame, width))
        elif style is FrameStyle.BADGE:
            chrome.extend(_badge_label(frame, width))
        else:
            chrome.extend(_bottom_label(frame, width, height))

    layout = FrameLayout(
        extra_width=extra_width,
        extra_height=extra_height,
        qr_offset_x=FRAME_PADDING,
        qr_offset_y=FRAME_PADDING + top_band,
        width=width,
        height=height,
        corner_radius=radius,
        chrome=tuple(chrome),
    )
    audit("frame.laid_out", logger=log, style=style.value, label=has_label,
          size=f"{fmt(width)}x{fmt(height)}")
    return layout
