"""Style configuration: enums, immutable option records and render constants.

Options are plain frozen dataclasses built fresh for every render call.
``StyleOptions.from_dict`` accepts both snake_case keys and the camelCase
keys used by the web editor's saved style blobs (``dotsType``,
``cornersSquareType``, ``logoSize``, ...).
"""

import json
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from qrsvg.errors import StyleConfigError
from qrsvg.logging import get_logger

log = get_logger("config")

# ---------------------------------------------------------------------------
# Render constants
# ---------------------------------------------------------------------------

FRAME_PADDING = 16
LABEL_HEIGHT = 32
FRAME_STROKE_WIDTH = 4
MAX_LABEL_LENGTH = 30

LOGO_SCALE = 0.8           # logo side = logo_size * canvas * LOGO_SCALE
LOGO_CLIP_ROUNDING = 0.15  # rx of the "rounded" clip, fraction of the side
LOGO_MASK_ROUNDING = 0.20  # corner radius of the raster shape mask
DEFAULT_LOGO_SIZE = 0.3
DEFAULT_LOGO_MARGIN = 5
DEFAULT_LOGO_TIMEOUT = 5.0

FINDER_SIZE = 7            # finder pattern side, in modules
FINDER_REGION = 8          # finder + one-module separator

GRADIENT_ID = "qr-gradient"
LOGO_CLIP_ID = "logo-clip"

_COLOR_RE = re.compile(r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]+|(rgb|rgba|hsl|hsla)\([0-9.,%\s]+\))$")


def logo_timeout() -> float:
    """Raster logo load timeout in seconds (``QRSVG_LOGO_TIMEOUT`` overrides).

    An unparsable override is logged and the default is used.
    """
    raw = os.environ.get("QRSVG_LOGO_TIMEOUT")
    if not raw:
        return DEFAULT_LOGO_TIMEOUT
    try:
        return max(0.0, float(raw))
    except ValueError:
        log.warning("QRSVG_LOGO_TIMEOUT=%r is not a number, using %gs", raw, DEFAULT_LOGO_TIMEOUT)
        return DEFAULT_LOGO_TIMEOUT


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class DotStyle(str, Enum):
    SQUARE = "square"
    DOTS = "dots"
    ROUNDED = "rounded"
    EXTRA_ROUNDED = "extra-rounded"
    CLASSY = "classy"
    CLASSY_ROUNDED = "classy-rounded"


class CornerSquareStyle(str, Enum):
    SQUARE = "square"
    EXTRA_ROUNDED = "extra-rounded"
    DOT = "dot"


class CornerDotStyle(str, Enum):
    SQUARE = "square"
    DOT = "dot"
    EXTRA_ROUNDED = "extra-rounded"


class GradientKind(str, Enum):
    LINEAR = "linear"
    RADIAL = "radial"


class LogoShape(str, Enum):
    SQUARE = "square"
    ROUNDED = "rounded"
    CIRCLE = "circle"


class FrameStyle(str, Enum):
    NONE = "none"
    SIMPLE = "simple"
    ROUNDED = "rounded"
    TOP_LABEL = "top-label"
    BOTTOM_LABEL = "bottom-label"
    BADGE = "badge"


class FontSize(str, Enum):
    SM = "sm"
    BASE = "base"
    LG = "lg"
    XL = "xl"


class FontFamily(str, Enum):
    SANS = "sans"
    SERIF = "serif"
    MONO = "mono"
    ROUNDED = "rounded"


class FrameIcon(str, Enum):
    NONE = "none"
    QR_CODE = "qr-code"
    SMARTPHONE = "smartphone"
    CAMERA = "camera"
    ARROW_RIGHT = "arrow-right"
    DOWNLOAD = "download"
    EXTERNAL_LINK = "external-link"
    SCAN = "scan"
    FINGER_PRINT = "finger-print"


class IconPosition(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    NONE = "none"


class QRPattern(str, Enum):
    """Live-preview module pattern: connected solid blocks or separate dots."""
    SOLID = "solid"
    DOTS = "dots"


ECC_LEVELS = ("L", "M", "Q", "H")


# ---------------------------------------------------------------------------
# Option records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColorStop:
    offset: float
    color: str


@dataclass(frozen=True)
class GradientSpec:
    """Abstract gradient: kind, rotation (linear only) and ordered stops."""

    kind: GradientKind = GradientKind.LINEAR
    color_stops: tuple[ColorStop, ...] = ()
    rotation: float = 0.0


@dataclass(frozen=True)
class LogoOptions:
    url: str | None = None
    svg_content: str | None = None
    size: float = DEFAULT_LOGO_SIZE
    shape: LogoShape = LogoShape.SQUARE
    margin: float = DEFAULT_LOGO_MARGIN

    @property
    def present(self) -> bool:
        return bool(self.url or self.svg_content)


@dataclass(frozen=True)
class FrameConfig:
    style: FrameStyle = FrameStyle.NONE
    label: str = ""
    color: str = "#1f2937"
    font_size: FontSize = FontSize.BASE
    font_family: FontFamily = FontFamily.SANS
    icon: FrameIcon = FrameIcon.NONE
    icon_position: IconPosition = IconPosition.NONE

    @property
    def has_frame(self) -> bool:
        return self.style is not FrameStyle.NONE

    @property
    def has_label(self) -> bool:
        return self.has_frame and bool(self.label.strip())


@dataclass(frozen=True)
class StyleOptions:
    dots_color: str = "#000000"
    background_color: str = "#ffffff"
    dots_type: DotStyle = DotStyle.SQUARE
    corners_square_type: CornerSquareStyle = CornerSquareStyle.SQUARE
    corners_dot_type: CornerDotStyle = CornerDotStyle.SQUARE
    error_correction_level: str = "H"
    use_gradient: bool = False
    gradient: GradientSpec | None = None
    logo: LogoOptions = field(default_factory=LogoOptions)
    frame: FrameConfig = field(default_factory=FrameConfig)
    qr_roundness: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "StyleOptions":
        """Build options from a plain mapping (snake_case or camelCase keys)."""
        d = _Reader(data)
        gradient_raw = d.get("gradient")
        frame_label = d.get("frame_label", "") or ""
        if len(frame_label) > MAX_LABEL_LENGTH:
            raise StyleConfigError(
                f"frame label is {len(frame_label)} characters, max is {MAX_LABEL_LENGTH}"
            )

        ecc = str(d.get("error_correction_level", "H")).upper()
        if ecc not in ECC_LEVELS:
            raise StyleConfigError(f"error_correction_level must be one of {ECC_LEVELS}, got {ecc!r}")

        roundness = d.get("qr_roundness")
        return cls(
            dots_color=_color(d.get("dots_color", "#000000"), "dots_color"),
            background_color=_color(d.get("background_color", "#ffffff"), "background_color"),
            dots_type=_enum(DotStyle, d.get("dots_type"), DotStyle.SQUARE, "dots_type"),
            corners_square_type=_enum(CornerSquareStyle, d.get("corners_square_type"),
                                      CornerSquareStyle.SQUARE, "corners_square_type"),
            corners_dot_type=_enum(CornerDotStyle, d.get("corners_dot_type"),
                                   CornerDotStyle.SQUARE, "corners_dot_type"),
            error_correction_level=ecc,
            use_gradient=bool(d.get("use_gradient", False)),
            gradient=_gradient(gradient_raw) if gradient_raw else None,
            logo=LogoOptions(
                url=d.get("logo_url") or None,
                svg_content=d.get("logo_svg_content") or None,
                size=_number(d.get("logo_size", DEFAULT_LOGO_SIZE), "logo_size"),
                shape=_enum(LogoShape, d.get("logo_shape"), LogoShape.SQUARE, "logo_shape"),
                margin=_number(d.get("logo_margin", DEFAULT_LOGO_MARGIN), "logo_margin"),
            ),
            frame=FrameConfig(
                style=_enum(FrameStyle, d.get("frame_style"), FrameStyle.NONE, "frame_style"),
                label=frame_label,
                color=_color(d.get("frame_color", "#1f2937"), "frame_color"),
                font_size=_enum(FontSize, d.get("frame_font_size"), FontSize.BASE, "frame_font_size"),
                font_family=_enum(FontFamily, d.get("frame_font_family"), FontFamily.SANS,
                                  "frame_font_family"),
                icon=_enum(FrameIcon, d.get("frame_icon"), FrameIcon.NONE, "frame_icon"),
                icon_position=_enum(IconPosition, d.get("frame_icon_position"), IconPosition.NONE,
                                    "frame_icon_position"),
            ),
            qr_roundness=None if roundness is None else _number(roundness, "qr_roundness"),
        )


def load_style(path: str | Path) -> StyleOptions:
    """Read a JSON style file into ``StyleOptions``."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise StyleConfigError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise StyleConfigError(f"{path}: expected a JSON object")
    return StyleOptions.from_dict(data)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(p.capitalize() for p in rest)


class _Reader:
    """Looks keys up under their snake_case name first, then camelCase."""

    def __init__(self, data: dict):
        self._data = data

    def get(self, key: str, default=None):
        for candidate in (key, _camel(key)):
            if candidate in self._data:
                return self._data[candidate]
        return default


def _enum(cls, value, default, name: str):
    if value is None:
        return default
    try:
        return cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in cls)
        raise StyleConfigError(f"{name}: {value!r} is not one of {allowed}") from None


def _number(value, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise StyleConfigError(f"{name}: expected a number, got {value!r}") from None


def _color(value, name: str) -> str:
    if not isinstance(value, str) or not _COLOR_RE.match(value.strip()):
        raise StyleConfigError(f"{name}: {value!r} is not a colour")
    return value.strip()


def _gradient(raw: dict) -> GradientSpec:
    if not isinstance(raw, dict):
        raise StyleConfigError("gradient must be an object")
    stops_raw = raw.get("color_stops", raw.get("colorStops", []))
    stops = tuple(
        ColorStop(offset=_number(s.get("offset"), "gradient.offset"),
                  color=_color(s.get("color"), "gradient.color"))
        for s in stops_raw
    )
    if len(stops) < 2:
        raise StyleConfigError("gradient needs at least 2 colour stops")
    for stop in stops:
        if not 0.0 <= stop.offset <= 1.0:
            raise StyleConfigError(f"gradient offset {stop.offset} outside [0, 1]")
    return GradientSpec(
        kind=_enum(GradientKind, raw.get("kind", raw.get("type")), GradientKind.LINEAR, "gradient.type"),
        color_stops=stops,
        rotation=_number(raw.get("rotation", 0) or 0, "gradient.rotation"),
    )
