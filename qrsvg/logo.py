"""Logo Compositor: exclusion zone, clip shapes, and vector / raster logo embedding.

Embedding never raises for bad logo data. Every track returns either
``LogoEmbedded`` or ``LogoOmitted`` and the render carries on without the
logo in the latter case.
"""

import asyncio
import base64
import inspect
import io
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Union
from urllib.parse import unquote, urlparse

import numpy as np
import requests
from PIL import Image, ImageDraw, UnidentifiedImageError

from qrsvg.config import (
    LOGO_CLIP_ID,
    LOGO_CLIP_ROUNDING,
    LOGO_MASK_ROUNDING,
    LOGO_SCALE,
    LogoOptions,
    LogoShape,
    logo_timeout,
)
from qrsvg.errors import LogoLoadError
from qrsvg.logging import audit, get_logger, trace
from qrsvg.paths import fmt, parse_length

log = get_logger("logo")

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
ET.register_namespace("xlink", XLINK_NS)

LogoLoader = Callable[[str], Union[bytes, Awaitable[bytes]]]


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LogoEmbedded:
    """Logo markup ready for the document, plus its clip path definition (if any)."""
    markup: str
    clip_def: str | None = None
    track: str = ""


@dataclass(frozen=True)
class LogoOmitted:
    reason: str


LogoOutcome = Union[LogoEmbedded, LogoOmitted]


def _omit(reason: str) -> LogoOmitted:
    log.warning("logo omitted: %s", reason)
    audit("logo.omitted", logger=log, reason=reason)
    return LogoOmitted(reason)


# ---------------------------------------------------------------------------
# Exclusion zone
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LogoExclusionArea:
    """Square region (output coordinates) withheld from data modules."""
    x: float
    y: float
    size: float


def logo_side(logo_size: float, canvas_size: float) -> float:
    return logo_size * canvas_size * LOGO_SCALE


def compute_exclusion_area(
    logo_size: float,
    margin: float,
    canvas_size: float,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
) -> LogoExclusionArea:
    """Logo box grown by *margin* on every side, centred on the drawing area."""
    side = logo_side(logo_size, canvas_size) + 2 * margin
    return LogoExclusionArea(
        x=offset_x + (canvas_size - side) / 2,
        y=offset_y + (canvas_size - side) / 2,
        size=side,
    )


def exclusion_for(
    logo: LogoOptions,
    canvas_size: float,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    processed_url: str | None = None,
) -> LogoExclusionArea | None:
    """Exclusion area for a style's logo, or None when there is no logo."""
    if not (processed_url or logo.present):
        return None
    return compute_exclusion_area(logo.size or 0.3, logo.margin, canvas_size, offset_x, offset_y)


def is_cell_excluded(x: float, y: float, cell_size: float, area: LogoExclusionArea | None) -> bool:
    """True when the cell box at (x, y) overlaps the exclusion square by any amount."""
    if area is None:
        return False
    return (
        x + cell_size > area.x
        and x < area.x + area.size
        and y + cell_size > area.y
        and y < area.y + area.size
    )


# ---------------------------------------------------------------------------
# Clip shapes
# ---------------------------------------------------------------------------

def build_logo_clip(
    shape: LogoShape | str, x: float, y: float, size: float, clip_id: str = LOGO_CLIP_ID,
) -> str | None:
    """``<clipPath>`` for the logo box, or None for square logos."""
    try:
        shape = LogoShape(shape)
    except ValueError:
        return None
    if shape is LogoShape.CIRCLE:
        half = size / 2
        content = f'<circle cx="{fmt(x + half)}" cy="{fmt(y + half)}" r="{fmt(half)}"/>'
    elif shape is LogoShape.ROUNDED:
        content = (
            f'<rect x="{fmt(x)}" y="{fmt(y)}" width="{fmt(size)}" height="{fmt(size)}" '
            f'rx="{fmt(size * LOGO_CLIP_ROUNDING)}"/>'
        )
    else:
        return None
    return f'    <clipPath id="{clip_id}">{content}</clipPath>'


# ---------------------------------------------------------------------------
# Vector track
# ---------------------------------------------------------------------------

def _strip_svg_namespace(element: ET.Element) -> None:
    prefix = f"{{{SVG_NS}}}"
    for el in element.iter():
        if isinstance(el.tag, str) and el.tag.startswith(prefix):
            el.tag = el.tag[len(prefix):]


def _viewbox_size(root: ET.Element) -> tuple[float, float]:
    width = parse_length(root.get("width"), 100.0)
    height = parse_length(root.get("height"), 100.0)
    view_box = root.get("viewBox")
    if not view_box:
        return width, height
    parts = [parse_length(p, 0.0) for p in re.split(r"[\s,]+", view_box.strip())]
    vb_w = parts[2] if len(parts) > 2 and parts[2] else width
    vb_h = parts[3] if len(parts) > 3 and parts[3] else height
    return vb_w, vb_h


@trace
def embed_vector_logo(svg_markup: str, x: float, y: float, size: float) -> LogoOutcome:
    """Inline an SVG logo, uniformly scaled and centred inside the logo box."""
    try:
        root = ET.fromstring(svg_markup)
    except ET.ParseError as exc:
        return _omit(f"vector logo parse error: {exc}")

    _strip_svg_namespace(root)
    if root.tag != "svg":
        return _omit(f"vector logo root is <{root.tag}>, expected <svg>")

    vb_w, vb_h = _viewbox_size(root)
    if vb_w <= 0 or vb_h <= 0:
        return _omit("vector logo has an empty viewBox")

    scale = min(size / vb_w, size / vb_h)
    offset_x = x + (size - vb_w * scale) / 2
    offset_y = y + (size - vb_h * scale) / 2

    inner = "".join(ET.tostring(child, encoding="unicode") for child in root)
    if root.text and root.text.strip():
        inner = root.text.strip() + inner
    body = "\n".join("      " + line for line in inner.strip().splitlines())

    markup = (
        f'    <g id="logo-vector" transform="translate({fmt(offset_x)}, {fmt(offset_y)}) '
        f'scale({fmt(scale)})">\n{body}\n    </g>'
    )
    return LogoEmbedded(markup=markup, track="vector")


# ---------------------------------------------------------------------------
# Raster track
# ---------------------------------------------------------------------------

def _is_inline_image(url: str) -> bool:
    """A usable ``data:image/`` URL: has a payload of more than a few bytes."""
    if not url.startswith("data:image/") or "," not in url:
        return False
    return len(url.split(",", 1)[1]) > 10


def _decode_data_url(url: str) -> bytes:
    header, _, payload = url.partition(",")
    try:
        if header.endswith(";base64"):
            return base64.b64decode(payload, validate=False)
        return unquote(payload).encode("latin-1")
    except (ValueError, UnicodeEncodeError) as exc:
        raise LogoLoadError(f"malformed data URL: {exc}") from exc


def default_loader(source: str, http_timeout: float = 10.0) -> bytes:
    """Fetch logo bytes from a data URL, a local path / ``file:`` URL, or http(s)."""
    if source.startswith("data:"):
        return _decode_data_url(source)

    parsed = urlparse(source)
    if parsed.scheme in ("http", "https"):
        try:
            resp = requests.get(source, timeout=http_timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise LogoLoadError(f"fetch failed: {exc}") from exc
        return resp.content

    path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(source)
    try:
        return path.read_bytes()
    except (OSError, ValueError) as exc:
        raise LogoLoadError(f"cannot read {path}: {exc}") from exc


def _to_png_data_url(raw: bytes) -> str:
    """Decode any Pillow-readable image and re-encode it as a PNG data URL."""
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise LogoLoadError(f"not a decodable image: {exc}") from exc

    out = io.BytesIO()
    rgba.save(out, format="PNG")
    return "data:image/png;base64," + base64.b64encode(out.getvalue()).decode("ascii")


async def _fetch(source: str, loader: LogoLoader) -> bytes:
    if inspect.iscoroutinefunction(loader):
        return await loader(source)
    result = await asyncio.to_thread(loader, source)
    if inspect.isawaitable(result):
        return await result
    return result


async def _load_data_url(source: str, loader: LogoLoader) -> str:
    raw = await _fetch(source, loader)
    return await asyncio.to_thread(_to_png_data_url, raw)


@trace
async def load_raster_logo(
    source: str | None,
    x: float,
    y: float,
    size: float,
    loader: LogoLoader | None = None,
    timeout: float | None = None,
) -> LogoOutcome:
    """Load *source* as an embedded base64 ``<image>``, bounded by *timeout* seconds.

    Valid ``data:image/`` URLs are embedded as-is. Anything else goes through
    *loader* (``default_loader`` when None) and is re-encoded as PNG.
    """
    if not source or not isinstance(source, str):
        return _omit("no logo source")
    source = source.strip()
    timeout = logo_timeout() if timeout is None else timeout

    if _is_inline_image(source):
        data_url = source
    else:
        try:
            data_url = await asyncio.wait_for(_load_data_url(source, loader or default_loader), timeout)
        except asyncio.TimeoutError:
            return _omit(f"raster logo load timed out after {timeout:g}s")
        except (LogoLoadError, OSError) as exc:
            return _omit(str(exc))

    markup = (
        f'    <image xlink:href="{data_url}" href="{data_url}" x="{fmt(x)}" y="{fmt(y)}" '
        f'width="{fmt(size)}" height="{fmt(size)}" preserveAspectRatio="xMidYMid slice"/>'
    )
    return LogoEmbedded(markup=markup, track="raster")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

@trace
async def embed_logo(
    logo: LogoOptions,
    canvas_size: float,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    processed_url: str | None = None,
    loader: LogoLoader | None = None,
    timeout: float | None = None,
) -> LogoOutcome:
    """Build the ``<g id="logo">`` layer for *logo*, centred on the drawing area.

    Inline vector markup wins over the raster source. *processed_url* (a logo
    that already had its shape mask applied) takes precedence over ``logo.url``.
    """
    source = processed_url or logo.url
    if not (source or logo.svg_content):
        return LogoOmitted("no logo configured")

    side = logo_side(logo.size or 0.3, canvas_size)
    x = offset_x + (canvas_size - side) / 2
    y = offset_y + (canvas_size - side) / 2

    if logo.svg_content:
        content = embed_vector_logo(logo.svg_content, x, y, side)
    else:
        content = await load_raster_logo(source, x, y, side, loader=loader, timeout=timeout)

    if isinstance(content, LogoOmitted):
        return content

    clip_def = build_logo_clip(logo.shape, x, y, side)
    clip_attr = f' clip-path="url(#{LOGO_CLIP_ID})"' if clip_def else ""
    markup = f'  <g id="logo"{clip_attr}>\n{content.markup}\n  </g>'

    audit("logo.embedded", logger=log, track=content.track,
          shape=getattr(logo.shape, "value", logo.shape), side=round(side, 2))
    return LogoEmbedded(markup=markup, clip_def=clip_def, track=content.track)


# ---------------------------------------------------------------------------
# Raster shape mask
# ---------------------------------------------------------------------------

@trace
def apply_logo_mask(image: Image.Image, shape: LogoShape | str) -> Image.Image:
    """Centre-crop *image* to a square and cut it to *shape*.

    Returns an RGBA image whose alpha is the intersection of the source
    alpha and the shape mask. The mask is drawn at 4x and downscaled with
    Lanczos for anti-aliased edges.
    """
    shape = LogoShape(shape)
    side = min(image.size)
    left = (image.width - side) // 2
    top = (image.height - side) // 2
    square = image.convert("RGBA").crop((left, top, left + side, top + side))

    if shape is LogoShape.SQUARE:
        return square

    rs = side * 4
    mask = Image.new("L", (rs, rs), 0)
    draw = ImageDraw.Draw(mask)
    if shape is LogoShape.CIRCLE:
        draw.ellipse([0, 0, rs - 1, rs - 1], fill=255)
    else:
        draw.rounded_rectangle([0, 0, rs - 1, rs - 1], radius=int(rs * LOGO_MASK_ROUNDING), fill=255)
    mask = mask.resize((side, side), Image.LANCZOS)

    arr = np.array(square)
    arr[..., 3] = np.minimum(arr[..., 3], np.array(mask))
    return Image.fromarray(arr)


def logo_mask_data_url(image: Image.Image, shape: LogoShape | str) -> str:
    """PNG data URL of the shape-masked logo, usable as ``processed_url``."""
    out = io.BytesIO()
    apply_logo_mask(image, shape).save(out, format="PNG")
    return "data:image/png;base64," + base64.b64encode(out.getvalue()).decode("ascii")
