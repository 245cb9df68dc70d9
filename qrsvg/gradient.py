"""Gradient Builder: SVG linearGradient / radialGradient definitions."""

import math

from qrsvg.config import GRADIENT_ID, GradientKind, GradientSpec, StyleOptions
from qrsvg.paths import fmt


def linear_endpoints(rotation: float) -> tuple[float, float, float, float]:
    """(x1, y1, x2, y2) in percent for a rotation in degrees; 0 runs left to right."""
    rad = math.radians(rotation)
    dx, dy = math.cos(rad) * 50, math.sin(rad) * 50
    return 50 - dx, 50 - dy, 50 + dx, 50 + dy


def _stops(spec: GradientSpec) -> str:
    # sorted() is stable, so equal offsets keep their input order
    ordered = sorted(spec.color_stops, key=lambda s: s.offset)
    return "\n".join(
        f'      <stop offset="{fmt(stop.offset * 100)}%" stop-color="{stop.color}"/>'
        for stop in ordered
    )


def build_gradient_def(spec: GradientSpec, gradient_id: str = GRADIENT_ID) -> str:
    """Definition block for *spec*, to be placed inside ``<defs>``."""
    stops = _stops(spec)
    if GradientKind(spec.kind) is GradientKind.RADIAL:
        return (
            f'    <radialGradient id="{gradient_id}" cx="50%" cy="50%" r="50%">\n'
            f"{stops}\n"
            "    </radialGradient>"
        )

    x1, y1, x2, y2 = linear_endpoints(spec.rotation or 0)
    return (
        f'    <linearGradient id="{gradient_id}" '
        f'x1="{fmt(x1)}%" y1="{fmt(y1)}%" x2="{fmt(x2)}%" y2="{fmt(y2)}%">\n'
        f"{stops}\n"
        "    </linearGradient>"
    )


def gradient_active(style: StyleOptions) -> bool:
    """A gradient is drawn only when enabled *and* concretely specified."""
    return bool(style.use_gradient and style.gradient and style.gradient.color_stops)


def resolve_fill(style: StyleOptions, gradient_id: str = GRADIENT_ID) -> str:
    """Fill attribute for the code: the gradient reference, else the solid colour."""
    if gradient_active(style):
        return f"url(#{gradient_id})"
    return style.dots_color
