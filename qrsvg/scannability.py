"""Scannability heuristics for a style: contrast, colour choice, logo size vs ECC, data density."""

import re
from dataclasses import dataclass, field

from qrsvg.config import StyleOptions
from qrsvg.logging import audit, get_logger, trace

log = get_logger("scannability")

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


@dataclass
class ScannabilityIssue:
    type: str       # contrast | logo | color | complexity
    severity: str   # low | medium | high
    message: str


@dataclass
class ScannabilityResult:
    score: str
    percentage: int
    issues: list[ScannabilityIssue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def summary(self) -> str:
        lines = [f"Scannability: {self.score.upper()} ({self.percentage}%)"]
        for issue in self.issues:
            lines.append(f"  [{issue.severity:6s}] {issue.type:10s} {issue.message}")
        for tip in self.suggestions:
            lines.append(f"  - {tip}")
        return "\n".join(lines)


def hex_to_rgb(color: str) -> tuple[int, int, int] | None:
    m = _HEX_RE.match(color.strip())
    if not m:
        return None
    return tuple(int(g, 16) for g in m.groups())


# ---------------------------------------------------------------------------
# WCAG contrast ratio
# ---------------------------------------------------------------------------

def _linearize(channel: int) -> float:
    """Convert sRGB channel (0-255) to linear light value."""
    c = channel / 255.0
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def luminance(rgb: tuple[int, int, int]) -> float:
    """Relative luminance per WCAG 2.0."""
    r, g, b = [_linearize(ch) for ch in rgb]
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def check_contrast(fg: str, bg: str) -> float:
    """WCAG contrast ratio between two hex colours, 1.0 to 21.0 (1.0 if either is not hex)."""
    rgb_fg, rgb_bg = hex_to_rgb(fg), hex_to_rgb(bg)
    if rgb_fg is None or rgb_bg is None:
        return 1.0
    l1, l2 = luminance(rgb_fg), luminance(rgb_bg)
    if l1 < l2:
        l1, l2 = l2, l1
    return (l1 + 0.05) / (l2 + 0.05)


def _red_green(fg: tuple[int, int, int], bg: tuple[int, int, int]) -> bool:
    return (
        (fg[0] > 150 and fg[1] < 100 and bg[1] > 150 and bg[0] < 100)
        or (bg[0] > 150 and bg[1] < 100 and fg[1] > 150 and fg[0] < 100)
    )


def _grade(percentage: int) -> str:
    if percentage >= 85:
        return "excellent"
    if percentage >= 70:
        return "good"
    if percentage >= 50:
        return "warning"
    return "poor"


@trace
def analyze_scannability(style: StyleOptions, data_length: int | None = None) -> ScannabilityResult:
    """Score how reliably *style* is likely to scan, with issues and suggestions."""
    issues: list[ScannabilityIssue] = []
    suggestions: list[str] = []
    deductions = 0

    ratio = check_contrast(style.dots_color, style.background_color)
    if ratio < 3:
        issues.append(ScannabilityIssue("contrast", "high", "Very low contrast between QR code and background"))
        suggestions.append("Increase contrast by using darker QR code or lighter background")
        deductions += 40
    elif ratio < 4.5:
        issues.append(ScannabilityIssue("contrast", "medium", "Contrast could be improved for better scanning"))
        suggestions.append("Consider using higher contrast colors")
        deductions += 20
    elif ratio < 7:
        deductions += 5

    fg, bg = hex_to_rgb(style.dots_color), hex_to_rgb(style.background_color)
    if fg and bg:
        if _red_green(fg, bg):
            issues.append(ScannabilityIssue("color", "medium",
                                            "Color combination may be difficult for colorblind users"))
            suggestions.append("Avoid red-green color combinations")
            deductions += 15
        if luminance(fg) > luminance(bg):
            issues.append(ScannabilityIssue("contrast", "low", "Light QR code on dark background (inverted)"))
            suggestions.append("Some scanners work better with dark QR codes on light backgrounds")
            deductions += 10

    ecc = style.error_correction_level
    logo_size = style.logo.size
    if style.logo.present and logo_size:
        if logo_size > 0.25:
            issues.append(ScannabilityIssue("logo", "medium", "Logo is quite large and may affect scanning"))
            suggestions.append("Consider reducing logo size or using High error correction")
            deductions += 15
            if ecc != "H":
                issues.append(ScannabilityIssue("logo", "high", "Large logo without High error correction"))
                suggestions.append("Set error correction to High (30%) when using large logos")
                deductions += 20
        elif logo_size > 0.2 and ecc == "L":
            issues.append(ScannabilityIssue("logo", "medium",
                                            "Logo with Low error correction may cause scanning issues"))
            suggestions.append("Increase error correction level to Medium or higher")
            deductions += 15

    if data_length and data_length > 200:
        issues.append(ScannabilityIssue("complexity", "low", "Long data creates a dense QR code"))
        suggestions.append("Consider shortening the URL for easier scanning at small sizes")
        deductions += 10

    percentage = max(0, min(100, 100 - deductions))
    result = ScannabilityResult(score=_grade(percentage), percentage=percentage,
                                issues=issues, suggestions=suggestions)
    audit("scannability.scored", logger=log, score=result.score, percentage=percentage,
          contrast_ratio=f"{ratio:.1f}:1", issues=len(issues))
    return result
