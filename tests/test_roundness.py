import xml.etree.ElementTree as ET

import pytest

from qrsvg.config import CornerDotStyle, CornerSquareStyle, DotStyle, QRPattern, StyleOptions
from qrsvg.roundness import (
    apply_roundness,
    apply_roundness_to_markup,
    clamp_roundness,
    corner_dot_style_for_roundness,
    corner_square_style_for_roundness,
    dot_style_for_pattern,
    resolve_style_roundness,
    should_post_process,
)

PREVIEW = (
    '<svg width="300" height="300">'
    '<rect x="0" y="0" width="300" height="300" fill="white"/>'
    '<rect x="10" y="10" width="10" height="10" fill="black"/>'
    '<rect x="20" y="10" width="10" height="10" fill="black"/>'
    '</svg>'
)


def _module_rects(root):
    return [r for r in root.iter("rect") if r.get("x") != "0"]


def test_half_roundness_on_ten_unit_modules():
    root = ET.fromstring(PREVIEW)
    assert apply_roundness(root, 50) == 2
    for rect in _module_rects(root):
        assert rect.get("rx") == "2.50"
        assert rect.get("ry") == "2.50"


def test_full_roundness():
    root = ET.fromstring(PREVIEW)
    apply_roundness(root, 100)
    assert {r.get("rx") for r in _module_rects(root)} == {"5.00"}


@pytest.mark.parametrize("value,expected", [(0, "0.00"), (-10, "0.00"), (200, "5.00")])
def test_roundness_clamped(value, expected):
    root = ET.fromstring(PREVIEW)
    apply_roundness(root, value)
    assert {r.get("rx") for r in _module_rects(root)} == {expected}


def test_background_untouched():
    root = ET.fromstring(PREVIEW)
    apply_roundness(root, 100)
    background = next(root.iter("rect"))
    assert background.get("rx") is None


def test_zero_size_rects_skipped():
    root = ET.fromstring('<svg width="100" height="100"><rect x="5" y="5" width="0" height="10"/></svg>')
    assert apply_roundness(root, 100) == 0


def test_non_square_rect_uses_smaller_side():
    root = ET.fromstring('<svg width="100" height="100"><rect x="5" y="5" width="10" height="4"/></svg>')
    apply_roundness(root, 50)
    assert root.find("rect").get("rx") == "1.00"


def test_namespaced_document():
    ns = "http://www.w3.org/2000/svg"
    root = ET.fromstring(PREVIEW.replace("<svg ", f'<svg xmlns="{ns}" '))
    assert apply_roundness(ET.ElementTree(root), 100) == 2
    rects = list(root.iter(f"{{{ns}}}rect"))
    assert rects[0].get("rx") is None
    assert rects[1].get("rx") == "5.00"


def test_svg_nested_in_wrapper():
    wrapper = ET.fromstring(f"<div>{PREVIEW}</div>")
    assert apply_roundness(wrapper, 100) == 2


def test_missing_document_is_a_no_op():
    assert apply_roundness(None, 50) == 0
    assert apply_roundness(ET.fromstring("<div><p/></div>"), 50) == 0


def test_markup_round_trip_keeps_default_namespace():
    markup = PREVIEW.replace("<svg ", '<svg xmlns="http://www.w3.org/2000/svg" ')
    out = apply_roundness_to_markup(markup, 100)
    assert out.startswith('<svg xmlns="http://www.w3.org/2000/svg"')
    assert "ns0:" not in out
    assert out.count('rx="5.00"') == 2


def test_clamp_roundness():
    assert clamp_roundness(150) == 100
    assert clamp_roundness(-1) == 0
    assert clamp_roundness("42") == 42


class TestStyleMapping:
    def test_solid_pattern_always_square_and_post_processed(self):
        assert dot_style_for_pattern(QRPattern.SOLID, 90) is DotStyle.SQUARE
        assert should_post_process("solid")
        assert not should_post_process("dots")

    @pytest.mark.parametrize("roundness,expected", [
        (0, DotStyle.SQUARE),
        (19, DotStyle.SQUARE),
        (20, DotStyle.ROUNDED),
        (39, DotStyle.ROUNDED),
        (40, DotStyle.EXTRA_ROUNDED),
        (59, DotStyle.EXTRA_ROUNDED),
        (60, DotStyle.DOTS),
        (100, DotStyle.DOTS),
    ])
    def test_dots_pattern_thresholds(self, roundness, expected):
        assert dot_style_for_pattern("dots", roundness) is expected

    @pytest.mark.parametrize("roundness,expected", [
        (24, CornerSquareStyle.SQUARE),
        (25, CornerSquareStyle.EXTRA_ROUNDED),
        (69, CornerSquareStyle.EXTRA_ROUNDED),
        (70, CornerSquareStyle.DOT),
    ])
    def test_corner_square_thresholds(self, roundness, expected):
        assert corner_square_style_for_roundness(roundness) is expected

    def test_corner_dot_thresholds(self):
        assert corner_dot_style_for_roundness(39) is CornerDotStyle.SQUARE
        assert corner_dot_style_for_roundness(40) is CornerDotStyle.DOT


class TestResolveStyleRoundness:
    def test_no_roundness_leaves_style_alone(self):
        style = StyleOptions(dots_type=DotStyle.CLASSY)
        assert resolve_style_roundness(style) is style

    def test_roundness_picks_discrete_styles(self):
        style = resolve_style_roundness(StyleOptions.from_dict({"qrRoundness": 50}))
        assert style.dots_type is DotStyle.EXTRA_ROUNDED
        assert style.corners_square_type is CornerSquareStyle.EXTRA_ROUNDED
        assert style.corners_dot_type is CornerDotStyle.DOT
        assert style.qr_roundness == 50

    def test_solid_pattern_keeps_square_dots(self):
        style = resolve_style_roundness(StyleOptions(qr_roundness=90), QRPattern.SOLID)
        assert style.dots_type is DotStyle.SQUARE
        assert style.corners_square_type is CornerSquareStyle.DOT

    def test_out_of_range_roundness_is_clamped(self):
        style = resolve_style_roundness(StyleOptions(qr_roundness=500))
        assert style.dots_type is DotStyle.DOTS
