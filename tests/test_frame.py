import pytest

from qrsvg.config import FrameConfig, FrameIcon, FrameStyle, IconPosition
from qrsvg.frame import escape_xml, frame_radius, icon_offset, layout_frame


def test_no_frame_keeps_canvas():
    layout = layout_frame(FrameConfig(), 300)
    assert (layout.width, layout.height) == (300, 300)
    assert (layout.qr_offset_x, layout.qr_offset_y) == (0, 0)
    assert layout.chrome == ()
    assert not layout.has_frame


def test_simple_frame_adds_padding_only():
    layout = layout_frame(FrameConfig(style=FrameStyle.SIMPLE), 300)
    assert (layout.extra_width, layout.extra_height) == (32, 32)
    assert (layout.qr_offset_x, layout.qr_offset_y) == (16, 16)
    assert layout.corner_radius == 0
    assert layout.chrome[0].startswith('    <rect x="0" y="0" width="332" height="332" rx="0"')
    assert 'stroke-width="4"' in layout.chrome[0]


def test_simple_frame_ignores_label():
    layout = layout_frame(FrameConfig(style=FrameStyle.SIMPLE, label="Scan me"), 300)
    assert layout.height == 332
    assert not any("<text" in part for part in layout.chrome)


def test_top_label_grows_top_band():
    layout = layout_frame(FrameConfig(style=FrameStyle.TOP_LABEL, label="Scan Me"), 300)
    assert (layout.width, layout.height) == (332, 364)
    assert (layout.qr_offset_x, layout.qr_offset_y) == (16, 48)
    assert layout.corner_radius == 16
    text = [p for p in layout.chrome if "<text" in p]
    assert len(text) == 1
    assert ">Scan Me</text>" in text[0]
    assert 'fill="white"' in text[0]


def test_blank_label_is_no_label():
    layout = layout_frame(FrameConfig(style=FrameStyle.TOP_LABEL, label="   "), 300)
    assert layout.height == 332
    assert layout.qr_offset_y == 16


def test_badge_uppercases():
    layout = layout_frame(FrameConfig(style=FrameStyle.BADGE, label="Scan Me"), 300)
    assert layout.qr_offset_y == 48
    assert any(">SCAN ME</text>" in p for p in layout.chrome)


def test_bottom_label_keeps_qr_at_top_padding():
    frame = FrameConfig(style=FrameStyle.BOTTOM_LABEL, label="Scan")
    layout = layout_frame(frame, 300)
    assert layout.height == 364
    assert layout.qr_offset_y == 16
    assert any('y="355"' in p and ">Scan</text>" in p for p in layout.chrome)


def test_bottom_label_icon_left():
    frame = FrameConfig(style=FrameStyle.BOTTOM_LABEL, label="Scan",
                        icon=FrameIcon.CAMERA, icon_position=IconPosition.LEFT)
    chrome = "\n".join(layout_frame(frame, 300).chrome)
    assert '<g transform="translate(128.2, 348)">' in chrome
    assert 'transform="scale(0.5833)"' in chrome


def test_bottom_label_icon_needs_position():
    frame = FrameConfig(style=FrameStyle.BOTTOM_LABEL, label="Scan", icon=FrameIcon.CAMERA)
    assert not any("<g transform" in p for p in layout_frame(frame, 300).chrome)


def test_icon_offset():
    assert icon_offset(IconPosition.LEFT, "Scan", 14) == pytest.approx(-30.8)
    assert icon_offset(IconPosition.RIGHT, "Scan", 14) == pytest.approx(20.8)


def test_label_is_escaped():
    frame = FrameConfig(style=FrameStyle.TOP_LABEL, label='A & <B> "C"')
    chrome = "\n".join(layout_frame(frame, 300).chrome)
    assert "A &amp; &lt;B&gt; &quot;C&quot;" in chrome


def test_escape_xml():
    assert escape_xml("it's") == "it&apos;s"


@pytest.mark.parametrize("style,radius", [
    (FrameStyle.ROUNDED, 40),
    (FrameStyle.SIMPLE, 0),
    (FrameStyle.BADGE, 16),
])
def test_frame_radius(style, radius):
    assert frame_radius(style) == radius
