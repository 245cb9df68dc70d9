import json

import pytest

from qrsvg.cli import main


def test_render_writes_svg(tmp_path, capsys):
    out = tmp_path / "qr.svg"
    main(["render", "https://example.com", "-o", str(out), "--dots", "rounded",
          "--corner-square", "dot", "--color", "#1a1a1a"])
    svg = out.read_text(encoding="utf-8")
    assert svg.startswith("<?xml")
    assert 'id="qr-dots" fill="#1a1a1a"' in svg
    assert "Rendered:" in capsys.readouterr().out


def test_render_with_style_file_and_vector_logo(tmp_path):
    style = tmp_path / "style.json"
    style.write_text(json.dumps({"frameStyle": "top-label", "frameLabel": "Scan me"}))
    logo = tmp_path / "logo.svg"
    logo.write_text('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 4 4"><rect width="4" height="4"/></svg>')
    out = tmp_path / "framed"
    main(["render", "hello", "-o", str(out), "--style", str(style), "--logo-svg", str(logo)])
    svg = (tmp_path / "framed.svg").read_text(encoding="utf-8")
    assert ">Scan me</text>" in svg
    assert 'id="logo-vector"' in svg


def test_render_with_masked_raster_logo(tmp_path, red_png):
    logo = tmp_path / "logo.png"
    logo.write_bytes(red_png)
    out = tmp_path / "qr.svg"
    main(["render", "hello", "-o", str(out), "--logo", str(logo), "--logo-shape", "circle", "--mask-logo"])
    svg = out.read_text(encoding="utf-8")
    assert "data:image/png;base64," in svg
    assert 'clip-path="url(#logo-clip)"' in svg


def test_mask_logo_from_data_url(tmp_path, red_png_data_url):
    out = tmp_path / "qr.svg"
    main(["render", "hello", "-o", str(out), "--logo", red_png_data_url,
          "--logo-shape", "rounded", "--mask-logo"])
    svg = out.read_text(encoding="utf-8")
    assert 'id="logo" clip-path="url(#logo-clip)"' in svg
    # the masked re-encode replaces the original payload
    assert red_png_data_url not in svg


def test_mask_logo_unreadable_source_renders_without_logo(tmp_path):
    out = tmp_path / "qr.svg"
    main(["render", "hello", "-o", str(out), "--logo", str(tmp_path / "missing.png"), "--mask-logo"])
    svg = out.read_text(encoding="utf-8")
    assert 'id="logo"' not in svg
    assert svg.endswith("</svg>")


def test_roundness_flag_selects_styles(tmp_path):
    out = tmp_path / "qr.svg"
    main(["render", "hello", "-o", str(out), "--roundness", "80", "--dots", "square"])
    svg = out.read_text(encoding="utf-8")
    dots = svg.split('id="qr-dots"', 1)[1].split("/>", 1)[0]
    assert " A " in dots
    assert " h " not in dots


def test_style_file_roundness_is_applied(tmp_path):
    style = tmp_path / "style.json"
    style.write_text(json.dumps({"qrRoundness": 10, "dotsType": "dots"}))
    out = tmp_path / "qr.svg"
    main(["render", "hello", "-o", str(out), "--style", str(style)])
    dots = out.read_text(encoding="utf-8").split('id="qr-dots"', 1)[1].split("/>", 1)[0]
    assert " A " not in dots


def test_bad_style_value_is_a_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["render", "hello", "-o", str(tmp_path / "x.svg"), "--color", "not a colour"])
    assert exc.value.code == 2


def test_roundness_in_place(tmp_path):
    path = tmp_path / "preview.svg"
    path.write_text('<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">'
                    '<rect x="0" y="0" width="100" height="100"/>'
                    '<rect x="10" y="10" width="10" height="10"/></svg>')
    main(["roundness", str(path), "-r", "100"])
    text = path.read_text(encoding="utf-8")
    assert text.count('rx="5.00"') == 1


def test_analyze_exit_codes(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["analyze", "https://example.com"])
    assert exc.value.code == 0
    assert "EXCELLENT" in capsys.readouterr().out

    with pytest.raises(SystemExit) as exc:
        main(["analyze", "--color", "#eeeeee"])
    assert exc.value.code == 1


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "usage:" in capsys.readouterr().out
