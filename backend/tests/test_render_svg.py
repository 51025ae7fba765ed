import re

import pytest

from domain.errors import RenderFailure
from domain.models import CardLayout, LetterRecord, PathStroke, TextRun
from services import render_svg
from services.layout_engine import OG_PREVIEW, compute_card_layout, get_variant
from services.render_svg import build_card_svg, path_data, render_preview_png


def _layout(**fields):
    return compute_card_layout(LetterRecord(**fields), get_variant(OG_PREVIEW))


def test_svg_document_size(fonts):
    layout = _layout(from_name="지민", to_name="서연", message="생일 축하해")
    svg = build_card_svg(layout, fonts=fonts)
    assert svg.startswith(f'<svg width="600" height="{layout.height}" viewBox="0 0 600 {layout.height}"')
    assert svg.rstrip().endswith("</svg>")
    assert 'fill="#18181b"' in svg
    assert "지민님이 서연님에게" in svg


def test_user_text_is_escaped(fonts):
    svg = build_card_svg(_layout(from_name="<script>", to_name='"&"'), fonts=fonts)
    assert "<script>" not in svg
    assert "&lt;script&gt;" in svg
    assert "&quot;&amp;&quot;" in svg


def test_text_carries_one_x_per_glyph(fonts):
    layout = CardLayout(
        width=100,
        height=50,
        instructions=(TextRun(text="a■c", x=50, y=30, font_size=12, fill="#fafafa", letter_spacing=2),),
    )
    svg = build_card_svg(layout, fonts=fonts)
    xs = re.search(r'<text x="([^"]*)"', svg).group(1).split()
    assert len(xs) == 3
    assert [float(x) for x in xs] == sorted(float(x) for x in xs)
    assert 'xml:space="preserve"' in svg


def test_message_runs_are_bold_monospace(fonts):
    svg = build_card_svg(_layout(message="hi"), fonts=fonts)
    assert 'font-size="60" font-weight="bold"' in svg
    assert 'font-family="monospace"' in svg


def test_path_data_for_shackle():
    path = PathStroke(
        commands=(("M", 294.0, 62), ("V", 57), ("A", 6, 0, 1, 306.0, 57), ("V", 62)),
        stroke="#a1a1aa",
    )
    assert path_data(path) == "M294 62 V57 A6 6 0 0 1 306 57 V62"


def test_render_failure_wraps_rasterizer_errors(monkeypatch, fonts):
    def boom(svg, width, height):
        raise RuntimeError("no svg delegate")

    monkeypatch.setattr(render_svg, "rasterize_svg", boom)
    with pytest.raises(RenderFailure):
        render_preview_png(_layout(message="hi"), fonts=fonts)


def test_empty_output_is_a_failure(monkeypatch, fonts):
    monkeypatch.setattr(render_svg, "rasterize_svg", lambda svg, width, height: b"")
    with pytest.raises(RenderFailure):
        render_preview_png(_layout(message="hi"), fonts=fonts)


def test_render_preview_png_with_imagemagick(fonts):
    pytest.importorskip("wand.image", exc_type=ImportError)
    layout = _layout(from_name="지민", to_name="서연", message="생일 축하해")
    try:
        png = render_preview_png(layout, fonts=fonts)
    except RenderFailure:
        pytest.skip("ImageMagick cannot read SVG here")
    assert png.startswith(b"\x89PNG\r\n\x1a\n")
