import pytest

from domain.models import FilledRect, Line, LetterRecord, QrMatrix, RoundedRect, TextRun
from services.letter_codec import encode_letter
from services.letter_page import letter_view_url
from services.qr_card import QR_CARD, compute_qr_card_layout, qr_header_lines, qr_modules, site_label
from services.render_canvas import dash_segments, render_card_image
from services.render_svg import build_card_svg
from settings import Settings

RECORD = LetterRecord(from_name="지민", to_name="서연", message="생일 축하해", theme="birthday")


@pytest.fixture
def cfg(monkeypatch):
    monkeypatch.setenv("SITE_URL", "https://suile.example")
    return Settings()


@pytest.fixture
def token():
    return encode_letter(RECORD)


@pytest.fixture
def layout(token, cfg):
    return compute_qr_card_layout(RECORD, token, cfg=cfg)


@pytest.mark.parametrize(
    "fields,expected",
    [
        ({"from_name": "A", "to_name": "B"}, ["A님이", "B님에게 보내는", "비밀 메시지에요 💌"]),
        ({"from_name": "A"}, ["A님이 보내는", "비밀 메시지에요 💌"]),
        ({"to_name": "B"}, ["B님에게 도착한", "비밀 메시지에요 💌"]),
        ({}, ["비밀 메시지가", "도착했어요 💌"]),
    ],
)
def test_header_lines(fields, expected):
    assert qr_header_lines(LetterRecord(**fields)) == expected


def test_instruction_order(layout):
    kinds = [type(i) for i in layout.instructions]
    assert kinds == [
        FilledRect, RoundedRect, TextRun, TextRun, Line,
        TextRun, TextRun, TextRun, Line,
        RoundedRect, QrMatrix, TextRun, TextRun,
    ]
    assert (layout.width, layout.height, layout.variant) == (600, 820, QR_CARD)


def test_layout_positions(layout):
    texts = [i for i in layout.instructions if isinstance(i, TextRun)]
    assert [t.y for t in texts] == [64, 92, 144, 176, 208, 572, 600]
    dividers = [i for i in layout.instructions if isinstance(i, Line)]
    assert [d.y1 for d in dividers] == [116, 244]
    assert all(d.dash == (6, 4) and (d.x1, d.x2) == (56, 544) for d in dividers)
    card = layout.instructions[1]
    assert (card.x, card.y, card.width, card.height) == (16, 16, 568, 788)
    assert card.stroke == "#e4e4e7"


def test_qr_encodes_letter_url(layout, token, cfg):
    qr = next(i for i in layout.instructions if isinstance(i, QrMatrix))
    assert (qr.x, qr.y, qr.size) == (170, 272, 260)
    assert qr.modules == qr_modules(letter_view_url(token, cfg))
    n = len(qr.modules)
    assert all(len(row) == n for row in qr.modules)
    # version sizes are 21 + 4k, plus a two-module quiet zone on each side
    assert (n - 4 - 21) % 4 == 0
    assert not any(qr.modules[0])
    assert all(qr.modules[2][2:9])


def test_site_label_is_host(layout, cfg):
    assert site_label(cfg) == "suile.example"
    assert layout.instructions[-1].text == "suile.example"


def test_canvas_render(layout, fonts):
    image = render_card_image(layout, fonts=fonts)
    assert image.size == (600, 820)
    qr = next(i for i in layout.instructions if isinstance(i, QrMatrix))
    m = qr.size / len(qr.modules)
    # centre of the finder pattern's inner block, and of the quiet zone
    assert image.getpixel((int(qr.x + 4.5 * m), int(qr.y + 4.5 * m))) == (24, 24, 27)
    assert image.getpixel((int(qr.x + 0.5 * m), int(qr.y + 0.5 * m))) == (255, 255, 255)
    assert image.getpixel((4, 4)) == (244, 244, 245)


def test_svg_has_dashes_and_crisp_modules(layout, fonts):
    svg = build_card_svg(layout, fonts=fonts)
    assert svg.count('stroke-dasharray="6 4"') == 2
    assert 'shape-rendering="crispEdges"' in svg
    assert 'stroke="#e4e4e7"' in svg


def test_dash_segments():
    solid = Line(x1=0, y1=5, x2=20, y2=5, stroke="#000")
    assert dash_segments(solid) == [((0, 5), (20, 5))]
    dashed = Line(x1=0, y1=5, x2=20, y2=5, stroke="#000", dash=(6, 4))
    assert dash_segments(dashed) == [((0, 5), (6, 5)), ((10, 5), (16, 5))]
    short = Line(x1=0, y1=0, x2=8, y2=0, stroke="#000", dash=(6, 4))
    assert dash_segments(short) == [((0, 0), (6, 0))]
