from PIL import Image

from domain.models import LetterRecord
from scripts import render_card
from services.letter_codec import decode_letter, encode_letter


def test_renders_card_from_fields(tmp_path, capsys):
    out = tmp_path / "card.png"
    code = render_card.main(["--from", "지민", "--to", "서연", "--message", "생일 축하해", "--out", str(out)])
    assert code == 0
    token = capsys.readouterr().out.strip()
    assert decode_letter(token) == LetterRecord(from_name="지민", to_name="서연", message="생일 축하해", theme="love")
    with Image.open(out) as image:
        assert image.width == 600


def test_renders_share_variant_from_token(tmp_path):
    token = encode_letter(LetterRecord(message="안녕", theme="simple"))
    out = tmp_path / "nested" / "share.png"
    assert render_card.main(["--token", token, "--variant", "share_card", "--out", str(out)]) == 0
    with Image.open(out) as image:
        assert image.width == 480


def test_svg_only(tmp_path):
    out = tmp_path / "preview.svg"
    assert render_card.main(["--message", "비밀", "--svg-only", "--out", str(out)]) == 0
    assert out.read_text(encoding="utf-8").startswith("<svg ")


def test_bad_token_exits_with_2(tmp_path):
    out = tmp_path / "card.png"
    assert render_card.main(["--token", "!!", "--out", str(out)]) == 2
    assert not out.exists()


def test_svg_backend_failure_exits_with_1(tmp_path, monkeypatch):
    def boom(svg, width, height):
        raise RuntimeError("no delegate")

    monkeypatch.setattr("services.render_svg.rasterize_svg", boom)
    out = tmp_path / "preview.png"
    assert render_card.main(["--message", "비밀", "--backend", "svg", "--out", str(out)]) == 1
    assert not out.exists()


def test_renders_qr_card(tmp_path):
    token = encode_letter(LetterRecord(from_name="지민", message="안녕"))
    out = tmp_path / "qr.png"
    assert render_card.main(["--token", token, "--qr", "--out", str(out)]) == 0
    with Image.open(out) as image:
        assert image.size == (600, 820)
