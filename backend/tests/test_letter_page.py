from domain.models import LetterRecord
from services.layout_engine import OG_PREVIEW, compute_card_layout, get_variant
from services.letter_page import (
    DEFAULT_TITLE,
    build_letter_page_html,
    letter_view_url,
    og_image_url,
    page_title,
    share_url,
)
from settings import Settings


def _cfg(monkeypatch):
    monkeypatch.setenv("SITE_URL", "https://suile.example/")
    monkeypatch.setenv("PUBLIC_API_URL", "https://api.suile.example")
    return Settings()


def test_urls_use_configured_hosts(monkeypatch):
    cfg = _cfg(monkeypatch)
    assert og_image_url("abc-_", cfg) == "https://api.suile.example/og-image?d=abc-_"
    assert share_url("abc", cfg) == "https://api.suile.example/v?d=abc"
    # trailing slash on SITE_URL is dropped
    assert letter_view_url("abc", cfg) == "https://suile.example/m?d=abc"


def test_urls_quote_unsafe_tokens(monkeypatch):
    cfg = _cfg(monkeypatch)
    assert og_image_url("a&b=c", cfg).endswith("?d=a%26b%3Dc")


def test_page_title():
    assert page_title(None) == DEFAULT_TITLE
    assert page_title(LetterRecord(from_name="지민")) == DEFAULT_TITLE
    assert page_title(LetterRecord(to_name="서연")) == f"서연님에게 {DEFAULT_TITLE}"


def test_page_carries_open_graph_and_redirect(monkeypatch):
    cfg = _cfg(monkeypatch)
    record = LetterRecord(from_name="지민", to_name="서연", message="생일 축하해", theme="birthday")
    preview = compute_card_layout(record, get_variant(OG_PREVIEW))
    page = build_letter_page_html("TOKEN", record, preview, cfg)

    assert '<meta property="og:image" content="https://api.suile.example/og-image?d=TOKEN"/>' in page
    assert '<meta property="og:image:width" content="600"/>' in page
    assert f'<meta property="og:image:height" content="{preview.height}"/>' in page
    assert '<meta name="twitter:card" content="summary_large_image"/>' in page
    assert 'content="0;url=https://suile.example/m?d=TOKEN"' in page
    assert "window.location.replace('https://suile.example/m?d=TOKEN')" in page
    # the message itself never leaks into the page
    assert "생일 축하해" not in page


def test_recipient_name_is_escaped(monkeypatch):
    cfg = _cfg(monkeypatch)
    record = LetterRecord(to_name='<b>"x"</b>')
    preview = compute_card_layout(record, get_variant(OG_PREVIEW))
    page = build_letter_page_html("T", record, preview, cfg)
    assert "<b>" not in page
    assert "&lt;b&gt;&quot;x&quot;&lt;/b&gt;님에게" in page
