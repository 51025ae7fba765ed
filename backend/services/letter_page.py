"""
Share-link landing page.

Serves a tiny HTML document whose Open Graph tags point at the card preview,
then sends the browser on to the front-end letter view.
"""
import html
from typing import Optional
from urllib.parse import quote

from domain.models import CardLayout, LetterRecord
from settings import Settings, settings as default_settings

PAGE_DESCRIPTION = "제가 하고 싶은 말은..."
DEFAULT_TITLE = "블라인드 메시지가 도착했어요"
SITE_NAME = "SUILE"


def page_title(record: Optional[LetterRecord]) -> str:
    if record is not None and record.has_recipient:
        return f"{record.to_name}님에게 {DEFAULT_TITLE}"
    return DEFAULT_TITLE


def og_image_url(token: str, cfg: Settings = default_settings) -> str:
    return f"{cfg.PUBLIC_API_URL}/og-image?d={quote(token, safe='')}"


def letter_view_url(token: str, cfg: Settings = default_settings) -> str:
    return f"{cfg.SITE_URL}/m?d={quote(token, safe='')}"


def share_url(token: str, cfg: Settings = default_settings) -> str:
    return f"{cfg.PUBLIC_API_URL}/v?d={quote(token, safe='')}"


def build_letter_page_html(
    token: str,
    record: Optional[LetterRecord],
    preview: CardLayout,
    cfg: Settings = default_settings,
) -> str:
    """
    Landing HTML for a share token.

    record is None when the token does not decode; the page still renders with
    the generic title and the front end shows its not-found state.
    """
    title = html.escape(page_title(record))
    description = html.escape(PAGE_DESCRIPTION)
    image_url = html.escape(og_image_url(token, cfg))
    page_url = html.escape(share_url(token, cfg))
    target_url = html.escape(letter_view_url(token, cfg))
    # Single-quoted JS string literal
    script_target = letter_view_url(token, cfg).replace("\\", "\\\\").replace("'", "\\'")

    return f"""<!DOCTYPE html>
<html lang="ko">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1, maximum-scale=1, user-scalable=no, viewport-fit=cover"/>
  <title>{title} | {SITE_NAME}</title>
  <meta name="description" content="{description}"/>
  <meta property="og:type" content="website"/>
  <meta property="og:title" content="{title}"/>
  <meta property="og:description" content="{description}"/>
  <meta property="og:image" content="{image_url}"/>
  <meta property="og:image:width" content="{preview.width}"/>
  <meta property="og:image:height" content="{preview.height}"/>
  <meta property="og:url" content="{page_url}"/>
  <meta property="og:site_name" content="{SITE_NAME}"/>
  <meta property="og:locale" content="ko_KR"/>
  <meta name="twitter:card" content="summary_large_image"/>
  <meta name="twitter:title" content="{title}"/>
  <meta name="twitter:description" content="{description}"/>
  <meta name="twitter:image" content="{image_url}"/>
  <meta http-equiv="refresh" content="0;url={target_url}"/>
</head>
<body>
  <div style="display:flex;align-items:center;justify-content:center;min-height:100vh;font-family:sans-serif;color:#71717a;">
    <p>메시지를 불러오는 중...</p>
  </div>
  <script>window.location.replace('{script_target}');</script>
</body>
</html>"""
