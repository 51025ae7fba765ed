"""
QR letter card.

Lays out a printable card whose QR code opens the letter view for a token:
branding at the top, a from/to header, the code, and a scan hint. The layout
is a plain CardLayout, so either renderer can draw it.
"""
import logging
from typing import List, Tuple
from urllib.parse import urlparse

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from domain.models import (
    CardLayout, DrawInstruction, FilledRect, FontRole, FontWeight, LetterRecord,
    Line, QrCardStyle, QrMatrix, RoundedRect, TextRun,
)
from services.letter_page import letter_view_url
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

QR_CARD = "qr_card"

DEFAULT_QR_STYLE = QrCardStyle()


def qr_modules(data: str, border: int = 2) -> Tuple[Tuple[bool, ...], ...]:
    """
    Module matrix for data, quiet zone included.

    Medium error correction and the smallest version that fits.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=1,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return tuple(tuple(bool(cell) for cell in row) for row in qr.get_matrix())


def qr_header_lines(record: LetterRecord, style: QrCardStyle = DEFAULT_QR_STYLE) -> List[str]:
    """Header copy with the same sender/recipient priority as the blind card."""
    if record.has_sender and record.has_recipient:
        return [f"{record.from_name}님이", f"{record.to_name}님에게 보내는", style.closing_text]
    if record.has_sender:
        return [f"{record.from_name}님이 보내는", style.closing_text]
    if record.has_recipient:
        return [f"{record.to_name}님에게 도착한", style.closing_text]
    return ["비밀 메시지가", "도착했어요 💌"]


def site_label(cfg: Settings = default_settings) -> str:
    return urlparse(cfg.SITE_URL).netloc or cfg.SITE_URL


def compute_qr_card_layout(
    record: LetterRecord,
    token: str,
    style: QrCardStyle = DEFAULT_QR_STYLE,
    cfg: Settings = default_settings,
) -> CardLayout:
    """
    Lay out the QR card for a letter.

    Args:
        record: The decoded letter, used for the header only
        token: Share token encoded into the QR code's URL
        style: Colours, sizes and copy
        cfg: Settings providing the site URL

    Returns:
        CardLayout of fixed size with instructions in paint order
    """
    width = style.width
    cx = width / 2
    card_x = card_y = style.card_margin
    card_w = width - 2 * style.card_margin
    left = card_x + style.padding
    right = card_x + card_w - style.padding

    instructions: List[DrawInstruction] = [
        FilledRect(x=0, y=0, width=width, height=style.height, fill=style.background_color),
        RoundedRect(
            x=card_x,
            y=card_y,
            width=card_w,
            height=style.height - 2 * style.card_margin,
            radius=style.card_radius,
            fill=style.card_color,
            stroke=style.border_color,
            stroke_width=1,
        ),
    ]

    y = card_y + style.padding + 8
    instructions.append(TextRun(
        text=style.brand_text,
        x=cx,
        y=y,
        font_size=style.brand_font_size,
        fill=style.brand_color,
        weight=FontWeight.BOLD,
        font_role=FontRole.BRAND,
    ))
    y += 12
    instructions.append(TextRun(
        text=style.subtitle_text,
        x=cx,
        y=y + 16,
        font_size=style.subtitle_font_size,
        fill=style.subtitle_color,
    ))
    y += 40
    instructions.append(_divider(left, right, y, style))
    y += 28

    lines = qr_header_lines(record, style)
    for i, line in enumerate(lines):
        instructions.append(TextRun(
            text=line,
            x=cx,
            y=y,
            font_size=style.header_font_size,
            fill=style.header_color,
            weight=FontWeight.BOLD,
        ))
        y += style.header_line_height if i < len(lines) - 1 else 20
    y += 16
    instructions.append(_divider(left, right, y, style))
    y += 28

    qr_x = (width - style.qr_size) / 2
    pad = style.qr_padding
    instructions.append(RoundedRect(
        x=qr_x - pad,
        y=y - pad,
        width=style.qr_size + 2 * pad,
        height=style.qr_size + 2 * pad,
        radius=style.qr_backing_radius,
        fill=style.qr_backing_color,
        stroke=style.border_color,
        stroke_width=1,
    ))
    url = letter_view_url(token, cfg)
    instructions.append(QrMatrix(
        x=qr_x,
        y=y,
        size=style.qr_size,
        modules=qr_modules(url, style.qr_border),
        dark=style.qr_dark_color,
        light=style.qr_light_color,
    ))
    y += style.qr_size + pad

    y += 24
    instructions.append(TextRun(
        text=style.hint_text,
        x=cx,
        y=y,
        font_size=style.hint_font_size,
        fill=style.hint_color,
    ))
    y += 28
    instructions.append(TextRun(
        text=site_label(cfg),
        x=cx,
        y=y,
        font_size=style.site_font_size,
        fill=style.site_color,
    ))

    logger.debug("[qr-card] laid out token_len=%s header_lines=%s", len(token), len(lines))
    return CardLayout(width=width, height=style.height, instructions=tuple(instructions), variant=QR_CARD)


def _divider(x1: float, x2: float, y: float, style: QrCardStyle) -> Line:
    return Line(
        x1=x1,
        y1=y,
        x2=x2,
        y2=y,
        stroke=style.border_color,
        stroke_width=style.divider_width,
        dash=style.divider_dash,
    )
