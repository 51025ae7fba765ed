"""
Card layout engine.

Computes the ordered draw instructions for a blind-message card.
Both render backends consume the same instruction list, so the server
preview and the downloadable card cannot drift apart.
Uses a registry of named card variants; variants differ in configuration only.
"""
import math
from dataclasses import fields, replace
from typing import Dict, List, Optional

from domain.errors import ConfigurationError
from domain.models import (
    CardLayout, CardStyle, CardVariant, Circle, DrawInstruction, FilledRect,
    FontRole, FontWeight, LetterRecord, Line, PathStroke, RoundedRect, TextAlign, TextRun,
)
from services.letter_codec import decode_letter_or_empty
from services.line_wrapper import wrap_lines
from services.reveal_selector import blind_message


OG_PREVIEW = "og_preview"
SHARE_CARD = "share_card"


# Registry of card variants by name
_variant_registry: Dict[str, CardVariant] = {}


def register_variant(variant: CardVariant) -> CardVariant:
    """Validate and register a card variant under its name."""
    validate_variant(variant)
    _variant_registry[variant.name] = variant
    return variant


def get_variant(name: str) -> CardVariant:
    """
    Look up a registered variant.

    Raises:
        KeyError: If no variant is registered under that name
    """
    variant = _variant_registry.get(name)
    if variant is None:
        raise KeyError(f"No card variant registered: {name}")
    return variant


def list_variants() -> List[str]:
    return sorted(_variant_registry)


_POSITIVE_STYLE_FIELDS = (
    "header_font_size",
    "prompt_font_size",
    "message_font_size",
    "footer_font_size",
    "brand_font_size",
    "message_line_height",
    "lock_circle_radius",
)


def validate_variant(variant: CardVariant) -> None:
    """
    Reject configuration that cannot produce a card.

    Raises:
        ConfigurationError: On zero or negative sizes and budgets
    """
    if variant.width <= 0:
        raise ConfigurationError(f"{variant.name}: width must be positive, got {variant.width}")
    if variant.max_chars <= 0:
        raise ConfigurationError(f"{variant.name}: max_chars must be positive, got {variant.max_chars}")
    if variant.max_lines <= 0:
        raise ConfigurationError(f"{variant.name}: max_lines must be positive, got {variant.max_lines}")

    style = variant.style
    for name in _POSITIVE_STYLE_FIELDS:
        if getattr(style, name) <= 0:
            raise ConfigurationError(f"{variant.name}: {name} must be positive")
    for f in fields(style):
        value = getattr(style, f.name)
        if isinstance(value, (int, float)) and value < 0:
            raise ConfigurationError(f"{variant.name}: {f.name} must not be negative")
    if 2 * style.panel_margin >= variant.width:
        raise ConfigurationError(f"{variant.name}: panel_margin leaves no room for the panel")


def resolve_header(record: LetterRecord, style: CardStyle) -> str:
    """Pick the header line: sender and recipient, sender only, recipient only, or default."""
    if record.has_sender and record.has_recipient:
        return style.sender_and_recipient_header.format(sender=record.from_name, recipient=record.to_name)
    if record.has_sender:
        return style.sender_only_header.format(sender=record.from_name)
    if record.has_recipient:
        return style.recipient_only_header.format(recipient=record.to_name)
    return style.default_header


def message_lines(record: LetterRecord, variant: CardVariant) -> List[str]:
    """Masked and wrapped message lines; an empty message shows the placeholder."""
    blind = blind_message(record.message or variant.style.placeholder_message)
    return wrap_lines(blind, variant.max_chars, variant.max_lines)


def footer_position(line_count: int, style: CardStyle) -> float:
    block_end = style.message_start_y + line_count * style.message_line_height
    return max(block_end + style.footer_margin, style.min_footer_y)


def compute_card_layout(record: LetterRecord, variant: CardVariant) -> CardLayout:
    """
    Compute the card for one letter.

    Args:
        record: The decoded letter
        variant: Width, message budget and style to lay out with

    Returns:
        CardLayout with instructions in paint order and the canvas height

    Raises:
        ConfigurationError: If the variant is unusable
    """
    validate_variant(variant)
    style = variant.style
    width = variant.width

    lines = message_lines(record, variant)
    footer_y = footer_position(len(lines), style)
    height = int(math.ceil(footer_y + style.bottom_margin))

    instructions: List[DrawInstruction] = []
    instructions.extend(_layout_frame(width, height, style))
    instructions.extend(_layout_lock_icon(width, style))
    instructions.extend(_layout_header(record, width, style))
    instructions.extend(_layout_message(lines, width, style))
    instructions.extend(_layout_footer(footer_y, width, style))

    return CardLayout(
        width=width,
        height=height,
        instructions=tuple(instructions),
        variant=variant.name,
    )


def compute_layout_for_token(token: Optional[str], variant_name: str = OG_PREVIEW) -> CardLayout:
    """Decode a share token (empty letter on failure) and lay out its card."""
    return compute_card_layout(decode_letter_or_empty(token), get_variant(variant_name))


# ============================================
# Card sections
# ============================================

def _layout_frame(width: int, height: int, style: CardStyle) -> List[DrawInstruction]:
    margin = style.panel_margin
    return [
        FilledRect(x=0, y=0, width=width, height=height, fill=style.background_color),
        RoundedRect(
            x=margin,
            y=margin,
            width=width - 2 * margin,
            height=height - 2 * margin,
            radius=style.panel_radius,
            fill=style.panel_color,
        ),
    ]


def _layout_lock_icon(width: int, style: CardStyle) -> List[DrawInstruction]:
    """Padlock: backdrop circle, body, and a shackle arc sitting on the body."""
    cx = width / 2
    r = style.lock_shackle_radius
    return [
        Circle(cx=cx, cy=style.lock_center_y, radius=style.lock_circle_radius, fill=style.lock_circle_color),
        RoundedRect(
            x=cx - style.lock_body_width / 2,
            y=style.lock_body_top,
            width=style.lock_body_width,
            height=style.lock_body_height,
            radius=style.lock_body_radius,
            fill=style.lock_color,
        ),
        PathStroke(
            commands=(
                ("M", cx - r, style.lock_body_top),
                ("V", style.lock_shackle_top),
                ("A", r, 0, 1, cx + r, style.lock_shackle_top),
                ("V", style.lock_body_top),
            ),
            stroke=style.lock_color,
            stroke_width=style.lock_stroke_width,
            line_cap="round",
        ),
    ]


def _layout_header(record: LetterRecord, width: int, style: CardStyle) -> List[DrawInstruction]:
    cx = width / 2
    return [
        TextRun(
            text=resolve_header(record, style),
            x=cx,
            y=style.header_y,
            font_size=style.header_font_size,
            fill=style.header_color,
            weight=FontWeight.BOLD,
        ),
        Line(
            x1=style.separator_inset,
            y1=style.separator_y,
            x2=width - style.separator_inset,
            y2=style.separator_y,
            stroke=style.separator_color,
        ),
        TextRun(
            text=style.prompt_text,
            x=cx,
            y=style.prompt_y,
            font_size=style.prompt_font_size,
            fill=style.prompt_color,
        ),
    ]


def _layout_message(lines: List[str], width: int, style: CardStyle) -> List[DrawInstruction]:
    cx = width / 2
    return [
        TextRun(
            text=line,
            x=cx,
            y=style.message_start_y + i * style.message_line_height,
            font_size=style.message_font_size,
            fill=style.message_color,
            weight=FontWeight.BOLD,
            font_role=FontRole.MONO,
            letter_spacing=style.message_letter_spacing,
        )
        for i, line in enumerate(lines)
    ]


def _layout_footer(footer_y: float, width: int, style: CardStyle) -> List[DrawInstruction]:
    cx = width / 2
    return [
        TextRun(
            text=style.footer_text,
            x=cx,
            y=footer_y,
            font_size=style.footer_font_size,
            fill=style.footer_color,
            align=TextAlign.CENTER,
        ),
        TextRun(
            text=style.brand_text,
            x=cx,
            y=footer_y + style.brand_gap,
            font_size=style.brand_font_size,
            fill=style.brand_color,
            weight=FontWeight.BOLD,
            font_role=FontRole.BRAND,
        ),
    ]


# ============================================
# Built-in variants
# ============================================

OG_PREVIEW_STYLE = CardStyle()

# Smaller downloadable card: same design scaled down, smaller monospace body
# so more characters fit per line.
SHARE_CARD_STYLE = replace(
    OG_PREVIEW_STYLE,
    header_font_size=22,
    prompt_font_size=15,
    message_font_size=32,
    footer_font_size=12,
    brand_font_size=11,
    message_letter_spacing=3,
    panel_margin=16,
    panel_radius=16,
    lock_center_y=56,
    lock_circle_radius=22,
    lock_body_width=16,
    lock_body_height=11,
    lock_body_top=51,
    lock_body_radius=2,
    lock_shackle_radius=5,
    lock_shackle_top=47,
    lock_stroke_width=2.5,
    header_y=108,
    separator_y=128,
    separator_inset=40,
    prompt_y=158,
    message_start_y=204,
    message_line_height=48,
    footer_margin=32,
    min_footer_y=380,
    bottom_margin=40,
    brand_gap=20,
)

register_variant(CardVariant(name=OG_PREVIEW, width=600, max_chars=9, max_lines=6, style=OG_PREVIEW_STYLE))
register_variant(CardVariant(name=SHARE_CARD, width=480, max_chars=12, max_lines=5, style=SHARE_CARD_STYLE))
